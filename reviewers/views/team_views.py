from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..dependencies import team_service
from ..domain import Team, User
from ..errors import PartialReassignment, ReviewError
from ..serializers import TeamDeactivationResultSerializer, TeamSerializer
from .responses import error_response, invalid_body_response, review_error_response, server_error_response


def _is_filled_str(value):
    return isinstance(value, str) and bool(value)


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду с участниками"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        team_name = request.data.get('team_name') or ''
        if not isinstance(team_name, str):
            return error_response('VALIDATION_ERROR', 'team_name must be a string', status.HTTP_400_BAD_REQUEST)
        members_data = request.data.get('members', [])

        if not isinstance(members_data, list):
            return error_response('VALIDATION_ERROR', 'members must be a list', status.HTTP_400_BAD_REQUEST)

        for i, member in enumerate(members_data):
            if not isinstance(member, dict) or not all(key in member for key in ['user_id', 'username', 'is_active']):
                return error_response(
                    'VALIDATION_ERROR',
                    f'Member at index {i} is missing required fields',
                    status.HTTP_400_BAD_REQUEST
                )
            # Типы проверяются строго, без приведения
            if not _is_filled_str(member['user_id']) or not _is_filled_str(member['username']) \
                    or not isinstance(member['is_active'], bool):
                return error_response(
                    'VALIDATION_ERROR',
                    f'Member at index {i}: user_id and username must be non-empty strings, is_active must be boolean',
                    status.HTTP_400_BAD_REQUEST
                )

        team = Team(
            name=team_name,
            members=[
                User(
                    id=member['user_id'],
                    username=member['username'],
                    team_name=team_name,
                    is_active=member['is_active']
                )
                for member in members_data
            ]
        )
        created = team_service().create_team(team)

        return Response({
            'team': TeamSerializer(created).data
        }, status=status.HTTP_201_CREATED)

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    try:
        team_name = request.query_params.get('team_name')

        if not team_name:
            return error_response(
                'VALIDATION_ERROR', 'team_name parameter is required', status.HTTP_400_BAD_REQUEST
            )

        team = team_service().get_team(team_name)
        return Response(TeamSerializer(team).data)

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def team_bulk_deactivate(request):
    """POST /team/bulkDeactivate - Деактивировать всех участников команды"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        team_name = request.data.get('team_name') or ''
        if not isinstance(team_name, str):
            return error_response('VALIDATION_ERROR', 'team_name must be a string', status.HTTP_400_BAD_REQUEST)

        result = team_service().deactivate_team_users(team_name)
        return Response(TeamDeactivationResultSerializer(result).data)

    except PartialReassignment as e:
        # Частичный успех: отдаем результат вместе с ошибкой
        data = dict(TeamDeactivationResultSerializer(e.result).data)
        data['error'] = {'code': e.code, 'message': e.message}
        return Response(data, status=e.status_code)
    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()
