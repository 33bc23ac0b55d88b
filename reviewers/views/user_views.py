from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..dependencies import user_service
from ..errors import ReviewError
from ..serializers import PullRequestShortSerializer, UserSerializer
from .responses import error_response, invalid_body_response, review_error_response, server_error_response


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        user_id = request.data.get('user_id')
        is_active = request.data.get('is_active')

        if not user_id or not isinstance(is_active, bool):
            return error_response(
                'VALIDATION_ERROR', 'user_id and is_active are required', status.HTTP_400_BAD_REQUEST
            )

        user = user_service().set_user_active(user_id, is_active)

        return Response({
            'user': UserSerializer(user).data
        })

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    try:
        user_id = request.query_params.get('user_id')

        if not user_id:
            return error_response(
                'VALIDATION_ERROR', 'user_id parameter is required', status.HTTP_400_BAD_REQUEST
            )

        assigned_prs = user_service().get_user_review_prs(user_id)

        return Response({
            'user_id': user_id,
            'pull_requests': PullRequestShortSerializer(assigned_prs, many=True).data
        })

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()
