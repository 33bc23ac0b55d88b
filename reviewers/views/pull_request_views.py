from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..dependencies import pull_request_service
from ..errors import ReviewError
from ..serializers import PullRequestSerializer
from .responses import error_response, invalid_body_response, review_error_response, server_error_response


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR и назначить ревьюверов"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        pr = pull_request_service().create_pr(
            request.data.get('pull_request_id') or '',
            request.data.get('pull_request_name') or '',
            request.data.get('author_id') or ''
        )

        return Response({
            'pr': PullRequestSerializer(pr).data
        }, status=status.HTTP_201_CREATED)

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        pr_id = request.data.get('pull_request_id')

        if not pr_id:
            return error_response('VALIDATION_ERROR', 'pull_request_id is required', status.HTTP_400_BAD_REQUEST)

        pr = pull_request_service().merge_pr(pr_id)

        return Response({
            'pr': PullRequestSerializer(pr).data
        })

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    try:
        invalid = invalid_body_response(request)
        if invalid is not None:
            return invalid

        pr_id = request.data.get('pull_request_id')
        old_user_id = request.data.get('old_user_id')

        if not all([pr_id, old_user_id]):
            return error_response(
                'VALIDATION_ERROR', 'pull_request_id and old_user_id are required', status.HTTP_400_BAD_REQUEST
            )

        pr, new_reviewer_id = pull_request_service().reassign_reviewer(pr_id, old_user_id)

        return Response({
            'pr': PullRequestSerializer(pr).data,
            'replaced_by': new_reviewer_id
        })

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()
