from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..dependencies import stats_service
from ..errors import ReviewError
from ..serializers import PRAssignmentStatSerializer, ReviewStatSerializer
from .responses import review_error_response, server_error_response


@api_view(['GET'])
def stats_reviews(request):
    """GET /stats/reviews - Количество ревью на каждого пользователя"""
    try:
        stats = stats_service().review_stats()
        return Response({'stats': ReviewStatSerializer(stats, many=True).data})

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()


@api_view(['GET'])
def stats_pr_assignments(request):
    """GET /stats/pr-assignments - Количество ревьюверов на каждый PR"""
    try:
        stats = stats_service().pr_assignment_stats()
        return Response({'stats': PRAssignmentStatSerializer(stats, many=True).data})

    except ReviewError as e:
        return review_error_response(e)
    except Exception:
        return server_error_response()
