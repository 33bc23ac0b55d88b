"""
Сборка сервисов поверх ORM-репозиториев.
"""
from django.conf import settings

from .repositories import PullRequestRepository, StatsRepository, TeamRepository, UserRepository
from .services import PullRequestService, StatsService, TeamService, UserService


def team_service() -> TeamService:
    return TeamService(
        TeamRepository(),
        UserRepository(),
        PullRequestRepository(),
        replacement_pool_limit=settings.REPLACEMENT_POOL_LIMIT,
    )


def user_service() -> UserService:
    return UserService(UserRepository(), PullRequestRepository())


def pull_request_service() -> PullRequestService:
    return PullRequestService(
        PullRequestRepository(),
        UserRepository(),
        reviewers_per_pr=settings.REVIEWERS_PER_PR,
    )


def stats_service() -> StatsService:
    return StatsService(StatsRepository())
