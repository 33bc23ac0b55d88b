"""
Реализации контрактов хранилища поверх Django ORM.
"""
import functools
import logging
from typing import List

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count

from . import models
from .domain import PRAssignmentStat, PRStatus, PullRequest, ReviewStat, Team, User
from .errors import (
    PRAlreadyExists,
    PRNotFound,
    ReviewerNotAssigned,
    StorageError,
    TeamAlreadyExists,
    TeamNotFound,
    UserNotFound,
)
from .gateways import PRStore, StatsStore, TeamStore, UserStore

logger = logging.getLogger(__name__)


def storage_call(func):
    """Переводит ошибки БД в StorageError, доменные ошибки пропускает как есть."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.error("Storage call %s failed: %s", func.__qualname__, exc)
            raise StorageError(f"{func.__name__} failed: {exc}") from exc
    return wrapper


def _to_user(row: models.User) -> User:
    return User(
        id=row.id,
        username=row.username,
        team_name=row.team_id,
        is_active=row.is_active,
    )


def _to_pr(row: models.PullRequest, reviewer_ids: List[str]) -> PullRequest:
    return PullRequest(
        id=row.id,
        name=row.name,
        author_id=row.author_id,
        status=PRStatus(row.status),
        assigned_reviewers=list(reviewer_ids),
        created_at=row.created_at,
        merged_at=row.merged_at,
    )


class TeamRepository(TeamStore):

    @storage_call
    def create(self, team: Team) -> None:
        try:
            with transaction.atomic():
                team_row = models.Team.objects.create(name=team.name)
                for member in team.members:
                    self._upsert_member(team_row, member)
        except IntegrityError as exc:
            # Параллельный запрос успел создать команду с тем же именем
            if models.Team.objects.filter(name=team.name).exists():
                raise TeamAlreadyExists() from exc
            raise

    @staticmethod
    def _upsert_member(team_row: models.Team, member: User) -> None:
        # Существующему пользователю меняем только команду
        updated = models.User.objects.filter(id=member.id).update(team=team_row)
        if not updated:
            models.User.objects.create(
                id=member.id,
                username=member.username,
                team=team_row,
                is_active=member.is_active
            )

    @storage_call
    def get_by_name(self, team_name: str) -> Team:
        try:
            team_row = models.Team.objects.get(name=team_name)
        except models.Team.DoesNotExist:
            raise TeamNotFound(f"Team '{team_name}' not found")

        members = [_to_user(row) for row in team_row.members.order_by('id')]
        return Team(name=team_row.name, members=members)

    @storage_call
    def exists(self, team_name: str) -> bool:
        return models.Team.objects.filter(name=team_name).exists()

    @storage_call
    def list_active_members(self, team_name: str) -> List[User]:
        rows = models.User.objects.filter(team_id=team_name, is_active=True).order_by('id')
        return [_to_user(row) for row in rows]

    @storage_call
    def list_open_prs_with_reviewers_from_team(self, team_name: str) -> List[str]:
        return list(
            models.PullRequest.objects
            .filter(status=models.PullRequest.Status.OPEN, assignments__user__team_id=team_name)
            .order_by('id')
            .values_list('id', flat=True)
            .distinct()
        )

    @storage_call
    def list_reviewers_from_team_for_pr(self, pr_id: str, team_name: str) -> List[str]:
        return list(
            models.ReviewerAssignment.objects
            .filter(pull_request_id=pr_id, user__team_id=team_name)
            .values_list('user_id', flat=True)
        )

    @storage_call
    def list_all_team_names(self) -> List[str]:
        return list(models.Team.objects.order_by('name').values_list('name', flat=True))


class UserRepository(UserStore):

    @storage_call
    def get_by_id(self, user_id: str) -> User:
        try:
            return _to_user(models.User.objects.get(id=user_id))
        except models.User.DoesNotExist:
            raise UserNotFound(f"User '{user_id}' not found")

    @storage_call
    def list_active_by_team_excluding(self, team_name: str, exclude_user_id: str) -> List[User]:
        rows = (
            models.User.objects
            .filter(team_id=team_name, is_active=True)
            .exclude(id=exclude_user_id)
            .order_by('id')
        )
        return [_to_user(row) for row in rows]

    @storage_call
    def update_active_flag(self, user_id: str, is_active: bool) -> User:
        try:
            row = models.User.objects.get(id=user_id)
        except models.User.DoesNotExist:
            raise UserNotFound(f"User '{user_id}' not found")

        row.is_active = is_active
        row.save(update_fields=['is_active'])
        return _to_user(row)

    @storage_call
    def get_team_of_user(self, user_id: str) -> str:
        team_name = models.User.objects.filter(id=user_id).values_list('team_id', flat=True).first()
        if team_name is None:
            raise UserNotFound(f"User '{user_id}' not found")
        return team_name


class PullRequestRepository(PRStore):

    @storage_call
    def create_with_reviewers(self, pr: PullRequest, reviewer_ids: List[str]) -> PullRequest:
        try:
            with transaction.atomic():
                row = models.PullRequest.objects.create(
                    id=pr.id,
                    name=pr.name,
                    author_id=pr.author_id,
                    status=models.PullRequest.Status.OPEN
                )
                for reviewer_id in reviewer_ids:
                    models.ReviewerAssignment.objects.create(pull_request=row, user_id=reviewer_id)
        except IntegrityError as exc:
            # После отката PR с этим id может существовать только от другого запроса
            if models.PullRequest.objects.filter(id=pr.id).exists():
                raise PRAlreadyExists() from exc
            raise

        return _to_pr(row, reviewer_ids)

    @storage_call
    def get_by_id(self, pr_id: str) -> PullRequest:
        try:
            row = models.PullRequest.objects.get(id=pr_id)
        except models.PullRequest.DoesNotExist:
            raise PRNotFound(f"PR '{pr_id}' not found")
        return _to_pr(row, self.list_reviewers_of_pr(pr_id))

    @storage_call
    def merge(self, pr_id: str) -> PullRequest:
        with transaction.atomic():
            try:
                row = models.PullRequest.objects.select_for_update().get(id=pr_id)
            except models.PullRequest.DoesNotExist:
                raise PRNotFound(f"PR '{pr_id}' not found")

            if row.status != models.PullRequest.Status.MERGED:
                # merged_at выставит PullRequest.clean()
                row.status = models.PullRequest.Status.MERGED
                row.save(update_fields=['status', 'merged_at'])

        return _to_pr(row, self.list_reviewers_of_pr(pr_id))

    @storage_call
    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> None:
        with transaction.atomic():
            deleted, _ = models.ReviewerAssignment.objects.filter(
                pull_request_id=pr_id, user_id=old_reviewer_id
            ).delete()
            if not deleted:
                raise ReviewerNotAssigned(f"User '{old_reviewer_id}' is not a reviewer of PR '{pr_id}'")

            models.ReviewerAssignment.objects.create(pull_request_id=pr_id, user_id=new_reviewer_id)

    @storage_call
    def list_prs_reviewed_by_user(self, user_id: str) -> List[PullRequest]:
        rows = (
            models.PullRequest.objects
            .filter(assignments__user_id=user_id)
            .order_by('id')
            .prefetch_related('assignments')
        )
        return [
            _to_pr(row, [assignment.user_id for assignment in row.assignments.all()])
            for row in rows
        ]

    @storage_call
    def is_user_reviewer_of_pr(self, pr_id: str, user_id: str) -> bool:
        return models.ReviewerAssignment.objects.filter(pull_request_id=pr_id, user_id=user_id).exists()

    @storage_call
    def exists(self, pr_id: str) -> bool:
        return models.PullRequest.objects.filter(id=pr_id).exists()

    @storage_call
    def list_reviewers_of_pr(self, pr_id: str) -> List[str]:
        return list(
            models.ReviewerAssignment.objects
            .filter(pull_request_id=pr_id)
            .values_list('user_id', flat=True)
        )


class StatsRepository(StatsStore):

    @storage_call
    def review_counts_per_user(self) -> List[ReviewStat]:
        rows = (
            models.User.objects
            .annotate(review_count=Count('review_assignments'))
            .order_by('-review_count', 'id')
            .values('id', 'username', 'review_count')
        )
        return [
            ReviewStat(user_id=row['id'], username=row['username'], review_count=row['review_count'])
            for row in rows
        ]

    @storage_call
    def reviewer_counts_per_pr(self) -> List[PRAssignmentStat]:
        rows = (
            models.PullRequest.objects
            .annotate(reviewers_count=Count('assignments'))
            .order_by('-reviewers_count', 'id')
            .values('id', 'name', 'reviewers_count')
        )
        return [
            PRAssignmentStat(pr_id=row['id'], pr_name=row['name'], reviewers_count=row['reviewers_count'])
            for row in rows
        ]
