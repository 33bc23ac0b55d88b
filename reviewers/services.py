import logging
from typing import List, Tuple

from .domain import (
    PRAssignmentStat,
    PRStatus,
    PullRequest,
    ReviewStat,
    Team,
    TeamDeactivationResult,
    User,
)
from .errors import (
    InvalidPRID,
    InvalidPRName,
    InvalidTeamName,
    InvalidUserID,
    NoActiveUsersInTeam,
    NoReviewerCandidate,
    PartialReassignment,
    PRAlreadyExists,
    PRAlreadyMerged,
    PRAuthorNotFound,
    PRNotFound,
    ReviewError,
    ReviewerNotAssigned,
    TeamAlreadyExists,
    TeamDeactivationFailed,
    TeamMustHaveMembers,
    TeamNotFound,
    UserNotFound,
)
from .gateways import PRStore, StatsStore, TeamStore, UserStore

logger = logging.getLogger(__name__)

DEFAULT_REVIEWERS_PER_PR = 2
DEFAULT_REPLACEMENT_POOL_LIMIT = 10


class TeamService:
    """
    Сервис для управления командами и массовой деактивацией
    """

    def __init__(self, teams: TeamStore, users: UserStore, prs: PRStore,
                 replacement_pool_limit: int = DEFAULT_REPLACEMENT_POOL_LIMIT):
        self.teams = teams
        self.users = users
        self.prs = prs
        self.replacement_pool_limit = replacement_pool_limit

    def create_team(self, team: Team) -> Team:
        """
        Создает команду с участниками.

        Существующие пользователи переезжают в новую команду,
        но их username и is_active не перезаписываются.
        """
        if not team.name:
            raise InvalidTeamName()

        if not team.members:
            raise TeamMustHaveMembers()

        if self.teams.exists(team.name):
            raise TeamAlreadyExists()

        self.teams.create(team)
        logger.info("Team %s created with %d members", team.name, len(team.members))
        return self.teams.get_by_name(team.name)

    def get_team(self, team_name: str) -> Team:
        if not self.teams.exists(team_name):
            raise TeamNotFound(f"Team '{team_name}' not found")

        return self.teams.get_by_name(team_name)

    def deactivate_team_users(self, team_name: str) -> TeamDeactivationResult:
        """
        Массовая деактивация пользователей команды с переназначением открытых PR
        на ревьюверов из других команд.

        Если часть PR переназначить не удалось, бросает PartialReassignment,
        в котором лежит заполненный результат.
        Уже деактивированные пользователи при сбое не восстанавливаются.
        """
        if not team_name:
            raise InvalidTeamName()

        if not self.teams.exists(team_name):
            raise TeamNotFound(f"Team '{team_name}' not found")

        active_users = self.teams.list_active_members(team_name)
        if not active_users:
            raise NoActiveUsersInTeam()

        # Собираем PR до деактивации, пока состав ревьюверов не поменялся
        open_pr_ids = self.teams.list_open_prs_with_reviewers_from_team(team_name)

        result = TeamDeactivationResult(team_name=team_name)

        for user in active_users:
            try:
                self.users.update_active_flag(user.id, False)
            except ReviewError as exc:
                logger.error(
                    "Deactivation of team %s stopped at user %s after %d users: %s",
                    team_name, user.id, len(result.deactivated_user_ids), exc
                )
                raise TeamDeactivationFailed() from exc
            result.deactivated_user_ids.append(user.id)
        result.deactivated_users = len(result.deactivated_user_ids)

        for pr_id in open_pr_ids:
            if self._migrate_pr_reviewers(pr_id, team_name):
                result.reassigned_prs += 1
            else:
                result.failed_reassignments += 1

        logger.info(
            "Team %s deactivated: users=%d reassigned_prs=%d failed_reassignments=%d",
            team_name, result.deactivated_users, result.reassigned_prs, result.failed_reassignments
        )

        if result.failed_reassignments > 0:
            raise PartialReassignment(result)

        return result

    def _migrate_pr_reviewers(self, pr_id: str, team_name: str) -> bool:
        """
        Заменяет всех ревьюверов PR из деактивируемой команды.
        Уже выполненные замены при сбое не откатываются.
        """
        try:
            pr = self.prs.get_by_id(pr_id)
            team_reviewers = self.teams.list_reviewers_from_team_for_pr(pr_id, team_name)
            pool = self._find_replacement_reviewers(team_name)
        except ReviewError as exc:
            logger.warning("PR %s: failed to prepare reviewer migration: %s", pr_id, exc)
            return False

        if not team_reviewers:
            return True

        # Автор и текущие ревьюверы не могут стать заменой
        busy = set(pr.assigned_reviewers)
        busy.add(pr.author_id)
        pool = [user for user in pool if user.id not in busy]

        if not pool:
            logger.warning("PR %s: no replacement reviewers outside team %s", pr_id, team_name)
            return False

        for old_reviewer_id, new_reviewer in zip(team_reviewers, pool):
            try:
                self.prs.reassign_reviewer(pr_id, old_reviewer_id, new_reviewer.id)
            except ReviewError as exc:
                logger.warning(
                    "PR %s: failed to replace %s with %s: %s",
                    pr_id, old_reviewer_id, new_reviewer.id, exc
                )
                return False

        if len(team_reviewers) > len(pool):
            logger.warning(
                "PR %s: %d reviewers from team %s left without replacement",
                pr_id, len(team_reviewers) - len(pool), team_name
            )
            return False

        return True

    def _find_replacement_reviewers(self, exclude_team: str) -> List[User]:
        """
        Активные пользователи из других команд.
        Команды добавляются целиком, сбор останавливается при достижении лимита.
        """
        candidates = []
        for team_name in self.teams.list_all_team_names():
            if team_name == exclude_team:
                continue

            candidates.extend(self.teams.list_active_members(team_name))
            if len(candidates) >= self.replacement_pool_limit:
                break

        return candidates


class UserService:
    """
    Сервис для управления пользователями
    """

    def __init__(self, users: UserStore, prs: PRStore):
        self.users = users
        self.prs = prs

    def set_user_active(self, user_id: str, is_active: bool) -> User:
        # Назначения пользователя не трогаем
        self.users.get_by_id(user_id)
        user = self.users.update_active_flag(user_id, is_active)
        logger.info("User %s is_active set to %s", user_id, is_active)
        return user

    def get_user_review_prs(self, user_id: str) -> List[PullRequest]:
        self.users.get_by_id(user_id)
        return self.prs.list_prs_reviewed_by_user(user_id)


class PullRequestService:
    """
    Сервис для управления Pull Request'ами
    """

    def __init__(self, prs: PRStore, users: UserStore,
                 reviewers_per_pr: int = DEFAULT_REVIEWERS_PER_PR):
        self.prs = prs
        self.users = users
        self.reviewers_per_pr = reviewers_per_pr

    def create_pr(self, pr_id: str, pr_name: str, author_id: str) -> PullRequest:
        """
        Создает PR и сразу назначает ревьюверов из команды автора.
        """
        if not pr_id:
            raise InvalidPRID()
        if not pr_name:
            raise InvalidPRName()
        if not author_id:
            raise InvalidUserID()

        try:
            author = self.users.get_by_id(author_id)
        except UserNotFound:
            raise PRAuthorNotFound(f"Author '{author_id}' not found")

        if self.prs.exists(pr_id):
            raise PRAlreadyExists()

        reviewer_ids = self._pick_reviewers(author)

        pr = PullRequest(id=pr_id, name=pr_name, author_id=author_id, status=PRStatus.OPEN)
        created = self.prs.create_with_reviewers(pr, reviewer_ids)
        logger.info("PR %s created by %s, reviewers: %s", pr_id, author_id, ", ".join(reviewer_ids))
        return created

    def _pick_reviewers(self, author: User) -> List[str]:
        # Кандидаты приходят отсортированными по id, берем первых
        candidates = self.users.list_active_by_team_excluding(author.team_name, author.id)
        if not candidates:
            raise NoReviewerCandidate()

        return [user.id for user in candidates[:self.reviewers_per_pr]]

    def merge_pr(self, pr_id: str) -> PullRequest:
        if not self.prs.exists(pr_id):
            raise PRNotFound(f"PR '{pr_id}' not found")

        pr = self.prs.merge(pr_id)
        logger.info("PR %s merged at %s", pr_id, pr.merged_at)
        return pr

    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str) -> Tuple[PullRequest, str]:
        """
        Заменяет ревьювера на активного коллегу из его же команды.

        Returns:
            (обновленный PR, id нового ревьювера)
        """
        pr = self.prs.get_by_id(pr_id)

        if pr.is_merged:
            raise PRAlreadyMerged()

        if not self.prs.is_user_reviewer_of_pr(pr_id, old_reviewer_id):
            raise ReviewerNotAssigned()

        team_name = self.users.get_team_of_user(old_reviewer_id)

        # Исключаем уже назначенных ревьюверов, включая заменяемого
        assigned = set(pr.assigned_reviewers)
        assigned.add(old_reviewer_id)
        candidates = [
            user for user in self.users.list_active_by_team_excluding(team_name, pr.author_id)
            if user.id not in assigned
        ]
        if not candidates:
            raise NoReviewerCandidate()

        new_reviewer_id = candidates[0].id
        self.prs.reassign_reviewer(pr_id, old_reviewer_id, new_reviewer_id)
        logger.info("PR %s: reviewer %s replaced by %s", pr_id, old_reviewer_id, new_reviewer_id)

        return self.prs.get_by_id(pr_id), new_reviewer_id


class StatsService:
    """
    Сервис для сбора статистики
    """

    def __init__(self, stats: StatsStore):
        self.stats = stats

    def review_stats(self) -> List[ReviewStat]:
        return self.stats.review_counts_per_user()

    def pr_assignment_stats(self) -> List[PRAssignmentStat]:
        return self.stats.reviewer_counts_per_pr()
