"""
Контракты хранилища, которые нужны сервисам.

Реализации обязаны:
- возвращать доменные объекты из reviewers.domain;
- бросать наследников NotFound, если сущность отсутствует;
- бросать StorageError при сбое инфраструктуры;
- упорядочивать списки пользователей по id, чтобы выбор кандидатов
  был детерминированным.
"""
from abc import ABC, abstractmethod
from typing import List

from .domain import PRAssignmentStat, PullRequest, ReviewStat, Team, User


class TeamStore(ABC):

    @abstractmethod
    def create(self, team: Team) -> None:
        """
        Атомарно создает команду и делает upsert всех участников.
        Для существующего пользователя меняется только команда,
        username и is_active сохраняются.
        """

    @abstractmethod
    def get_by_name(self, team_name: str) -> Team:
        """Команда со всеми участниками, включая неактивных."""

    @abstractmethod
    def exists(self, team_name: str) -> bool:
        ...

    @abstractmethod
    def list_active_members(self, team_name: str) -> List[User]:
        ...

    @abstractmethod
    def list_open_prs_with_reviewers_from_team(self, team_name: str) -> List[str]:
        """id открытых PR, у которых хотя бы один ревьювер из команды."""

    @abstractmethod
    def list_reviewers_from_team_for_pr(self, pr_id: str, team_name: str) -> List[str]:
        ...

    @abstractmethod
    def list_all_team_names(self) -> List[str]:
        ...


class UserStore(ABC):

    @abstractmethod
    def get_by_id(self, user_id: str) -> User:
        ...

    @abstractmethod
    def list_active_by_team_excluding(self, team_name: str, exclude_user_id: str) -> List[User]:
        ...

    @abstractmethod
    def update_active_flag(self, user_id: str, is_active: bool) -> User:
        ...

    @abstractmethod
    def get_team_of_user(self, user_id: str) -> str:
        ...


class PRStore(ABC):

    @abstractmethod
    def create_with_reviewers(self, pr: PullRequest, reviewer_ids: List[str]) -> PullRequest:
        """Атомарно: строка PR и все строки назначений, либо ничего."""

    @abstractmethod
    def get_by_id(self, pr_id: str) -> PullRequest:
        ...

    @abstractmethod
    def merge(self, pr_id: str) -> PullRequest:
        """Идемпотентно: merged_at выставляется только при первом переходе."""

    @abstractmethod
    def reassign_reviewer(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> None:
        """Атомарно удаляет старое назначение и добавляет новое."""

    @abstractmethod
    def list_prs_reviewed_by_user(self, user_id: str) -> List[PullRequest]:
        ...

    @abstractmethod
    def is_user_reviewer_of_pr(self, pr_id: str, user_id: str) -> bool:
        ...

    @abstractmethod
    def exists(self, pr_id: str) -> bool:
        ...

    @abstractmethod
    def list_reviewers_of_pr(self, pr_id: str) -> List[str]:
        ...


class StatsStore(ABC):

    @abstractmethod
    def review_counts_per_user(self) -> List[ReviewStat]:
        """Все пользователи, включая тех, у кого ноль ревью; по убыванию."""

    @abstractmethod
    def reviewer_counts_per_pr(self) -> List[PRAssignmentStat]:
        ...
