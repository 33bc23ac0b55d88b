"""
Доменные сущности сервиса назначения ревьюверов.

Сущности не зависят от ORM: репозитории переводят строки БД в эти
объекты, сервисы работают только с ними.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PRStatus(str, Enum):
    OPEN = 'OPEN'
    MERGED = 'MERGED'


@dataclass
class User:
    id: str
    username: str
    team_name: str
    is_active: bool = True


@dataclass
class Team:
    """
    Команда. Список участников собирается при чтении,
    пользователь хранит только имя своей команды.
    """
    name: str
    members: List[User] = field(default_factory=list)


@dataclass
class PullRequest:
    id: str
    name: str
    author_id: str
    status: PRStatus = PRStatus.OPEN
    assigned_reviewers: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None

    @property
    def is_merged(self) -> bool:
        return self.status == PRStatus.MERGED


@dataclass
class TeamDeactivationResult:
    team_name: str
    deactivated_users: int = 0
    reassigned_prs: int = 0
    failed_reassignments: int = 0
    deactivated_user_ids: List[str] = field(default_factory=list)


@dataclass
class ReviewStat:
    user_id: str
    username: str
    review_count: int


@dataclass
class PRAssignmentStat:
    pr_id: str
    pr_name: str
    reviewers_count: int
