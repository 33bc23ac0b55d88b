"""
Типизированные ошибки сервиса.

Каждая ошибка знает свой код для API и HTTP-статус, в который её
переводит слой представления. Сервисы пробрасывают их без изменений.
"""
from django.core.exceptions import ObjectDoesNotExist


class ReviewError(Exception):
    code = 'SERVER_ERROR'
    message = 'internal error'
    status_code = 500

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


# Виды ошибок

class ValidationFailed(ReviewError):
    code = 'VALIDATION_ERROR'
    message = 'invalid input'
    status_code = 400


class NotFound(ReviewError, ObjectDoesNotExist):
    code = 'NOT_FOUND'
    message = 'resource not found'
    status_code = 404


class Conflict(ReviewError):
    status_code = 409


class Fatal(ReviewError):
    status_code = 500


class PartialSuccess(ReviewError):
    """
    Ошибка, которая несет вместе с собой заполненный результат.
    Вызывающий код обязан посмотреть на result даже при ошибке.
    """
    status_code = 200

    def __init__(self, result, message: str = None):
        self.result = result
        super().__init__(message)


# Валидация

class InvalidPRID(ValidationFailed):
    message = 'invalid pull request id'


class InvalidPRName(ValidationFailed):
    message = 'invalid pull request name'


class InvalidUserID(ValidationFailed):
    message = 'invalid user id'


class InvalidTeamName(ValidationFailed):
    message = 'invalid team name'


class TeamMustHaveMembers(ValidationFailed):
    message = 'team must have members'


# Не найдено

class UserNotFound(NotFound):
    message = 'user not found'


class TeamNotFound(NotFound):
    message = 'team not found'


class PRNotFound(NotFound):
    message = 'pull request not found'


class PRAuthorNotFound(NotFound):
    message = 'author not found'


# Конфликты

class TeamAlreadyExists(Conflict):
    code = 'TEAM_EXISTS'
    message = 'team_name already exists'


class PRAlreadyExists(Conflict):
    code = 'PR_EXISTS'
    message = 'PR id already exists'


class PRAlreadyMerged(Conflict):
    code = 'PR_MERGED'
    message = 'cannot reassign on merged PR'


class ReviewerNotAssigned(Conflict):
    code = 'NOT_ASSIGNED'
    message = 'reviewer is not assigned to this PR'


class NoReviewerCandidate(Conflict):
    code = 'NO_CANDIDATE'
    message = 'no active replacement candidate in team'


class NoActiveUsersInTeam(Conflict):
    code = 'NO_ACTIVE_USERS'
    message = 'no active users in team to deactivate'


# Инфраструктура

class StorageError(Fatal):
    code = 'STORAGE_ERROR'
    message = 'storage operation failed'


class TeamDeactivationFailed(Fatal):
    code = 'DEACTIVATION_FAILED'
    message = 'team deactivation failed'


class PartialReassignment(PartialSuccess):
    code = 'PARTIAL_REASSIGNMENT'
    message = 'partial reassignment completed with some failures'
