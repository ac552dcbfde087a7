from rest_framework import status


class AssignmentError(Exception):
    """
    Базовая доменная ошибка. Вид ошибки определяется классом,
    code и status_code - внешнее представление для API.
    """
    code = 'SERVER_ERROR'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Internal server error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TeamExists(AssignmentError):
    code = 'TEAM_EXISTS'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'team_name already exists'


class PRExists(AssignmentError):
    code = 'PR_EXISTS'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'PR id already exists'


class PRMerged(AssignmentError):
    code = 'PR_MERGED'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'cannot reassign on merged PR'


class NotAssigned(AssignmentError):
    code = 'NOT_ASSIGNED'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'reviewer is not assigned to this PR'


class NoCandidate(AssignmentError):
    code = 'NO_CANDIDATE'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'no active replacement candidate in team'


class NotFound(AssignmentError):
    code = 'NOT_FOUND'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'resource not found'


class AuthorNotFound(NotFound):
    default_message = 'author not found'
