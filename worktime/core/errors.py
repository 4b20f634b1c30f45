class WorktimeError(ValueError):
    """Base for user-facing domain errors; mapped to 4xx at the HTTP boundary."""

    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AlreadyActive(WorktimeError):
    status_code = 409
    default_detail = "An ongoing session already exists for this user"


class AlreadyCompleted(WorktimeError):
    status_code = 409
    default_detail = "Session is already completed"


class NotCompleted(WorktimeError):
    status_code = 409
    default_detail = "Only completed sessions can be edited"


class InvalidState(WorktimeError):
    status_code = 409
    default_detail = "Operation not allowed in the current state"


class BreakInProgress(WorktimeError):
    status_code = 409
    default_detail = "Break already in progress"


class NoOpenBreak(WorktimeError):
    status_code = 409
    default_detail = "No ongoing break found"


class TypeImmutable(WorktimeError):
    status_code = 400
    default_detail = "Time entry type cannot be changed"


class ReasonRequired(WorktimeError):
    status_code = 400
    default_detail = "A reason is required for edits"


class InvalidRange(WorktimeError):
    status_code = 400
    default_detail = "End time must not be before start time"


class NotFound(WorktimeError):
    status_code = 404
    default_detail = "Not found"


class Forbidden(WorktimeError):
    status_code = 403
    default_detail = "Access denied"


class InviteExpired(WorktimeError):
    status_code = 410
    default_detail = "Invite expired"


class InviteConsumed(WorktimeError):
    status_code = 409
    default_detail = "Invite already used"


class EmailTaken(WorktimeError):
    status_code = 409
    default_detail = "User already exists"
