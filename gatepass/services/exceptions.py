"""Gate pass error taxonomy.

Every error here is a definitive outcome: bad input or a lost race. None of
them is retried inside the service layer.
"""


class GatePassError(Exception):
    """Base class; carries the HTTP status and error code the API renders"""

    status_code = 500
    error = "gatepass_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GatePassError):
    status_code = 400
    error = "validation_error"


class NoApproverAssigned(GatePassError):
    status_code = 409
    error = "no_approver_assigned"


class NotFound(GatePassError):
    status_code = 404
    error = "not_found"


class Unauthorized(GatePassError):
    status_code = 403
    error = "unauthorized"


class InvalidTransition(GatePassError):
    """The pass is not in a state the requested operation can start from"""

    status_code = 409
    error = "invalid_transition"


class TransitionConflict(GatePassError):
    """A conditional write found the pass no longer in the expected state"""

    status_code = 409
    error = "transition_conflict"


class TokenIssueError(GatePassError):
    """Every generated token collided with an existing one"""

    status_code = 500
    error = "token_issue_failed"
