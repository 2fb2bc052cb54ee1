"""
Errors raised by the scoring engines.
Routes translate these into HTTP responses; engines never catch them.
"""


class ScoringError(Exception):
    """Base class for every rejected scoring operation"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DeliveryValidationError(ScoringError):
    """Malformed request: missing names, unknown enum values, negative runs"""


class PreconditionError(ScoringError):
    """Match or innings is not in a state that allows the operation"""


class NotFoundError(ScoringError):
    status_code = 404


class PermissionDeniedError(ScoringError):
    status_code = 403
