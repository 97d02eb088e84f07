"""Failures surfaced by friendship and profile operations.

Each one is scoped to the single action that raised it; the request session
is rolled back so no partial mutation survives.
"""


class HuddleError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ConstraintViolation(HuddleError):
    """A friendship already exists for the pair, or the pair is invalid."""

    status_code = 409


class NotFound(HuddleError):
    status_code = 404


class Forbidden(HuddleError):
    """The access policy does not allow this caller to touch the edge."""

    status_code = 403


class TransientIOError(HuddleError):
    """The database could not be reached. Callers decide whether to retry."""

    status_code = 503
