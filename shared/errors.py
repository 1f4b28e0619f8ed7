"""
Errors reported synchronously to whoever initiated an operation.

Each error carries the HTTP status the API layer answers with. None of them
is retried; real-time delivery failures are never raised at all.
"""


class ListError(Exception):
    """Base class for shopping list errors."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(ListError):
    """No valid session for the caller."""

    status_code = 401

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class NotFound(ListError):
    """Referenced list, product, user or member does not exist."""

    status_code = 404


class Conflict(ListError):
    """The user is already a member of the list."""

    status_code = 409


class InvalidInput(ListError):
    """A required field is missing or a value is out of range."""

    status_code = 400
