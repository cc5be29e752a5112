"""Domain errors raised by the services and mapped to HTTP responses in app.main."""


class BookstoreError(Exception):
    """Base exception for all bookstore request rejections."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(BookstoreError):
    """Malformed or missing input, out-of-range values, rule violations."""

    status_code = 400


class NotFoundError(BookstoreError):
    """Unknown id, or an id not owned by the requesting user."""

    status_code = 404


class ForbiddenError(BookstoreError):
    """Attempt to bypass an action-gated mutation."""

    status_code = 403
