class AppError(Exception):
    """Base class for errors that map onto a structured JSON response."""

    status_code = 500

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_body(self) -> dict:
        body: dict = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    status_code = 400

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls("Invalid request data", errors={field: message})


class UnauthorizedError(AppError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Forbidden. Admin access required."):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class InsufficientCreditsError(ConflictError):
    pass


class QuotaExceededError(AppError):
    status_code = 429

    def __init__(self, limit: int):
        super().__init__(
            f"Daily application limit of {limit} reached. Credits reset at midnight."
        )
        self.limit = limit
