"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Referenced record does not exist or has been soft-deleted."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)

    @classmethod
    def for_field(cls, entity: str, field: str, value: object) -> "NotFoundException":
        """Build the message used for lookups by a single field."""
        return cls(f"{entity} not found with {field}: {value}")


class UnauthorizedException(AppException):
    """Actor context is missing or invalid."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class BusinessRuleViolation(AppException):
    """A domain rule rejected the operation for an identified actor."""

    def __init__(self, message: str = "Business rule violated"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)
