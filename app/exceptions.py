from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors the API layer knows how to render.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, ids involved)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Application error"
    default_code = "APPLICATION_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Malformed identifiers end up here, before any store access happens.
    """

    http_status = 400
    default_message = "Invalid input"
    default_code = "SERVICE_VALIDATION_ERROR"


class NotFoundError(AppError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(AppError):
    """Raised when a resource conflict occurs (e.g., duplicate ingredient name)."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class RecipeExpansionError(AppError):
    """Raised when a recipe listing could not be fully expanded.

    One unresolvable ingredient reference fails the whole listing; nothing
    partial is returned or cached.
    """

    http_status = 500
    default_message = "Unable to fetch recipes"
    default_code = "RECIPE_EXPANSION_FAILED"


class MessageDecodeError(AppError):
    """Raised when an inbound realtime frame cannot be decoded.

    Fatal to the connection that sent it.
    """

    http_status = 400
    default_message = "Malformed realtime message"
    default_code = "MESSAGE_DECODE_ERROR"
