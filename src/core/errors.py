"""Error taxonomy and classification utilities for task board operations."""

from typing import Literal

from pydantic import BaseModel

from src.core.config import constants


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_INVALID_INPUT = "ERR_INVALID_INPUT"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"
    ERR_STORE_BUSY = "ERR_STORE_BUSY"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class TaskBoardError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = constants.HTTP_SERVER_ERROR
    code: str = ErrorCode.ERR_UNKNOWN

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class InvalidInputError(TaskBoardError):
    """Malformed or out-of-range input, raised before the store is touched."""

    status_code = constants.HTTP_BAD_REQUEST
    code = ErrorCode.ERR_INVALID_INPUT


class TaskNotFoundError(TaskBoardError):
    """The referenced task does not exist."""

    status_code = constants.HTTP_NOT_FOUND
    code = ErrorCode.ERR_TASK_NOT_FOUND

    def __init__(self, task_id: int) -> None:
        super().__init__("Task not found")
        self.task_id = task_id


class TransientStoreError(TaskBoardError):
    """Connectivity, lock or timeout failure inside a store transaction.

    The transaction has been rolled back when this is raised, so callers may
    retry the same request.
    """

    status_code = constants.HTTP_SERVER_ERROR
    code = ErrorCode.ERR_STORE_UNAVAILABLE


class ErrorResponse(BaseModel):
    """JSON error payload returned by the API."""

    message: str
    error: str | None = None


_STORE_ERROR_PATTERNS: dict[Literal["busy", "unavailable"], list[str]] = {
    "busy": [
        "database is locked",
        "database table is locked",
        "database is busy",
        "timed out",
    ],
    "unavailable": [
        "unable to open database",
        "disk i/o error",
        "no such table",
        "closed database",
        "connection closed",
        "readonly database",
        "database disk image is malformed",
    ],
}


def _match_store_pattern(error_str: str, pattern_type: Literal["busy", "unavailable"]) -> bool:
    """Return True if the error string contains one of the configured phrases."""
    return any(phrase in error_str for phrase in _STORE_ERROR_PATTERNS[pattern_type])


def classify_store_error(exception: BaseException, *, operation: str) -> TransientStoreError:
    """Wrap a raw store exception into a TransientStoreError with a readable message.

    Args:
        exception: The exception raised by sqlite/aiosqlite or the lock wait
        operation: Short description of what was being attempted (e.g. "reorder task")

    Returns:
        TransientStoreError carrying a user-facing message and the raw error text
    """
    error_str = str(exception).lower()

    if isinstance(exception, TimeoutError) or _match_store_pattern(error_str, "busy"):
        error = TransientStoreError(
            f"Task store is busy, could not {operation}. Please try again.",
            detail=str(exception) or type(exception).__name__,
        )
        error.code = ErrorCode.ERR_STORE_BUSY
        return error

    if _match_store_pattern(error_str, "unavailable"):
        return TransientStoreError(
            f"Task store is unavailable, could not {operation}.",
            detail=str(exception),
        )

    return TransientStoreError(f"Failed to {operation}.", detail=str(exception) or type(exception).__name__)


def to_error_response(error: TaskBoardError) -> ErrorResponse:
    """Build the JSON payload for a TaskBoardError."""
    return ErrorResponse(message=error.message, error=error.detail)
