"""
Provider/LLM error classification.

Maps a failure to a category label for the fallback response. Labeling only:
every category degrades (fallback=True) and the call sites always fall back.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel

from meetsync.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

ErrorSource = Literal["calendar", "summary"]


class ErrorCategory(str, Enum):
    ACTION_NOT_FOUND = "action_not_found"
    AUTH_FAILED = "auth_failed"
    ACCESS_FORBIDDEN = "access_forbidden"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    GENERIC_ERROR = "generic_error"


class ErrorClassification(BaseModel):
    type: ErrorCategory
    message: str
    fallback: bool = True

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


_MESSAGES: dict[ErrorSource, dict[ErrorCategory, str]] = {
    "calendar": {
        ErrorCategory.ACTION_NOT_FOUND: "Calendar action not available - using mock data fallback",
        ErrorCategory.AUTH_FAILED: "Calendar provider authentication failed - using mock data fallback",
        ErrorCategory.ACCESS_FORBIDDEN: "Calendar provider access forbidden - using mock data fallback",
        ErrorCategory.QUOTA_EXCEEDED: "Calendar provider quota exceeded - using mock data fallback",
        ErrorCategory.RATE_LIMIT_EXCEEDED: "Calendar provider rate limit exceeded - using mock data fallback",
        ErrorCategory.GENERIC_ERROR: "Calendar provider error - using mock data fallback",
    },
    "summary": {
        ErrorCategory.ACTION_NOT_FOUND: "Summary model not available - using mock summary fallback",
        ErrorCategory.AUTH_FAILED: "OpenAI authentication failed - using mock summary fallback",
        ErrorCategory.ACCESS_FORBIDDEN: "OpenAI access forbidden - using mock summary fallback",
        ErrorCategory.QUOTA_EXCEEDED: "OpenAI quota exceeded - using realistic mock summary",
        ErrorCategory.RATE_LIMIT_EXCEEDED: "OpenAI rate limit exceeded - using realistic mock summary",
        ErrorCategory.GENERIC_ERROR: "OpenAI API error - using mock summary fallback",
    },
}


def _status_of(error: BaseException) -> int | None:
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(error, "status", None)
    return status if isinstance(status, int) else None


def _code_of(error: BaseException) -> str | None:
    for attr in ("code", "error_code"):
        code = getattr(error, attr, None)
        if isinstance(code, str):
            return code
    return None


def categorize(error: BaseException) -> ErrorCategory:
    """Pure status/code -> category mapping."""
    if getattr(error, "resource_not_found", False):
        return ErrorCategory.ACTION_NOT_FOUND

    status = _status_of(error)
    if status == 401:
        return ErrorCategory.AUTH_FAILED
    if status == 403:
        return ErrorCategory.ACCESS_FORBIDDEN
    if status == 429:
        code = _code_of(error)
        if code == "insufficient_quota":
            return ErrorCategory.QUOTA_EXCEEDED
        if code == "rate_limit_exceeded":
            return ErrorCategory.RATE_LIMIT_EXCEEDED
    return ErrorCategory.GENERIC_ERROR


def classify_error(
    error: BaseException, source: ErrorSource = "calendar", context: str = "unknown"
) -> ErrorClassification:
    category = categorize(error)
    logger.debug(
        "Classified upstream error",
        context=context,
        source=source,
        category=category.value,
        error=str(error),
        error_type=type(error).__name__,
    )
    return ErrorClassification(type=category, message=_MESSAGES[source][category])


def log_error_with_context(
    error: BaseException, context: str, user_id: str | None = None
) -> dict[str, Any]:
    """Log an absorbed upstream failure and return the structured record."""
    error_info = {
        "timestamp": datetime.now(UTC).isoformat(),
        "context": context,
        "user_id": user_id or "unknown",
        "error": {
            "message": str(error),
            "type": type(error).__name__,
            "code": _code_of(error),
            "status": _status_of(error),
            "err_code": getattr(error, "error_code", None),
        },
    }
    logger.warning("Upstream error absorbed", **error_info)
    return error_info
