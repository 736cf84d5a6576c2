"""
Error taxonomy for the sync core.

Provider and LLM failures are always absorbed at the orchestrator boundary;
only UnauthenticatedUser, ProviderNotConfigured and ConnectionSessionMissing
reach the HTTP layer as real errors.
"""

PROVIDER_NOT_FOUND_CODE = "BACKEND::NOT_FOUND"


class SyncError(Exception):
    """Base exception for meeting sync operations."""

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.user_id = user_id


class UnauthenticatedUser(SyncError):
    """No provider entity is bound to the user yet."""


class ConnectionSessionMissing(SyncError):
    """Authorization callback arrived without a prior initiate."""


class StoreUnavailable(SyncError):
    """Durable store not configured or unreachable. Logged, never surfaced."""


class ProviderError(SyncError):
    """Failure reported by the calendar provider."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        resource_not_found: bool = False,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.resource_not_found = resource_not_found
        self.response_data = response_data or {}

    @classmethod
    def from_status(
        cls,
        message: str,
        status_code: int,
        error_code: str | None = None,
        response_data: dict | None = None,
    ) -> "ProviderError":
        """Pick the most specific subclass for an HTTP failure."""
        not_found = status_code == 404 or error_code == PROVIDER_NOT_FOUND_CODE
        if not_found:
            error_cls = ProviderCapabilityUnavailable
        elif status_code == 401:
            error_cls = ProviderAuthFailed
        elif status_code == 403:
            error_cls = ProviderAccessForbidden
        elif status_code == 429 and error_code == "insufficient_quota":
            error_cls = ProviderQuotaExceeded
        elif status_code == 429:
            error_cls = ProviderRateLimited
        else:
            error_cls = ProviderGenericError
        return error_cls(
            message,
            status_code=status_code,
            error_code=error_code,
            resource_not_found=not_found,
            response_data=response_data,
        )


class ProviderCapabilityUnavailable(ProviderError):
    """None of the cascade actions is available for this integration."""

    def __init__(self, message: str, last_error: Exception | None = None, **kwargs):
        kwargs.setdefault("resource_not_found", True)
        super().__init__(message, **kwargs)
        self.last_error = last_error


class ProviderAuthFailed(ProviderError):
    pass


class ProviderAccessForbidden(ProviderError):
    pass


class ProviderRateLimited(ProviderError):
    pass


class ProviderQuotaExceeded(ProviderError):
    pass


class ProviderGenericError(ProviderError):
    pass


class ProviderNotConfigured(ProviderError):
    """Calendar provider API key missing."""


class LLMError(SyncError):
    """Failure reported by the LLM provider."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class LLMAuthFailed(LLMError):
    pass


class LLMRateLimited(LLMError):
    pass


class LLMQuotaExceeded(LLMError):
    pass


class LLMGenericError(LLMError):
    pass
