"""Request-scoped error taxonomy and Notion error classification.

Every failure a request can hit is raised as a ServiceError subclass. The
FastAPI app renders them with a single exception handler; nothing here is
fatal to the process.
"""

import httpx
from notion_client import APIErrorCode, APIResponseError
from notion_client.errors import HTTPResponseError, RequestTimeoutError


class ServiceError(Exception):
    """Base class for errors surfaced to the API caller."""

    status_code: int = 500
    retryable: bool = False
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UnauthenticatedError(ServiceError):
    """Missing, invalid or expired caller credential."""

    status_code = 401
    default_detail = "Authentication required"


class UnauthorizedError(ServiceError):
    """Credential is valid but lacks access to the target resource."""

    status_code = 403
    default_detail = "Access to the Notion resource was denied"


class NotFoundError(ServiceError):
    """Schema, session or saved item does not exist."""

    status_code = 404
    default_detail = "Not found"


class MalformedInputError(ServiceError):
    """Required input fields are missing or invalid."""

    status_code = 400
    default_detail = "Malformed input"


class ServiceUnavailableError(ServiceError):
    """Remote store failed transiently or the request deadline expired."""

    status_code = 503
    retryable = True
    default_detail = "Notion is temporarily unavailable"


class RateLimitedError(ServiceUnavailableError):
    """Remote store asked us to slow down."""

    default_detail = "Notion rate limit reached, try again later"


_CODE_TO_ERROR: dict[str, type[ServiceError]] = {
    APIErrorCode.Unauthorized.value: UnauthorizedError,
    APIErrorCode.RestrictedResource.value: UnauthorizedError,
    APIErrorCode.ObjectNotFound.value: NotFoundError,
    APIErrorCode.RateLimited.value: RateLimitedError,
    APIErrorCode.InvalidJSON.value: MalformedInputError,
    APIErrorCode.InvalidRequestURL.value: MalformedInputError,
    APIErrorCode.InvalidRequest.value: MalformedInputError,
    APIErrorCode.ValidationError.value: MalformedInputError,
    APIErrorCode.ConflictError.value: ServiceUnavailableError,
    APIErrorCode.InternalServerError.value: ServiceUnavailableError,
    APIErrorCode.ServiceUnavailable.value: ServiceUnavailableError,
}


def _status_to_error(status: int | None) -> type[ServiceError]:
    if status == 401 or status == 403:
        return UnauthorizedError
    if status == 404:
        return NotFoundError
    if status == 429:
        return RateLimitedError
    if status is not None and 400 <= status < 500:
        return MalformedInputError
    return ServiceUnavailableError


def from_notion_error(exc: BaseException) -> ServiceError:
    """Classify an exception raised while talking to Notion.

    APIResponseError is mapped by its Notion error code, other HTTP errors by
    status, and timeouts/transport failures become ServiceUnavailableError.
    Anything already a ServiceError is returned unchanged.
    """
    if isinstance(exc, ServiceError):
        return exc
    if isinstance(exc, APIResponseError):
        code = getattr(exc, "code", None)
        code = getattr(code, "value", code)
        error_cls = _CODE_TO_ERROR.get(code) or _status_to_error(getattr(exc, "status", None))
        return error_cls(f"Notion API error: {exc}" if str(exc) else None)
    if isinstance(exc, (RequestTimeoutError, TimeoutError)):
        return ServiceUnavailableError("Notion request timed out")
    if isinstance(exc, HTTPResponseError):
        return _status_to_error(getattr(exc, "status", None))()
    if isinstance(exc, httpx.TransportError):
        return ServiceUnavailableError(f"Could not reach Notion: {exc}")
    return ServiceUnavailableError(str(exc) or None)
