"""
Domain errors and their safe HTTP translation.

Services raise the PharmaTraceError subclasses below and never retry on
their own. The API layer turns them into HTTPExceptions via BusinessError:
specific messages for problems the caller caused, generic ones for
internal failures (details go to the log, not the response).
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class PharmaTraceError(Exception):
    """Base class for every failure scoped to a single operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PharmaTraceError):
    """Malformed or missing field on create. Raised before any write."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFound(PharmaTraceError):
    """Lookup matched nothing the caller is allowed to see."""

    def __init__(self, resource: str = "Resource", message: str = ""):
        super().__init__(message or f"{resource} not found")
        self.resource = resource


class PermissionDenied(PharmaTraceError):
    """The caller's role may not perform this operation."""


class TransitionNotAllowed(PharmaTraceError):
    """Requested status change is rejected by the lifecycle rules."""

    def __init__(self, current, requested, reason: str = ""):
        message = f"Cannot move batch from {current.value} to {requested.value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.current = current
        self.requested = requested


class PersistenceFailure(PharmaTraceError):
    """
    Storage rejected a read or write (constraint violation, lost race, outage).

    Always retryable from the caller's point of view: a retry of batch
    creation draws a fresh qr_code, a retry of a transition re-reads state.
    """

    def __init__(self, message: str, retryable: bool = True, conflict: bool = False):
        super().__init__(message)
        self.retryable = retryable
        self.conflict = conflict


class BusinessError:
    """Business-domain HTTP errors with safe (non-leaky) messages."""

    @staticmethod
    def not_found(detail: str = "Resource not found", reason: str = "") -> HTTPException:
        """
        404 for lookups. Also used when the resource exists but belongs to
        someone else, so ownership cannot be probed by id.
        """
        if reason:
            logger.warning(f"Access denied / not found: {detail} - {reason}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """Generic 401 for all identity failures."""
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def forbidden(reason: str = "") -> HTTPException:
        logger.warning(f"Forbidden access: {reason}")
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    @staticmethod
    def bad_request(detail: str, field: str | None = None) -> HTTPException:
        """
        400 for input validation / lifecycle errors.
        OK to include specific details here since the caller caused the issue.
        """
        logger.info(f"Bad request: {detail}")
        body = {"message": detail, "field": field} if field else detail
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=body,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """409 for constraint collisions and lost update races."""
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def unavailable(detail: str = "Storage temporarily unavailable. Please retry.") -> HTTPException:
        logger.warning(f"Service unavailable: {detail}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """Generic 500 - logs actual error internally, hides from user."""
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )


def to_http_exception(error: PharmaTraceError) -> HTTPException:
    """Map a domain error onto the matching BusinessError response."""
    if isinstance(error, ValidationError):
        return BusinessError.bad_request(error.message, field=error.field)
    if isinstance(error, TransitionNotAllowed):
        return BusinessError.bad_request(error.message, field="status")
    if isinstance(error, NotFound):
        return BusinessError.not_found(error.message)
    if isinstance(error, PermissionDenied):
        return BusinessError.forbidden(error.message)
    if isinstance(error, PersistenceFailure):
        if error.conflict:
            return BusinessError.conflict(error.message)
        return BusinessError.unavailable()
    return BusinessError.server_error(error)
