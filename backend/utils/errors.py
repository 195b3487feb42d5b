from fastapi import HTTPException


class MissingIdentifierError(ValueError):
    """A payload lacks an identifier the reconciliation cannot invent."""


class OrderValidationError(Exception):
    """Rejected before any request is sent upstream."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CommerceApiError(Exception):
    """Non-2xx or transport failure talking to the commerce API."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SubmissionInProgressError(Exception):
    def __init__(self, key: str):
        super().__init__(f"Submission already in progress for {key}")
        self.key = key


def http_error_from(exc: Exception) -> HTTPException:
    """
    Map workflow errors to the response the storefront sees.
    """
    if isinstance(exc, OrderValidationError):
        return HTTPException(status_code=400, detail=exc.message)

    if isinstance(exc, SubmissionInProgressError):
        return HTTPException(status_code=409, detail="Request already in progress")

    if isinstance(exc, CommerceApiError):
        status_code = exc.status_code
        if status_code is None or not 400 <= status_code < 500:
            status_code = 502
        return HTTPException(status_code=status_code, detail=exc.message)

    if isinstance(exc, MissingIdentifierError):
        return HTTPException(status_code=502, detail="Malformed order payload from commerce API")

    return HTTPException(status_code=500, detail="Internal error")


# Everything a workflow may raise that the route seam translates.
WORKFLOW_ERRORS = (
    OrderValidationError,
    SubmissionInProgressError,
    CommerceApiError,
    MissingIdentifierError,
)
