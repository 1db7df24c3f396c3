"""
Error taxonomy, custom exception classes and FastAPI exception handlers.

Two kinds of failure flow through the API:

  - Expected business outcomes of the auth workflow (bad input, wrong
    password, locked account, duplicate email) are returned as an
    ErrorKind inside an AuthResult. The router turns them into responses
    with error_response().
  - Faults (store timeout, store or crypto failure, missing catalog rows)
    are raised as AppetiteAPIError subclasses and translated by the
    handlers registered here.

Every error body has the same shape:
    {"message": "...", "error_type": "..."}
500 responses include the underlying cause as "error" only in DEBUG mode,
and never when ENVIRONMENT is production.

Exception hierarchy:
    AppetiteAPIError (base)
    ├── InternalServiceError   — store, hashing or signing failure
    ├── StoreTimeoutError      — store call exceeded DB_TIMEOUT_SECONDS (retryable)
    └── CatalogItemNotFoundError
        ├── CarrierNotFoundError
        ├── ProductNotFoundError
        └── RuleNotFoundError
"""

import enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.logging_config import get_logger

logger = get_logger(__name__)


class ErrorKind(str, enum.Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    DUPLICATE_EMAIL = "duplicate_email"
    INTERNAL_ERROR = "internal_error"
    SERVICE_UNAVAILABLE = "service_unavailable"


ERROR_STATUS_CODES = {
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_LOCKED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

ERROR_MESSAGES = {
    ErrorKind.INVALID_REQUEST: "Email and password are required",
    # Same message for unknown email, inactive user and wrong password
    ErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorKind.ACCOUNT_LOCKED: "Account is temporarily locked",
    ErrorKind.DUPLICATE_EMAIL: "User with this email already exists",
    ErrorKind.INTERNAL_ERROR: "An unexpected error occurred",
    ErrorKind.SERVICE_UNAVAILABLE: "Service temporarily unavailable, please retry",
}


def error_response(
    kind: ErrorKind,
    message: str | None = None,
    cause: BaseException | None = None,
) -> JSONResponse:
    """Build the JSON error body for a taxonomy kind."""
    content = {
        "message": message or ERROR_MESSAGES[kind],
        "error_type": kind.value,
    }
    if cause is not None and settings.expose_error_details:
        content["error"] = str(cause)
    return JSONResponse(status_code=ERROR_STATUS_CODES[kind], content=content)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class AppetiteAPIError(Exception):
    """Base exception for all Appetite Checker API faults."""

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


class InternalServiceError(AppetiteAPIError):
    """
    Raised at a service boundary when the store or a crypto primitive fails.

    The detail is the caller-facing message ("Login failed"); the original
    exception is chained as __cause__ and only logged.
    """

    def __init__(self, detail: str = "An unexpected error occurred"):
        super().__init__(detail)


class StoreTimeoutError(AppetiteAPIError):
    """Raised when a store call does not finish within DB_TIMEOUT_SECONDS."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Store call {operation} timed out after {timeout}s")


class CatalogItemNotFoundError(AppetiteAPIError):
    """Raised when a carrier, product or rule id doesn't exist."""

    label = "Item"
    error_type = "not_found"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"{self.label} {item_id} not found")


class CarrierNotFoundError(CatalogItemNotFoundError):
    label = "Carrier"
    error_type = "carrier_not_found"


class ProductNotFoundError(CatalogItemNotFoundError):
    label = "Product"
    error_type = "product_not_found"


class RuleNotFoundError(CatalogItemNotFoundError):
    label = "Rule"
    error_type = "rule_not_found"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Called once during app creation in main.py.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(ErrorKind.INVALID_REQUEST, message="Invalid request")

    @app.exception_handler(InternalServiceError)
    async def internal_service_handler(
        request: Request, exc: InternalServiceError
    ) -> JSONResponse:
        return error_response(
            ErrorKind.INTERNAL_ERROR, message=exc.detail, cause=exc.__cause__ or exc
        )

    @app.exception_handler(StoreTimeoutError)
    async def store_timeout_handler(
        request: Request, exc: StoreTimeoutError
    ) -> JSONResponse:
        logger.warning("%s %s: %s", request.method, request.url.path, exc.detail)
        response = error_response(ErrorKind.SERVICE_UNAVAILABLE)
        response.headers["Retry-After"] = "1"
        return response

    @app.exception_handler(CatalogItemNotFoundError)
    async def catalog_item_not_found_handler(
        request: Request, exc: CatalogItemNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": exc.detail, "error_type": exc.error_type},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(ErrorKind.INTERNAL_ERROR, cause=exc)
