from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..core.errors import (
    AccountNotFoundError,
    BalanceLimitExceededError,
    DuplicateAccountError,
    InsufficientBalanceError,
    InvalidAmountError,
    KYCNotVerifiedError,
    LedgerError,
    LedgerTimeoutError,
    MissingFieldError,
    SameAccountError,
    TransactionAbortedError,
)

# Checked in order, so subclasses (sender/receiver not found) resolve
# through their parent.
STATUS_CODES: list[tuple[type[LedgerError], int]] = [
    (InvalidAmountError, status.HTTP_400_BAD_REQUEST),
    (MissingFieldError, status.HTTP_400_BAD_REQUEST),
    (SameAccountError, status.HTTP_400_BAD_REQUEST),
    (DuplicateAccountError, status.HTTP_409_CONFLICT),
    (InsufficientBalanceError, status.HTTP_409_CONFLICT),
    (BalanceLimitExceededError, status.HTTP_409_CONFLICT),
    (AccountNotFoundError, status.HTTP_404_NOT_FOUND),
    (KYCNotVerifiedError, status.HTTP_403_FORBIDDEN),
    (TransactionAbortedError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LedgerTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
]


def status_code_for(exc: LedgerError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        return JSONResponse(
            status_code=status_code_for(exc),
            content={"detail": exc.message, "code": exc.code, "retryable": exc.retryable},
        )
