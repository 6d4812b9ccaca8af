from __future__ import annotations

from typing import Any, Optional


class LedgerError(Exception):
    """Base class for every failure the ledger reports to its callers.

    Each subclass has exactly one stable ``message``; per-call details go in
    ``context`` so callers can still tell two failures of the same kind apart.
    """

    code = "ledger_error"
    message = "Ledger operation failed"
    retryable = False

    def __init__(self, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(self.message)
        self.context = context or {}


class InvalidAmountError(LedgerError):
    code = "invalid_amount"
    message = "Amount must be a positive number up to 999999999999999.99 with at most two decimal places"


class MissingFieldError(LedgerError):
    code = "missing_field"
    message = "Required fields are missing"


class SameAccountError(LedgerError):
    code = "same_account"
    message = "Sender and receiver accounts must be different"


class DuplicateAccountError(LedgerError):
    code = "duplicate_account"
    message = "Account number already exists"


class AccountNotFoundError(LedgerError):
    code = "account_not_found"
    message = "Account not found"


class SenderNotFoundError(AccountNotFoundError):
    code = "sender_not_found"
    message = "Sender account not found"


class ReceiverNotFoundError(AccountNotFoundError):
    code = "receiver_not_found"
    message = "Receiver account not found"


class InsufficientBalanceError(LedgerError):
    code = "insufficient_balance"
    message = "Insufficient balance"


class BalanceLimitExceededError(LedgerError):
    code = "balance_limit_exceeded"
    message = "Resulting balance exceeds the maximum the ledger can hold"


class KYCNotVerifiedError(LedgerError):
    code = "kyc_not_verified"
    message = "Sender must be KYC verified to transfer money"


class TransactionAbortedError(LedgerError):
    """Raised when the store gave up on a transaction after transient conflicts."""

    code = "transaction_aborted"
    message = "Transaction was aborted, please retry"
    retryable = True


class LedgerTimeoutError(LedgerError):
    code = "timeout"
    message = "Timed out waiting for the account store"
    retryable = True
