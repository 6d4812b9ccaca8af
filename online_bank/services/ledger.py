from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from ..core.errors import (
    AccountNotFoundError,
    InsufficientBalanceError,
    KYCNotVerifiedError,
    ReceiverNotFoundError,
    SenderNotFoundError,
)
from ..models import AccountModel, AccountResponse
from .repository import AccountRepository
from .store import AccountStore
from .validation import (
    from_minor_units,
    to_minor_units,
    validate_amount,
    validate_distinct_accounts,
    validate_initial_deposit,
    validate_required_fields,
)


logger = logging.getLogger(__name__)


class LedgerService:
    """Balance-mutating operations on top of an ``AccountStore``.

    Input is validated before the store is touched. Each operation then runs
    as a single store transaction and only returns once it has committed.
    """

    def __init__(self, store: AccountStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _account_to_response(self, account: AccountModel) -> AccountResponse:
        return AccountResponse(
            account_no=account.account_no,
            holder_name=account.holder_name,
            balance=from_minor_units(account.balance),
            is_kyc_verified=account.is_kyc_verified,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def create_account(
        self,
        account_no: Optional[str],
        holder_name: Optional[str],
        initial_deposit: Any = 0,
        is_kyc_verified: bool = False,
        *,
        timeout: Optional[float] = None,
    ) -> AccountResponse:
        fields = validate_required_fields(account_no=account_no, holder_name=holder_name)
        opening = validate_initial_deposit(initial_deposit)

        def _insert(repo: AccountRepository) -> AccountModel:
            account = AccountModel(
                account_no=fields["account_no"],
                holder_name=fields["holder_name"],
                balance=to_minor_units(opening),
                is_kyc_verified=bool(is_kyc_verified),
            )
            return repo.insert_if_absent(account)

        created = self.store.run_transaction(_insert, timeout=timeout)
        logger.info(
            "account.created",
            extra={
                "account_no": created.account_no,
                "holder_name": created.holder_name,
                "balance": str(opening),
            },
        )
        return self._account_to_response(created)

    def get_account(self, account_no: Optional[str]) -> AccountResponse:
        fields = validate_required_fields(account_no=account_no)
        account = self.store.find_by_account_no(fields["account_no"])
        if account is None:
            raise AccountNotFoundError({"account_no": fields["account_no"]})
        return self._account_to_response(account)

    def list_accounts(self) -> list[AccountResponse]:
        return [self._account_to_response(account) for account in self.store.list_accounts()]

    def deposit(
        self,
        account_no: Optional[str],
        amount: Any,
        *,
        timeout: Optional[float] = None,
    ) -> AccountResponse:
        fields = validate_required_fields(account_no=account_no)
        value = validate_amount(amount)

        account = self.store.atomic_update_balance(
            fields["account_no"], to_minor_units(value), timeout=timeout
        )
        logger.info(
            "account.deposit",
            extra={
                "account_no": account.account_no,
                "amount": str(value),
                "balance": str(from_minor_units(account.balance)),
            },
        )
        return self._account_to_response(account)

    def withdraw(
        self,
        account_no: Optional[str],
        amount: Any,
        *,
        timeout: Optional[float] = None,
    ) -> AccountResponse:
        fields = validate_required_fields(account_no=account_no)
        value = validate_amount(amount)

        account = self.store.atomic_update_balance(
            fields["account_no"], -to_minor_units(value), timeout=timeout
        )
        logger.info(
            "account.withdraw",
            extra={
                "account_no": account.account_no,
                "amount": str(value),
                "balance": str(from_minor_units(account.balance)),
            },
        )
        return self._account_to_response(account)

    def transfer(
        self,
        sender_account_no: Optional[str],
        receiver_account_no: Optional[str],
        amount: Any,
        *,
        timeout: Optional[float] = None,
    ) -> Tuple[AccountResponse, AccountResponse]:
        value = validate_amount(amount)
        fields = validate_required_fields(
            sender_account_no=sender_account_no,
            receiver_account_no=receiver_account_no,
        )
        sender_no = fields["sender_account_no"]
        receiver_no = fields["receiver_account_no"]
        validate_distinct_accounts(sender_no, receiver_no)
        minor = to_minor_units(value)

        def _move_funds(repo: AccountRepository) -> Tuple[AccountModel, AccountModel]:
            # Everything below is decided on rows read and locked inside this
            # transaction, never on an earlier lookup.
            locked = repo.lock_accounts([sender_no, receiver_no])
            sender = locked.get(sender_no)
            if sender is None:
                raise SenderNotFoundError({"account_no": sender_no})
            if receiver_no not in locked:
                raise ReceiverNotFoundError({"account_no": receiver_no})
            if not sender.is_kyc_verified:
                raise KYCNotVerifiedError({"account_no": sender_no})
            if sender.balance < minor:
                raise InsufficientBalanceError({"account_no": sender_no})

            debited = repo.atomic_update_balance(sender_no, -minor)
            credited = repo.atomic_update_balance(receiver_no, minor)
            return debited, credited

        sender, receiver = self.store.run_transaction(_move_funds, timeout=timeout)
        logger.info(
            "account.transfer",
            extra={
                "sender_account_no": sender_no,
                "receiver_account_no": receiver_no,
                "amount": str(value),
            },
        )
        return self._account_to_response(sender), self._account_to_response(receiver)
