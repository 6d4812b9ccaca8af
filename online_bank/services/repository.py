from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from ..core.errors import (
    AccountNotFoundError,
    BalanceLimitExceededError,
    DuplicateAccountError,
    InsufficientBalanceError,
)
from ..models import AccountModel
from ..models.db import MAX_BALANCE


class AccountRepository:
    """Record access scoped to one store transaction.

    Instances are handed out by ``AccountStore.run_transaction`` and must not
    outlive the callback they were given to.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_account_no(self, account_no: str) -> Optional[AccountModel]:
        stmt = (
            select(AccountModel)
            .where(AccountModel.account_no == account_no)
            .execution_options(populate_existing=True)
        )
        return self.session.exec(stmt).first()

    def lock_accounts(self, account_nos: Iterable[str]) -> dict[str, AccountModel]:
        # Rows are locked in ascending account_no order so two transfers over
        # the same pair cannot wait on each other.
        stmt = (
            select(AccountModel)
            .where(col(AccountModel.account_no).in_(sorted(set(account_nos))))
            .order_by(col(AccountModel.account_no))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {account.account_no: account for account in self.session.exec(stmt)}

    def list_accounts(self) -> list[AccountModel]:
        stmt = select(AccountModel).order_by(col(AccountModel.created_at).desc())
        return list(self.session.exec(stmt))

    def insert_if_absent(self, account: AccountModel) -> AccountModel:
        if self.find_by_account_no(account.account_no) is not None:
            raise DuplicateAccountError({"account_no": account.account_no})
        self.session.add(account)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # A concurrent insert won the race; the unique index caught it.
            raise DuplicateAccountError({"account_no": account.account_no}) from exc
        self.session.refresh(account)
        return account

    def atomic_update_balance(self, account_no: str, delta: int) -> AccountModel:
        """Add ``delta`` minor units to the balance in one conditional UPDATE.

        The bounds check (never negative, never above ``MAX_BALANCE``) is part
        of the statement itself, so there is no window between reading the
        balance and writing it.
        """
        accounts = AccountModel.__table__
        # Bounds are compared against a Python-side constant so the database
        # never evaluates a sum that could leave the integer range.
        if delta >= 0:
            within_bounds = accounts.c.balance <= MAX_BALANCE - delta
        else:
            within_bounds = accounts.c.balance >= -delta
        stmt = (
            update(accounts)
            .where(accounts.c.account_no == account_no)
            .where(within_bounds)
            .values(
                balance=accounts.c.balance + delta,
                updated_at=datetime.now(UTC),
            )
        )
        result = self.session.connection().execute(stmt)
        account = self.find_by_account_no(account_no)
        if account is None:
            raise AccountNotFoundError({"account_no": account_no})
        if result.rowcount == 0 and delta >= 0:
            raise BalanceLimitExceededError({"account_no": account_no})
        if result.rowcount == 0:
            raise InsufficientBalanceError({"account_no": account_no})
        return account
