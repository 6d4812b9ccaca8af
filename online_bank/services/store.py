from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Optional, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel

from ..core.config import Settings
from ..core.db import create_engine_for_url
from ..core.errors import LedgerTimeoutError, TransactionAbortedError
from ..models import AccountModel
from .repository import AccountRepository


logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccountStore:
    """Transactional storage of account records.

    Every unit of work runs in its own session and transaction; nothing is
    cached between calls. Transient store conflicts are retried a bounded
    number of times and then reported as ``TransactionAbortedError``, or as
    ``LedgerTimeoutError`` once the caller's deadline has passed.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        retries: int = 3,
        backoff: float = 0.05,
        default_timeout: float = 5.0,
    ) -> None:
        self.engine = engine
        self.retries = retries
        self.backoff = backoff
        self.default_timeout = default_timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccountStore":
        engine = create_engine_for_url(
            settings.database_url, lock_timeout=settings.lock_timeout_seconds
        )
        return cls(
            engine,
            retries=settings.transaction_retries,
            backoff=settings.retry_backoff_seconds,
            default_timeout=settings.lock_timeout_seconds,
        )

    # Lifecycle ----------------------------------------------------------
    def open(self) -> None:
        SQLModel.metadata.create_all(self.engine)
        logger.info("store.opened", extra={"url": self.engine.url.render_as_string()})

    def close(self) -> None:
        self.engine.dispose()
        logger.info("store.closed")

    # Transactions -------------------------------------------------------
    def run_transaction(
        self,
        fn: Callable[[AccountRepository], T],
        timeout: Optional[float] = None,
    ) -> T:
        """Run ``fn`` inside one all-or-nothing transaction and return its result.

        The result is returned only after the commit succeeded. Any exception
        rolls the whole transaction back; ledger errors raised by ``fn`` are
        passed through untouched and never retried.
        """
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        attempt = 0
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.error("store.transaction.timeout", extra={"attempts": attempt})
                raise LedgerTimeoutError({"timeout": timeout, "attempts": attempt})
            try:
                return self._run_once(fn, remaining)
            except OperationalError as exc:
                attempt += 1
                if deadline - time.monotonic() <= 0:
                    logger.error("store.transaction.timeout", extra={"attempts": attempt})
                    raise LedgerTimeoutError({"timeout": timeout, "attempts": attempt}) from exc
                if attempt > self.retries:
                    logger.error(
                        "store.transaction.aborted",
                        extra={"attempts": attempt, "error": str(exc.orig)},
                    )
                    raise TransactionAbortedError({"attempts": attempt}) from exc
                logger.warning(
                    "store.transaction.retry",
                    extra={"attempt": attempt, "error": str(exc.orig)},
                )
                time.sleep(min(self.backoff * attempt, max(deadline - time.monotonic(), 0)))

    def _run_once(self, fn: Callable[[AccountRepository], T], timeout: float) -> T:
        bind = self.engine.execution_options(lock_timeout=timeout)
        with Session(bind, expire_on_commit=False) as session:
            with session.begin():
                if self.engine.dialect.name == "postgresql":
                    session.connection().exec_driver_sql(
                        f"SET LOCAL lock_timeout = '{int(timeout * 1000)}ms'"
                    )
                return fn(AccountRepository(session))

    # Single-call primitives ---------------------------------------------
    def find_by_account_no(self, account_no: str) -> Optional[AccountModel]:
        return self.run_transaction(lambda repo: repo.find_by_account_no(account_no))

    def insert_if_absent(self, account: AccountModel) -> AccountModel:
        return self.run_transaction(lambda repo: repo.insert_if_absent(account))

    def atomic_update_balance(
        self, account_no: str, delta: int, timeout: Optional[float] = None
    ) -> AccountModel:
        return self.run_transaction(
            lambda repo: repo.atomic_update_balance(account_no, delta), timeout=timeout
        )

    def list_accounts(self) -> list[AccountModel]:
        return self.run_transaction(lambda repo: repo.list_accounts())
