from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from ..core.errors import (
    AccountNotFoundError,
    BalanceLimitExceededError,
    DuplicateAccountError,
    InsufficientBalanceError,
    InvalidAmountError,
    KYCNotVerifiedError,
    LedgerError,
    MissingFieldError,
    ReceiverNotFoundError,
    SameAccountError,
    SenderNotFoundError,
)
from ..services import LedgerService


def _balance(service: LedgerService, account_no: str) -> Decimal:
    return service.get_account(account_no).balance


def test_scenario_deposit_withdraw_transfer_and_kyc_gate(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", 0, True)
    assert service.deposit("ACC1", 100).balance == Decimal("100")

    with pytest.raises(InsufficientBalanceError):
        service.withdraw("ACC1", 150)
    assert _balance(service, "ACC1") == Decimal("100")

    service.create_account("ACC2", "Bob", 0, False)
    sender, receiver = service.transfer("ACC1", "ACC2", 100)
    assert (sender.balance, receiver.balance) == (Decimal("0"), Decimal("100"))

    with pytest.raises(KYCNotVerifiedError):
        service.transfer("ACC2", "ACC1", 50)
    assert (_balance(service, "ACC1"), _balance(service, "ACC2")) == (
        Decimal("0"),
        Decimal("100"),
    )


def test_create_account_trims_and_sets_defaults(service: LedgerService) -> None:
    account = service.create_account(" ACC9 ", "  Carol ")
    assert account.account_no == "ACC9"
    assert account.holder_name == "Carol"
    assert account.balance == Decimal("0.00")
    assert account.is_kyc_verified is False
    assert account.created_at is not None
    assert account.updated_at is not None


def test_create_account_with_initial_deposit(service: LedgerService) -> None:
    account = service.create_account("ACC1", "Alice", "250.75")
    assert account.balance == Decimal("250.75")


def test_create_account_validates_before_touching_store(service: LedgerService) -> None:
    with pytest.raises(MissingFieldError):
        service.create_account("", "Alice")
    with pytest.raises(MissingFieldError):
        service.create_account("ACC1", "   ")
    with pytest.raises(InvalidAmountError):
        service.create_account("ACC1", "Alice", -10)
    assert service.list_accounts() == []


def test_duplicate_account_never_mutates_existing(service: LedgerService) -> None:
    original = service.create_account("ACC1", "Alice", 40, True)

    with pytest.raises(DuplicateAccountError):
        service.create_account("ACC1", "Mallory", 1000, False)

    current = service.get_account("ACC1")
    assert current == original


def test_account_numbers_are_case_sensitive(service: LedgerService) -> None:
    service.create_account("acc1", "Lower")
    service.create_account("ACC1", "Upper")
    assert {a.account_no for a in service.list_accounts()} == {"acc1", "ACC1"}


def test_list_accounts_newest_first(service: LedgerService) -> None:
    for number in ("A", "B", "C"):
        service.create_account(number, f"Holder {number}")
    assert [a.account_no for a in service.list_accounts()] == ["C", "B", "A"]


def test_deposit_and_withdraw_unknown_account(service: LedgerService) -> None:
    with pytest.raises(AccountNotFoundError):
        service.deposit("NOPE", 10)
    with pytest.raises(AccountNotFoundError):
        service.withdraw("NOPE", 10)
    with pytest.raises(AccountNotFoundError):
        service.get_account("NOPE")


@pytest.mark.parametrize("amount", [0, -1, "abc", None, "0.001"])
def test_invalid_amounts_are_rejected_without_side_effects(
    service: LedgerService, amount
) -> None:
    service.create_account("ACC1", "Alice", 10, True)
    service.create_account("ACC2", "Bob")

    for call in (
        lambda: service.deposit("ACC1", amount),
        lambda: service.withdraw("ACC1", amount),
        lambda: service.transfer("ACC1", "ACC2", amount),
    ):
        with pytest.raises(InvalidAmountError):
            call()

    assert _balance(service, "ACC1") == Decimal("10")
    assert _balance(service, "ACC2") == Decimal("0")


def test_withdraw_entire_balance(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", "10.50")
    assert service.withdraw("ACC1", "10.50").balance == Decimal("0")


def test_deposit_updates_timestamp(service: LedgerService) -> None:
    created = service.create_account("ACC1", "Alice")
    deposited = service.deposit("ACC1", 5)
    assert deposited.updated_at >= created.updated_at
    assert deposited.created_at == created.created_at


def test_transfer_conserves_total(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", "100.10", True)
    service.create_account("ACC2", "Bob", "3.90")

    before = _balance(service, "ACC1") + _balance(service, "ACC2")
    sender, receiver = service.transfer("ACC1", "ACC2", "33.33")

    assert sender.balance == Decimal("66.77")
    assert receiver.balance == Decimal("37.23")
    assert sender.balance + receiver.balance == before


@pytest.mark.parametrize(
    "sender, receiver, amount, error",
    [
        ("ACC1", "ACC1", 10, SameAccountError),
        ("MISSING", "ACC2", 10, SenderNotFoundError),
        ("ACC1", "MISSING", 10, ReceiverNotFoundError),
        ("ACC2", "ACC1", 1, KYCNotVerifiedError),
        ("ACC1", "ACC2", 51, InsufficientBalanceError),
        ("ACC1", "", 10, MissingFieldError),
    ],
)
def test_failed_transfer_leaves_both_accounts_unchanged(
    service: LedgerService, sender, receiver, amount, error
) -> None:
    service.create_account("ACC1", "Alice", 50, True)
    service.create_account("ACC2", "Bob", 500, False)
    snapshot = {a.account_no: a for a in service.list_accounts()}

    with pytest.raises(error):
        service.transfer(sender, receiver, amount)

    assert {a.account_no: a for a in service.list_accounts()} == snapshot


def test_sender_and_receiver_not_found_are_account_not_found(service: LedgerService) -> None:
    with pytest.raises(AccountNotFoundError):
        service.transfer("X", "Y", 1)


def test_kyc_gate_applies_even_with_sufficient_balance(service: LedgerService) -> None:
    service.create_account("RICH", "Unverified", 1_000_000, False)
    service.create_account("ACC2", "Bob", 0, False)

    with pytest.raises(KYCNotVerifiedError):
        service.transfer("RICH", "ACC2", 1)


def test_receiver_does_not_need_kyc(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", 20, True)
    service.create_account("ACC2", "Bob", 0, False)
    _, receiver = service.transfer("ACC1", "ACC2", 20)
    assert receiver.balance == Decimal("20")


def test_concurrent_withdrawals_never_overdraw(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", 100)

    def _withdraw(_: int) -> str:
        try:
            service.withdraw("ACC1", 30)
        except InsufficientBalanceError:
            return "insufficient"
        return "ok"

    with ThreadPoolExecutor(max_workers=10) as pool:
        outcomes = list(pool.map(_withdraw, range(10)))

    succeeded = outcomes.count("ok")
    assert succeeded == 3
    assert outcomes.count("insufficient") == 7
    assert _balance(service, "ACC1") == Decimal("100") - 30 * succeeded


def test_concurrent_opposite_transfers_conserve_funds(service: LedgerService) -> None:
    service.create_account("A", "Alice", 100, True)
    service.create_account("B", "Bob", 100, True)

    def _transfer(i: int) -> None:
        sender, receiver = ("A", "B") if i % 2 == 0 else ("B", "A")
        try:
            service.transfer(sender, receiver, 7)
        except InsufficientBalanceError:
            pass

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_transfer, range(40)))

    a, b = _balance(service, "A"), _balance(service, "B")
    assert a >= 0 and b >= 0
    assert a + b == Decimal("200")


def test_concurrent_creation_with_same_number_succeeds_once(service: LedgerService) -> None:
    def _create(i: int) -> str:
        try:
            service.create_account("SAME", f"Holder {i}", i)
        except DuplicateAccountError:
            return "duplicate"
        return "created"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(_create, range(8)))

    assert outcomes.count("created") == 1
    assert len(service.list_accounts()) == 1


def test_business_errors_are_terminal(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice")
    with pytest.raises(LedgerError) as excinfo:
        service.withdraw("ACC1", 1)
    assert excinfo.value.retryable is False


def test_oversized_amounts_are_rejected_as_invalid(service: LedgerService) -> None:
    service.create_account("ACC1", "Alice", 0, True)

    with pytest.raises(InvalidAmountError):
        service.deposit("ACC1", "100000000000000000")
    with pytest.raises(InvalidAmountError):
        service.create_account("ACC2", "Bob", "100000000000000000")
    assert _balance(service, "ACC1") == Decimal("0")


def test_accumulated_deposits_stop_at_the_balance_limit(service: LedgerService) -> None:
    largest = "999999999999999.99"
    service.create_account("ACC1", "Alice", largest, True)
    service.create_account("ACC2", "Bob", largest, True)

    deposits = 0
    with pytest.raises(BalanceLimitExceededError):
        for _ in range(100):
            service.deposit("ACC1", largest)
            deposits += 1

    # 2**63 - 1 cents holds 92 maximum-sized amounts
    assert deposits == 91
    balance = _balance(service, "ACC1")
    assert balance == Decimal(largest) * 92
    assert isinstance(service.store.find_by_account_no("ACC1").balance, int)

    # a transfer that would overflow the receiver leaves both sides untouched
    with pytest.raises(BalanceLimitExceededError):
        service.transfer("ACC2", "ACC1", largest)
    assert _balance(service, "ACC1") == balance
    assert _balance(service, "ACC2") == Decimal(largest)
