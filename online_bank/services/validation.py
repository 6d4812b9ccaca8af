"""Pure checks that run before the account store is touched."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.errors import InvalidAmountError, MissingFieldError, SameAccountError

CENT = Decimal("0.01")
# Largest single amount accepted; in cents it stays well inside a 64-bit column.
MAX_AMOUNT = Decimal("999999999999999.99")
ZERO = Decimal("0.00")


def _parse_decimal(raw: Any) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError({"amount": raw})
    try:
        if isinstance(raw, (str, float)):
            return Decimal(str(raw).strip())
        return Decimal(raw)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError({"amount": raw}) from exc


def validate_amount(raw: Any) -> Decimal:
    """Parse ``raw`` into a positive currency amount.

    Values that are not finite, not positive, above ``MAX_AMOUNT``, or carry
    sub-cent precision raise ``InvalidAmountError``; nothing is rounded.
    """
    amount = _parse_decimal(raw)
    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        raise InvalidAmountError({"amount": raw})
    try:
        quantized = amount.quantize(CENT)
    except InvalidOperation as exc:
        raise InvalidAmountError({"amount": raw}) from exc
    if quantized != amount:
        raise InvalidAmountError({"amount": raw})
    return quantized


def validate_initial_deposit(raw: Any) -> Decimal:
    """Like ``validate_amount``, except an absent or zero deposit is accepted."""
    if raw is None:
        return ZERO
    amount = _parse_decimal(raw)
    if amount.is_finite() and amount == 0:
        return ZERO
    return validate_amount(raw)


def validate_distinct_accounts(sender: str, receiver: str) -> None:
    if sender == receiver:
        raise SameAccountError({"account_no": sender})


def validate_required_fields(**fields: Optional[str]) -> dict[str, str]:
    """Return the trimmed values, or raise listing every empty field."""
    cleaned: dict[str, str] = {}
    missing: list[str] = []
    for name, value in fields.items():
        text = value.strip() if isinstance(value, str) else ""
        if not text:
            missing.append(name)
        cleaned[name] = text
    if missing:
        raise MissingFieldError({"fields": missing})
    return cleaned


def to_minor_units(amount: Decimal) -> int:
    return int(amount.quantize(CENT) * 100)


def from_minor_units(value: int) -> Decimal:
    return (Decimal(value) / 100).quantize(CENT)
