from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional
from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

# Largest balance a signed 64-bit column holds, in minor units.
MAX_BALANCE = 2**63 - 1

class Account(SQLModel, table=True):
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_account_balance_non_negative"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    account_no: str = Field(unique=True, index=True)
    holder_name: str
    # minor units (cents)
    balance: int = Field(default=0, ge=0)
    is_kyc_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
