from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

# Request bodies take raw values; the validation layer decides what is acceptable.
RawAmount = Any

class AccountCreate(BaseModel):
    account_no: Optional[str] = Field(default=None, description="Unique, case-sensitive account number")
    holder_name: Optional[str] = Field(default=None, description="Name of the account holder")
    initial_deposit: RawAmount = Field(default=0, description="Opening balance, zero or positive")
    is_kyc_verified: bool = False

class AccountResponse(BaseModel):
    account_no: str
    holder_name: str
    balance: Decimal = Field(..., ge=0, description="Balance with two decimal places")
    is_kyc_verified: bool
    created_at: datetime
    updated_at: datetime

class AccountMessageResponse(BaseModel):
    message: str
    account: AccountResponse

class AccountListResponse(BaseModel):
    accounts: list[AccountResponse]

class MoneyMovementRequest(BaseModel):
    amount: RawAmount = Field(default=None, description="Positive amount, at most two decimal places")

class TransferRequest(BaseModel):
    sender_account_no: Optional[str] = None
    receiver_account_no: Optional[str] = None
    amount: RawAmount = None

class TransferResponse(BaseModel):
    message: str
    sender: AccountResponse
    receiver: AccountResponse
