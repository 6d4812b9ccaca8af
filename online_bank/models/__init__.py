from .db import Account as AccountModel
from .schemas import (
    AccountCreate,
    AccountListResponse,
    AccountMessageResponse,
    AccountResponse,
    MoneyMovementRequest,
    TransferRequest,
    TransferResponse,
)

__all__ = [
    "AccountCreate",
    "AccountListResponse",
    "AccountMessageResponse",
    "AccountResponse",
    "MoneyMovementRequest",
    "TransferRequest",
    "TransferResponse",
    "AccountModel",
]
