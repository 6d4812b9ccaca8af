from fastapi import APIRouter, Depends, status

from ..core.dependencies import get_ledger_service
from ..models import (
    AccountCreate,
    AccountListResponse,
    AccountMessageResponse,
    AccountResponse,
    MoneyMovementRequest,
    TransferRequest,
    TransferResponse,
)
from ..services import LedgerService


router = APIRouter(prefix="/accounts", tags=["accounts"])
transfer_router = APIRouter(prefix="/transfers", tags=["transfers"])

@router.post("", response_model=AccountMessageResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    payload: AccountCreate,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountMessageResponse:
    account = service.create_account(
        payload.account_no,
        payload.holder_name,
        payload.initial_deposit,
        payload.is_kyc_verified,
    )
    return AccountMessageResponse(message="Account created successfully", account=account)

@router.get("", response_model=AccountListResponse)
def list_accounts(
    service: LedgerService = Depends(get_ledger_service),
) -> AccountListResponse:
    return AccountListResponse(accounts=service.list_accounts())

@router.post("/transfer", response_model=TransferResponse)
@transfer_router.post("", response_model=TransferResponse)
def create_transfer(
    payload: TransferRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> TransferResponse:
    sender, receiver = service.transfer(
        payload.sender_account_no,
        payload.receiver_account_no,
        payload.amount,
    )
    return TransferResponse(message="Transfer successful", sender=sender, receiver=receiver)

@router.get("/{account_no}", response_model=AccountResponse)
def get_account(
    account_no: str,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    return service.get_account(account_no)

@router.post("/{account_no}/deposit", response_model=AccountMessageResponse)
def deposit(
    account_no: str,
    payload: MoneyMovementRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountMessageResponse:
    account = service.deposit(account_no, payload.amount)
    return AccountMessageResponse(message="Deposit successful", account=account)

@router.post("/{account_no}/withdraw", response_model=AccountMessageResponse)
def withdraw(
    account_no: str,
    payload: MoneyMovementRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> AccountMessageResponse:
    account = service.withdraw(account_no, payload.amount)
    return AccountMessageResponse(message="Withdrawal successful", account=account)

__all__ = ["router", "transfer_router"]
