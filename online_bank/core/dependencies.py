from fastapi import Depends, Request

from ..services import AccountStore, LedgerService

def get_account_store(request: Request) -> AccountStore:
    return request.app.state.store

def get_ledger_service(store: AccountStore = Depends(get_account_store)) -> LedgerService:
    return LedgerService(store)
