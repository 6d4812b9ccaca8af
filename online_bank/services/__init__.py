from .ledger import LedgerService
from .repository import AccountRepository
from .store import AccountStore

__all__ = ["AccountRepository", "AccountStore", "LedgerService"]
