from cv_ledger.db.repositories.account_repository import AccountRepository
from cv_ledger.db.repositories.ledger_repository import LedgerRepository

__all__ = [
    "AccountRepository",
    "LedgerRepository"
]
