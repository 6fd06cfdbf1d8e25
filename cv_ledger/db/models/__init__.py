from cv_ledger.db.models.account import Account
from cv_ledger.db.models.ledger import LedgerState, Case, CaseLike, LEDGER_STATE_ID

__all__ = [
    "Account",
    "LedgerState",
    "Case",
    "CaseLike",
    "LEDGER_STATE_ID"
]
