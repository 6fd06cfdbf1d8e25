from cv_ledger.domains.ledger.entities import Case, LedgerState
from cv_ledger.domains.ledger.exceptions import (
    LedgerError, Unauthorized, InvalidInput, NotFound, AlreadyLiked
)
from cv_ledger.domains.ledger.events import LikeSet, EventBus, event_bus
from cv_ledger.domains.ledger.schemas import (
    MainInfoUpdate, MainInfoResponse, CaseBase, CaseCreate, CaseUpdate,
    CaseCreatedResponse, CaseResponse, CaseListResponse, LikeResponse,
    LedgerStatsResponse, OwnerResponse
)
from cv_ledger.domains.ledger.services import LedgerService, ledger_lock

__all__ = [
    "Case", "LedgerState",
    "LedgerError", "Unauthorized", "InvalidInput", "NotFound", "AlreadyLiked",
    "LikeSet", "EventBus", "event_bus",
    "MainInfoUpdate", "MainInfoResponse", "CaseBase", "CaseCreate", "CaseUpdate",
    "CaseCreatedResponse", "CaseResponse", "CaseListResponse", "LikeResponse",
    "LedgerStatsResponse", "OwnerResponse",
    "LedgerService", "ledger_lock"
]
