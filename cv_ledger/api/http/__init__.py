from cv_ledger.api.http.health import router as health_router
from cv_ledger.api.http.auth import router as auth_router
from cv_ledger.api.http.ledger import router as ledger_router

__all__ = [
    "health_router",
    "auth_router",
    "ledger_router"
]
