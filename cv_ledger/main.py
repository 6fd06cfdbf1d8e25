from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cv_ledger.api.http import health_router, auth_router, ledger_router
from cv_ledger.api.ws.events import router as websocket_router, manager
from cv_ledger.core.config import settings
from cv_ledger.core.db import SessionLocal, init_models
from cv_ledger.core.logging import configure_logging
from cv_ledger.domains.identity.services import IdentityService
from cv_ledger.domains.ledger.events import event_bus
from cv_ledger.domains.ledger.services import LedgerService

logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    
    async with SessionLocal() as session:
        state = await LedgerService(session).bootstrap(settings.owner_address)
        await IdentityService(session).ensure_owner_account(state.owner, settings.owner_password)
    
    event_bus.subscribe(manager.handle_event)
    logger.info("CV Ledger started")
    yield
    event_bus.unsubscribe(manager.handle_event)
    await manager.shutdown()
    logger.info("CV Ledger stopped")


app = FastAPI(
    title="CV Ledger",
    description="Single-owner CV record store with cases and likes",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(ledger_router)
app.include_router(websocket_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "CV Ledger API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
