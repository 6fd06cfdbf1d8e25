"""
Pytest fixtures for CV Ledger tests
"""
import asyncio
import os

# Настройки должны быть заданы до импорта cv_ledger
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("OWNER_ADDRESS", "owner")
os.environ.setdefault("OWNER_PASSWORD", "OwnerSecret1")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cv_ledger.core.db import init_models
from cv_ledger.domains.ledger.events import EventBus
from cv_ledger.domains.ledger.services import LedgerService

OWNER = os.environ["OWNER_ADDRESS"]
VIEWER = "viewer"
OTHER_VIEWER = "viewer-2"
OWNER_PASSWORD = os.environ["OWNER_PASSWORD"]

# 2023-01-20 и 2023-01-23, секунды
START_DATE = 1674172800
END_DATE = 1674432000


@pytest.fixture
async def engine():
    """In-memory SQLite, одно соединение на весь тест"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def lock():
    return asyncio.Lock()


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def received_events(events):
    """Список событий, опубликованных в шину теста"""
    received = []

    async def handler(event):
        received.append(event)

    events.subscribe(handler)
    return received


@pytest.fixture
async def ledger(session, lock, events):
    service = LedgerService(session, lock=lock, events=events)
    await service.bootstrap(OWNER)
    return service


@pytest.fixture
def case_info():
    return '{"name": "CV", "employee": "Uddug Team", "description": "Make an on-chain CV"}'
