import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from cv_ledger.db.repositories.ledger_repository import LedgerRepository
from cv_ledger.domains.ledger.entities import Case, LedgerState, validate_start_date
from cv_ledger.domains.ledger.events import EventBus, LikeSet, event_bus
from cv_ledger.domains.ledger.exceptions import AlreadyLiked, LedgerError, NotFound, Unauthorized

logger = logging.getLogger(__name__)

# Один реестр на процесс: все изменяющие вызовы выполняются строго по очереди
ledger_lock = asyncio.Lock()


class LedgerService:
    """Сервис реестра: основная информация, кейсы и лайки"""

    def __init__(
        self,
        session: AsyncSession,
        lock: Optional[asyncio.Lock] = None,
        events: Optional[EventBus] = None
    ):
        self.session = session
        self.ledger_repository = LedgerRepository(session)
        self.lock = lock or ledger_lock
        self.events = events or event_bus

    async def bootstrap(self, owner: str) -> LedgerState:
        """Создание состояния реестра при первом запуске

        Владелец задается один раз; при повторном запуске сохраненный
        владелец остается прежним.
        """
        async with self._write():
            state = await self.ledger_repository.get_state()

            if state is not None:
                if state.owner != owner:
                    logger.warning(
                        f"Configured owner {owner} ignored, ledger is owned by {state.owner}"
                    )
                return state

            state = LedgerState(owner=owner)
            await self.ledger_repository.create_state(state)
            await self.session.commit()

            logger.info(f"Ledger initialized for owner {owner}")
            return state

    async def get_owner(self) -> str:
        state = await self._load_state()
        return state.owner

    async def get_main_info(self) -> str:
        """Получение основной информации"""
        state = await self._load_state()
        return state.main_info

    async def update_main_info(self, caller: str, doc: str) -> str:
        """Полная перезапись основной информации владельцем"""
        async with self._write():
            state = await self._load_state()
            self._check_owner(state, caller, "update_main_info")

            state.update_main_info(doc)
            await self.ledger_repository.save_state(state)
            await self.session.commit()

            logger.info(f"Main info updated ({len(doc)} chars)")
            return state.main_info

    async def add_case(self, caller: str, info: str, start_date: int, end_date: int) -> int:
        """Добавление кейса, возвращает назначенный id"""
        async with self._write():
            state = await self._load_state()
            self._check_owner(state, caller, "add_case")

            # id резервируется только после успешной проверки данных
            self._reject_on_error("add_case", validate_start_date, start_date)
            case = Case.create_case(state.next_case_id(), info, start_date, end_date)

            await self.ledger_repository.add_case(case)
            await self.ledger_repository.save_state(state)
            await self.session.commit()

            logger.info(f"Case {case.id} added")
            return case.id

    async def update_case(
        self,
        caller: str,
        case_id: int,
        info: str,
        start_date: int,
        end_date: int
    ) -> Case:
        """Обновление содержимого кейса, лайки сохраняются"""
        async with self._write():
            state = await self._load_state()
            self._check_owner(state, caller, "update_case")

            case = await self._load_active_case(case_id, "update_case")
            self._reject_on_error("update_case", case.update_content, info, start_date, end_date)

            await self.ledger_repository.save_case(case)
            await self.session.commit()

            logger.info(f"Case {case_id} updated")
            return case

    async def remove_case(self, caller: str, case_id: int) -> None:
        """Удаление кейса (tombstone) со снятием его лайков с общего счетчика"""
        async with self._write():
            state = await self._load_state()
            self._check_owner(state, caller, "remove_case")

            case = await self._load_active_case(case_id, "remove_case")
            removed_likes = case.mark_deleted()
            state.on_case_removed(removed_likes)

            await self.ledger_repository.save_case(case)
            await self.ledger_repository.save_state(state)
            await self.session.commit()

            logger.info(f"Case {case_id} removed, {removed_likes} likes withdrawn")

    async def set_like(self, caller: str, case_id: int) -> Case:
        """Лайк кейса; каждая идентичность может поставить не более одного"""
        async with self._write():
            state = await self._load_state()
            case = await self._load_active_case(case_id, "set_like")

            if await self.ledger_repository.has_like(case_id, caller):
                logger.warning(f"set_like rejected: {caller} already liked case {case_id}")
                raise AlreadyLiked()

            case.register_like()
            state.on_like()

            try:
                await self.ledger_repository.add_like(case_id, caller)
                await self.ledger_repository.save_case(case)
                await self.ledger_repository.save_state(state)
                await self.session.commit()
            except IntegrityError:
                raise AlreadyLiked()

            await self.events.publish(LikeSet(case_id=case_id, liker=caller))
            return case

    async def get_case(self, case_id: int) -> Case:
        """Получение кейса по id"""
        case = await self.ledger_repository.get_case(case_id)

        if case is None:
            raise NotFound()

        case.ensure_active()
        return case

    async def get_cases(self) -> List[Case]:
        """Все неудаленные кейсы по возрастанию id"""
        return await self.ledger_repository.list_active_cases()

    async def get_total_cases(self) -> int:
        return await self.ledger_repository.count_active_cases()

    async def get_total_likes(self) -> int:
        state = await self._load_state()
        return state.total_likes

    @asynccontextmanager
    async def _write(self):
        """Изменяющий вызов: под общей блокировкой, при ошибке откатывается целиком"""
        async with self.lock:
            try:
                yield
            except Exception:
                await self.session.rollback()
                raise

    async def _load_state(self) -> LedgerState:
        state = await self.ledger_repository.get_state()

        if state is None:
            raise RuntimeError("Ledger is not initialized")

        return state

    async def _load_active_case(self, case_id: int, operation: str) -> Case:
        case = await self.ledger_repository.get_case(case_id)

        if case is None or case.deleted:
            logger.warning(f"{operation} rejected: case {case_id} deleted or invalid")
            raise NotFound()

        return case

    def _check_owner(self, state: LedgerState, caller: str, operation: str) -> None:
        try:
            state.ensure_owner(caller)
        except Unauthorized:
            logger.warning(f"{operation} rejected: {caller} is not the owner")
            raise

    def _reject_on_error(self, operation: str, func, *args):
        """Вызов доменной проверки с логированием отказа"""
        try:
            return func(*args)
        except LedgerError as e:
            logger.warning(f"{operation} rejected: {e}")
            raise
