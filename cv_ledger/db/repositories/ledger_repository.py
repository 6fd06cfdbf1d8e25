from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, and_

from cv_ledger.db.models.ledger import (
    LedgerState as LedgerStateModel, Case as CaseModel, CaseLike as CaseLikeModel,
    LEDGER_STATE_ID
)

if TYPE_CHECKING:
    from cv_ledger.domains.ledger.entities import Case, LedgerState


class LedgerRepository:
    """Репозиторий состояния реестра, кейсов и лайков

    Методы не фиксируют транзакцию: commit выполняет сервис, чтобы каждая
    операция реестра применялась целиком или не применялась вовсе.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get_state(self) -> Optional["LedgerState"]:
        """Получение состояния реестра"""
        result = await self.session.execute(
            select(LedgerStateModel).where(LedgerStateModel.id == LEDGER_STATE_ID)
        )
        db_state = result.scalar_one_or_none()
        return self._state_to_domain(db_state) if db_state else None
    
    async def create_state(self, state: "LedgerState") -> None:
        """Создание строки состояния"""
        self.session.add(
            LedgerStateModel(
                id=LEDGER_STATE_ID,
                owner=state.owner,
                main_info=state.main_info,
                total_likes=state.total_likes,
                last_case_id=state.last_case_id
            )
        )
        await self.session.flush()
    
    async def save_state(self, state: "LedgerState") -> None:
        """Сохранение изменяемых полей состояния (владелец неизменен)"""
        await self.session.execute(
            update(LedgerStateModel)
            .where(LedgerStateModel.id == LEDGER_STATE_ID)
            .values(
                main_info=state.main_info,
                total_likes=state.total_likes,
                last_case_id=state.last_case_id
            )
        )
    
    async def get_case(self, case_id: int) -> Optional["Case"]:
        """Получение кейса по id, включая удаленные"""
        result = await self.session.execute(
            select(CaseModel).where(CaseModel.id == case_id)
        )
        db_case = result.scalar_one_or_none()
        return self._case_to_domain(db_case) if db_case else None
    
    async def list_active_cases(self) -> List["Case"]:
        """Все неудаленные кейсы в порядке возрастания id"""
        result = await self.session.execute(
            select(CaseModel)
            .where(CaseModel.deleted.is_(False))
            .order_by(CaseModel.id.asc())
        )
        return [self._case_to_domain(db_case) for db_case in result.scalars().all()]
    
    async def count_active_cases(self) -> int:
        """Подсчет неудаленных кейсов"""
        result = await self.session.execute(
            select(func.count(CaseModel.id)).where(CaseModel.deleted.is_(False))
        )
        return result.scalar()
    
    async def add_case(self, case: "Case") -> None:
        """Добавление кейса"""
        self.session.add(
            CaseModel(
                id=case.id,
                info=case.info,
                start_date=case.start_date,
                end_date=case.end_date,
                likes=case.likes,
                deleted=case.deleted
            )
        )
        await self.session.flush()
    
    async def save_case(self, case: "Case") -> None:
        """Сохранение полей кейса"""
        await self.session.execute(
            update(CaseModel)
            .where(CaseModel.id == case.id)
            .values(
                info=case.info,
                start_date=case.start_date,
                end_date=case.end_date,
                likes=case.likes,
                deleted=case.deleted
            )
        )
    
    async def has_like(self, case_id: int, liker: str) -> bool:
        """Проверка регистрации лайка (case, identity)"""
        result = await self.session.execute(
            select(CaseLikeModel.id).where(
                and_(
                    CaseLikeModel.case_id == case_id,
                    CaseLikeModel.liker == liker
                )
            )
        )
        return result.scalar_one_or_none() is not None
    
    async def add_like(self, case_id: int, liker: str) -> None:
        """Регистрация лайка"""
        self.session.add(CaseLikeModel(case_id=case_id, liker=liker))
        await self.session.flush()
    
    async def count_likes(self, case_id: int) -> int:
        """Подсчет зарегистрированных лайков кейса"""
        result = await self.session.execute(
            select(func.count(CaseLikeModel.id)).where(CaseLikeModel.case_id == case_id)
        )
        return result.scalar()
    
    def _state_to_domain(self, db_state: LedgerStateModel) -> "LedgerState":
        """Преобразование модели БД в доменную сущность"""
        from cv_ledger.domains.ledger.entities import LedgerState
        
        return LedgerState(
            owner=db_state.owner,
            main_info=db_state.main_info,
            total_likes=db_state.total_likes,
            last_case_id=db_state.last_case_id
        )
    
    def _case_to_domain(self, db_case: CaseModel) -> "Case":
        """Преобразование модели БД в доменную сущность"""
        from cv_ledger.domains.ledger.entities import Case
        
        return Case(
            id=db_case.id,
            info=db_case.info,
            start_date=db_case.start_date,
            end_date=db_case.end_date,
            likes=db_case.likes,
            deleted=db_case.deleted
        )
