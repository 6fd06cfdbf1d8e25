from typing import Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cv_ledger.db.models.account import Account as AccountModel

if TYPE_CHECKING:
    from cv_ledger.domains.identity.entities import Account


class AccountRepository:
    """Репозиторий для работы с учетными записями"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, account: "Account") -> "Account":
        """Создание новой учетной записи"""
        db_account = AccountModel(
            uuid=account.uuid,
            address=account.address,
            password_hash=account.password_hash,
            is_active=account.is_active
        )
        
        self.session.add(db_account)
        try:
            await self.session.commit()
            await self.session.refresh(db_account)
            return self._to_domain(db_account)
        except IntegrityError:
            await self.session.rollback()
            raise ValueError("Address already registered")
    
    async def get_by_address(self, address: str) -> Optional["Account"]:
        """Получение учетной записи по адресу"""
        result = await self.session.execute(
            select(AccountModel).where(AccountModel.address == address)
        )
        db_account = result.scalar_one_or_none()
        return self._to_domain(db_account) if db_account else None
    
    async def address_exists(self, address: str) -> bool:
        """Проверка существования адреса"""
        result = await self.session.execute(
            select(AccountModel.uuid).where(AccountModel.address == address)
        )
        return result.scalar_one_or_none() is not None
    
    def _to_domain(self, db_account: AccountModel) -> "Account":
        """Преобразование модели БД в доменную сущность"""
        from cv_ledger.domains.identity.entities import Account
        
        return Account(
            uuid=db_account.uuid,
            address=db_account.address,
            password_hash=db_account.password_hash,
            is_active=db_account.is_active,
            created_at=db_account.created_at,
            updated_at=db_account.updated_at
        )
