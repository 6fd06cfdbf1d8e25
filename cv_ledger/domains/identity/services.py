import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from cv_ledger.db.repositories.account_repository import AccountRepository
from cv_ledger.domains.identity.entities import Account
from cv_ledger.domains.identity.schemas import AccountCreate, AccountLogin, TokenData
from cv_ledger.core.config import settings
from cv_ledger.core.security import create_access_token, verify_token

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис учетных записей: регистрация, вход и определение вызывающего"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.account_repository = AccountRepository(session)
    
    async def register_account(self, account_data: AccountCreate) -> Account:
        """Регистрация новой учетной записи"""
        # Учетная запись владельца создается только при старте сервиса
        if account_data.address == settings.owner_address:
            logger.warning(f"Registration of owner address {account_data.address} rejected")
            raise ValueError("Address is reserved")

        if await self.account_repository.address_exists(account_data.address):
            raise ValueError("Address already registered")
        
        account = Account.create_account(
            address=account_data.address,
            password=account_data.password
        )
        
        created = await self.account_repository.create(account)
        logger.info(f"Account {created.address} registered")
        return created
    
    async def ensure_owner_account(self, address: str, password: str) -> Account:
        """Создание учетной записи владельца из настроек, если ее еще нет"""
        account = await self.account_repository.get_by_address(address)

        if account is not None:
            return account

        account = await self.account_repository.create(
            Account.create_account(address=address, password=password)
        )
        logger.info(f"Owner account {address} created")
        return account

    async def authenticate_account(self, login_data: AccountLogin) -> Optional[Account]:
        """Аутентификация учетной записи"""
        account = await self.account_repository.get_by_address(login_data.address)
        
        if not account or not account.is_active:
            return None
        
        if not account.authenticate(login_data.password):
            return None
        
        return account
    
    async def login_account(self, login_data: AccountLogin) -> Optional[str]:
        """Вход и создание JWT токена"""
        account = await self.authenticate_account(login_data)
        
        if not account:
            logger.warning(f"Failed login for {login_data.address}")
            return None
        
        return create_access_token(data={"sub": account.address})
    
    async def get_account_by_address(self, address: str) -> Optional[Account]:
        """Получение учетной записи по адресу"""
        return await self.account_repository.get_by_address(address)
    
    async def get_current_account_from_token(self, token: str) -> Optional[Account]:
        """Получение текущей учетной записи из JWT токена"""
        payload = verify_token(token)
        
        if payload is None:
            return None
        
        token_data = TokenData(address=payload.get("sub"))
        
        if token_data.address is None:
            return None
        
        account = await self.account_repository.get_by_address(token_data.address)
        
        if account is None or not account.is_active:
            return None
        
        return account
