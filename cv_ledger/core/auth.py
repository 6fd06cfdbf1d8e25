from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from cv_ledger.core.db import get_db
from cv_ledger.domains.identity.entities import Account
from cv_ledger.domains.identity.services import IdentityService

security = HTTPBearer(auto_error=False)


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Account:
    """Зависимость для получения текущей учетной записи (идентичности вызывающего)"""
    account = None
    
    if credentials is not None:
        identity_service = IdentityService(db)
        account = await identity_service.get_current_account_from_token(credentials.credentials)
    
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return account
