from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cv_ledger.core.auth import get_current_account
from cv_ledger.core.db import get_db
from cv_ledger.domains.identity.entities import Account
from cv_ledger.domains.identity.schemas import (
    AccountCreate, AccountLogin, AccountResponse, Token
)
from cv_ledger.domains.identity.services import IdentityService
from cv_ledger.domains.ledger.services import LedgerService

router = APIRouter(prefix="/auth", tags=["authentication"])


async def _to_response(account: Account, db: AsyncSession) -> AccountResponse:
    owner = await LedgerService(db).get_owner()
    return AccountResponse(
        uuid=account.uuid,
        address=account.address,
        is_active=account.is_active,
        is_owner=account.address == owner,
        created_at=account.created_at
    )


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def register(
    account_data: AccountCreate,
    db: AsyncSession = Depends(get_db)
):
    """Регистрация новой учетной записи"""
    identity_service = IdentityService(db)
    
    try:
        account = await identity_service.register_account(account_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    return await _to_response(account, db)


@router.post("/login", response_model=Token)
async def login(
    login_data: AccountLogin,
    db: AsyncSession = Depends(get_db)
):
    """Вход"""
    identity_service = IdentityService(db)
    
    token = await identity_service.login_account(login_data)
    
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect address or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=AccountResponse)
async def get_current_account_info(
    current_account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db)
):
    """Получение информации о текущей учетной записи"""
    return await _to_response(current_account, db)
