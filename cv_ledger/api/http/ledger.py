from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cv_ledger.core.auth import get_current_account
from cv_ledger.core.db import get_db
from cv_ledger.domains.identity.entities import Account
from cv_ledger.domains.ledger.entities import Case
from cv_ledger.domains.ledger.exceptions import (
    LedgerError, Unauthorized, InvalidInput, NotFound, AlreadyLiked
)
from cv_ledger.domains.ledger.schemas import (
    MainInfoUpdate, MainInfoResponse, CaseCreate, CaseUpdate, CaseCreatedResponse,
    CaseResponse, CaseListResponse, LikeResponse, LedgerStatsResponse, OwnerResponse
)
from cv_ledger.domains.ledger.services import LedgerService

router = APIRouter(prefix="/ledger", tags=["ledger"])

ERROR_STATUS = {
    Unauthorized: status.HTTP_403_FORBIDDEN,
    InvalidInput: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    AlreadyLiked: status.HTTP_409_CONFLICT,
}


def get_ledger_service(db: AsyncSession = Depends(get_db)) -> LedgerService:
    return LedgerService(db)


def _http_error(error: LedgerError) -> HTTPException:
    """Преобразование ошибки реестра в HTTP ответ"""
    return HTTPException(
        status_code=ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
        detail=str(error)
    )


def _case_response(case: Case) -> CaseResponse:
    return CaseResponse(
        id=case.id,
        info=case.info,
        start_date=case.start_date,
        end_date=case.end_date,
        likes=case.likes
    )


@router.get("/owner", response_model=OwnerResponse)
async def get_owner(ledger: LedgerService = Depends(get_ledger_service)):
    """Получение владельца реестра"""
    return OwnerResponse(owner=await ledger.get_owner())


@router.get("/main-info", response_model=MainInfoResponse)
async def get_main_info(ledger: LedgerService = Depends(get_ledger_service)):
    """Получение основной информации"""
    return MainInfoResponse(main_info=await ledger.get_main_info())


@router.put("/main-info", response_model=MainInfoResponse)
async def update_main_info(
    update_data: MainInfoUpdate,
    current_account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Обновление основной информации"""
    try:
        main_info = await ledger.update_main_info(current_account.address, update_data.main_info)
    except LedgerError as e:
        raise _http_error(e)

    return MainInfoResponse(main_info=main_info)


@router.get("/cases", response_model=CaseListResponse)
async def get_cases(ledger: LedgerService = Depends(get_ledger_service)):
    """Получение всех неудаленных кейсов"""
    cases = await ledger.get_cases()

    return CaseListResponse(
        cases=[_case_response(case) for case in cases],
        total=len(cases)
    )


@router.post("/cases", response_model=CaseCreatedResponse, status_code=status.HTTP_201_CREATED)
async def add_case(
    case_data: CaseCreate,
    current_account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Добавление кейса"""
    try:
        case_id = await ledger.add_case(
            current_account.address,
            case_data.info,
            case_data.start_date,
            case_data.end_date
        )
    except LedgerError as e:
        raise _http_error(e)

    return CaseCreatedResponse(id=case_id)


@router.get("/cases/{case_id}", response_model=CaseResponse)
async def get_case(case_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    """Получение кейса по id"""
    try:
        case = await ledger.get_case(case_id)
    except LedgerError as e:
        raise _http_error(e)

    return _case_response(case)


@router.put("/cases/{case_id}", response_model=CaseResponse)
async def update_case(
    case_id: int,
    case_data: CaseUpdate,
    current_account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Обновление кейса"""
    try:
        case = await ledger.update_case(
            current_account.address,
            case_id,
            case_data.info,
            case_data.start_date,
            case_data.end_date
        )
    except LedgerError as e:
        raise _http_error(e)

    return _case_response(case)


@router.delete("/cases/{case_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_case(
    case_id: int,
    current_account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Удаление кейса"""
    try:
        await ledger.remove_case(current_account.address, case_id)
    except LedgerError as e:
        raise _http_error(e)


@router.post("/cases/{case_id}/like", response_model=LikeResponse)
async def set_like(
    case_id: int,
    current_account: Account = Depends(get_current_account),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Лайк кейса"""
    try:
        case = await ledger.set_like(current_account.address, case_id)
    except LedgerError as e:
        raise _http_error(e)

    return LikeResponse(case_id=case.id, liker=current_account.address, likes=case.likes)


@router.get("/stats", response_model=LedgerStatsResponse)
async def get_stats(ledger: LedgerService = Depends(get_ledger_service)):
    """Получение счетчиков кейсов и лайков"""
    return LedgerStatsResponse(
        total_cases=await ledger.get_total_cases(),
        total_likes=await ledger.get_total_likes()
    )
