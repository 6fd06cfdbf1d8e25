from pydantic import BaseModel, Field, ConfigDict
from typing import List

# Верхняя граница BigInteger колонок дат
MAX_TIMESTAMP = 2**63 - 1


class MainInfoUpdate(BaseModel):
    """Схема для обновления основной информации (произвольный текст, не разбирается)"""
    main_info: str = ""


class MainInfoResponse(BaseModel):
    """Схема для ответа с основной информацией"""
    main_info: str


class CaseBase(BaseModel):
    """Базовая схема кейса; info хранится как непрозрачный текст"""
    info: str = ""
    # Нулевая дата начала отклоняется доменом, а не схемой
    start_date: int = Field(..., ge=0, le=MAX_TIMESTAMP)
    end_date: int = Field(0, ge=0, le=MAX_TIMESTAMP)


class CaseCreate(CaseBase):
    """Схема для создания кейса"""
    pass


class CaseUpdate(CaseBase):
    """Схема для обновления кейса"""
    pass


class CaseCreatedResponse(BaseModel):
    """Схема для ответа с id созданного кейса"""
    id: int


class CaseResponse(CaseBase):
    """Схема для ответа с данными кейса (флаг удаления не раскрывается)"""
    id: int
    likes: int
    
    model_config = ConfigDict(from_attributes=True)


class CaseListResponse(BaseModel):
    """Схема для списка кейсов"""
    cases: List[CaseResponse]
    total: int


class LikeResponse(BaseModel):
    """Схема для ответа на лайк"""
    case_id: int
    liker: str
    likes: int


class LedgerStatsResponse(BaseModel):
    """Схема для счетчиков реестра"""
    total_cases: int
    total_likes: int


class OwnerResponse(BaseModel):
    """Схема для ответа с владельцем реестра"""
    owner: str
