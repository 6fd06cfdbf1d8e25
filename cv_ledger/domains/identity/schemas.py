from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
from datetime import datetime
import uuid


class AccountBase(BaseModel):
    """Базовая схема учетной записи"""
    address: str = Field(..., min_length=3, max_length=100)
    
    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        if not v.replace('_', '').replace('-', '').isalnum():
            raise ValueError('Address must contain only alphanumeric characters, underscores, and hyphens')
        return v


class AccountCreate(AccountBase):
    """Схема для регистрации учетной записи"""
    password: str = Field(..., min_length=8, max_length=128)
    
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not any(c.isupper() for c in v):
            raise ValueError('Password must contain at least one uppercase letter')
        if not any(c.islower() for c in v):
            raise ValueError('Password must contain at least one lowercase letter')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v


class AccountLogin(BaseModel):
    """Схема для входа"""
    address: str
    password: str


class AccountResponse(AccountBase):
    """Схема для ответа с данными учетной записи"""
    uuid: uuid.UUID
    is_active: bool
    is_owner: bool = False
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Схема для JWT токена"""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Схема для данных из JWT токена"""
    address: Optional[str] = None
