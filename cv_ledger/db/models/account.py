import uuid

from sqlalchemy import Column, String, Boolean, Uuid

from cv_ledger.db.base import BaseModel


class Account(BaseModel):
    __tablename__ = "accounts"
    
    uuid = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    address = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
