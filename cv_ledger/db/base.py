from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func

from cv_ledger.core.db import Base


class BaseModel(Base):
    __abstract__ = True

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
