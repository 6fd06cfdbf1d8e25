from sqlalchemy import Column, String, Text, Integer, BigInteger, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from cv_ledger.db.base import BaseModel

# Единственная строка состояния реестра
LEDGER_STATE_ID = 1


class LedgerState(BaseModel):
    __tablename__ = "ledger_state"
    
    id = Column(Integer, primary_key=True, default=LEDGER_STATE_ID)
    owner = Column(String(100), nullable=False)
    main_info = Column(Text, nullable=False, default="")
    total_likes = Column(Integer, nullable=False, default=0)
    last_case_id = Column(Integer, nullable=False, default=0)


class Case(BaseModel):
    __tablename__ = "cases"
    
    # id назначается сервисом из last_case_id, автоинкремент БД не используется
    id = Column(Integer, primary_key=True, autoincrement=False)
    info = Column(Text, nullable=False, default="")
    start_date = Column(BigInteger, nullable=False)
    end_date = Column(BigInteger, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    
    # Relationships
    like_registrations = relationship("CaseLike", back_populates="case")


class CaseLike(BaseModel):
    __tablename__ = "case_likes"
    __table_args__ = (
        UniqueConstraint("case_id", "liker", name="uq_case_likes_case_liker"),
    )
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(Integer, ForeignKey("cases.id"), nullable=False)
    liker = Column(String(100), nullable=False)
    
    # Relationships
    case = relationship("Case", back_populates="like_registrations")
