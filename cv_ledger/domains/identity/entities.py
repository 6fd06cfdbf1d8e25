import uuid
from datetime import datetime
from typing import Optional

from cv_ledger.core.security import get_password_hash, verify_password


class Account:
    """Сущность учетной записи домена Identity; address служит идентичностью вызывающего"""
    
    def __init__(
        self,
        uuid: uuid.UUID,
        address: str,
        password_hash: str,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.address = address
        self.password_hash = password_hash
        self.is_active = is_active
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()
    
    def authenticate(self, password: str) -> bool:
        """Проверка пароля"""
        return verify_password(password, self.password_hash)
    
    @classmethod
    def create_account(cls, address: str, password: str) -> "Account":
        """Создание новой учетной записи с хешированием пароля"""
        return cls(
            uuid=uuid.uuid4(),
            address=address,
            password_hash=get_password_hash(password)
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, Account):
            return False
        return self.uuid == other.uuid
    
    def __repr__(self) -> str:
        return f"Account(uuid={self.uuid}, address={self.address})"
