from typing import Optional

from cv_ledger.domains.ledger.exceptions import Unauthorized, InvalidInput, NotFound


def validate_start_date(start_date: int) -> None:
    """Проверка даты начала: 0 означает незаданную дату"""
    if start_date == 0:
        raise InvalidInput()


class Case:
    """Сущность кейса (запись портфолио) домена Ledger"""
    
    def __init__(
        self,
        id: int,
        info: str,
        start_date: int,
        end_date: int = 0,
        likes: int = 0,
        deleted: bool = False
    ):
        self.id = id
        self.info = info
        self.start_date = start_date
        self.end_date = end_date
        self.likes = likes
        self.deleted = deleted
    
    def ensure_active(self) -> None:
        """Удаленный кейс недоступен ни для чтения, ни для изменений"""
        if self.deleted:
            raise NotFound()
    
    def update_content(self, info: str, start_date: int, end_date: int) -> None:
        """Перезапись содержимого, лайки сохраняются"""
        validate_start_date(start_date)
        self.info = info
        self.start_date = start_date
        self.end_date = end_date
    
    def register_like(self) -> None:
        self.likes += 1
    
    def mark_deleted(self) -> int:
        """Пометка кейса удаленным, возвращает число снимаемых лайков"""
        self.deleted = True
        return self.likes
    
    @classmethod
    def create_case(cls, case_id: int, info: str, start_date: int, end_date: int) -> "Case":
        """Создание нового кейса"""
        validate_start_date(start_date)
        return cls(
            id=case_id,
            info=info,
            start_date=start_date,
            end_date=end_date
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, Case):
            return False
        return self.id == other.id
    
    def __repr__(self) -> str:
        return f"Case(id={self.id}, likes={self.likes}, deleted={self.deleted})"


class LedgerState:
    """Глобальное состояние реестра: владелец, основная информация и счетчики"""
    
    def __init__(
        self,
        owner: str,
        main_info: str = "",
        total_likes: int = 0,
        last_case_id: int = 0
    ):
        self.owner = owner
        self.main_info = main_info
        self.total_likes = total_likes
        self.last_case_id = last_case_id
    
    def is_owner(self, caller: Optional[str]) -> bool:
        return caller is not None and caller == self.owner
    
    def ensure_owner(self, caller: Optional[str]) -> None:
        if not self.is_owner(caller):
            raise Unauthorized()
    
    def update_main_info(self, doc: str) -> None:
        self.main_info = doc
    
    def next_case_id(self) -> int:
        """Выдача следующего id; id удаленных кейсов не переиспользуются"""
        self.last_case_id += 1
        return self.last_case_id
    
    def on_like(self) -> None:
        self.total_likes += 1
    
    def on_case_removed(self, likes: int) -> None:
        self.total_likes -= likes
    
    def __repr__(self) -> str:
        return (
            f"LedgerState(owner={self.owner}, total_likes={self.total_likes}, "
            f"last_case_id={self.last_case_id})"
        )
