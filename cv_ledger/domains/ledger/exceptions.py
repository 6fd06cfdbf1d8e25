from typing import Optional


class LedgerError(Exception):
    """Базовая ошибка реестра, операция отклоняется без изменений состояния"""

    default_message = "ledger operation rejected"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class Unauthorized(LedgerError):
    """Вызывающий не является владельцем реестра"""

    default_message = "caller is not the owner"


class InvalidInput(LedgerError):
    """Некорректные входные данные (нулевая дата начала)"""

    default_message = "start date can not be 0"


class NotFound(LedgerError):
    """Кейс не существует или удален, эти случаи намеренно неразличимы"""

    default_message = "case deleted or invalid ID"


class AlreadyLiked(LedgerError):
    """Идентичность уже поставила лайк этому кейсу"""

    default_message = "you already set like on this case"
