import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Awaitable, Callable, List, Optional

from cv_ledger.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LikeSet:
    """Уведомление об успешном лайке, само состояние не несет"""
    case_id: int
    liker: str

    @property
    def name(self) -> str:
        return "LikeSet"

    def to_message(self) -> dict:
        return {"type": self.name, "data": asdict(self)}


EventHandler = Callable[[LikeSet], Awaitable[None]]


class EventBus:
    """Внутрипроцессная шина уведомлений реестра"""

    def __init__(self, handler_timeout: Optional[float] = None):
        self._handlers: List[EventHandler] = []
        # Публикация идет под блокировкой записи, медленный подписчик ее не держит
        self.handler_timeout = handler_timeout

    def subscribe(self, handler: EventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def publish(self, event: LikeSet) -> None:
        """Рассылка события всем подписчикам"""
        logger.info(f"{event.name} emitted: case_id={event.case_id} liker={event.liker}")

        for handler in list(self._handlers):
            try:
                await asyncio.wait_for(handler(event), self.handler_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Event handler {handler!r} timed out after {self.handler_timeout}s for {event.name}"
                )
            except Exception:
                # Изменение уже зафиксировано, ошибка подписчика его не отменяет
                logger.exception(f"Event handler {handler!r} failed for {event.name}")


event_bus = EventBus(handler_timeout=settings.event_handler_timeout)
