import logging
from typing import Optional

from cv_ledger.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _parse_level(value: Optional[str]) -> int:
    """Преобразование строкового уровня ('debug', 'INFO') в константу logging"""
    if not value:
        return logging.INFO
    level = getattr(logging, value.strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, force: bool = False) -> logging.Logger:
    """Настройка логирования сервиса, вызывается один раз при старте"""
    logging.basicConfig(
        level=_parse_level(level or settings.log_level),
        format=LOG_FORMAT,
        force=force,
    )
    return logging.getLogger("cv_ledger")
