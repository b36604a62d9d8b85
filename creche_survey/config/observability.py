import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from creche_survey.config.settings import settings

logger = logging.getLogger("creche_survey")
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))


def _format_fields(kwargs: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in kwargs.items())


@contextmanager
def timed(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("op=%s duration_ms=%.2f", operation, duration_ms)


def log_event(event: str, **kwargs: Any) -> None:
    logger.info("event=%s %s", event, _format_fields(kwargs))


def log_debug(event: str, **kwargs: Any) -> None:
    logger.debug("event=%s %s", event, _format_fields(kwargs))


def log_warning(event: str, message: str, **kwargs: Any) -> None:
    logger.warning("event=%s message=\"%s\" %s", event, message, _format_fields(kwargs))


def log_error(event: str, message: str, **kwargs: Any) -> None:
    logger.error("event=%s message=\"%s\" %s", event, message, _format_fields(kwargs))
