from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

from .domain.models import DetectionRequest, SourceOutcome


Sleeper = Callable[[float], Awaitable[None]]


class SourceClientPort(Protocol):
    """Port for one third-party detection source.

    Implementations never raise for remote failures; they report why they
    found nothing through ``SourceOutcome.status``.
    """

    async def detect(self, request: DetectionRequest) -> SourceOutcome:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Keyword arguments are attached to the log record as structured fields.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
