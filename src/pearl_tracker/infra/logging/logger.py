from __future__ import annotations

import logging
from pathlib import Path

from dependency_injector.resources import Resource

from .handlers import build_json_file_handler, build_human_console_handler


class DetectionLogger(Resource):
    """Structured logger for detection runs.

    Keyword arguments on each call become structured fields. A JSONL file
    handler is attached when a run id is given; console output is optional.
    """

    def init(
        self,
        *,
        run_id: str | None = None,
        logs_dir: Path | None = None,
        logger_name: str = "pearl_tracker",
        console_output: bool = False,
        level: str = "INFO",
    ) -> "DetectionLogger":
        """Configure handlers and return self (dependency_injector Resource)."""
        numeric_level = getattr(logging, level.upper())
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers: list[logging.Handler] = []

        if run_id and logs_dir is not None:
            self.log_file = Path(logs_dir) / f"{run_id}.jsonl"
            file_handler = build_json_file_handler(self.log_file, level=numeric_level)
            self._logger.addHandler(file_handler)
            self._handlers.append(file_handler)
        else:
            self.log_file = None

        if console_output:
            console_handler = build_human_console_handler(level=numeric_level)
            self._logger.addHandler(console_handler)
            self._handlers.append(console_handler)

        return self

    def shutdown(self, resource: "DetectionLogger") -> None:
        """Flush and close handlers so log files are released."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
        self._logger.handlers.clear()

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(message, extra=kwargs or None)
