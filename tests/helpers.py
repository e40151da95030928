from pathlib import Path

import httpx


def mark_by_dir(items, base_dir, marker):
    base = Path(base_dir).resolve()
    for item in items:
        # pytest 7/8: item.path (Path) on new versions, item.fspath on old ones
        p = getattr(item, "path", None)
        p = Path(p) if p is not None else Path(str(getattr(item, "fspath")))
        try:
            p.resolve().relative_to(base)
        except ValueError:
            continue
        item.add_marker(marker)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeLogger:
    """Logger double that keeps (level, message, fields) tuples."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def debug(self, message: str, **kwargs) -> None:
        self.records.append(("debug", message, kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.records.append(("info", message, kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.records.append(("warning", message, kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self.records.append(("error", message, kwargs))

    def exception(self, message: str, **kwargs) -> None:
        self.records.append(("exception", message, kwargs))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for (lvl, m, _) in self.records if level is None or lvl == level]
