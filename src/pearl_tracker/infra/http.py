from __future__ import annotations

import httpx


DEFAULT_USER_AGENT = "PearlTracker/1.0"


class HttpClientFactory:
    """Builds ``httpx.AsyncClient`` instances with shared defaults.

    A custom ``transport`` replaces the network layer, which is how tests
    feed canned responses to the source clients.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    def __call__(self, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
        merged = {"User-Agent": self._user_agent}
        if headers:
            merged.update(headers)
        return httpx.AsyncClient(
            headers=merged,
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        )
