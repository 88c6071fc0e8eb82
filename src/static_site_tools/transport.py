from __future__ import annotations

import asyncio
import http.client
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from .errors import RequestFailed, TransportUnavailable

logger = logging.getLogger(__name__)

DEFAULT_TRANSPORT_ORDER: Sequence[str] = ("aiohttp", "urllib")


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str


class Transport(Protocol):
    async def get(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        ...

    async def aclose(self) -> None:
        ...


class UrllibTransport:
    """Blocking ``urllib`` GET, run in a worker thread."""

    name = "urllib"

    def __init__(self, *, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def get(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        return await asyncio.to_thread(self._get, url, dict(headers))

    async def aclose(self) -> None:
        pass

    def _get(self, url: str, headers: Dict[str, str]) -> TransportResponse:
        req = urllib.request.Request(url, headers=headers, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read().decode("utf-8")
                return TransportResponse(status=resp.status, body=body)
        except urllib.error.HTTPError as exc:
            body = exc.read().decode("utf-8", errors="replace")
            return TransportResponse(status=exc.code, body=body)
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise RequestFailed(f"GET {url} failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise RequestFailed(f"GET {url} returned a body that is not UTF-8: {exc}") from exc


class AiohttpTransport:
    """One ``aiohttp`` session, opened on first use and kept until ``aclose``."""

    name = "aiohttp"

    def __init__(self, *, timeout: float = 10.0) -> None:
        try:
            import aiohttp
        except ImportError as exc:
            raise TransportUnavailable("aiohttp is required for AiohttpTransport") from exc
        self._aiohttp = aiohttp
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[Any] = None

    def _client(self) -> Any:
        if self._session is None or self._session.closed:
            self._session = self._aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def get(self, url: str, headers: Mapping[str, str]) -> TransportResponse:
        aiohttp = self._aiohttp
        try:
            async with self._client().get(url, headers=dict(headers)) as resp:
                body = await resp.text()
                return TransportResponse(status=resp.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RequestFailed(f"GET {url} failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise RequestFailed(f"GET {url} returned a body that is not UTF-8: {exc}") from exc

    async def aclose(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None


TRANSPORT_FACTORIES: Mapping[str, Callable[..., Transport]] = {
    "aiohttp": AiohttpTransport,
    "urllib": UrllibTransport,
}


def build_transport(
    order: Sequence[str] = DEFAULT_TRANSPORT_ORDER,
    *,
    timeout: float = 10.0,
    factories: Mapping[str, Callable[..., Transport]] = TRANSPORT_FACTORIES,
) -> Transport:
    """
    Return the first transport in ``order`` that can be constructed.

    Raises TransportUnavailable naming every rejected candidate when none can.
    """
    reasons: List[str] = []
    for name in order:
        factory = factories.get(name)
        if factory is None:
            reasons.append(f"{name}: unknown transport")
            continue
        try:
            transport = factory(timeout=timeout)
        except TransportUnavailable as exc:
            logger.debug("Transport %s unavailable: %s", name, exc)
            reasons.append(f"{name}: {exc}")
            continue
        logger.debug("Using %s transport", name)
        return transport
    raise TransportUnavailable(
        "No HTTP transport available (" + "; ".join(reasons or ["none configured"]) + ")"
    )
