"""Authenticated JSON transport for the Fly.io Machines API."""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Collection, Mapping
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from flysdk.errors import (
    FlyCancelledError,
    FlyDecodeError,
    FlyStatusError,
    FlyTimeoutError,
    FlyTransportError,
)

DEFAULT_BASE_URL = "https://api.machines.dev/v1"

logger = logging.getLogger(__name__)

T = TypeVar("T")


@functools.lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def path_segment(value: str) -> str:
    """Percent-encode one URL path segment, including any "/" or "?"."""
    return quote(value, safe="")


def to_payload(body: Any) -> Any:
    """Serialize a request body, dropping unset optional fields."""
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True, by_alias=True)
    return body


def _status_ok(status_code: int, expected: int | Collection[int] | None) -> bool:
    if expected is None:
        return 200 <= status_code < 300
    if isinstance(expected, int):
        return status_code == expected
    return status_code in expected


class FlyTransport:
    """Sends bearer-authenticated requests relative to a configured base URL.

    The transport keeps no per-request state, so one instance can serve any
    number of concurrent calls over the shared ``httpx.AsyncClient`` pool.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        expected: int | Collection[int] | None = None,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> httpx.Response:
        """Send a request and return the response if its status is expected.

        ``expected`` of ``None`` accepts any 2xx status. Query parameters whose
        value is ``None`` are left out of the URL.
        """
        url = self.url(path)
        kwargs: dict[str, Any] = {"headers": self._headers}
        if json is not None:
            kwargs["json"] = to_payload(json)
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if timeout is not None:
            kwargs["timeout"] = timeout

        logger.debug("%s %s params=%s", method, url, kwargs.get("params"))
        try:
            resp = await self._send(method, url, cancel, **kwargs)
        except httpx.TimeoutException as exc:
            raise FlyTimeoutError(f"{method} {url} timed out", method=method, url=url) from exc
        except httpx.TransportError as exc:
            raise FlyTransportError(f"{method} {url} failed: {exc}", method=method, url=url) from exc

        logger.debug("%s %s -> %d", method, url, resp.status_code)
        if not _status_ok(resp.status_code, expected):
            raise FlyStatusError(resp.status_code, resp.text, method=method, url=url)
        return resp

    async def _send(
        self,
        method: str,
        url: str,
        cancel: asyncio.Event | None,
        **kwargs: Any,
    ) -> httpx.Response:
        if cancel is None:
            return await self._http.request(method, url, **kwargs)
        if cancel.is_set():
            raise FlyCancelledError(f"{method} {url} cancelled before sending", method=method, url=url)

        request = asyncio.ensure_future(self._http.request(method, url, **kwargs))
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {request, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancelled.cancel()
            if not request.done():
                request.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await request

        if request in done:
            return request.result()
        raise FlyCancelledError(f"{method} {url} cancelled", method=method, url=url)

    def decode(self, response: httpx.Response, type_: type[T] | Any) -> T:
        """Validate a response body into ``type_`` (a model or any typing construct)."""
        try:
            return _adapter(type_).validate_json(response.content)
        except ValidationError as exc:
            request = response.request
            raise FlyDecodeError(
                f"Unexpected response body from {request.method} {request.url}: {exc}",
                response.text,
                method=request.method,
                url=str(request.url),
            ) from exc
