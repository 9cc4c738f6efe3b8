"""FlyControl: one handle for apps, machines, secrets and volumes."""

from __future__ import annotations

from types import TracebackType

import httpx

from flysdk.clients.apps import AppsClient
from flysdk.clients.machines import MachinesClient
from flysdk.clients.secrets import SecretsClient
from flysdk.clients.volumes import VolumesClient
from flysdk.config import load_config
from flysdk.models import FlyConfig
from flysdk.transport import DEFAULT_BASE_URL, FlyTransport


class FlyControl:
    """Entry point to the Fly.io Machines API.

    All four resource clients share one transport and therefore one
    connection pool and credential. Pass ``http`` to reuse an existing
    ``httpx.AsyncClient`` (the caller then owns its lifetime); otherwise a
    client is created here and closed by ``aclose()`` or ``async with``.

    Example:
        >>> async with FlyControl("fo1_xxx") as fly:
        ...     app = await fly.apps.create("my-app", "personal")
        ...     machines = await fly.machines.list("my-app")
    """

    def __init__(
        self,
        api_token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        wait_grace: float = 10.0,
    ) -> None:
        if not api_token:
            raise ValueError("API token required. Pass api_token or set FLY_API_TOKEN.")

        self._owns_http = http is None
        self._http = http if http is not None else httpx.AsyncClient(timeout=timeout)
        self._transport = FlyTransport(self._http, api_token, base_url)

        self.apps = AppsClient(self._transport)
        self.machines = MachinesClient(self._transport, wait_grace=wait_grace)
        self.secrets = SecretsClient(self._transport)
        self.volumes = VolumesClient(self._transport)

    @classmethod
    def from_config(
        cls,
        config: FlyConfig | None = None,
        *,
        http: httpx.AsyncClient | None = None,
    ) -> FlyControl:
        """Build from a ``FlyConfig``, loading one via ``load_config()`` if omitted."""
        config = config or load_config()
        return cls(
            config.api_token or "",
            base_url=config.base_url,
            http=http,
            timeout=config.timeout,
            wait_grace=config.wait_grace,
        )

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> FlyControl:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<FlyControl base_url={self.base_url!r}>"
