"""Fly.io app secrets API client."""

from __future__ import annotations

import logging

from flysdk.models import Secret, SecretValue
from flysdk.transport import FlyTransport, path_segment

logger = logging.getLogger(__name__)


class SecretsClient:
    """Manage app secrets.

    Secret values are write-only: they can be set or generated, but the API
    only ever returns labels, types and public key material.
    """

    def __init__(self, transport: FlyTransport) -> None:
        self._transport = transport

    def _path(
        self, app_name: str, label: str | None = None, secret_type: str | None = None
    ) -> str:
        path = f"/apps/{path_segment(app_name)}/secrets"
        if label:
            path = f"{path}/{path_segment(label)}"
        if secret_type:
            path = f"{path}/type/{path_segment(secret_type)}"
        return path

    async def list(self, app_name: str) -> list[Secret]:
        resp = await self._transport.request("GET", self._path(app_name))
        return self._transport.decode(resp, list[Secret])

    async def create(
        self,
        app_name: str,
        label: str,
        secret_type: str,
        value: bytes | str | list[int] | SecretValue,
    ) -> Secret:
        """Store ``value`` under ``label``. Strings are sent UTF-8 encoded."""
        logger.debug("Creating secret %s (%s) for app %s", label, secret_type, app_name)
        body = value if isinstance(value, SecretValue) else SecretValue.of(value)
        resp = await self._transport.request(
            "POST",
            self._path(app_name, label, secret_type),
            json=body,
        )
        return self._transport.decode(resp, Secret)

    async def generate(self, app_name: str, label: str, secret_type: str) -> None:
        """Have the API generate a random value for ``label``."""
        logger.debug("Generating secret %s (%s) for app %s", label, secret_type, app_name)
        await self._transport.request(
            "POST", f"{self._path(app_name, label, secret_type)}/generate"
        )

    async def destroy(self, app_name: str, label: str) -> None:
        logger.debug("Deleting secret %s for app %s", label, app_name)
        await self._transport.request("DELETE", self._path(app_name, label))
