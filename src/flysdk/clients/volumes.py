"""Fly.io Volumes API client."""

from __future__ import annotations

import logging

from flysdk.models import (
    CreateVolumeRequest,
    ExtendVolumeRequest,
    ExtendVolumeResponse,
    Snapshot,
    UpdateVolumeRequest,
    Volume,
)
from flysdk.transport import FlyTransport, path_segment

logger = logging.getLogger(__name__)


class VolumesClient:
    """Volume CRUD, resize and snapshots.

    Every call is a single request/response; volume state changes are not
    waited on.
    """

    def __init__(self, transport: FlyTransport) -> None:
        self._transport = transport

    def _path(self, app_name: str, volume_id: str | None = None) -> str:
        path = f"/apps/{path_segment(app_name)}/volumes"
        return f"{path}/{path_segment(volume_id)}" if volume_id else path

    async def list(self, app_name: str, summary: bool = False) -> list[Volume]:
        """List an app's volumes. ``summary`` skips per-volume usage details."""
        resp = await self._transport.request(
            "GET", self._path(app_name), params={"summary": "true" if summary else "false"}
        )
        return self._transport.decode(resp, list[Volume])

    async def create(self, app_name: str, request: CreateVolumeRequest) -> Volume:
        logger.debug("Creating volume %s in %s for app %s", request.name, request.region, app_name)
        resp = await self._transport.request("POST", self._path(app_name), json=request)
        return self._transport.decode(resp, Volume)

    async def get(self, app_name: str, volume_id: str) -> Volume:
        resp = await self._transport.request("GET", self._path(app_name, volume_id))
        return self._transport.decode(resp, Volume)

    async def update(
        self, app_name: str, volume_id: str, request: UpdateVolumeRequest
    ) -> Volume:
        logger.debug("Updating volume %s", volume_id)
        resp = await self._transport.request(
            "PUT", self._path(app_name, volume_id), json=request
        )
        return self._transport.decode(resp, Volume)

    async def destroy(self, app_name: str, volume_id: str) -> None:
        logger.debug("Deleting volume %s", volume_id)
        await self._transport.request("DELETE", self._path(app_name, volume_id))

    async def extend(
        self, app_name: str, volume_id: str, request: ExtendVolumeRequest
    ) -> ExtendVolumeResponse:
        """Grow a volume to ``request.size_gb``.

        The response says whether the attached machine must restart before
        the new size is usable.
        """
        logger.debug("Extending volume %s to %d GB", volume_id, request.size_gb)
        resp = await self._transport.request(
            "PUT", f"{self._path(app_name, volume_id)}/extend", json=request
        )
        return self._transport.decode(resp, ExtendVolumeResponse)

    async def list_snapshots(self, app_name: str, volume_id: str) -> list[Snapshot]:
        resp = await self._transport.request(
            "GET", f"{self._path(app_name, volume_id)}/snapshots"
        )
        return self._transport.decode(resp, list[Snapshot])

    async def create_snapshot(self, app_name: str, volume_id: str) -> None:
        logger.debug("Creating snapshot of volume %s", volume_id)
        await self._transport.request("POST", f"{self._path(app_name, volume_id)}/snapshots")
