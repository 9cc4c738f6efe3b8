"""Fly.io Apps API client."""

from __future__ import annotations

import logging

from flysdk.models import App, AppList, CreateAppRequest
from flysdk.transport import FlyTransport, path_segment

logger = logging.getLogger(__name__)


class AppsClient:
    def __init__(self, transport: FlyTransport) -> None:
        self._transport = transport

    async def create(self, app_name: str, org_slug: str) -> App:
        """Create an app in an org.

        A name that is already taken comes back as ``FlyStatusError`` with the
        API's conflict status and message, not as a transport failure.
        """
        logger.debug("Creating app %s in org %s", app_name, org_slug)
        resp = await self._transport.request(
            "POST",
            "/apps",
            expected=201,
            json=CreateAppRequest(app_name=app_name, org_slug=org_slug),
        )
        return self._transport.decode(resp, App)

    async def list(self, org_slug: str) -> list[App]:
        """List all apps in a Fly.io org."""
        resp = await self._transport.request(
            "GET", "/apps", expected=200, params={"org_slug": org_slug}
        )
        # Usually wrapped as {"total_apps": n, "apps": [...]}, but accept a bare list.
        data = self._transport.decode(resp, AppList | list[App])
        return data if isinstance(data, list) else data.apps

    async def get(self, app_name: str) -> App:
        """Get details for a specific app."""
        resp = await self._transport.request(
            "GET", f"/apps/{path_segment(app_name)}", expected=200
        )
        return self._transport.decode(resp, App)

    async def delete(self, app_name: str, force: bool = False) -> None:
        """Delete an app.

        Without ``force`` the API refuses to delete an app that still has
        machines; that refusal is raised as ``FlyStatusError``.
        """
        logger.debug("Deleting app %s (force=%s)", app_name, force)
        await self._transport.request(
            "DELETE",
            f"/apps/{path_segment(app_name)}",
            expected=202,
            params={"force": "true"} if force else None,
        )
