"""Fly.io Machines API client and lifecycle coordination.

Mutating machine calls (start, stop, restart, delete) are followed by a
single call to the ``/wait`` long-poll endpoint, so the coroutine completes
only once the API reports the target state. The polling happens server-side;
the client issues exactly one wait request and never retries.

Every waiting operation accepts:

* ``timeout``: seconds the server should wait before giving up. When omitted
  the server default (60s) applies. The HTTP timeout for the wait request is
  sized to outlast it.
* ``cancel``: an ``asyncio.Event``; setting it abandons whichever request is
  in flight. During the wait that surfaces as ``WaitCancelledError``, during
  the mutating call as ``FlyCancelledError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from flysdk.errors import (
    FlyCancelledError,
    FlyStatusError,
    FlyTimeoutError,
    WaitCancelledError,
    WaitTimeoutError,
)
from flysdk.models import (
    CommandResponse,
    Machine,
    MachineEvent,
    MachineRequest,
    MachineState,
    ProcessInfo,
)
from flysdk.transport import FlyTransport, path_segment

logger = logging.getLogger(__name__)

SERVER_DEFAULT_WAIT = 60  # seconds the API waits when no timeout is given


class MachinesClient:
    def __init__(self, transport: FlyTransport, wait_grace: float = 10.0) -> None:
        self._transport = transport
        self._wait_grace = wait_grace

    def _path(self, app_name: str, machine_id: str | None = None, action: str | None = None) -> str:
        path = f"/apps/{path_segment(app_name)}/machines"
        if machine_id:
            path = f"{path}/{path_segment(machine_id)}"
        if action:
            path = f"{path}/{action}"
        return path

    # ── Plain requests ─────────────────────────────────────────────────────────

    async def create(self, app_name: str, request: MachineRequest) -> Machine:
        """Create (and by default launch) a machine.

        Does not wait for the machine to start; call ``wait_for_machine_state``
        with the returned id and instance id if that matters.
        """
        logger.debug("Creating machine for app %s", app_name)
        resp = await self._transport.request("POST", self._path(app_name), json=request)
        machine = self._transport.decode(resp, Machine)
        logger.debug("Created machine %s (instance %s)", machine.id, machine.instance_id)
        return machine

    async def list(self, app_name: str) -> list[Machine]:
        """List all machines for an app."""
        resp = await self._transport.request("GET", self._path(app_name), expected=200)
        return self._transport.decode(resp, list[Machine])

    async def get(self, app_name: str, machine_id: str) -> Machine:
        resp = await self._transport.request("GET", self._path(app_name, machine_id))
        return self._transport.decode(resp, Machine)

    async def list_events(self, app_name: str, machine_id: str) -> list[MachineEvent]:
        resp = await self._transport.request("GET", self._path(app_name, machine_id, "events"))
        return self._transport.decode(resp, list[MachineEvent])

    async def list_processes(self, app_name: str, machine_id: str) -> list[ProcessInfo]:
        resp = await self._transport.request("GET", self._path(app_name, machine_id, "ps"))
        return self._transport.decode(resp, list[ProcessInfo])

    async def execute_command(
        self,
        app_name: str,
        machine_id: str,
        command: Sequence[str],
        timeout: int | None = None,
    ) -> CommandResponse:
        """Run ``command`` inside a running machine and return its output.

        ``timeout`` bounds the remote command, not the HTTP call; the HTTP
        timeout is widened to cover it.
        """
        if isinstance(command, str):
            raise TypeError("command must be a sequence of arguments, not a string")
        logger.debug("Executing %s on machine %s", list(command), machine_id)
        body: dict[str, Any] = {"command": list(command)}
        if timeout is not None:
            body["timeout"] = timeout
        resp = await self._transport.request(
            "POST",
            self._path(app_name, machine_id, "exec"),
            json=body,
            timeout=self._http_timeout(timeout) if timeout is not None else None,
        )
        return self._transport.decode(resp, CommandResponse)

    # ── Lifecycle ──────────────────────────────────────────────────────────────

    async def start(
        self,
        app_name: str,
        machine_id: str,
        *,
        instance_id: str | None = None,
        timeout: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Machine:
        """Start a stopped machine and wait until it is ``started``."""
        logger.debug("Starting machine %s", machine_id)
        await self._transport.request(
            "POST", self._path(app_name, machine_id, "start"), expected=200, cancel=cancel
        )
        return await self.wait_for_machine_state(
            app_name, machine_id, MachineState.STARTED, timeout, instance_id, cancel=cancel
        )

    async def stop(
        self,
        app_name: str,
        machine_id: str,
        instance_id: str | None = None,
        *,
        timeout: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Machine:
        """Stop a machine and wait until it is ``stopped``.

        Pass the current ``instance_id`` so the wait refers to this run of the
        machine, not to a replacement that may already be up again.
        """
        logger.debug("Stopping machine %s", machine_id)
        await self._transport.request(
            "POST", self._path(app_name, machine_id, "stop"), expected=200, cancel=cancel
        )
        return await self.wait_for_machine_state(
            app_name, machine_id, MachineState.STOPPED, timeout, instance_id, cancel=cancel
        )

    async def restart_machine(
        self,
        app_name: str,
        machine_id: str,
        instance_id: str | None = None,
        *,
        timeout: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Machine:
        """Restart a machine and wait until it is ``started`` again.

        The wait is pinned to the pre-restart ``instance_id``: it asks whether
        that instance finished restarting.
        """
        logger.debug("Restarting machine %s", machine_id)
        await self._transport.request(
            "POST", self._path(app_name, machine_id, "restart"), cancel=cancel
        )
        return await self.wait_for_machine_state(
            app_name, machine_id, MachineState.STARTED, timeout, instance_id, cancel=cancel
        )

    async def delete(
        self,
        app_name: str,
        machine_id: str,
        force: bool = False,
        *,
        timeout: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> None:
        """Destroy a machine and wait until the API reports it ``destroyed``.

        ``force`` kills a running machine instead of refusing.
        """
        logger.debug("Deleting machine %s (force=%s)", machine_id, force)
        await self._transport.request(
            "DELETE",
            self._path(app_name, machine_id),
            expected=200,
            params={"force": "true"} if force else None,
            cancel=cancel,
        )
        await self.wait_for_machine_state(
            app_name, machine_id, MachineState.DESTROYED, timeout, cancel=cancel
        )

    async def update_machine(
        self,
        app_name: str,
        machine_id: str,
        instance_id: str | None,
        request: MachineRequest,
        *,
        wait: bool = False,
        timeout: int | None = None,
        cancel: asyncio.Event | None = None,
    ) -> Machine:
        """Replace a machine's config.

        Returns as soon as the API accepts the update unless ``wait`` is set,
        in which case it also waits for the updated machine to be ``started``.
        The wait is pinned to the instance id reported by the update, falling
        back to the ``instance_id`` passed in.
        """
        logger.debug("Updating machine %s", machine_id)
        resp = await self._transport.request(
            "POST", self._path(app_name, machine_id), json=request, cancel=cancel
        )
        machine = self._transport.decode(resp, Machine)
        if not wait:
            return machine
        return await self.wait_for_machine_state(
            app_name,
            machine_id,
            MachineState.STARTED,
            timeout,
            machine.instance_id or instance_id,
            cancel=cancel,
        )

    async def wait_for_machine_state(
        self,
        app_name: str,
        machine_id: str,
        state: MachineState | str,
        timeout: int | None = None,
        instance_id: str | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> Machine:
        """Block until the machine reaches ``state``, using the API's long poll.

        Raises:
            WaitTimeoutError: the state was not reached in time, either per the
                server (408) or because its answer never arrived (read timeout).
            FlyTimeoutError: the request could not be delivered in time
                (connect, write or pool timeout).
            WaitCancelledError: ``cancel`` was set before the wait finished.
            FlyStatusError: the API rejected the wait for another reason.
        """
        state = MachineState(state)
        params: dict[str, Any] = {"state": state.value}
        if timeout is not None:
            params["timeout"] = timeout
        if instance_id is not None:
            params["instance_id"] = instance_id

        path = self._path(app_name, machine_id, "wait")
        logger.debug("Waiting for machine %s to reach state %s", machine_id, state.value)
        try:
            resp = await self._transport.request(
                "GET",
                path,
                params=params,
                timeout=self._http_timeout(timeout),
                cancel=cancel,
            )
        except FlyStatusError as exc:
            if exc.status_code != 408:
                raise
            raise WaitTimeoutError(
                machine_id, state.value, timeout, method=exc.method, url=exc.url
            ) from exc
        except FlyTimeoutError as exc:
            # Only a read timeout means the request reached the server.
            if not isinstance(exc.__cause__, httpx.ReadTimeout):
                raise
            raise WaitTimeoutError(
                machine_id, state.value, timeout, method=exc.method, url=exc.url
            ) from exc
        except FlyCancelledError as exc:
            raise WaitCancelledError(
                machine_id, state.value, method=exc.method, url=exc.url
            ) from exc

        logger.debug("Machine %s reached state %s", machine_id, state.value)
        return self._transport.decode(resp, Machine)

    def _http_timeout(self, remote_timeout: int | None) -> float:
        base = remote_timeout if remote_timeout is not None else SERVER_DEFAULT_WAIT
        return base + self._wait_grace
