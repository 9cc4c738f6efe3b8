"""Exception hierarchy for Fly Machines API failures."""

from __future__ import annotations


class FlyError(Exception):
    """Base class for every error raised by the SDK."""


class FlyTransportError(FlyError):
    """The request never produced an HTTP response (connect, DNS, protocol, timeout)."""

    def __init__(self, message: str, *, method: str = "", url: str = "") -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class FlyTimeoutError(FlyTransportError):
    """The HTTP request exceeded its timeout.

    Covers connect, write, read and pool timeouts alike, so the server may
    never have seen the request.
    """


class FlyCancelledError(FlyError):
    """A caller-supplied cancellation event fired while a request was in flight."""

    def __init__(self, message: str, *, method: str = "", url: str = "") -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class FlyStatusError(FlyError):
    """The API answered with a status the endpoint does not treat as success.

    The raw response body is kept verbatim so callers can inspect the API's
    own error message (conflict details, validation failures, ...).
    """

    def __init__(self, status_code: int, body: str, *, method: str = "", url: str = "") -> None:
        super().__init__(f"{method} {url} returned {status_code}: {body}".strip())
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url


class FlyDecodeError(FlyError):
    """A successful response whose body does not match the expected shape."""

    def __init__(self, message: str, body: str, *, method: str = "", url: str = "") -> None:
        super().__init__(message)
        self.body = body
        self.method = method
        self.url = url


class WaitTimeoutError(FlyError):
    """A machine did not reach the requested state before the wait expired.

    Raised when the server answers the wait with 408, or when the request was
    delivered but its answer did not arrive in time. Network failures during a
    wait stay ``FlyTransportError``/``FlyTimeoutError``.
    """

    def __init__(
        self,
        machine_id: str,
        state: str,
        timeout: int | None = None,
        *,
        method: str = "",
        url: str = "",
    ) -> None:
        limit = f"{timeout}s" if timeout is not None else "the server default"
        super().__init__(f"Machine {machine_id} did not reach state {state!r} within {limit}")
        self.machine_id = machine_id
        self.state = state
        self.timeout = timeout
        self.method = method
        self.url = url


class WaitCancelledError(FlyCancelledError):
    """A wait for a machine state was abandoned by the caller."""

    def __init__(self, machine_id: str, state: str, *, method: str = "", url: str = "") -> None:
        super().__init__(
            f"Wait for machine {machine_id} to reach state {state!r} was cancelled",
            method=method,
            url=url,
        )
        self.machine_id = machine_id
        self.state = state
