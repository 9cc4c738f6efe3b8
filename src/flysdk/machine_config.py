"""Machine configuration value objects.

A ``MachineConfig`` is purely descriptive: it is sent with create/update
requests and echoed back inside machine records. Every model is frozen, so
the ``with_*`` helpers return modified copies instead of mutating in place.
Unset optional fields are dropped when a config is serialized.
"""

from __future__ import annotations

import base64
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FlyModel(BaseModel):
    """Base for every API record: immutable, tolerant of unknown fields."""

    model_config = ConfigDict(frozen=True, extra="ignore")


def seconds(value: int | float | str | None) -> str | None:
    """Render a number of seconds as an API duration string ("15s")."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, int):
        return f"{value}s"
    return f"{value:f}".rstrip("0").rstrip(".") + "s"


# ── Enums ──────────────────────────────────────────────────────────────────────


class CpuKind(StrEnum):
    SHARED = "shared"
    PERFORMANCE = "performance"


class GpuKind(StrEnum):
    A10 = "a10"
    L40S = "l40s"
    A100_PCIE_40GB = "a100-pcie-40gb"
    A100_SXM4_80GB = "a100-sxm4-80gb"


class RestartPolicyKind(StrEnum):
    NO = "no"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    SPOT_PRICE = "spot-price"


class CheckKind(StrEnum):
    INFORMATIONAL = "informational"
    READINESS = "readiness"


class CheckType(StrEnum):
    TCP = "tcp"
    HTTP = "http"


class CheckProtocol(StrEnum):
    HTTP = "http"
    HTTPS = "https"


class FieldRef(StrEnum):
    ID = "id"
    VERSION = "version"
    APP_NAME = "app_name"
    PRIVATE_IP = "private_ip"
    REGION = "region"
    IMAGE = "image"


class AutostopMode(StrEnum):
    OFF = "off"
    STOP = "stop"
    SUSPEND = "suspend"


class ConcurrencyType(StrEnum):
    CONNECTIONS = "connections"
    REQUESTS = "requests"


# ── Resources ──────────────────────────────────────────────────────────────────


class GuestConfig(FlyModel):
    cpu_kind: CpuKind | None = None
    cpus: int | None = None
    gpu_kind: GpuKind | None = None
    gpus: int | None = None
    memory_mb: int | None = None
    kernel_args: list[str] | None = None

    @classmethod
    def standard(cls, **overrides: Any) -> GuestConfig:
        """A shared-cpu-1x guest with 256 MB of memory."""
        fields: dict[str, Any] = {"cpu_kind": CpuKind.SHARED, "cpus": 1, "memory_mb": 256}
        fields.update(overrides)
        return cls(**fields)


class RestartPolicy(FlyModel):
    policy: RestartPolicyKind | None = None
    max_retries: int | None = None
    gpu_bid_price: float | None = None


# ── Health checks ──────────────────────────────────────────────────────────────


class CheckHeader(FlyModel):
    name: str
    values: list[str] = Field(default_factory=list)


class CheckConfig(FlyModel):
    """A single machine health check.

    Durations (``interval``, ``timeout``, ``grace_period``) are API duration
    strings such as ``"15s"``. The ``http``/``tcp`` constructors accept plain
    seconds and convert them.
    """

    type: CheckType | None = None
    kind: CheckKind | None = None
    port: int | None = None
    interval: str | None = None
    timeout: str | None = None
    grace_period: str | None = None
    method: str | None = None
    path: str | None = None
    protocol: CheckProtocol | None = None
    headers: list[CheckHeader] | None = None
    tls_server_name: str | None = None
    tls_skip_verify: bool | None = None

    @classmethod
    def http(
        cls,
        port: int,
        path: str = "/",
        *,
        method: str = "GET",
        interval: int | float | str | None = None,
        timeout: int | float | str | None = None,
        grace_period: int | float | str | None = None,
        **fields: Any,
    ) -> CheckConfig:
        return cls(
            type=CheckType.HTTP,
            port=port,
            path=path,
            method=method,
            interval=seconds(interval),
            timeout=seconds(timeout),
            grace_period=seconds(grace_period),
            **fields,
        )

    @classmethod
    def tcp(
        cls,
        port: int,
        *,
        interval: int | float | str | None = None,
        timeout: int | float | str | None = None,
        grace_period: int | float | str | None = None,
        **fields: Any,
    ) -> CheckConfig:
        return cls(
            type=CheckType.TCP,
            port=port,
            interval=seconds(interval),
            timeout=seconds(timeout),
            grace_period=seconds(grace_period),
            **fields,
        )

    def with_header(self, name: str, *values: str) -> CheckConfig:
        headers = [*(self.headers or []), CheckHeader(name=name, values=list(values))]
        return self.model_copy(update={"headers": headers})


# ── Services ───────────────────────────────────────────────────────────────────


class HttpResponseOptions(FlyModel):
    headers: dict[str, Any] | None = None
    pristine: bool | None = None


class HttpOptions(FlyModel):
    compress: bool | None = None
    h2_backend: bool | None = None
    headers_read_timeout: int | None = None
    idle_timeout: int | None = None
    response: HttpResponseOptions | None = None


class ProxyProtoOptions(FlyModel):
    version: str | None = None


class TlsOptions(FlyModel):
    alpn: list[str] | None = None
    default_self_signed: bool | None = None
    versions: list[str] | None = None


class MachinePort(FlyModel):
    port: int | None = None
    start_port: int | None = None
    end_port: int | None = None
    force_https: bool | None = None
    handlers: list[str] | None = None
    http_options: HttpOptions | None = None
    proxy_proto_options: ProxyProtoOptions | None = None
    tls_options: TlsOptions | None = None


class ConcurrencyConfig(FlyModel):
    type: ConcurrencyType | None = None
    hard_limit: int | None = None
    soft_limit: int | None = None


class ServiceConfig(FlyModel):
    protocol: str | None = None
    internal_port: int | None = None
    autostart: bool | None = None
    # The API takes either a bool or one of the AutostopMode strings.
    autostop: AutostopMode | bool | None = None
    min_machines_running: int | None = None
    concurrency: ConcurrencyConfig | None = None
    ports: list[MachinePort] | None = None
    checks: list[CheckConfig] | None = None


# ── Processes ──────────────────────────────────────────────────────────────────


class EnvFrom(FlyModel):
    env_var: str
    field_ref: FieldRef


class SecretRef(FlyModel):
    env_var: str
    name: str | None = None


class ProcessConfig(FlyModel):
    cmd: list[str] | None = None
    entrypoint: list[str] | None = None
    exec: list[str] | None = None
    env: dict[str, str] | None = None
    env_from: list[EnvFrom] | None = None
    ignore_app_secrets: bool | None = None
    secrets: list[SecretRef] | None = None
    user: str | None = None


# ── System ─────────────────────────────────────────────────────────────────────


class InitConfig(FlyModel):
    cmd: list[str] | None = None
    entrypoint: list[str] | None = None
    exec: list[str] | None = None
    kernel_args: list[str] | None = None
    swap_size_mb: int | None = None
    tty: bool | None = None


class MountConfig(FlyModel):
    volume: str
    path: str
    name: str | None = None
    encrypted: bool | None = None
    size_gb: int | None = None
    size_gb_limit: int | None = None
    add_size_gb: int | None = None
    extend_threshold_percent: int | None = None


class FileConfig(FlyModel):
    guest_path: str
    mode: int | None = None
    raw_value: str | None = None
    secret_name: str | None = None

    @classmethod
    def from_text(cls, guest_path: str, text: str | bytes, mode: int | None = None) -> FileConfig:
        """Inline file contents; the API expects ``raw_value`` base64 encoded."""
        data = text.encode() if isinstance(text, str) else text
        return cls(guest_path=guest_path, raw_value=base64.b64encode(data).decode(), mode=mode)


class StaticConfig(FlyModel):
    guest_path: str
    url_prefix: str
    index_document: str | None = None
    tigris_bucket: str | None = None


class MetricsConfig(FlyModel):
    port: int
    path: str


class StopConfig(FlyModel):
    signal: str | None = None
    timeout: str | None = None


class DnsForwardRule(FlyModel):
    basename: str
    addr: str


class DnsOption(FlyModel):
    name: str
    value: str | None = None


class DnsConfig(FlyModel):
    dns_forward_rules: list[DnsForwardRule] | None = None
    hostname: str | None = None
    hostname_fqdn: str | None = None
    nameservers: list[str] | None = None
    options: list[DnsOption] | None = None
    searches: list[str] | None = None
    skip_registration: bool | None = None


# ── Machine config ─────────────────────────────────────────────────────────────


class MachineConfig(FlyModel):
    image: str
    guest: GuestConfig | None = None
    auto_destroy: bool | None = None
    init: InitConfig | None = None
    env: dict[str, str] | None = None
    processes: list[ProcessConfig] | None = None
    mounts: list[MountConfig] | None = None
    restart: RestartPolicy | None = None
    checks: dict[str, CheckConfig] | None = None
    dns: DnsConfig | None = None
    files: list[FileConfig] | None = None
    metadata: dict[str, str] | None = None
    metrics: MetricsConfig | None = None
    schedule: str | None = None
    services: list[ServiceConfig] | None = None
    standbys: list[str] | None = None
    statics: list[StaticConfig] | None = None
    stop_config: StopConfig | None = None

    @classmethod
    def standard(cls, image: str = "ubuntu:22.04", **overrides: Any) -> MachineConfig:
        """Build a config with the usual defaults filled in.

        Defaults: no auto-destroy, restart policy ``no`` and a shared-cpu-1x
        guest with 256 MB. Any keyword overrides the matching default.
        """
        fields: dict[str, Any] = {
            "auto_destroy": False,
            "restart": RestartPolicy(policy=RestartPolicyKind.NO),
            "guest": GuestConfig.standard(),
        }
        fields.update(overrides)
        return cls(image=image, **fields)

    def with_image(self, image: str) -> MachineConfig:
        return self.model_copy(update={"image": image})

    def with_guest(self, **fields: Any) -> MachineConfig:
        """Merge ``fields`` into the guest config, creating one if absent."""
        current = self.guest.model_dump(exclude_none=True) if self.guest else {}
        current.update(fields)
        return self.model_copy(update={"guest": GuestConfig(**current)})

    def with_restart(
        self,
        policy: RestartPolicyKind | str,
        max_retries: int | None = None,
        gpu_bid_price: float | None = None,
    ) -> MachineConfig:
        restart = RestartPolicy(
            policy=RestartPolicyKind(policy),
            max_retries=max_retries,
            gpu_bid_price=gpu_bid_price,
        )
        return self.model_copy(update={"restart": restart})

    def with_env(self, key: str, value: str) -> MachineConfig:
        return self.model_copy(update={"env": {**(self.env or {}), key: value}})

    def with_metadata(self, key: str, value: str) -> MachineConfig:
        return self.model_copy(update={"metadata": {**(self.metadata or {}), key: value}})

    def with_check(self, name: str, check: CheckConfig) -> MachineConfig:
        return self.model_copy(update={"checks": {**(self.checks or {}), name: check}})

    def with_mount(self, mount: MountConfig) -> MachineConfig:
        return self.model_copy(update={"mounts": [*(self.mounts or []), mount]})

    def with_file(self, file: FileConfig) -> MachineConfig:
        return self.model_copy(update={"files": [*(self.files or []), file]})

    def with_process(self, process: ProcessConfig) -> MachineConfig:
        return self.model_copy(update={"processes": [*(self.processes or []), process]})

    def with_service(self, service: ServiceConfig) -> MachineConfig:
        return self.model_copy(update={"services": [*(self.services or []), service]})

    def with_standby(self, machine_id: str) -> MachineConfig:
        return self.model_copy(update={"standbys": [*(self.standbys or []), machine_id]})

    def with_static(self, static: StaticConfig) -> MachineConfig:
        return self.model_copy(update={"statics": [*(self.statics or []), static]})
