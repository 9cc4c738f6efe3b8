"""Pydantic models: client config, API requests and API responses."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from flysdk.machine_config import FlyModel, MachineConfig
from flysdk.transport import DEFAULT_BASE_URL

# ── Config models ──────────────────────────────────────────────────────────────


class FlyConfig(BaseModel):
    api_token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    # Extra seconds allowed on top of a server-side wait or exec timeout.
    wait_grace: float = 10.0


# ── Enums ──────────────────────────────────────────────────────────────────────


class MachineState(StrEnum):
    """States a caller can wait for. Intermediate states are not waitable."""

    STARTED = "started"
    STOPPED = "stopped"
    SUSPENDED = "suspended"
    DESTROYED = "destroyed"


class HostStatus(StrEnum):
    OK = "ok"
    UNKNOWN = "unknown"
    UNREACHABLE = "unreachable"


class MachineRegion(StrEnum):
    AMS = "ams"  # Amsterdam, Netherlands
    ARN = "arn"  # Stockholm, Sweden
    ATL = "atl"  # Atlanta, Georgia (US)
    BOG = "bog"  # Bogotá, Colombia
    BOM = "bom"  # Mumbai, India
    BOS = "bos"  # Boston, Massachusetts (US)
    CDG = "cdg"  # Paris, France
    DEN = "den"  # Denver, Colorado (US)
    DFW = "dfw"  # Dallas, Texas (US)
    EWR = "ewr"  # Secaucus, NJ (US)
    EZE = "eze"  # Ezeiza, Argentina
    FRA = "fra"  # Frankfurt, Germany
    GDL = "gdl"  # Guadalajara, Mexico
    GIG = "gig"  # Rio de Janeiro, Brazil
    GRU = "gru"  # Sao Paulo, Brazil
    HKG = "hkg"  # Hong Kong
    IAD = "iad"  # Ashburn, Virginia (US)
    JNB = "jnb"  # Johannesburg, South Africa
    LAX = "lax"  # Los Angeles, California (US)
    LHR = "lhr"  # London, United Kingdom
    MAD = "mad"  # Madrid, Spain
    MIA = "mia"  # Miami, Florida (US)
    NRT = "nrt"  # Tokyo, Japan
    ORD = "ord"  # Chicago, Illinois (US)
    OTP = "otp"  # Bucharest, Romania
    PHX = "phx"  # Phoenix, Arizona (US)
    QRO = "qro"  # Querétaro, Mexico
    SCL = "scl"  # Santiago, Chile
    SEA = "sea"  # Seattle, Washington (US)
    SIN = "sin"  # Singapore
    SJC = "sjc"  # San Jose, California (US)
    SYD = "syd"  # Sydney, Australia
    WAW = "waw"  # Warsaw, Poland
    YUL = "yul"  # Montreal, Canada
    YYZ = "yyz"  # Toronto, Canada


# ── App models ─────────────────────────────────────────────────────────────────


class Organization(FlyModel):
    name: str = ""
    slug: str = ""


class App(FlyModel):
    id: str
    name: str = ""
    machine_count: int = 0
    network: str = ""
    organization: Organization | None = None
    status: str | None = None
    created_at: int | None = None


class AppList(FlyModel):
    total_apps: int = 0
    apps: list[App] = Field(default_factory=list)


class CreateAppRequest(FlyModel):
    app_name: str
    org_slug: str


# ── Secret models ──────────────────────────────────────────────────────────────


class Secret(FlyModel):
    """Secret metadata. The plaintext value is never returned by the API."""

    label: str
    type: str
    publickey: list[int] | None = None


class SecretValue(FlyModel):
    value: list[int]

    @classmethod
    def of(cls, value: bytes | str | list[int] | tuple[int, ...]) -> SecretValue:
        if isinstance(value, str):
            value = value.encode()
        return cls(value=list(value))

    def __repr__(self) -> str:
        return f"SecretValue(<{len(self.value)} bytes>)"

    __str__ = __repr__


# ── Volume models ──────────────────────────────────────────────────────────────


class Volume(FlyModel):
    id: str | None = None
    name: str | None = None
    state: str | None = None
    region: str | None = None
    zone: str | None = None
    size_gb: int | None = None
    encrypted: bool | None = None
    fstype: str | None = None
    attached_machine_id: str | None = None
    attached_alloc_id: str | None = None
    auto_backup_enabled: bool | None = None
    block_size: int | None = None
    blocks: int | None = None
    blocks_avail: int | None = None
    blocks_free: int | None = None
    host_status: str | None = None
    snapshot_retention: int | None = None
    created_at: str | None = None


class Compute(FlyModel):
    """Compute hint used to place a new volume next to a matching host."""

    cpu_kind: str | None = "shared"
    cpus: int | None = 1
    memory_mb: int | None = 512
    gpu_kind: str | None = None
    gpus: int | None = None
    host_dedication_id: str | None = None
    kernel_args: list[str] | None = None
    image: str | None = None


class CreateVolumeRequest(FlyModel):
    name: str
    region: MachineRegion | str
    size_gb: int
    encrypted: bool = False
    fstype: str = "ext4"
    require_unique_zone: bool = True
    compute: Compute | None = Field(default_factory=Compute)
    snapshot_id: str | None = None
    snapshot_retention: int | None = None
    source_volume_id: str | None = None


class UpdateVolumeRequest(FlyModel):
    auto_backup_enabled: bool | None = None
    snapshot_retention: int | None = None


class ExtendVolumeRequest(FlyModel):
    size_gb: int


class ExtendVolumeResponse(FlyModel):
    needs_restart: bool = False
    volume: Volume | None = None


class Snapshot(FlyModel):
    id: str
    created_at: str | None = None
    digest: str | None = None
    retention_days: int | None = None
    size: int | None = None
    status: str | None = None


# ── Machine models ─────────────────────────────────────────────────────────────


class MachineRequest(FlyModel):
    """Body for machine create and update calls."""

    config: MachineConfig
    name: str | None = None
    region: MachineRegion | str | None = None
    lease_ttl: int | None = None
    lsvd: bool | None = None
    skip_launch: bool | None = None
    skip_service_registration: bool | None = None


class ImageRef(FlyModel):
    registry: str | None = None
    repository: str | None = None
    tag: str | None = None
    digest: str | None = None
    labels: dict[str, Any] | None = None


class CheckStatus(FlyModel):
    name: str | None = None
    status: str | None = None
    output: str | None = None
    updated_at: str | None = None


class MachineEvent(FlyModel):
    id: str | None = None
    type: str | None = None
    status: str | None = None
    source: str | None = None
    timestamp: int | None = None
    request: dict[str, Any] | None = None


class Machine(FlyModel):
    """A machine as last observed from the API.

    Every field is optional: the wait endpoint answers with a partial record,
    and the client never fills in values the API did not send.
    """

    id: str | None = None
    instance_id: str | None = None
    name: str | None = None
    region: str | None = None
    state: str | None = None
    config: MachineConfig | None = None
    incomplete_config: dict[str, Any] | None = None
    image_ref: ImageRef | None = None
    checks: list[CheckStatus] | None = None
    events: list[MachineEvent] | None = None
    host_status: HostStatus | None = None
    private_ip: str | None = None
    nonce: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ListenSocket(FlyModel):
    address: str | None = None
    proto: str | None = None


class ProcessInfo(FlyModel):
    pid: int | None = None
    command: str | None = None
    directory: str | None = None
    cpu: int | None = None
    rss: int | None = None
    rtime: int | None = None
    stime: int | None = None
    listen_sockets: list[ListenSocket] | None = None


class CommandResponse(FlyModel):
    exit_code: int | None = None
    exit_signal: int | None = None
    stdout: str | None = None
    stderr: str | None = None
