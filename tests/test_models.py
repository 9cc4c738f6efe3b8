"""Tests for Pydantic data models."""

from __future__ import annotations

from flysdk.machine_config import MachineConfig
from flysdk.models import (
    App,
    Compute,
    CreateVolumeRequest,
    ExtendVolumeResponse,
    FlyConfig,
    HostStatus,
    Machine,
    MachineRegion,
    MachineRequest,
    MachineState,
    UpdateVolumeRequest,
)


class TestMachineState:
    def test_values(self):
        assert [s.value for s in MachineState] == ["started", "stopped", "suspended", "destroyed"]

    def test_str_is_wire_value(self):
        assert str(MachineState.DESTROYED) == "destroyed"
        assert f"{MachineState.STOPPED}" == "stopped"


class TestMachine:
    def test_from_api_payload(self):
        payload = {
            "id": "1781973f003d89",
            "name": "red-bush-4321",
            "state": "started",
            "region": "iad",
            "instance_id": "01H3JK6SP6W2F0X2XRHBE4MNQ5",
            "private_ip": "fdaa:0:1:a7b:23:1:2:3",
            "config": {
                "image": "registry-1.docker.io/library/nginx:latest",
                "guest": {"cpu_kind": "shared", "cpus": 1, "memory_mb": 256},
                "restart": {"policy": "always"},
            },
            "image_ref": {
                "registry": "registry-1.docker.io",
                "repository": "library/nginx",
                "tag": "latest",
                "digest": "sha256:abc",
                "labels": {"maintainer": "nginx"},
            },
            "created_at": "2023-06-20T18:48:18Z",
            "updated_at": "2023-06-20T18:48:20Z",
            "events": [
                {"type": "start", "status": "started", "source": "flyd", "timestamp": 1687286900000}
            ],
            "checks": [{"name": "http", "status": "passing", "output": "OK"}],
            "host_status": "ok",
        }
        m = Machine.model_validate(payload)
        assert m.id == "1781973f003d89"
        assert m.config.guest.memory_mb == 256
        assert m.config.restart.policy == "always"
        assert m.image_ref.repository == "library/nginx"
        assert m.events[0].status == "started"
        assert m.checks[0].status == "passing"
        assert m.host_status is HostStatus.OK

    def test_intermediate_state_kept_as_reported(self):
        m = Machine.model_validate({"id": "m1", "state": "replacing"})
        assert m.state == "replacing"

    def test_empty(self):
        m = Machine()
        assert m.id is None
        assert m.config is None


class TestMachineRequest:
    def test_omits_unset(self):
        req = MachineRequest(config=MachineConfig(image="nginx"), region=MachineRegion.LHR)
        assert req.model_dump(mode="json", exclude_none=True) == {
            "config": {"image": "nginx"},
            "region": "lhr",
        }

    def test_flags(self):
        req = MachineRequest(
            config=MachineConfig(image="nginx"),
            lease_ttl=30,
            skip_launch=True,
            skip_service_registration=False,
        )
        data = req.model_dump(mode="json", exclude_none=True)
        assert data["lease_ttl"] == 30
        assert data["skip_launch"] is True
        assert data["skip_service_registration"] is False
        assert "lsvd" not in data

    def test_custom_region_string(self):
        req = MachineRequest(config=MachineConfig(image="nginx"), region="nbg")
        assert req.model_dump(mode="json", exclude_none=True)["region"] == "nbg"


class TestApp:
    def test_minimal(self):
        app = App(id="app-1")
        assert app.name == ""
        assert app.machine_count == 0
        assert app.organization is None


class TestVolumeRequests:
    def test_create_defaults(self):
        req = CreateVolumeRequest(name="data", region=MachineRegion.IAD, size_gb=1)
        assert req.fstype == "ext4"
        assert req.require_unique_zone is True
        assert req.encrypted is False
        assert req.compute == Compute(cpu_kind="shared", cpus=1, memory_mb=512)
        assert req.snapshot_id is None

    def test_create_overrides(self):
        req = CreateVolumeRequest(
            name="data",
            region="ams",
            size_gb=3,
            encrypted=True,
            fstype="raw",
            require_unique_zone=False,
            compute=None,
            source_volume_id="vol_9",
        )
        data = req.model_dump(mode="json", exclude_none=True)
        assert data == {
            "name": "data",
            "region": "ams",
            "size_gb": 3,
            "encrypted": True,
            "fstype": "raw",
            "require_unique_zone": False,
            "source_volume_id": "vol_9",
        }

    def test_update_empty(self):
        assert UpdateVolumeRequest().model_dump(exclude_none=True) == {}

    def test_extend_response_default(self):
        resp = ExtendVolumeResponse.model_validate({"volume": {"id": "vol_1"}})
        assert resp.needs_restart is False
        assert resp.volume.id == "vol_1"


class TestFlyConfig:
    def test_defaults(self):
        config = FlyConfig()
        assert config.api_token is None
        assert config.base_url == "https://api.machines.dev/v1"
        assert config.timeout == 30.0
        assert config.wait_grace == 10.0
