"""Tests for the FlyControl facade."""

from __future__ import annotations

import httpx
import pytest

from flysdk.clients.apps import AppsClient
from flysdk.clients.machines import MachinesClient
from flysdk.clients.secrets import SecretsClient
from flysdk.clients.volumes import VolumesClient
from flysdk.control import FlyControl
from flysdk.models import FlyConfig

TOKEN = "fly_test_token"


def recording_http(seen):
    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=[])

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestConstruction:
    def test_exposes_managers(self):
        fly = FlyControl(TOKEN, http=httpx.AsyncClient())
        assert isinstance(fly.apps, AppsClient)
        assert isinstance(fly.machines, MachinesClient)
        assert isinstance(fly.secrets, SecretsClient)
        assert isinstance(fly.volumes, VolumesClient)
        assert fly.base_url == "https://api.machines.dev/v1"

    def test_requires_token(self):
        with pytest.raises(ValueError, match="token"):
            FlyControl("")

    def test_from_config(self):
        config = FlyConfig(api_token=TOKEN, base_url="http://localhost:4280/v1")
        fly = FlyControl.from_config(config, http=httpx.AsyncClient())
        assert fly.base_url == "http://localhost:4280/v1"
        assert "localhost:4280" in repr(fly)

    def test_from_config_without_token(self):
        with pytest.raises(ValueError):
            FlyControl.from_config(FlyConfig())

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("FLY_SDK_CONFIG_PATH", raising=False)
        monkeypatch.setenv("FLY_API_TOKEN", TOKEN)
        monkeypatch.setenv("FLY_API_BASE_URL", "http://example.test/v1")
        fly = FlyControl.from_config(http=httpx.AsyncClient())
        assert fly.base_url == "http://example.test/v1"


class TestSharedTransport:
    async def test_all_managers_use_credential_and_endpoint(self):
        seen: list[httpx.Request] = []
        fly = FlyControl(TOKEN, base_url="http://fly.test/v1", http=recording_http(seen))

        await fly.apps.list("org")
        await fly.machines.list("app")
        await fly.secrets.list("app")
        await fly.volumes.list("app")

        assert [r.url.path for r in seen] == [
            "/v1/apps",
            "/v1/apps/app/machines",
            "/v1/apps/app/secrets",
            "/v1/apps/app/volumes",
        ]
        assert all(r.url.host == "fly.test" for r in seen)
        assert all(r.headers["authorization"] == f"Bearer {TOKEN}" for r in seen)


class TestLifetime:
    async def test_owned_client_closed(self):
        async with FlyControl(TOKEN) as fly:
            http = fly._http
            assert not http.is_closed
        assert http.is_closed

    async def test_injected_client_left_open(self):
        http = httpx.AsyncClient()
        async with FlyControl(TOKEN, http=http):
            pass
        assert not http.is_closed
        await http.aclose()
