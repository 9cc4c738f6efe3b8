"""YAML + environment config loading → FlyConfig."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from flysdk.models import FlyConfig

DEFAULT_CONFIG_FILE = "flysdk.yaml"


def load_config(path: str | Path | None = None) -> FlyConfig:
    """Load client config from a YAML file, then apply environment overrides.

    Resolution order for path:
    1. Explicit `path` argument
    2. FLY_SDK_CONFIG_PATH env var
    3. Default: flysdk.yaml in current directory (optional)

    An explicitly requested file must exist; the default one may be absent.
    Afterwards FLY_API_TOKEN (or FLY_ORG_TOKEN) and FLY_API_BASE_URL override
    whatever the file says.
    """
    explicit = path is not None or "FLY_SDK_CONFIG_PATH" in os.environ
    if path is None:
        path = os.environ.get("FLY_SDK_CONFIG_PATH", DEFAULT_CONFIG_FILE)

    config_path = Path(path)
    data: dict = {}
    if config_path.exists():
        loaded = yaml.safe_load(config_path.read_text())
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(
                    f"Config file must contain a YAML mapping, got {type(loaded).__name__}"
                )
            data = loaded
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    token = os.environ.get("FLY_API_TOKEN") or os.environ.get("FLY_ORG_TOKEN")
    if token:
        data["api_token"] = token
    base_url = os.environ.get("FLY_API_BASE_URL")
    if base_url:
        data["base_url"] = base_url

    return FlyConfig(**data)
