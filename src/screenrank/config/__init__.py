"""Configuration management utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..schemas.config import AppConfig, load_config


class ConfigManager:
    """YAML-backed loader for named settings files in one directory."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        path = self._base_path / f"{name}.yaml"
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    def app_config(self, name: str) -> AppConfig:
        return load_config(self.load(name))


def load_settings(path: str | Path | None) -> AppConfig:
    """Read and validate a settings file; ``None`` yields the defaults."""
    if path is None:
        return AppConfig()
    with Path(path).open("r", encoding="utf-8") as handle:
        return load_config(yaml.safe_load(handle))


__all__ = ["ConfigManager", "load_settings"]
