"""Fake config store for testing."""

from __future__ import annotations

from pathlib import Path

from jjdash.config import DashConfig
from jjdash.errors import ConfigError
from jjdash.gateway.config_store.abc import ConfigStore


class FakeConfigStore(ConfigStore):
    """In-memory config store.

    Mutation Tracking:
    -----------------
    - saves: (config, local) pairs passed to save(), in order
    """

    def __init__(self, *, config: DashConfig | None = None, save_error: str | None = None) -> None:
        self._config = config or DashConfig.default()
        self._save_error = save_error
        self._saves: list[tuple[DashConfig, bool]] = []

    def load(self) -> DashConfig:
        return self._config

    def save(self, config: DashConfig, *, local: bool) -> Path:
        if self._save_error is not None:
            raise ConfigError(self._save_error)
        self._saves.append((config, local))
        self._config = config
        return Path(".jjdash.toml") if local else Path("config.toml")

    @property
    def saves(self) -> list[tuple[DashConfig, bool]]:
        return list(self._saves)
