"""Abstract base class for loading and saving dashboard settings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from jjdash.config import DashConfig


class ConfigStore(ABC):
    """Persistent settings; failures raise ConfigError."""

    @abstractmethod
    def load(self) -> DashConfig:
        """Load the effective config (global, then local overrides, then environment)."""
        ...

    @abstractmethod
    def save(self, config: DashConfig, *, local: bool) -> Path:
        """Persist ``config``.

        Args:
            config: Settings to write
            local: Write the repository-local file instead of the global one

        Returns:
            Path of the file written
        """
        ...
