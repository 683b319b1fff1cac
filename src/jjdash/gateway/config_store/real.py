"""TOML-backed config store.

The global file lives at $JJDASH_CONFIG or ~/.config/jjdash/config.toml. A
.jjdash.toml in the repository root overrides the keys it sets.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from jjdash.config import DashConfig
from jjdash.errors import ConfigError
from jjdash.gateway.config_store.abc import ConfigStore

logger = logging.getLogger(__name__)

LOCAL_CONFIG_FILENAME = ".jjdash.toml"


def default_global_path(environ: Mapping[str, str]) -> Path:
    override = environ.get("JJDASH_CONFIG")
    if override:
        return Path(override)
    return Path.home() / ".config" / "jjdash" / "config.toml"


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomli.loads(path.read_text(encoding="utf-8"))
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e


class RealConfigStore(ConfigStore):
    def __init__(self, *, repo_root: Path, global_path: Path | None = None) -> None:
        self._repo_root = repo_root
        self._global_path = global_path or default_global_path(os.environ)

    @property
    def local_path(self) -> Path:
        return self._repo_root / LOCAL_CONFIG_FILENAME

    def load(self) -> DashConfig:
        config = DashConfig.default()
        if self._global_path.exists():
            config = DashConfig.from_mapping(_read_toml(self._global_path))
        if self.local_path.exists():
            logger.debug("Applying local config %s", self.local_path)
            config = config.merged_with(_read_toml(self.local_path))
        return config.with_environment(os.environ)

    def save(self, config: DashConfig, *, local: bool) -> Path:
        path = self.local_path if local else self._global_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(tomli_w.dumps(config.to_mapping()), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot write config file {path}: {e}") from e
        logger.debug("Saved config to %s", path)
        return path
