"""Configuration management for loadcheck."""

import tempfile
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_CHECK_NAME = "monitor_load"


class LoadCheckConfig(BaseModel):
    """Root configuration for a check run."""

    check_name: str = Field(default=DEFAULT_CHECK_NAME, min_length=1)
    per_core_threshold: float = Field(
        default=0.08,
        ge=0,
        description="Fraction of one core's load allowed before flagging (1 = 100% of each CPU)",
    )
    top_count: int = Field(default=5, ge=1, description="Processes listed in the status line")
    log_path: Path | None = Field(
        default=None, description="Event log file. Defaults to the platform's log path."
    )
    lock_path: Path | None = Field(
        default=None, description="Lock file. Defaults to <tmpdir>/<check_name>.tmp"
    )
    sample_interval: float = Field(
        default=0.5, ge=0, description="Seconds over which per-process CPU% is measured"
    )

    def get_lock_path(self) -> Path:
        """Get the effective lock file path."""
        if self.lock_path is not None:
            return self.lock_path
        return Path(tempfile.gettempdir()) / f"{self.check_name}.tmp"


def load_config(config_path: Path | None = None) -> LoadCheckConfig:
    """Load config from a TOML file.

    Values may sit at the top level or under a ``[loadcheck]`` table.

    Args:
        config_path: Path to the TOML file, or None for defaults

    Returns:
        Loaded configuration, or defaults if no file is given
    """
    if config_path is None:
        return LoadCheckConfig()
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return LoadCheckConfig.model_validate(data.get("loadcheck", data))
