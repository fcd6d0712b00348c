"""Configuration loading for ticketflow.

Layer order (later wins):
1) System defaults (hardcoded)
2) .ticketflow/config.toml found by walking up from the start directory
3) Explicit config file (CLI --config-file)
"""

import logging
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

# Conditional TOML import: stdlib tomllib (3.11+) or fallback tomli (<3.11)
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # type: ignore
    except ImportError:
        tomllib = None  # type: ignore

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".ticketflow"
CONFIG_FILE_NAME = "config.toml"
DEFAULT_BACKLOG_FILE_NAME = "TICKETFLOW_Backlog.md"


class BacklogSettings(BaseModel):
    file_name: str = Field(DEFAULT_BACKLOG_FILE_NAME, description="Backlog markdown file name")

    model_config = ConfigDict(extra="forbid")


class ScreenshotSettings(BaseModel):
    base_path: Optional[str] = Field(
        None, description="Absolute screenshots folder used for clipboard export"
    )

    model_config = ConfigDict(extra="forbid")


class LogSettings(BaseModel):
    verbosity: Literal["debug", "info", "warning", "error"] = "warning"
    debug: bool = False

    model_config = ConfigDict(extra="forbid")


class TicketflowConfig(BaseModel):
    """Effective configuration."""

    backlog: BacklogSettings = Field(default_factory=BacklogSettings)
    screenshots: ScreenshotSettings = Field(default_factory=ScreenshotSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    source: Optional[Path] = Field(None, description="Config file the values came from")

    model_config = ConfigDict(extra="forbid")

    @property
    def log_level(self) -> int:
        if self.log.debug:
            return logging.DEBUG
        return getattr(logging, self.log.verbosity.upper())


class ConfigLoader:
    """Load and resolve ticketflow configuration."""

    @staticmethod
    def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = dict(base)
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _read_toml_optional(path: Path) -> dict[str, Any]:
        """Read TOML config file; return {} if not found."""
        if not path.exists():
            return {}
        if tomllib is None:
            logger.warning("tomllib/tomli not available; install tomli for TOML support")
            return {}
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            if not isinstance(data, dict):
                raise ConfigError(f"Config TOML must be a table: {path}")
            return data
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}")
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Failed to load config from {path}: {e}")

    @staticmethod
    def find_config_file(start: Path) -> Optional[Path]:
        """Walk up from `start` to the first `.ticketflow/config.toml`."""
        current = start.resolve()
        if current.is_file():
            current = current.parent
        for directory in (current, *current.parents):
            candidate = directory / CONFIG_DIR_NAME / CONFIG_FILE_NAME
            if candidate.is_file():
                return candidate
        return None

    @staticmethod
    def from_dict(data: dict[str, Any], source: Optional[Path] = None) -> TicketflowConfig:
        try:
            return TicketflowConfig.model_validate({**data, "source": source})
        except ValidationError as e:
            where = f" in {source}" if source else ""
            raise ConfigError(f"Invalid configuration{where}: {e}")

    @staticmethod
    def load(start: Optional[Path] = None, config_file: Optional[Path] = None) -> TicketflowConfig:
        """Load the effective config.

        Args:
            start: Directory to search upward from (defaults to cwd)
            config_file: Explicit config file, layered on top of the discovered one

        Returns:
            TicketflowConfig with defaults filled in
        """
        data: dict[str, Any] = {}
        source: Optional[Path] = None

        discovered = ConfigLoader.find_config_file(start or Path.cwd())
        if discovered is not None:
            logger.debug(f"Using config {discovered}")
            data = ConfigLoader._deep_merge(data, ConfigLoader._read_toml_optional(discovered))
            source = discovered

        if config_file is not None:
            if not config_file.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            data = ConfigLoader._deep_merge(data, ConfigLoader._read_toml_optional(config_file))
            source = config_file

        return ConfigLoader.from_dict(data, source=source)
