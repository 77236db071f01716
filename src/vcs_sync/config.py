import logging
import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    CONFIG_FILE,
    DEFAULT_DRIVER,
    LOCAL_CONFIG_NAME,
)
from .driver import DriverConfig

logger = logging.getLogger(APP_NAME)


def parse_size(value: int | str) -> int:
    """Converts human-readable size strings (e.g., '100MB') to bytes."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid size format '{value}'")
    if isinstance(value, int):
        return value
    match = re.match(r"^(\d+(?:\.\d+)?)\s*([kmg]b?)$", str(value).strip().lower())
    if not match:
        raise ValueError(f"Invalid size format '{value}'")
    num, unit = float(match.group(1)), match.group(2)
    multiplier = {
        "k": 1024,
        "kb": 1024,
        "m": 1024**2,
        "mb": 1024**2,
        "g": 1024**3,
        "gb": 1024**3,
    }
    return int(num * multiplier[unit])


def parse_bool(value: bool | str) -> bool:
    """Accepts real booleans and the usual 'true'/'false' spellings."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "on", "1"):
        return True
    if text in ("false", "no", "off", "0"):
        return False
    raise ValueError(f"Invalid boolean '{value}'")


@dataclass
class DriverSection:
    """Which backend to use and how it tracks refs.

    Attributes:
        vcs (str): The registered driver name.
        detect_ref (bool): Ask the remote for its default branch.
        ref (str): An explicit ref to track (overrides detection).
    """

    vcs: str = DEFAULT_DRIVER
    detect_ref: bool = False
    ref: str = ""


@dataclass
class LimitsConfig:
    """Resource limitation settings.

    Attributes:
        max_log_size (int): Max bytes for the log file before rotation.
    """

    max_log_size: int = 5 * 1024 * 1024


@dataclass
class LoggingConfig:
    """Logging settings.

    Attributes:
        file (str | None): Log file path; file logging is off when unset.
        verbose (bool): Emit debug messages.
    """

    file: str | None = None
    verbose: bool = False


@dataclass
class Config:
    """Global configuration aggregator.

    Attributes:
        driver (DriverSection): Driver selection and ref policy.
        limits (LimitsConfig): Resource limits.
        logging (LoggingConfig): Logging settings.
    """

    driver: DriverSection = field(default_factory=DriverSection)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(
        cls, project_path: Path | None = None, extra_file: Path | None = None
    ) -> "Config":
        """Loads and merges configuration from defaults, global, and local sources.

        Args:
            project_path (Path | None): Directory searched for `vcs-sync.toml`
                                        or a `[tool.vcs-sync]` pyproject table.
            extra_file (Path | None): An explicitly requested file, merged last.

        Returns:
            Config: The fully merged configuration object.
        """
        instance = cls()
        if CONFIG_FILE.exists():
            instance._merge_from_file(CONFIG_FILE)

        if project_path:
            local_toml = project_path / LOCAL_CONFIG_NAME
            pyproject = project_path / "pyproject.toml"

            if local_toml.exists():
                instance._merge_from_file(local_toml)
            elif pyproject.exists():
                instance._merge_from_file(pyproject, section="tool.vcs-sync")

        if extra_file:
            instance._merge_from_file(extra_file)

        return instance

    def driver_config(self) -> DriverConfig:
        return DriverConfig(detect_ref=self.driver.detect_ref, ref=self.driver.ref)

    def driver_blob(self) -> bytes:
        """Serializes the driver section for `DriverRegistry.new`."""
        return self.driver_config().to_bytes()

    def _merge_from_file(self, path: Path, section: str | None = None) -> None:
        """Parses a TOML file and merges it into the current instance.

        Args:
            path (Path): Path to the TOML file.
            section (str | None): Dot-separated section path (e.g., 'tool.vcs-sync').
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if section:
                for key in section.split("."):
                    data = data.get(key, {}) if isinstance(data, dict) else {}

            if not data or not isinstance(data, dict):
                return

            for name in ("driver", "limits", "logging"):
                if name not in data:
                    continue
                if not isinstance(data[name], dict):
                    logger.warning(
                        f"Config section [{name}] in {path} is not a table. Ignoring."
                    )
                    continue
                updated = self._update_dataclass(name, getattr(self, name), data[name])
                setattr(self, name, updated)

        except tomllib.TOMLDecodeError as e:
            logger.error(f"Config syntax error in {path}: {e}")
        except OSError as e:
            logger.warning(f"Failed to load config from {path}: {e}")

    @staticmethod
    def _update_dataclass(section_name: str, instance: Any, updates: dict) -> Any:
        """Updates a dataclass, warning on invalid keys and parsing human-readable formats."""
        valid_keys = instance.__dataclass_fields__.keys()
        filtered_updates = {}

        # TOML users may write either detect_ref or detect-ref.
        updates = {k.replace("-", "_"): v for k, v in updates.items()}

        invalid_keys = set(updates.keys()) - set(valid_keys)
        if invalid_keys:
            logger.warning(
                f"Unknown config keys in [{section_name}]: {', '.join(sorted(invalid_keys))}. Ignoring."
            )

        for k, v in updates.items():
            if k not in valid_keys:
                continue

            try:
                if k == "max_log_size":
                    filtered_updates[k] = parse_size(v)
                elif k in ["detect_ref", "verbose"]:
                    filtered_updates[k] = parse_bool(v)
                elif k in ["vcs", "ref", "file"]:
                    if not isinstance(v, str):
                        raise ValueError(f"Expected a string, got {v!r}")
                    filtered_updates[k] = v
                else:
                    filtered_updates[k] = v
            except ValueError as e:
                logger.warning(
                    f"Config error in [{section_name}].{k}: {e}. Falling back to default."
                )

        return replace(instance, **filtered_updates)
