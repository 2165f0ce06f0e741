"""
binmagic Configuration Management
==================================

Centralized configuration using Python dataclasses and TOML-based
persistence.  Every setting has a default, so a missing file or a
missing key never stops the tool.

Example ``binmagic.toml``::

    [global]
    log_level = "DEBUG"
    log_file = "logs/binmagic.log"
    log_json = true

    [inspect]
    max_file_size = 268435456
    max_symbols_displayed = 500

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "binmagic.toml"


@dataclass(frozen=False, slots=True)
class InspectConfig:
    """Settings for loading and displaying ELF files."""

    max_file_size: int = 268_435_456  # 256 MiB
    max_symbols_displayed: int = 200
    show_unnamed_symbols: bool = False


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and execution settings."""

    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_json: bool = False
    max_workers: int = 4


@dataclass(frozen=False, slots=True)
class MagicConfig:
    """Master configuration aggregating all sections.

    Usage:
        >>> config = MagicConfig.load()                  # from default path
        >>> config = MagicConfig.load("custom.toml")     # from custom path
        >>> config.inspect.max_symbols_displayed
        200
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    inspect: InspectConfig = field(default_factory=InspectConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> MagicConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``binmagic.toml`` in the
        project root and falls back to defaults when it is absent.

        Raises:
            FileNotFoundError: The caller named a file that does not exist.
            tomllib.TOMLDecodeError: The file is not valid TOML.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            inspect=cls._build_section(InspectConfig, raw.get("inspect", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(section_cls: type, data: dict[str, Any]) -> Any:
        """Instantiate *section_cls* using only the keys it declares.

        Unknown keys are ignored so newer config files keep working.
        """
        valid_keys = set(section_cls.__dataclass_fields__)  # type: ignore[attr-defined]
        return section_cls(**{k: v for k, v in data.items() if k in valid_keys})
