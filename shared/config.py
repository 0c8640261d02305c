"""
Exhibit Configuration Management
================================

Dataclass-backed settings for the Exhibit analysis engine, persisted as
TOML.  Two sections are recognised: ``[global]`` for runtime concerns
(logging, worker pool) and ``[analysis]`` for the knobs that shape a
single file's examination.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ============================ Analysis Settings ============================


@dataclass(frozen=False, slots=True)
class AnalysisConfig:
    """Parameters applied to every file the engine examines.

    ``max_file_size`` bounds what :meth:`ExhibitEngine.analyze_path` will
    read into memory.  ``sniff_content`` enables routing by leading magic
    bytes when neither the declared MIME type nor the extension matches.
    ``max_package_part_size`` caps the decompressed size of a single OOXML
    part.  ``file_timeout`` of ``0`` disables the per-file deadline.
    """

    max_file_size: int = 268_435_456  # 256 MiB
    min_string_length: int = 4
    sniff_content: bool = False
    max_package_part_size: int = 10_485_760  # 10 MiB
    file_timeout: float = 0.0


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Runtime settings: logging verbosity, log sink and worker count."""

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    max_workers: int = 4
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class ExhibitConfig:
    """Master configuration aggregating global and analysis settings.

    Usage:
        >>> config = ExhibitConfig.load()                  # from default path
        >>> config = ExhibitConfig.load("custom.toml")     # from custom path
        >>> config.analysis.min_string_length
        4
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> ExhibitConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`ExhibitConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
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
            analysis=cls._build_section(AnalysisConfig, raw.get("analysis", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate dataclass *cls* from the keys it declares; others are ignored."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


# ========================= Module-level convenience ========================

def get_config(path: str | Path | None = None) -> ExhibitConfig:
    """Cached wrapper around :meth:`ExhibitConfig.load`.

    Passing an explicit *path* always reloads.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = ExhibitConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]
