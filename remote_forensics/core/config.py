"""Acquisition configuration helpers.

Configuration is sourced from (in order of precedence):

1. Explicit overrides provided to :func:`get_config` (the CLI options).
2. Environment variables prefixed with ``REMOTE_FORENSICS_``.
3. ``framework.yaml`` located in the config directory or
   ``$REMOTE_FORENSICS_CONFIG_DIR``.
4. Built-in defaults.

Missing configuration files simply result in the defaults being used.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigurationError

ENV_PREFIX = "REMOTE_FORENSICS_"
CONFIG_DIR_ENV = f"{ENV_PREFIX}CONFIG_DIR"

DEFAULT_TOOLS: dict[str, str] = {
    "psexec": "PsExec64.exe",
    "wmic": "wmic",
    "powershell": "powershell.exe",
    "sharprdp": "SharpRDP.exe",
    "plink": "plink.exe",
    "pscp": "pscp.exe",
    "xcopy": "xcopy",
    "net": "net",
}

DEFAULT_CONFIG: dict[str, Any] = {
    "log_level": "INFO",
    "store_directory": "evidence",
    "wait_time": 15,
    "wmi_output_wait": 10,
    "remote_temp_directory": "C:\\Users\\Public",
    "memory_tool": "winpmem_mini_x64_rc2.exe",
    "catalog_path": None,
    "nla": False,
    "tools": dict(DEFAULT_TOOLS),
}

_KNOWN_KEYS = set(DEFAULT_CONFIG)


def load_yaml(path: Path) -> dict[str, Any]:
    """Safely load YAML configuration from ``path``.

    The function returns an empty dictionary when the file does not exist
    or is empty. Parsing errors are surfaced to aid debugging.
    """

    if not path or not path.exists():
        return {}

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, Mapping):
        raise TypeError(f"Config file must contain a mapping: {path}")

    return dict(data)


def merge_dicts(*dicts: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge mappings with later dictionaries taking precedence."""

    merged: dict[str, Any] = {}

    for current in dicts:
        for key, value in current.items():
            if (
                key in merged
                and isinstance(merged[key], MutableMapping)
                and isinstance(value, Mapping)
            ):
                merged[key] = merge_dicts(merged[key], value)  # type: ignore[arg-type]
            else:
                merged[key] = value

    return merged


def _load_env_config(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Load configuration overrides from environment variables."""

    env_config: dict[str, Any] = {}
    prefix_len = len(prefix)

    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == CONFIG_DIR_ENV:
            continue
        config_key = key[prefix_len:].lower()
        env_config[config_key] = _coerce_env_value(value)

    return env_config


def _coerce_env_value(value: str) -> Any:
    """Attempt to cast environment variable values to richer types."""

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"

    if lowered.isdigit():
        return int(lowered)

    return value


@dataclass(frozen=True)
class AcquisitionConfig:
    """Strongly typed configuration representation."""

    log_level: str = DEFAULT_CONFIG["log_level"]
    store_directory: Path = Path(DEFAULT_CONFIG["store_directory"])
    wait_time: int = DEFAULT_CONFIG["wait_time"]
    wmi_output_wait: float = DEFAULT_CONFIG["wmi_output_wait"]
    remote_temp_directory: str = DEFAULT_CONFIG["remote_temp_directory"]
    memory_tool: str = DEFAULT_CONFIG["memory_tool"]
    catalog_path: Optional[Path] = None
    nla: bool = DEFAULT_CONFIG["nla"]
    tools: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TOOLS))
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def memory_timeout(self) -> float:
        """Memory imaging timeout in seconds derived from ``wait_time`` minutes."""

        return float(self.wait_time) * 60

    def tool(self, name: str) -> str:
        return str(self.tools.get(name) or DEFAULT_TOOLS[name])

    def as_dict(self) -> dict[str, Any]:
        data = {
            "log_level": self.log_level,
            "store_directory": str(self.store_directory),
            "wait_time": self.wait_time,
            "wmi_output_wait": self.wmi_output_wait,
            "remote_temp_directory": self.remote_temp_directory,
            "memory_tool": self.memory_tool,
            "catalog_path": str(self.catalog_path) if self.catalog_path else None,
            "nla": self.nla,
            "tools": dict(self.tools),
        }
        data.update(self.extra)
        return data


def get_config(
    config_root: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> AcquisitionConfig:
    """Load acquisition configuration.

    Args:
        config_root: Optional YAML file, or directory containing
            ``framework.yaml``.
        overrides: Explicit overrides that take highest precedence. ``None``
            values are ignored so unset CLI options do not mask lower layers.

    Returns:
        An :class:`AcquisitionConfig` instance.
    """

    config_root = _resolve_config_root(config_root)

    yaml_config: dict[str, Any] = {}
    config_file = config_root if config_root and config_root.is_file() else None
    if config_root and config_file is None:
        config_file = config_root / "framework.yaml"
    if config_file is not None:
        try:
            yaml_config = load_yaml(config_file)
        except (TypeError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Invalid configuration file {config_file}: {exc}") from exc

    env_config = _load_env_config()
    explicit_overrides = {
        key: value for key, value in dict(overrides or {}).items() if value is not None
    }

    merged = merge_dicts(DEFAULT_CONFIG, yaml_config, env_config, explicit_overrides)
    extra = {k: v for k, v in merged.items() if k not in _KNOWN_KEYS}

    catalog_path = merged.get("catalog_path")
    tools = merged.get("tools") or {}
    if not isinstance(tools, Mapping):
        raise ConfigurationError("'tools' configuration must be a mapping")

    try:
        wait_time = int(merged["wait_time"])
        wmi_output_wait = float(merged["wmi_output_wait"])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timing configuration: {exc}") from exc
    if wait_time <= 0:
        raise ConfigurationError("'wait_time' must be a positive number of minutes")

    return AcquisitionConfig(
        log_level=str(merged["log_level"]),
        store_directory=Path(str(merged["store_directory"])).expanduser(),
        wait_time=wait_time,
        wmi_output_wait=wmi_output_wait,
        remote_temp_directory=str(merged["remote_temp_directory"]),
        memory_tool=str(merged["memory_tool"]),
        catalog_path=Path(str(catalog_path)).expanduser() if catalog_path else None,
        nla=bool(merged["nla"]),
        tools={str(k): str(v) for k, v in tools.items()},
        extra=extra,
    )


def _resolve_config_root(config_root: Optional[Path]) -> Optional[Path]:
    """Determine the configuration directory to use."""

    if config_root and config_root.exists():
        return config_root

    env_root = os.environ.get(CONFIG_DIR_ENV)
    if env_root:
        candidate = Path(env_root).expanduser()
        if candidate.exists():
            return candidate

    return None


__all__ = [
    "AcquisitionConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_TOOLS",
    "ENV_PREFIX",
    "get_config",
    "load_yaml",
    "merge_dicts",
]
