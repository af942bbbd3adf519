"""Configuration loading for the hkctl client."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore

from .errors import ConfigError


CONFIG_ENV_PREFIX = "HKCTL_"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 55123
OUTPUT_FORMATS = ("table", "json", "yaml")
LOG_FORMATS = ("plain", "json")

# Keys a config file or the environment may set. The port is CLI-only.
_FILE_KEYS = {"host", "output", "log_format"}


def _default_config_path() -> Path:
    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "hkctl" / "config.toml"


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the service client."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    output: str = "table"
    log_format: str = "plain"
    verbosity: int = 0

    def __post_init__(self) -> None:
        _validate_config(self)

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_sources(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """Load configuration from defaults, file, env, and CLI (in that order)."""

        environ = os.environ if environ is None else environ
        path = config_path
        if path is None and environ.get(f"{CONFIG_ENV_PREFIX}CONFIG"):
            path = Path(environ[f"{CONFIG_ENV_PREFIX}CONFIG"]).expanduser()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
        if path is None:
            path = _default_config_path()

        config = cls()
        config = _apply_mapping(config, _load_file_config(path))
        config = _apply_mapping(config, _load_env_config(environ, CONFIG_ENV_PREFIX))
        config = _apply_mapping(config, overrides or {}, from_cli=True)
        return config


def _validate_config(config: ClientConfig) -> None:
    if not config.host:
        raise ConfigError("host must not be empty.")
    if config.port < 1 or config.port > 65535:
        raise ConfigError(f"port must be between 1 and 65535; got {config.port}.")
    if config.output not in OUTPUT_FORMATS:
        raise ConfigError(f"output must be one of {list(OUTPUT_FORMATS)}; got {config.output}.")
    if config.log_format not in LOG_FORMATS:
        raise ConfigError(f"log_format must be one of {list(LOG_FORMATS)}; got {config.log_format}.")
    if config.verbosity < 0:
        raise ConfigError("verbosity must not be negative.")


def _load_file_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            parsed = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc
    section = parsed.get("client", parsed)
    if not isinstance(section, Mapping):
        raise ConfigError("The [client] section must be a TOML table.")
    mapping = {k.replace("-", "_"): v for k, v in section.items()}
    unknown = set(mapping) - _FILE_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {path}: {sorted(unknown)}")
    return mapping


def _load_env_config(environ: Mapping[str, str], prefix: str) -> Dict[str, Any]:
    mapping: Dict[str, Any] = {}
    for field in _FILE_KEYS:
        env_key = f"{prefix}{field}".upper()
        if env_key in environ:
            mapping[field] = environ[env_key]
    return mapping


def _apply_mapping(
    config: ClientConfig, overrides: Mapping[str, Any], from_cli: bool = False
) -> ClientConfig:
    data: MutableMapping[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in {"port", "verbosity"} and from_cli:
            data[key] = int(value)
        elif key in {"output", "log_format"}:
            data[key] = str(value).strip().lower()
        elif key == "host":
            data[key] = str(value).strip()
        else:
            raise ConfigError(f"Unsupported configuration key: {key}")
    return replace(config, **data)
