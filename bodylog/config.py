"""
Configuration for body logging.

Settings can be built in code, from a dict, or from a YAML file with
environment variable overrides.

YAML Example:
    bodylog:
      sensitive_fields: [password, token, pin]
      log_response_body: true
      max_body_size: 16KB
      skip_paths: [/health]

Environment Variable Override Format:
    BODYLOG_<KEY>=value

Examples:
    BODYLOG_LOG_RESPONSE_BODY=true
    BODYLOG_MAX_BODY_SIZE=32KB
    BODYLOG_SKIP_PATHS=/health,/metrics
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigError
from .redact import DEFAULT_SENSITIVE_FIELDS, RedactionScanner, normalize_fields
from .size import size_to_bytes

# Maximum config file size (1MB)
MAX_CONFIG_SIZE_BYTES = 1024 * 1024

DEFAULT_ENV_PREFIX = "BODYLOG_"

DEFAULT_SKIP_CONTENT_TYPES: tuple[str, ...] = (
    "multipart/form-data",
    "application/octet-stream",
    "image/",
    "video/",
    "audio/",
    "application/pdf",
    "application/zip",
    "application/gzip",
)

_TUPLE_FIELDS = ("sensitive_fields", "skip_content_types", "skip_paths")
_BOOL_FIELDS = ("log_request_body", "log_response_body")
_INT_FIELDS = ("binary_min_length",)
_STR_FIELDS = ("request_id_header", "logger_name")


@dataclass(frozen=True)
class BodyLogConfig:
    """
    Body logging configuration.

    Attributes:
        sensitive_fields: Field names whose string values are masked
        log_request_body: Include the request body in the log line
        log_response_body: Include the response body in the log line
        max_body_size: Bytes of body text kept in a log line (default: 64KB)
        skip_content_types: Content-Type substrings whose bodies are not logged
        binary_ratio: Non-ASCII share above which a body counts as binary
        binary_min_length: Bodies up to this many bytes skip the binary check
        request_id_header: Header carrying the request id
        skip_paths: Request paths passed through without logging
        logger_name: Logger receiving the request records
    """

    sensitive_fields: tuple[str, ...] = DEFAULT_SENSITIVE_FIELDS
    log_request_body: bool = True
    log_response_body: bool = False
    max_body_size: int = 64 * 1024
    skip_content_types: tuple[str, ...] = DEFAULT_SKIP_CONTENT_TYPES
    binary_ratio: float = 0.2
    binary_min_length: int = 100
    request_id_header: str = "X-Request-ID"
    skip_paths: tuple[str, ...] = ()
    logger_name: str = "bodylog.http"

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "sensitive_fields", normalize_fields(self.sensitive_fields)
        )
        object.__setattr__(
            self,
            "skip_content_types",
            tuple(t.lower() for t in self.skip_content_types),
        )
        object.__setattr__(self, "skip_paths", tuple(self.skip_paths))
        object.__setattr__(self, "max_body_size", size_to_bytes(self.max_body_size))

        if not 0.0 <= self.binary_ratio <= 1.0:
            raise ConfigError(
                "binary_ratio must be between 0 and 1", binary_ratio=self.binary_ratio
            )
        if self.binary_min_length < 0:
            raise ConfigError(
                "binary_min_length cannot be negative",
                binary_min_length=self.binary_min_length,
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> BodyLogConfig:
        """
        Build a config from a plain mapping.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(
                "Configuration must be a mapping", type=type(data).__name__
            )

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError("Unknown configuration keys", keys=",".join(unknown))

        return cls(**{key: _convert_value(key, value) for key, value in data.items()})

    def scanner(self) -> RedactionScanner:
        """Build a redaction scanner for the configured field set."""
        return RedactionScanner(self.sensitive_fields)


def _convert_value(key: str, value: Any) -> Any:
    """Validate and coerce a single configuration value."""
    if key in _TUPLE_FIELDS:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(v, str) for v in value
        ):
            raise ConfigError(f"'{key}' must be a list of strings", value=value)
        return tuple(value)

    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be a boolean", value=value)
        return value

    if key in _INT_FIELDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"'{key}' must be an integer", value=value)
        return value

    if key in _STR_FIELDS:
        if not isinstance(value, str) or not value:
            raise ConfigError(f"'{key}' must be a non-empty string", value=value)
        return value

    if key == "binary_ratio":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError("'binary_ratio' must be a number", value=value)
        return float(value)

    # max_body_size: int or size string, validated by size_to_bytes
    return value


def _convert_env_value(value: str) -> bool | int | float | str | list[Any] | None:
    """
    Convert environment variable string to appropriate type.

    Args:
        value: Environment variable value as string

    Returns:
        Converted value with appropriate type
    """
    if value.lower() in ("null", "none", ""):
        return None

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    if "," in value:
        return [_convert_env_value(v.strip()) for v in value.split(",")]

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


def _split_env_list(value: str) -> list[str] | None:
    """Split a comma-separated list value, keeping every item as a string."""
    if value.strip().lower() in ("null", "none", ""):
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def collect_env_overrides(prefix: str = DEFAULT_ENV_PREFIX) -> dict[str, Any]:
    """
    Collect configuration overrides from environment variables.

    ``BODYLOG_LOG_RESPONSE_BODY=true`` becomes ``{"log_response_body": True}``.
    List-valued keys always yield lists of strings, even for a single or
    numeric-looking item, and string-valued keys are taken verbatim.
    """
    overrides: dict[str, Any] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(prefix):
            continue
        key = env_key[len(prefix) :].lower()
        if key in _TUPLE_FIELDS:
            overrides[key] = _split_env_list(env_value)
        elif key in _STR_FIELDS:
            overrides[key] = env_value
        else:
            overrides[key] = _convert_env_value(env_value)
    return overrides


def _check_file_size(path: Path) -> None:
    """Check file size limit before reading."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            "Configuration file too large",
            path=str(path),
            size=file_size,
            limit=MAX_CONFIG_SIZE_BYTES,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError("Invalid YAML in configuration file", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must contain a mapping", path=str(path))

    # Settings may live at the top level or under a "bodylog" section
    section = data.get("bodylog", data)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError("'bodylog' section must be a mapping", path=str(path))
    return dict(section)


def load_config(
    path: str | Path | None = None,
    *,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    enable_env_overrides: bool = True,
) -> BodyLogConfig:
    """
    Load configuration from a YAML file and the environment.

    Args:
        path: YAML file path; None uses defaults plus environment overrides
        env_prefix: Prefix for environment variables (default: 'BODYLOG_')
        enable_env_overrides: Whether to apply environment variable overrides

    Returns:
        Validated BodyLogConfig

    Raises:
        ConfigError: If the file is missing, too large, malformed, or invalid
    """
    data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError("Configuration file not found", path=str(config_path))
        _check_file_size(config_path)
        data = _read_yaml(config_path)

    if enable_env_overrides:
        data.update(collect_env_overrides(env_prefix))

    return BodyLogConfig.from_dict(data)


__all__ = [
    "BodyLogConfig",
    "DEFAULT_SKIP_CONTENT_TYPES",
    "collect_env_overrides",
    "load_config",
]
