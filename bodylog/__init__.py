from importlib.metadata import PackageNotFoundError, version

from .capture import (
    CaptureResult,
    ReadableCloseable,
    ReceiveCaptureResult,
    capture,
    capture_receive,
)
from .config import BodyLogConfig, load_config
from .content import extract_params, should_log_body, truncate
from .exceptions import BodyLogError, CaptureError, ConfigError
from .middleware import BodyLoggingMiddleware, install_body_logging
from .redact import (
    DEFAULT_SENSITIVE_FIELDS,
    MASK,
    RedactingFilter,
    RedactionScanner,
    get_scanner,
    redact,
    reset_scanner,
)
from .size import InvalidSizeError, size_str, size_to_bytes

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("bodylog")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

# Explicit public API
__all__ = [
    # Version
    "__version__",
    # Capture
    "CaptureResult",
    "ReadableCloseable",
    "ReceiveCaptureResult",
    "capture",
    "capture_receive",
    # Redaction
    "DEFAULT_SENSITIVE_FIELDS",
    "MASK",
    "RedactingFilter",
    "RedactionScanner",
    "get_scanner",
    "redact",
    "reset_scanner",
    # Body selection
    "extract_params",
    "should_log_body",
    "truncate",
    # Middleware
    "BodyLoggingMiddleware",
    "install_body_logging",
    # Config
    "BodyLogConfig",
    "load_config",
    # Size utilities
    "size_str",
    "size_to_bytes",
    # Exceptions
    "BodyLogError",
    "CaptureError",
    "ConfigError",
    "InvalidSizeError",
]
