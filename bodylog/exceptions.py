"""
Exception hierarchy for bodylog.

Only configuration loading raises to callers. Capture and redaction never
propagate errors into the request pipeline; see bodylog.capture for the
policy.
"""

from typing import Any


class BodyLogError(Exception):
    """
    Base exception for all bodylog errors.

    Example:
        try:
            config = load_config("etc/bodylog.yaml")
        except BodyLogError as e:
            logger.error(f"bodylog error: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(BodyLogError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Unknown configuration key
        - Invalid configuration value type
    """

    pass


class CaptureError(BodyLogError):
    """
    Raised internally when a stream cannot be drained.

    capture() and capture_receive() catch it and degrade to an empty
    result, so callers of the public API never see it.
    """

    pass
