"""Public observability primitives: structured logging setup and redaction."""

from xdnmb_wire.observability.logging import (
    default_log_redactor,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "default_log_redactor",
    "setup_logging",
    "shutdown_logging",
]
