"""SDK error types."""

from __future__ import annotations


class GatewayConfigError(Exception):
    """Raised when a gateway YAML fails parsing, validation, or wiring."""
