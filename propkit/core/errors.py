from __future__ import annotations


class PropertyError(ValueError):
    """Raised by attachment constructors on malformed arguments."""
