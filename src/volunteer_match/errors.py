from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when caller-supplied matching input is malformed."""


class InvalidCoordinate(InvalidArgument):
    """Raised for a latitude/longitude outside the valid range."""
