"""Exceptions raised by the cleanup pipeline."""


class InvalidArgumentError(ValueError):
    """A cleanup parameter is out of range (raised before any processing)."""
