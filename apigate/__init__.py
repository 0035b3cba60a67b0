"""Building blocks for an HTTP API gateway."""

__version__ = "0.1.0"