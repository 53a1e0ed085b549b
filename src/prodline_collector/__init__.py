"""Production line data collector."""

__version__ = "0.1.0"
