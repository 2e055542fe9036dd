"""Desktop client for entering and maintaining sales orders."""

__version__ = "1.0.0"
