"""Office-scoped access control and session lifecycle core."""

__version__ = "0.1.0"
