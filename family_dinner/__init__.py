"""Family dinner planning: local persistence and view-state binding."""

__version__ = "0.1.0"
