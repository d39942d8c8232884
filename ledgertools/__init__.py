"""Command-line helpers for plain-text accounting journals: entry, questions and import."""

__version__ = "0.1.0"
__all__ = ["__version__"]