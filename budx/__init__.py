"""Ordered maps, simple sets and a HOCON-style configuration loader."""

__version__ = "0.1.0"
__all__ = ["config", "escapes", "linkedmap", "scanner", "sets"]