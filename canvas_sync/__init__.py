"""Shared canvas rooms with a global operation log, synchronized over WebSocket."""

__version__ = "0.1.0"
