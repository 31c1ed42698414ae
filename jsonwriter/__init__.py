"""Buffered JSON output stream, formatting helpers and value encoders."""

__version__ = "0.1.0"
__all__ = ["floats", "strings", "stream", "structs", "encoders"]