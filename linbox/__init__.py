"""LIN bus slave node: frame reader, diagnostic transport protocol and Truma value enumerations."""

__version__ = "0.1.0"
__all__ = ["enums", "logmsg", "listener", "protocol"]