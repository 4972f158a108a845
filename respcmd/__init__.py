"""Typed Redis command objects that build arguments and decode parsed RESP replies."""

__version__ = "0.1.0"

__all__ = [
    "reply",
    "command",
    "scalar",
    "streams",
    "zset",
    "geo",
    "cluster",
    "functions",
    "server",
]