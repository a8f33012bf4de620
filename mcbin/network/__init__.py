"""Network module for mcbin."""

from .async_connection import AsyncConnection
from .connection import Connection

__all__ = ["AsyncConnection", "Connection"]
