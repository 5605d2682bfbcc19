"""WebSocket host: wraps the draw-poker rules engine with networking."""

from .server import TableServer
from .transport import Transport

__all__ = ["TableServer", "Transport"]
