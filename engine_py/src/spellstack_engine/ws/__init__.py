"""
WebSocket server and event handling for SpellStack rooms.
"""

from .events import parse_inbound_event
from .server import app

__all__ = ["app", "parse_inbound_event"]
