"""
bus — In-memory command messaging
=================================

Provides a lightweight, thread-safe pub/sub queue that carries input
commands from the UI thread to the simulation loop, which drains it
between steps.

Modules
-------
message
    :class:`BusMessage` dataclass.
command_bus
    :class:`CommandBus` publish / poll transport.
metrics
    :class:`BusMetrics` counter snapshot.
"""

from .message import BusMessage
from .command_bus import UI_COMMAND_TOPIC, CommandBus
from .metrics import BusMetrics

__all__ = [
    "BusMessage",
    "CommandBus",
    "BusMetrics",
    "UI_COMMAND_TOPIC",
]
