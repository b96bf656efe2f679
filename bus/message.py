"""
BusMessage: Data structure representing a message carried by the CommandBus.
"""

from dataclasses import dataclass, field


@dataclass
class BusMessage:
    """
    Represents a single message sent via the CommandBus.

    Attributes:
        id (str): Unique identifier for the message.
        topic (str): The topic of the message (e.g., 'ui.command').
        sender (str): ID of the sender (e.g., 'ui', 'test').
        payload (dict): Plain-data message contents.
        ts (float): Timestamp (in seconds) when the message was created.
    """
    id: str
    topic: str
    sender: str
    payload: dict = field(default_factory=dict)
    ts: float = 0.0
