"""
CommandBus: In-memory pub/sub queue between the UI thread and the simulation loop.

Supports:
    - Topic-based messaging
    - Thread-safe publish / poll (one lock around the topic queues)
    - Delivery counters via BusMetrics
    - Logging of events

Intended usage:
    - The UI publishes input commands to 'ui.command'
    - The simulation loop polls 'ui.command' between steps
"""

import logging
import threading
import time
import uuid
from typing import Dict, List, Optional

from .message import BusMessage
from .metrics import BusMetrics

log = logging.getLogger("bus")

UI_COMMAND_TOPIC = "ui.command"


class CommandBus:
    """
    Transport layer for commands crossing the UI / simulation thread boundary.

    Attributes:
        metrics (BusMetrics): Counters for published, delivered and rejected messages.
        max_queue (int): Per-topic queue bound; the oldest message is dropped beyond it.
    """

    def __init__(self, max_queue: int = 1024):
        """
        Initialize a CommandBus instance.

        Args:
            max_queue (int): Maximum number of undelivered messages kept per topic.
        """
        self._topics: Dict[str, List[BusMessage]] = {}
        self._lock = threading.Lock()
        self.metrics = BusMetrics()
        self.max_queue = max_queue

    def publish(self, topic: str, sender: str, payload: dict) -> Optional[str]:
        """
        Publish a message to a specific topic.

        Args:
            topic (str): The topic name (e.g., 'ui.command').
            sender (str): ID of the sender (e.g., 'ui').
            payload (dict): Plain-data dictionary representing the message contents.

        Returns:
            Optional[str]: The unique message ID, or None if the payload is not a dict.
        """
        if not isinstance(payload, dict):
            log.warning("publish rejected topic=%s sender=%s: payload is %s",
                        topic, sender, type(payload).__name__)
            return None

        msg = BusMessage(
            id=str(uuid.uuid4()),
            topic=topic,
            sender=sender,
            payload=dict(payload),
            ts=time.time(),
        )
        with self._lock:
            queue = self._topics.setdefault(topic, [])
            queue.append(msg)
            if len(queue) > self.max_queue:
                dropped = queue.pop(0)
                log.warning("queue full topic=%s; dropped id=%s", topic, dropped.id)
            self.metrics.published += 1

        log.debug("publish topic=%s sender=%s id=%s", topic, sender, msg.id)
        return msg.id

    def poll(self, topic: str) -> List[BusMessage]:
        """
        Retrieve and clear all messages from a given topic, oldest first.

        Args:
            topic (str): The topic name to poll messages from.

        Returns:
            List[BusMessage]: Messages published to the topic since the last poll.
        """
        with self._lock:
            msgs = self._topics.get(topic, [])
            self._topics[topic] = []
            self.metrics.delivered += len(msgs)
        return msgs

    def reject(self, msg: BusMessage, reason: str):
        """
        Record that a delivered message could not be used.

        Args:
            msg (BusMessage): The offending message.
            reason (str): Human-readable cause, logged at WARNING.
        """
        with self._lock:
            self.metrics.rejected += 1
        log.warning("rejected topic=%s sender=%s id=%s: %s", msg.topic, msg.sender, msg.id, reason)

    def pending(self, topic: str) -> int:
        """
        Count undelivered messages on a topic.

        Args:
            topic (str): The topic name.

        Returns:
            int: Number of messages waiting for the next poll().
        """
        with self._lock:
            return len(self._topics.get(topic, []))
