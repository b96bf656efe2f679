"""
BusMetrics: Tracks simple statistics for CommandBus message flow.
"""


class BusMetrics:
    """
    Tracks counters for published, delivered and rejected messages.

    Attributes:
        published (int): Messages accepted by publish().
        delivered (int): Messages handed out by poll().
        rejected (int): Delivered messages the consumer could not parse.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.published = 0
        self.delivered = 0
        self.rejected = 0

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Dictionary containing 'published', 'delivered' and 'rejected' counters.
        """
        return {
            "published": self.published,
            "delivered": self.delivered,
            "rejected": self.rejected,
        }
