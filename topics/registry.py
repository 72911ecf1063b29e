"""
Subscription registry data structures for the channel router.

The registry maps a channel key (literal path or compiled pattern) to the
subscriptions registered under it. A channel exists in the registry while it
has at least one subscription; the bucket is dropped as soon as it empties.

Buckets keep insertion order so listeners on the same channel are visited in
the order they subscribed.
"""

from typing import Iterator

from topics import channels
from topics import subscription


_BUCKET = dict[subscription.Subscription, None]


class SubscriptionRegistry(object):
    """
    Channel to subscription store owned by a single router.

    Multi channel registration is a series of add() calls, and unsubscribing is
    the same series of remove() calls.
    """

    def __init__(self) -> None:
        self._buckets: dict[channels.CHANNEL, _BUCKET] = {}

    def __contains__(self, channel: object) -> bool:
        return channel in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[channels.CHANNEL]:
        return iter(list(self._buckets))

    def add(
        self, channel: channels.CHANNEL, sub: subscription.Subscription
    ) -> bool:
        """
        Add a subscription under a channel.
        Returns True if the channel was added to the registry.
        """
        is_new_channel = channel not in self._buckets
        if is_new_channel:
            self._buckets[channel] = {}

        self._buckets[channel][sub] = None
        return is_new_channel

    def remove(
        self, channel: channels.CHANNEL, sub: subscription.Subscription
    ) -> bool:
        """
        Remove a subscription from a channel. Removing something that is not
        there is a no-op.
        Returns True if the channel became empty and was dropped.
        """
        bucket = self._buckets.get(channel)
        if bucket is None:
            return False

        bucket.pop(sub, None)
        if bucket:
            return False

        del self._buckets[channel]
        return True

    def entries_for(
        self, channel: channels.CHANNEL
    ) -> tuple[subscription.Subscription, ...]:
        """Snapshot of the subscriptions on a channel, empty if unknown."""
        return tuple(self._buckets.get(channel, ()))

    def items(
        self,
    ) -> list[tuple[channels.CHANNEL, tuple[subscription.Subscription, ...]]]:
        """Snapshot of every channel with its subscriptions."""
        return [(channel, tuple(bucket)) for channel, bucket in self._buckets.items()]

    def keys(self) -> list[channels.CHANNEL]:
        """All channels currently holding subscriptions."""
        return list(self._buckets)

    def clear(self) -> None:
        self._buckets.clear()
