"""
# Channel Router

Herein is the router itself: a PubSub instance owns a subscription registry
and resolves, for every published or broadcast message, which listeners are
interested in it.

Channels are slash delimited paths. Publishing to '/a/b/c' reaches listeners
on '/a/b/c', '/a/b', '/a' and '/', deepest first, plus any pattern listener
whose regular expression matches '/a/b/c'. Broadcasting to '/a' reaches
listeners on '/a' and every channel nested beneath it, but never pattern
listeners.

Each listener runs at most once per call, no matter how many of its channels
matched, and only if its filter accepts the message.

Routers share nothing, create as many as needed.
"""

import json
import logging
import os
import threading
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import Union

from topics import channels
from topics import errors
from topics import event
from topics import filters
from topics import handlers
from topics import registry
from topics import subscription


logger = logging.getLogger(__name__)


UNSUBSCRIBE = Callable[[], None]
"""Returned by subscribe(). Safe to call any number of times."""

CHANNEL_ARG = Union[channels.CHANNEL, list, tuple, set, frozenset]
"""A single channel or a collection of them."""


class PubSub(object):
    """
    Primary message router.
    Supports hierarchical channels through slash notation, and compiled
    regular expressions as channel patterns.

    Use publish() to deliver up the channel tree.
    Use broadcast() to deliver down the channel tree.

    To manage listeners use subscribe() and the function it returns, or
    decorate with @listen.
    """

    def __init__(
        self,
        matcher: filters.MATCHER = filters.matches,
        listener_exception_handler: Optional[
            handlers.LISTENER_EXCEPTION_HANDLER
        ] = None,
    ) -> None:
        """
        Args:
            matcher (MATCHER): Evaluates a subscription filter against a
                message. Defaults to mongo style queries.
            listener_exception_handler (Optional[LISTENER_EXCEPTION_HANDLER]):
                Called when a listener raises. None runs the remaining
                listeners then re-raises the first exception.
        """
        self._registry = registry.SubscriptionRegistry()
        self._lock = threading.RLock()
        self._matcher = matcher
        self._listener_exception_handler = listener_exception_handler

    def clear(self) -> None:
        """Remove every subscription from the router."""
        with self._lock:
            self._registry.clear()

    def set_listener_exception_handler(
        self, handler: Optional[handlers.LISTENER_EXCEPTION_HANDLER]
    ) -> None:
        """
        Set the exception handler for listener errors.
        The handler is called when a listener raises an exception during
        publish or broadcast.

        Args:
            Optional[handlers.LISTENER_EXCEPTION_HANDLER]:
                Callable with signature (LISTENER, tuple[str, ...], Exception)
                -> bool. Returns True to stop delivery, False to continue.
                Pass None to restore default behavior (deliver to everyone,
                then re-raise the first exception).
        """
        self._listener_exception_handler = handler

    # -----Subscriber Management-----------------------------------------------

    @staticmethod
    def _prepare_channels(
        channel: CHANNEL_ARG, allow_patterns: bool
    ) -> list[channels.CHANNEL]:
        """
        Normalize and validate a channel argument.

        Args:
            channel (CHANNEL_ARG): One channel or a collection of channels.
            allow_patterns (bool): Whether pattern matchers are accepted.
        Returns:
            list[CHANNEL]: The unique normalized channels, in given order.
        Raises:
            InvalidChannelKind: If any channel is malformed, or is a pattern when
                patterns are not allowed.
        """
        targets = [channels.normalize(c) for c in channels.as_channel_list(channel)]

        if not channels.is_well_formed(targets, allow_patterns):
            rejected = [
                c for c in targets if not channels.is_well_formed([c], allow_patterns)
            ]
            expected = (
                "channel strings starting with '/' or compiled patterns"
                if allow_patterns
                else "channel strings starting with '/'"
            )
            raise errors.InvalidChannelKind(
                f"Expected {expected}, but got: {rejected!r}"
            )

        return list(dict.fromkeys(targets))

    def subscribe(
        self,
        channel: CHANNEL_ARG,
        callback: subscription.LISTENER,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> UNSUBSCRIBE:
        """
        Register a callback on one or more channels.

        Args:
            channel (CHANNEL_ARG): Channel(s) to listen on, e.g. '/system/io'
                or re.compile(r'/io/(?:read|write)$'). Patterns receive
                published messages but never broadcast ones.
            callback (LISTENER): Function called with an Event for each
                delivered message.
            filter (Optional[Mapping[str, Any]]): Query document messages must
                satisfy, e.g. {'priority': {'$gt': 2}}.
        Returns:
            UNSUBSCRIBE: Removes the subscription from every channel it was
                added to.
        Raises:
            InvalidCallback: If callback is not callable.
            InvalidFilter: If filter is given and is not a mapping.
            InvalidChannelKind: If any channel is malformed.
        """
        if not callable(callback):
            raise errors.InvalidCallback(
                f"Listener must be callable, but got: {callback!r}"
            )

        if filter is not None and not filters.is_filter_document(filter):
            raise errors.InvalidFilter(
                f"Filter must be a mapping, but got: {filter!r}"
            )

        targets = self._prepare_channels(channel, allow_patterns=True)
        sub = subscription.Subscription(
            callback=callback, filter=filter, channels=tuple(targets)
        )

        with self._lock:
            for target in sub.channels:
                self._registry.add(target, sub)

        logger.debug(
            f"Subscribed {handlers.get_callable_name(callback)} to "
            f"{[channels.describe(c) for c in sub.channels]}"
        )

        def unsubscribe() -> None:
            with self._lock:
                for target_ in sub.channels:
                    self._registry.remove(target_, sub)

        return unsubscribe

    def listen(
        self, channel: CHANNEL_ARG, filter: Optional[Mapping[str, Any]] = None
    ) -> Callable[[subscription.LISTENER], subscription.LISTENER]:
        """
        Decorator to register a function as a listener.

        The decorated function is returned unchanged, so there is no
        unsubscribe function. Use subscribe() if one is needed.

        Args:
            channel (CHANNEL_ARG): Channel(s) to listen on.
            filter (Optional[Mapping[str, Any]]): Query document messages must
                satisfy.
        """

        def decorator(func: subscription.LISTENER) -> subscription.LISTENER:
            self.subscribe(channel, func, filter=filter)
            return func

        return decorator

    # -----Dispatch Handling---------------------------------------------------

    def publish(self, channel: CHANNEL_ARG, message: Any) -> bool:
        """
        Publish a message on the given channel(s) and all of their ancestors.

        Listeners on deeper channels run before listeners on their ancestors.
        Pattern listeners are tested against the given channels only, and run
        before literal listeners.

        Args:
            channel (CHANNEL_ARG): Literal channel(s) to publish on.
            message (Any): The message, passed by reference to each listener.
        Returns:
            bool: True if at least one listener received the message.
        Raises:
            InvalidChannelKind: If any channel is malformed or a pattern.
        """
        targets = self._prepare_channels(channel, allow_patterns=False)
        closure = channels.ancestor_closure(targets)

        candidates: list[subscription.Subscription] = []
        with self._lock:
            for key, subs in self._registry.items():
                if channels.is_pattern(key) and channels.pattern_matches(key, targets):
                    candidates.extend(subs)

            for key in closure:
                candidates.extend(self._registry.entries_for(key))

        return self._dispatch(targets, candidates, message)

    def broadcast(self, channel: CHANNEL_ARG, message: Any) -> bool:
        """
        Broadcast a message on the given channel(s) and every channel nested
        beneath them. Pattern listeners never receive broadcasts.

        Listeners on shallower channels run before listeners on deeper ones.

        Args:
            channel (CHANNEL_ARG): Literal channel(s) to broadcast on.
            message (Any): The message, passed by reference to each listener.
        Returns:
            bool: True if at least one listener received the message.
        Raises:
            InvalidChannelKind: If any channel is malformed or a pattern.
        """
        targets = self._prepare_channels(channel, allow_patterns=False)

        with self._lock:
            matched = [
                (key, subs)
                for key, subs in self._registry.items()
                if not channels.is_pattern(key)
                and any(channels.is_descendant(key, target) for target in targets)
            ]

        matched.sort(key=lambda item: channels.depth(item[0]))
        candidates = [sub for _, subs in matched for sub in subs]

        return self._dispatch(targets, candidates, message)

    def _select_listeners(
        self, candidates: list[subscription.Subscription], message: Any
    ) -> list[subscription.LISTENER]:
        """
        Reduce matched subscriptions to the callbacks that should fire, keeping
        first seen order. A callback is kept once if any of its subscriptions
        accepts the message.
        """
        seen: set[tuple] = set()
        selected: list[subscription.LISTENER] = []
        for sub in candidates:
            key = sub.listener_key
            if key in seen:
                continue

            if filters.accepts(sub.filter, message, self._matcher):
                seen.add(key)
                selected.append(sub.callback)

        return selected

    def _dispatch(
        self,
        targets: list[channels.CHANNEL],
        candidates: list[subscription.Subscription],
        message: Any,
    ) -> bool:
        listeners = self._select_listeners(candidates, message)
        if not listeners:
            logger.debug(f"No listeners for message on {targets}")
            return False

        evt = event.Event(data=message, target=tuple(targets))
        logger.debug(f"Delivering message on {targets} to {len(listeners)} listener(s)")
        self._deliver(listeners, evt)

        return True

    def _deliver(
        self, listeners: list[subscription.LISTENER], evt: event.Event
    ) -> None:
        """
        Call each listener with the event.

        Raises:
            Exception: The first exception raised by a listener, once every
                listener has run, if no exception handler is set.
        """
        first_exception: Optional[Exception] = None

        for callback in listeners:
            try:
                callback(evt)
            except Exception as e:
                handler = self._listener_exception_handler
                if handler is None:
                    logger.debug(
                        f"Listener {handlers.get_callable_name(callback)} raised "
                        f"{e.__class__.__name__}, delivery continues"
                    )
                    if first_exception is None:
                        first_exception = e
                    continue

                stop = handler(callback, evt.target, e)
                if stop:
                    break

        if first_exception is not None:
            raise first_exception

    # -----Introspection API---------------------------------------------------

    def get_channels(self) -> list[str]:
        """Get all channels holding subscriptions, patterns shown as 're:...'."""
        with self._lock:
            return sorted(channels.describe(key) for key in self._registry.keys())

    def channel_exists(self, channel: channels.CHANNEL) -> bool:
        """Check if a channel currently holds any subscription."""
        with self._lock:
            return channels.normalize(channel) in self._registry

    def get_subscriber_count(self, channel: channels.CHANNEL) -> int:
        """
        Get the number of subscriptions on a channel.

        Args:
            channel (CHANNEL): Channel or pattern to count subscriptions for.
        Returns:
            int: Number of subscriptions registered directly on the channel.
        """
        with self._lock:
            return len(self._registry.entries_for(channels.normalize(channel)))

    def is_subscribed(
        self, callback: subscription.LISTENER, channel: channels.CHANNEL
    ) -> bool:
        """
        Check if a specific callback is subscribed directly to a channel.

        Args:
            callback (LISTENER): The callback function to check.
            channel (CHANNEL): The channel or pattern to check.
        Returns:
            bool: True if callback is subscribed to the channel, False otherwise.
        """
        with self._lock:
            subs = self._registry.entries_for(channels.normalize(channel))

        key = subscription.listener_key(callback)
        return any(sub.listener_key == key for sub in subs)

    def get_subscriptions(self, callback: subscription.LISTENER) -> list[str]:
        """
        Get all channels that a callback is subscribed to.

        Args:
            callback (LISTENER): The callback to find subscriptions for.
        Returns:
            list[str]: Sorted channels the callback is subscribed to.
        Example:
            >>> router = PubSub()
            >>> def on_file(evt): pass
            >>> router.subscribe(['/io/read', '/io/write'], on_file)
            >>> router.get_subscriptions(on_file)
            ['/io/read', '/io/write']
        """
        with self._lock:
            items = self._registry.items()

        wanted = subscription.listener_key(callback)
        return sorted(
            channels.describe(key)
            for key, subs in items
            if any(sub.listener_key == wanted for sub in subs)
        )

    def get_statistics(self) -> dict[str, object]:
        """
        Get overall router statistics.

        Returns:
            dict[str, object]: Dictionary with router-wide statistics.
        Example:
            {
                "total_channels": 4,
                "literal_channels": 3,
                "pattern_channels": 1,
                "total_subscriptions": 5,
                "filtered_subscriptions": 2,
                "total_listeners": 4,
                "average_subscriptions_per_channel": 1.5,
            }
        """
        with self._lock:
            items = self._registry.items()

        unique_subs = {sub for _, subs in items for sub in subs}
        pattern_count = sum(1 for key, _ in items if channels.is_pattern(key))
        channel_count = len(items)
        entries = sum(len(subs) for _, subs in items)

        return {
            "total_channels": channel_count,
            "literal_channels": channel_count - pattern_count,
            "pattern_channels": pattern_count,
            "total_subscriptions": len(unique_subs),
            "filtered_subscriptions": sum(1 for sub in unique_subs if sub.is_filtered),
            "total_listeners": len({sub.listener_key for sub in unique_subs}),
            "average_subscriptions_per_channel": (
                entries / channel_count if channel_count > 0 else 0
            ),
        }

    def to_dict(self) -> dict:
        """Convert the router structure to a dictionary."""
        with self._lock:
            items = self._registry.items()

        data = {}
        for key, subs in items:
            listeners_info = []
            for sub in subs:
                info = handlers.get_callable_name(sub.callback)
                filter_str = (
                    f" [filter={json.dumps(sub.filter, sort_keys=True, default=str)}]"
                    if sub.is_filtered
                    else ""
                )
                listeners_info.append(f"{info}{filter_str}")

            data[channels.describe(key)] = {"listeners": listeners_info}

        return {channel: data[channel] for channel in sorted(data)}

    def to_string(self) -> str:
        """Returns a string representation of the router."""
        return json.dumps(self.to_dict(), indent=4)

    def export(self, filepath: Union[str, os.PathLike]) -> None:
        """Export router structure to filepath."""
        with open(filepath, "w") as outfile:
            json.dump(self.to_dict(), outfile, indent=4)
