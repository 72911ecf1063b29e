"""
Subscription data structures and type definitions for the channel router.

Defines the Subscription dataclass which binds a listener callback to an
optional filter document and to the channels it was registered against. Also
defines the LISTENER type alias used throughout the router for type hints.

Subscriptions compare by identity. Subscribing the same callback twice creates
two subscriptions, each removed only by its own unsubscribe function.
"""

from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional

from topics import channels
from topics import event


LISTENER = Callable[[event.Event], Any]
"""
The callback end point that messages are forwarded to. Receives a single Event
carrying the message data and the channels it was sent to.

The return value is ignored. If you want data back, publish it on another
channel.
"""


def listener_key(callback: LISTENER) -> tuple:
    """
    Identity key for a listener. Bound methods of one object share a key even
    though each attribute access builds a new method object.
    """
    if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
        return (id(callback.__self__), id(callback.__func__))

    if hasattr(callback, "__self__") and hasattr(callback, "__name__"):
        return (id(callback.__self__), callback.__name__)

    return (id(callback),)


@dataclass(frozen=True, eq=False)
class Subscription(object):
    """A listener with its filter and the channels it listens on."""

    callback: LISTENER
    """The end point that messages are forwarded to. i.e. what gets ran."""

    filter: Optional[Mapping[str, Any]]
    """
    Query document tested against each message. None or an empty mapping lets
    every message through.
    """

    channels: tuple[channels.CHANNEL, ...]
    """Every normalized channel or pattern the subscription was added under."""

    @property
    def is_filtered(self) -> bool:
        """True if the subscription carries a non empty filter."""
        return bool(self.filter)

    @property
    def listener_key(self) -> tuple:
        """Identity key of the callback, see listener_key()."""
        return listener_key(self.callback)
