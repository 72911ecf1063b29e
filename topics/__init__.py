"""
# Topics

In-process publish/subscribe router over hierarchical, slash delimited
channels.

    >>> import topics
    >>> router = topics.PubSub()
    >>> unsubscribe = router.subscribe('/system/io', lambda evt: print(evt.data))
    >>> router.publish('/system/io/file', 'opened')
    opened
    True
    >>> router.broadcast('/system', 'shutting down')
    shutting down
    True
    >>> unsubscribe()

Every router instance is independent; there is no module level router.
"""

from topics import channels
from topics import handlers
from topics.errors import InvalidCallback
from topics.errors import InvalidChannelKind
from topics.errors import InvalidFilter
from topics.errors import TopicsError
from topics.event import Event
from topics.pubsub import PubSub
from topics.subscription import Subscription


version_major = 1
version_minor = 0
version_patch = 0
__version__ = f"{version_major}.{version_minor}.{version_patch}"

__all__ = [
    "Event",
    "InvalidCallback",
    "InvalidChannelKind",
    "InvalidFilter",
    "PubSub",
    "Subscription",
    "TopicsError",
    "channels",
    "handlers",
]
