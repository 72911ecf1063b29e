"""
Exceptions raised by the channel router.

Every misuse is rejected at the call boundary before the registry is touched
or a listener runs, so a rejected subscribe/publish/broadcast call leaves no
partial state behind.

The concrete errors also subclass TypeError, since each of them signals a value
of the wrong kind being handed to the router.
"""


class TopicsError(Exception):
    """Base class for all router errors."""


class InvalidChannelKind(TopicsError, TypeError):
    """
    Raised when a channel is not a literal path starting with '/', or when a
    pattern matcher is given where only literal channels are accepted.
    """


class InvalidCallback(TopicsError, TypeError):
    """Raised when a listener callback is not callable."""


class InvalidFilter(TopicsError, TypeError):
    """Raised when a subscription filter is not a mapping document."""
