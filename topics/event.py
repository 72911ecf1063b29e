"""
The Event handed to listeners.

One Event is built per publish/broadcast call and the same instance is passed
to every listener fired by that call.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Event(object):
    """Read only view of a delivered message."""

    data: Any
    """The message being published/broadcast, passed by reference."""

    target: tuple[str, ...]
    """
    The normalized channels the call was made against. For publish this is not
    the expanded list of ancestor channels.
    """
