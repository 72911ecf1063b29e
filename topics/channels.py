"""
Channel parsing and channel tree traversal.

A channel is either a literal path ('/system/io/file') or a compiled regular
expression pattern. Literal paths are normalized so that a channel is always
stored and compared in one canonical form: it starts with '/', and empty
segments created by doubled or trailing separators are removed.

Publishing walks up the tree (a channel and all of its ancestors), while
broadcasting walks down it (a channel and everything nested beneath it).
Patterns only take part in publishing and are tested against the channels the
caller supplied, never against the expanded ancestors.
"""

import re
from typing import Any
from typing import Iterable
from typing import Iterator
from typing import Union


SEPARATOR = "/"
ROOT = "/"

CHANNEL = Union[str, re.Pattern[str]]
"""A literal channel path or a compiled pattern matcher."""

_COLLECTION_TYPES = (list, tuple, set, frozenset)


def is_pattern(channel: Any) -> bool:
    """Returns True if the channel is a compiled str pattern matcher."""
    return isinstance(channel, re.Pattern) and isinstance(channel.pattern, str)


def is_literal(channel: Any) -> bool:
    """Returns True if the channel is a string beginning with the separator."""
    return isinstance(channel, str) and channel.startswith(SEPARATOR)


def normalize(channel: Any) -> Any:
    """
    Normalize a literal channel.

    Empty and whitespace only segments are dropped and a leading separator is
    guaranteed, so '//a//b/' becomes '/a/b' and '/' stays '/'.
    Anything that is not a literal (patterns, malformed values) is returned
    untouched so that validation can judge it.

    Args:
        channel (Any): The channel to normalize.
    Returns:
        Any: The normalized channel, or the original value if not a literal.
    """
    if not is_literal(channel):
        return channel

    parts = [part for part in channel.split(SEPARATOR) if part.strip()]
    return SEPARATOR + SEPARATOR.join(parts)


def as_channel_list(value: Any) -> list[Any]:
    """
    Coerce a channel argument into a list of channels.

    Lists, tuples and sets are expanded, everything else becomes a single item
    list. No validation happens here.
    """
    if isinstance(value, _COLLECTION_TYPES):
        return list(value)

    return [value]


def is_well_formed(channels: Iterable[Any], allow_patterns: bool = True) -> bool:
    """
    Check that every channel is a literal, or a pattern when allowed.

    Args:
        channels (Iterable[Any]): The channels to check.
        allow_patterns (bool): Whether pattern matchers are acceptable.
    Returns:
        bool: True if all channels passed.
    """
    for channel in channels:
        if is_literal(channel):
            continue

        if allow_patterns and is_pattern(channel):
            continue

        return False

    return True


def describe(channel: CHANNEL) -> str:
    """Returns a printable form of a channel, patterns prefixed with 're:'."""
    if is_pattern(channel):
        return f"re:{channel.pattern}"

    return channel


def depth(channel: str) -> int:
    """Number of segments in a normalized literal channel. The root is 0."""
    if channel == ROOT:
        return 0

    return channel.count(SEPARATOR)


def _lop(channel: str) -> str:
    """Remove the last segment of a channel."""
    return channel.rsplit(SEPARATOR, 1)[0]


def ancestors(channel: str) -> Iterator[str]:
    """
    Lazily yield a normalized literal channel followed by each of its
    ancestors, most specific first, ending with the root.

    Example:
        >>> list(ancestors('/a/b/c'))
        ['/a/b/c', '/a/b', '/a', '/']
    """
    current = channel
    last = current

    while current:
        last = current
        yield current
        current = _lop(current)

    if last != ROOT:
        yield ROOT


def ancestor_closure(channels: Iterable[str]) -> list[str]:
    """
    Get the unique union of the ancestor chains of several channels.

    The chains are walked side by side and each channel is kept once, then
    ordered deepest first so a parent never comes before one of its children.

    Args:
        channels (Iterable[str]): Normalized literal channels.
    Returns:
        list[str]: Every channel and ancestor, most specific first.
    """
    walkers = [ancestors(channel) for channel in channels]
    seen: dict[str, None] = {}

    while walkers:
        remaining = []
        for walker in walkers:
            channel = next(walker, None)
            if channel is None:
                continue

            seen.setdefault(channel, None)
            remaining.append(walker)

        walkers = remaining

    return sorted(seen, key=depth, reverse=True)


def is_descendant(channel: str, target: str) -> bool:
    """
    Check whether a channel is the target or is nested beneath it.

    '/a/b' is a descendant of '/a' and '/', but not of '/ab' or '/a/b/c'.
    """
    if channel == target or target == ROOT:
        return True

    return channel.startswith(target + SEPARATOR)


def pattern_matches(pattern: re.Pattern[str], channels: Iterable[str]) -> bool:
    """Returns True if the pattern can be found in any of the channels."""
    return any(pattern.search(channel) for channel in channels)
