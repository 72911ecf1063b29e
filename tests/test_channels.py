"""
Unit tests for channel normalization and channel tree traversal.

Tests verify that literal channels are normalized into a single canonical
form, that malformed channels are detected, and that the ancestor and
descendant relations used by publish and broadcast are computed correctly.
"""

import re

import pytest

from topics import channels


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/", "/"),
        ("//", "/"),
        ("/a", "/a"),
        ("/a/", "/a"),
        ("//a//b/", "/a/b"),
        ("/a/ /b", "/a/b"),
        ("/test/extra/extreme", "/test/extra/extreme"),
    ],
)
def test_normalize(raw: str, expected: str) -> None:
    """Test that empty segments are dropped and the leading slash is kept."""
    assert channels.normalize(raw) == expected


@pytest.mark.parametrize("raw", ["/", "//a//b/", "/a/b/c/", "/x///"])
def test_normalize_is_idempotent(raw: str) -> None:
    """Test that normalizing a normalized channel changes nothing."""
    once = channels.normalize(raw)

    assert channels.normalize(once) == once


def test_normalize_leaves_non_literals_alone() -> None:
    """Test that patterns and malformed values pass through untouched."""
    pattern = re.compile(r"/a/.*")

    assert channels.normalize(pattern) is pattern
    assert channels.normalize("test/") == "test/"
    assert channels.normalize(None) is None


def test_as_channel_list() -> None:
    """Test that collections are expanded and single values wrapped."""
    pattern = re.compile("x")

    assert channels.as_channel_list("/a") == ["/a"]
    assert channels.as_channel_list(pattern) == [pattern]
    assert channels.as_channel_list(["/a", "/b"]) == ["/a", "/b"]
    assert channels.as_channel_list(("/a",)) == ["/a"]
    assert sorted(channels.as_channel_list({"/a", "/b"})) == ["/a", "/b"]
    assert channels.as_channel_list(None) == [None]
    assert channels.as_channel_list({"key": "/a"}) == [{"key": "/a"}]


def test_is_well_formed() -> None:
    """Test channel validation with and without patterns allowed."""
    pattern = re.compile("x")

    assert channels.is_well_formed(["/a", "/b/c"])
    assert channels.is_well_formed(["/a", pattern])
    assert not channels.is_well_formed(["/a", pattern], allow_patterns=False)
    assert not channels.is_well_formed(["a"])
    assert not channels.is_well_formed([None])
    assert not channels.is_well_formed([True])
    assert not channels.is_well_formed(["/a", {}])
    assert channels.is_well_formed([])


def test_ancestors() -> None:
    """Test that ancestors run from the channel up to the root."""
    assert list(channels.ancestors("/a/b/c")) == ["/a/b/c", "/a/b", "/a", "/"]
    assert list(channels.ancestors("/a")) == ["/a", "/"]


def test_ancestors_of_root_yields_root_once() -> None:
    """Test that the root is produced exactly once for the root channel."""
    assert list(channels.ancestors("/")) == ["/"]


def test_ancestors_is_restartable() -> None:
    """Test that each call produces a fresh sequence."""
    first = list(channels.ancestors("/a/b"))
    second = list(channels.ancestors("/a/b"))

    assert first == second == ["/a/b", "/a", "/"]


def test_ancestor_closure_removes_duplicates() -> None:
    """Test that shared ancestors appear once in the closure."""
    closure = channels.ancestor_closure(["/a/b", "/a/c"])

    assert sorted(closure) == ["/", "/a", "/a/b", "/a/c"]
    assert closure.count("/a") == 1
    assert closure.count("/") == 1


def test_ancestor_closure_is_deepest_first() -> None:
    """Test that no ancestor comes before one of its descendants."""
    closure = channels.ancestor_closure(["/a/b/c", "/x"])

    for channel in closure:
        for ancestor in channels.ancestors(channel):
            assert closure.index(ancestor) >= closure.index(channel)

    assert closure[0] == "/a/b/c"
    assert closure[-1] == "/"


def test_depth() -> None:
    """Test segment counting."""
    assert channels.depth("/") == 0
    assert channels.depth("/a") == 1
    assert channels.depth("/a/b/c") == 3


def test_is_descendant() -> None:
    """Test the broadcast relation."""
    assert channels.is_descendant("/a", "/a")
    assert channels.is_descendant("/a/b", "/a")
    assert channels.is_descendant("/a/b/c", "/a")
    assert channels.is_descendant("/a", "/")
    assert channels.is_descendant("/", "/")
    assert not channels.is_descendant("/", "/a")
    assert not channels.is_descendant("/ab", "/a")
    assert not channels.is_descendant("/x", "/a")


def test_pattern_matches() -> None:
    """Test that patterns are searched for within the channels."""
    pattern = re.compile(r"test/(?:extra|more)/")

    assert channels.pattern_matches(pattern, ["/test/extra/extreme"])
    assert channels.pattern_matches(pattern, ["/x", "/test/more/extreme"])
    assert not channels.pattern_matches(pattern, ["/test/zero/extreme"])
    assert not channels.pattern_matches(pattern, ["/test/more"])


def test_describe() -> None:
    """Test printable channel names."""
    assert channels.describe("/a") == "/a"
    assert channels.describe(re.compile(r"/a/\d+")) == r"re:/a/\d+"


def test_is_pattern_requires_str_pattern() -> None:
    """Test that only str patterns count as channel patterns."""
    assert channels.is_pattern(re.compile("a"))
    assert not channels.is_pattern(re.compile(b"a"))
    assert not channels.is_pattern("/a")
    assert not channels.is_well_formed([re.compile(b"a")])
