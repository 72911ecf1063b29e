"""
Message filtering for subscriptions.

Filters are MongoDB style query documents, e.g. {'priority': {'$gt': 2}},
evaluated against a single message with mongoquery. The router only requires a
filter to be a mapping and treats evaluation as a pure yes/no question, so any
callable with the MATCHER signature can be given to a router instead.
"""

from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional

from mongoquery import Query


MATCHER = Callable[[Mapping[str, Any], Any], bool]
"""
Signature for filter matchers.

Matchers receive the filter document and the message and return True if the
message should be delivered.
"""


def is_filter_document(value: Any) -> bool:
    """Returns True if the value can be used as a filter."""
    return isinstance(value, Mapping)


def matches(filter_document: Mapping[str, Any], message: Any) -> bool:
    """
    Test a message against a query document.

    Args:
        filter_document (Mapping[str, Any]): The mongo style query.
        message (Any): The published message.
    Returns:
        bool: True if the message satisfies the query.
    Raises:
        mongoquery.QueryError: If the query uses an unknown operator.
    """
    return bool(Query(filter_document).match(message))


def accepts(
    filter_document: Optional[Mapping[str, Any]], message: Any, matcher: MATCHER
) -> bool:
    """
    Check a message against an optional filter.
    An absent or empty filter always accepts without consulting the matcher.
    """
    if not filter_document:
        return True

    return matcher(filter_document, message)
