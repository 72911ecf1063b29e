"""
Exception handling utilities for the channel router.

Provides exception handler functions and type definitions for managing errors
that occur during listener callback execution. Includes built-in handlers for
common patterns: stopping on error with logging
(stop_and_log_listener_exception), logging and continuing
(log_and_continue_listener_exception), silently continuing
(silent_listener_exception), and collecting exceptions for batch processing
(collect_listener_exception).

When no handler is set on a router, every matched listener still runs and the
first exception raised is re-raised once delivery is over.
"""

import logging
import sys
from typing import Callable

from topics import subscription


logger = logging.getLogger(__name__)


LISTENER_EXCEPTION_HANDLER = Callable[
    [subscription.LISTENER, tuple[str, ...], Exception], bool
]
"""
Signature for exception handlers.

Exception handlers receive the failing callback, the channels the message was
sent to, and the exception, then return True to stop delivery or False to
continue to remaining listeners. Exceptions given to a handler are not
re-raised by the router.
"""

STOP = True
CONTINUE = False


def get_callable_name(callable_: Callable) -> str:
    """
    Returns the name of the callable, using class name for items with __self__,
    __name__ for anything with __name__, or str(callback) if neither are found.
    """
    if hasattr(callable_, "__self__"):
        return f"{callable_.__self__.__class__.__name__}.{callable_.__name__}"
    elif hasattr(callable_, "__name__"):
        return callable_.__name__
    else:
        return str(callable_)


def _format_target(target: tuple[str, ...]) -> str:
    return ", ".join(target)


def stop_and_log_listener_exception(
    callback: subscription.LISTENER, target: tuple[str, ...], exception: Exception
) -> bool:
    """Handler that stops message delivery and logs the raised exception."""
    logger.error(
        f"Exception in topics listener:\n"
        f"  Target:    {_format_target(target)}\n"
        f"  Callback:  {get_callable_name(callback)}\n"
        f"  Exception: {exception.__class__.__name__}: {exception}",
        exc_info=True,
    )

    return STOP


def log_and_continue_listener_exception(
    callback: subscription.LISTENER, target: tuple[str, ...], exception: Exception
) -> bool:
    """Log listener errors but continue processing."""
    logger.warning(
        f"Listener error (continuing): "
        f"{get_callable_name(callback)} on {_format_target(target)}: {exception}"
    )
    return CONTINUE


def silent_listener_exception(
    _: subscription.LISTENER, __: tuple[str, ...], ___: Exception
) -> bool:
    """Silently ignore all exceptions."""
    return CONTINUE


exceptions_caught = []


def collect_listener_exception(
    callback: subscription.LISTENER, target: tuple[str, ...], exception: Exception
) -> bool:
    """
    Collect exceptions for batch processing.
    This appends exceptions caught to topics.handlers.exceptions_caught which
    is a list.
    Either manage the list manually or use this function as an example to create
    a more robust exception collector.
    """
    exceptions_caught.append(
        {
            "callback": get_callable_name(callback),
            "target": target,
            "exception": f"{exception.__class__.__name__}: {exception}",
            "exc_info": sys.exc_info(),
        }
    )
    return CONTINUE
