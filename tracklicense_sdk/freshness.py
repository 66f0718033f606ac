"""
Timestamp freshness checks for track requests.
"""
import time
import logging
from collections.abc import Mapping
from typing import Callable, Optional

from .config import DEFAULT_FRESHNESS_WINDOW
from .models import Record, _Record

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def now_seconds(clock: Optional[Clock] = None) -> int:
    """Current Unix time in whole seconds"""
    return int((clock or time.time)())


def is_current(
    request: Record,
    window: int = DEFAULT_FRESHNESS_WINDOW,
    clock: Optional[Clock] = None
) -> bool:
    """
    Check that a request's claimed timestamp is within ``window`` seconds of now.

    The clock is read on every call. Both bounds are inclusive.

    Args:
        request: Request-shaped record (model or mapping)
        window: Allowed distance from now in seconds
        clock: Callable returning Unix time (defaults to ``time.time``)

    Returns:
        True if ``now - window <= timestamp <= now + window``
    """
    if isinstance(request, _Record):
        timestamp = getattr(request, "timestamp", None)
    elif isinstance(request, Mapping):
        timestamp = request.get("timestamp")
    else:
        return False

    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        return False

    now = now_seconds(clock)
    if timestamp < now - window or timestamp > now + window:
        logger.debug("Request timestamp %d is outside %d±%ds", timestamp, now, window)
        return False
    return True
