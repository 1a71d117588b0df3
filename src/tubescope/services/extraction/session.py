"""
Stale-result guard.

Callers that replace a view's content (a new search, another channel tab)
issue a fresh token per request. When an older request completes after a
newer one was issued, its result is discarded instead of overwriting the
newer state. This is a comparison on arrival, not a cancellation: the older
fetch still runs to completion and still populates the cache.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Awaitable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionTokens:
    """
    Monotonic request tokens for one logical view.

    Examples
    --------
    >>> tokens = SessionTokens()
    >>> token = tokens.issue()
    >>> result = await tokens.guard(token, engine.fetch_collection(...))
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    @property
    def latest(self) -> int:
        """The most recently issued token (0 before the first issue)."""
        return self._latest

    def issue(self) -> int:
        """Issue a new token; every earlier token becomes stale."""
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_current(self, token: int) -> bool:
        """Return True when *token* is the latest issued token."""
        return token == self._latest

    async def guard(self, token: int, awaitable: Awaitable[T]) -> T | None:
        """
        Await *awaitable* and return its result only if *token* is still current.

        Parameters
        ----------
        token : int
            Token issued for this request.
        awaitable : Awaitable[T]
            The in-flight work.

        Returns
        -------
        T | None
            The result, or None when a newer token was issued meanwhile.
        """
        result = await awaitable
        if not self.is_current(token):
            logger.debug("Discarding result for stale token %d (latest %d)", token, self._latest)
            return None
        return result
