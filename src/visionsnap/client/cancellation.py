"""Single-slot register for the current analyze request.

At most one request is current at a time. Replacing it cancels the
previous token and its task, so a stale stream can never write into
the display of a newer one.
"""

from __future__ import annotations

import asyncio
import itertools
import logging

logger = logging.getLogger(__name__)

_token_ids = itertools.count(1)


class CancellationToken:
    """Cooperative cancellation flag checked at every read boundary."""

    def __init__(self) -> None:
        self.id = next(_token_ids)
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        return f"CancellationToken(id={self.id}, cancelled={self._cancelled})"


class RequestSlot:
    """Holds the current request's token and task."""

    def __init__(self) -> None:
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None

    @property
    def token(self) -> CancellationToken | None:
        return self._token

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def busy(self) -> bool:
        """Whether the current request is still running."""
        return self._task is not None and not self._task.done()

    def replace(self) -> CancellationToken:
        """Cancel whatever is current and install a fresh token."""
        self.cancel()
        self._token = CancellationToken()
        return self._token

    def attach(self, token: CancellationToken, task: asyncio.Task) -> None:
        if token is not self._token:
            # The token was superseded before its task was created.
            task.cancel()
            return
        self._task = task

    def is_current(self, token: CancellationToken) -> bool:
        return token is self._token and not token.cancelled

    def cancel(self) -> None:
        """Cancel the current request, if any. The slot becomes empty."""
        token, task = self._token, self._task
        self._token = None
        self._task = None
        if token is not None:
            token.cancel()
        if task is not None and not task.done():
            logger.debug("Cancelling in-flight request %r", token)
            task.cancel()
