"""Identity change notifications for puzzle sessions."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

IdentityListener = Callable[[str | None], Awaitable[None]]


class IdentityEvents:
    """Publishes the signed-in user id (or ``None``) to registered listeners.

    ``subscribe`` returns a callable that removes the listener; calling it on
    teardown is the subscriber's job.
    """

    def __init__(self, user_id: str | None = None) -> None:
        self._current = user_id
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> str | None:
        return self._current

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def publish(self, user_id: str | None) -> None:
        self._current = user_id
        for listener in list(self._listeners):
            try:
                await listener(user_id)
            except Exception:
                logger.exception("Identity listener failed")


__all__ = ["IdentityEvents", "IdentityListener"]
