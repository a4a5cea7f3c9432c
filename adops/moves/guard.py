"""Single-flight guard for hierarchy moves.

Only one move runs at a time. If a move never finishes, the guard frees
itself after ``timeout`` seconds; the abandoned work keeps running but no
longer blocks new moves.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class SingleFlightGuard:
    def __init__(self, timeout: float = 30.0) -> None:
        if timeout <= 0:
            msg = f"Guard timeout must be positive, got {timeout}."
            raise ValueError(msg)
        self._timeout = timeout
        self._token: object | None = None
        self._reset_handle: asyncio.TimerHandle | None = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    def try_acquire(self) -> object | None:
        """Take the guard; returns a release token, or ``None`` when busy."""
        if self._token is not None:
            return None
        token = object()
        self._token = token
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self._timeout, self._force_reset, token)
        return token

    def release(self, token: object) -> None:
        # A token from a force-reset run must not free a newer holder.
        if self._token is not token:
            return
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self._token = None

    def _force_reset(self, token: object) -> None:
        if self._token is not token:
            return
        logger.error("Move still running after %.0fs, releasing guard", self._timeout)
        self._token = None
        self._reset_handle = None

