"""Orchestration of a hierarchy move.

``handle_move`` runs the caller's move under the single-flight guard,
then schedules a campaign-wide taxonomy regeneration in the background
and refreshes the caller's view. The move counts as done before the
regeneration finishes; regeneration errors are only logged and never
undo the move.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from adops.config.settings import Settings
from adops.models.common import ParentType
from adops.moves.background import BackgroundTasks
from adops.moves.guard import SingleFlightGuard
from adops.taxonomy.bulk import MoveParent, MoveRegenerationResult

logger = logging.getLogger(__name__)

RegenerateFn = Callable[[ParentType, MoveParent], Awaitable[MoveRegenerationResult]]


@dataclass(frozen=True)
class MoveDestination:
    client_id: str
    campaign_id: str
    campaign_name: str = ""


@dataclass
class MoveOutcome:
    started: bool
    moved: Any = None
    refreshed: bool = False
    regeneration_task: asyncio.Task | None = None


class MoveCoordinator:
    def __init__(
        self,
        regenerate: RegenerateFn,
        background: BackgroundTasks,
        guard: SingleFlightGuard | None = None,
        refresh: Callable[[], Awaitable[None]] | None = None,
        refresh_timeout: float = 15.0,
    ) -> None:
        self._regenerate = regenerate
        self._background = background
        self._guard = guard or SingleFlightGuard()
        self._refresh = refresh
        self._refresh_timeout = refresh_timeout

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        regenerate: RegenerateFn,
        background: BackgroundTasks,
        refresh: Callable[[], Awaitable[None]] | None = None,
    ) -> MoveCoordinator:
        return cls(
            regenerate,
            background,
            guard=SingleFlightGuard(timeout=settings.MOVE_LOCK_TIMEOUT_SECONDS),
            refresh=refresh,
            refresh_timeout=settings.REFRESH_TIMEOUT_SECONDS,
        )

    @property
    def busy(self) -> bool:
        return self._guard.busy

    async def handle_move(
        self,
        perform_move: Callable[[], Awaitable[Any]],
        destination: MoveDestination,
    ) -> MoveOutcome:
        """Run one move.

        A move requested while another is running is ignored and reported
        with ``started=False``. Errors raised by ``perform_move`` propagate;
        no regeneration is scheduled for a failed move.
        """
        token = self._guard.try_acquire()
        if token is None:
            logger.warning("Move ignored: another move is in progress")
            return MoveOutcome(started=False)

        try:
            moved = await perform_move()
            task = self.schedule_regeneration(destination)
            refreshed = await self._run_refresh()
            return MoveOutcome(
                started=True, moved=moved, refreshed=refreshed, regeneration_task=task,
            )
        finally:
            self._guard.release(token)

    def schedule_regeneration(self, destination: MoveDestination) -> asyncio.Task:
        """Regenerate the destination campaign's taxonomies without waiting."""
        parent = MoveParent(
            id=destination.campaign_id,
            client_id=destination.client_id,
            name=destination.campaign_name,
        )
        return self._background.spawn(
            f"taxonomy-regeneration:{destination.client_id}:{destination.campaign_id}",
            self._regenerate(ParentType.CAMPAIGN, parent),
        )

    async def _run_refresh(self) -> bool:
        if self._refresh is None:
            return False
        try:
            await asyncio.wait_for(self._refresh(), timeout=self._refresh_timeout)
        except asyncio.TimeoutError:
            logger.error("Refresh after move timed out after %.0fs", self._refresh_timeout)
            return False
        except Exception:
            logger.exception("Refresh after move failed")
            return False
        return True
