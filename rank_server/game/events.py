"""Rank-up events + observer dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankUp:
    playerId: str
    name: str
    rank: int


RankUpObserver = Callable[[RankUp], None]


def log_rank_up(event: RankUp) -> None:
    logger.info("[RankUp] %s reached rank %d", event.name, event.rank)


def dispatch(observers: Iterable[RankUpObserver], events: Iterable[RankUp]) -> None:
    for ev in events:
        for obs in observers:
            try:
                obs(ev)
            except Exception:
                # A broken sink must not stop the remaining notifications.
                logger.exception("rank-up observer %r failed for %s", obs, ev.playerId)
