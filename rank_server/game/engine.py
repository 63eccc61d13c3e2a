"""Authoritative player progression state.

All operations run under one registry-wide lock: a kill never interleaves with a
tick, and readers never see a half-applied update.
"""

from __future__ import annotations

import io
import logging
import math
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TextIO

from rank_server.game import errors
from rank_server.game.config import ProgressionConfig
from rank_server.game.events import RankUp, RankUpObserver, dispatch, log_rank_up
from rank_server.game.systems.kills import apply_kill
from rank_server.game.systems.passive import step_passive
from rank_server.game.systems.ranking import xp_threshold

logger = logging.getLogger(__name__)


@dataclass
class Player:
    playerId: str
    name: str
    lastTick: float
    xp: float = 0.0
    rank: int = 0
    killStreak: int = 0


@dataclass(frozen=True)
class PlayerInfo:
    playerId: str
    name: str
    rank: int
    xp: float
    killStreak: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.playerId,
            "name": self.name,
            "rank": self.rank,
            "xp": self.xp,
            "killStreak": self.killStreak,
        }


@dataclass
class KillResult:
    ok: bool
    reason: str | None = None
    missing: tuple[str, ...] = ()
    gainedXp: float = 0.0
    ranksGained: int = 0
    killerRank: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "reason": self.reason,
            "missing": list(self.missing),
            "gainedXp": self.gainedXp,
            "ranksGained": self.ranksGained,
            "killerRank": self.killerRank,
        }


@dataclass
class TickReport:
    ticked: int = 0
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    rankUps: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticked": self.ticked,
            "skipped": list(self.skipped),
            "failed": list(self.failed),
            "rankUps": self.rankUps,
        }


def _info(p: Player) -> PlayerInfo:
    return PlayerInfo(playerId=p.playerId, name=p.name, rank=p.rank, xp=p.xp, killStreak=p.killStreak)


class RankingEngine:
    """Rank-up observers run after the lock is released, so events from two
    concurrent calls may arrive in a different order than the state changes."""

    def __init__(
        self,
        config: ProgressionConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        observers: Iterable[RankUpObserver] | None = None,
    ):
        self.config = config or ProgressionConfig()
        self.clock = clock
        self._observers: list[RankUpObserver] = list(observers) if observers is not None else [log_rank_up]

        self._players: dict[str, Player] = {}
        self._lock = threading.Lock()

    @property
    def player_count(self) -> int:
        with self._lock:
            return len(self._players)

    def add_observer(self, observer: RankUpObserver) -> None:
        with self._lock:
            self._observers.append(observer)

    def xp_threshold(self, rank: int) -> float:
        return xp_threshold(rank, self.config)

    def add_player(self, player_id: str, name: str) -> bool:
        with self._lock:
            if player_id in self._players:
                logger.debug("%s: %s already registered", errors.DUPLICATE_REGISTRATION, player_id)
                return False
            self._players[player_id] = Player(playerId=player_id, name=name, lastTick=self.clock())
            return True

    def record_kill(self, killer_id: str, victim_id: str) -> KillResult:
        with self._lock:
            killer = self._players.get(killer_id)
            victim = self._players.get(victim_id)
            if not killer or not victim:
                missing = tuple(pid for pid, p in ((killer_id, killer), (victim_id, victim)) if not p)
                logger.debug("%s: kill %s -> %s ignored", errors.UNKNOWN_PLAYER, killer_id, victim_id)
                return KillResult(ok=False, reason=errors.UNKNOWN_PLAYER, missing=missing)

            gained, rank_ups = apply_kill(killer, victim, self.config)
            result = KillResult(ok=True, gainedXp=gained, ranksGained=len(rank_ups), killerRank=killer.rank)
            observers = list(self._observers)

        dispatch(observers, rank_ups)
        return result

    def tick_all(self, now: float | None = None) -> TickReport:
        report = TickReport()
        rank_ups: list[RankUp] = []
        with self._lock:
            if now is None:
                now = self.clock()
            if not math.isfinite(now):
                logger.warning("%s: tick at %r ignored", errors.NON_MONOTONIC_CLOCK, now)
                report.skipped.extend(self._players)
                return report
            for pid, p in self._players.items():
                try:
                    gained = step_passive(p, now, self.config)
                except Exception:
                    logger.exception("tick failed for player %s", pid)
                    report.failed.append(pid)
                    continue
                if gained is None:
                    logger.debug("%s: tick skipped for %s", errors.NON_MONOTONIC_CLOCK, pid)
                    report.skipped.append(pid)
                    continue
                report.ticked += 1
                rank_ups.extend(gained)
            observers = list(self._observers)

        report.rankUps = len(rank_ups)
        dispatch(observers, rank_ups)
        return report

    def get_player_info(self, player_id: str) -> PlayerInfo | None:
        with self._lock:
            p = self._players.get(player_id)
            if not p:
                return None
            return _info(p)

    def require_player_info(self, player_id: str) -> PlayerInfo:
        info = self.get_player_info(player_id)
        if info is None:
            raise errors.UnknownPlayer(player_id)
        return info

    def players(self) -> list[PlayerInfo]:
        with self._lock:
            return [_info(p) for p in self._players.values()]

    def print_all(self, out: TextIO | None = None) -> None:
        out = out if out is not None else sys.stdout
        with self._lock:
            out.write("---- Players ----\n")
            for p in self._players.values():
                out.write(f"{p.playerId} | {p.name} | Rank: {p.rank} | XP: {int(p.xp)} | Streak: {p.killStreak}\n")
            out.write("-----------------\n")

    def dump(self) -> str:
        buf = io.StringIO()
        self.print_all(buf)
        return buf.getvalue()
