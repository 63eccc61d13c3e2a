"""Passive XP over time, streak decay."""

from __future__ import annotations

import copy
import math

from rank_server.game.config import ProgressionConfig
from rank_server.game.events import RankUp
from rank_server.game.systems.ranking import apply_rank_ups


def streak_decay_steps(delta: float, cfg: ProgressionConfig) -> int:
    # Only whole steps count; the fractional remainder is dropped, not carried
    # into the next tick.
    decay = delta / cfg.streak_decay_window_sec * cfg.streak_decay_per_window
    if decay <= 0.0:
        return 0
    return int(decay)


def step_passive(p, now: float, cfg: ProgressionConfig) -> list[RankUp] | None:
    """Apply one tick to `p`. Returns None when the tick was skipped.

    The update is worked out on a copy and committed at the end, so `p` is left
    untouched if anything raises.
    """
    delta = now - p.lastTick
    if not math.isfinite(delta) or delta <= 0.0:
        return None

    nxt = copy.copy(p)
    nxt.xp += cfg.passive_xp_per_sec * math.sqrt(nxt.rank + 1) * delta

    steps = streak_decay_steps(delta, cfg)
    if steps > 0 and nxt.killStreak > 0:
        nxt.killStreak = max(0, nxt.killStreak - steps)

    nxt.lastTick = now
    gained = apply_rank_ups(nxt, cfg)

    p.xp, p.rank, p.killStreak, p.lastTick = nxt.xp, nxt.rank, nxt.killStreak, nxt.lastTick
    return gained
