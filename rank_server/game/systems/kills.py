"""Kill awards, streak multiplier."""

from __future__ import annotations

from rank_server.game.config import ProgressionConfig
from rank_server.game.events import RankUp
from rank_server.game.systems.ranking import apply_rank_ups


def streak_multiplier(kill_streak: int, cfg: ProgressionConfig) -> float:
    # First kill of a streak is x1.0.
    extra = max(0, min(kill_streak - 1, cfg.streak_cap))
    return 1.0 + cfg.streak_step * extra


def kill_xp(victim_rank: int, kill_streak: int, cfg: ProgressionConfig) -> float:
    return (cfg.base_xp + cfg.victim_rank_xp * victim_rank) * streak_multiplier(kill_streak, cfg)


def apply_kill(killer, victim, cfg: ProgressionConfig) -> tuple[float, list[RankUp]]:
    # killer and victim may be the same record (self-kill): award, then reset.
    killer.killStreak += 1
    gained = kill_xp(victim.rank, killer.killStreak, cfg)
    killer.xp += gained

    victim.killStreak = 0

    return gained, apply_rank_ups(killer, cfg)
