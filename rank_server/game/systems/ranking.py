"""XP curve, rank-ups, post-rank XP cap."""

from __future__ import annotations

from rank_server.game.config import ProgressionConfig
from rank_server.game.events import RankUp


def xp_threshold(rank: int, cfg: ProgressionConfig) -> float:
    return cfg.threshold_base * cfg.threshold_growth ** rank


def apply_rank_ups(p, cfg: ProgressionConfig) -> list[RankUp]:
    """Promote `p` while its XP covers the current threshold.

    Returns one event per rank crossed. XP left over after the last promotion is
    truncated to `xp_cap_factor` thresholds of the new rank.
    """
    gained: list[RankUp] = []
    while p.xp >= xp_threshold(p.rank, cfg):
        p.xp -= xp_threshold(p.rank, cfg)
        p.rank += 1
        gained.append(RankUp(playerId=p.playerId, name=p.name, rank=p.rank))

    cap = xp_threshold(p.rank, cfg) * cfg.xp_cap_factor
    if p.xp > cap:
        p.xp = cap
    return gained
