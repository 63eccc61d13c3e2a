"""Progression tuning + host settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressionConfig:
    # Kill award
    base_xp: float = 100.0
    victim_rank_xp: float = 10.0  # per victim rank
    streak_step: float = 0.1
    streak_cap: int = 100

    # Rank curve: threshold(rank) = threshold_base * threshold_growth ** rank
    threshold_base: float = 300.0
    threshold_growth: float = 1.5
    xp_cap_factor: float = 2.0

    # Passive
    passive_xp_per_sec: float = 1.0
    streak_decay_per_window: float = 0.1
    streak_decay_window_sec: float = 30.0


@dataclass
class ServerConfig:
    # Versions
    server_version: str = "0.1.0"

    # Network
    host: str = "0.0.0.0"
    port: int = 8766
    cors_allow_all: bool = True
    cors_allowed_origins: list[str] = field(default_factory=list)

    # Tick
    tick_interval_sec: float = 1.0

    log_level: str = "INFO"

    progression: ProgressionConfig = field(default_factory=ProgressionConfig)

    @staticmethod
    def _parse_bool(v: str | None, default: bool) -> bool:
        if v is None:
            return default
        return v.strip().lower() in ("1", "true", "yes", "on")

    @classmethod
    def from_env(cls) -> "ServerConfig":
        cfg = cls()
        cfg.host = os.environ.get("RANK_HOST", cfg.host)
        if os.environ.get("RANK_PORT"):
            try:
                cfg.port = int(os.environ["RANK_PORT"])
            except ValueError:
                pass
        if os.environ.get("RANK_TICK_SEC"):
            try:
                tick = float(os.environ["RANK_TICK_SEC"])
                if tick > 0.0:
                    cfg.tick_interval_sec = tick
            except ValueError:
                pass
        cfg.cors_allow_all = cls._parse_bool(os.environ.get("RANK_CORS_ALLOW_ALL"), cfg.cors_allow_all)
        origins = os.environ.get("RANK_CORS_ORIGINS")
        if origins:
            cfg.cors_allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]
        level = os.environ.get("RANK_LOG_LEVEL")
        if level:
            cfg.log_level = level.strip().upper()
        return cfg
