"""Error taxonomy + result reasons."""

from __future__ import annotations

UNKNOWN_PLAYER = "unknown_player"
DUPLICATE_REGISTRATION = "duplicate_registration"
NON_MONOTONIC_CLOCK = "non_monotonic_clock"


class ProgressionError(Exception):
    pass


class UnknownPlayer(ProgressionError, KeyError):
    def __init__(self, *player_ids: str):
        self.player_ids = tuple(player_ids)
        super().__init__(f"unknown player(s): {', '.join(self.player_ids)}")

    def __str__(self) -> str:
        # KeyError would repr() the message.
        return self.args[0]
