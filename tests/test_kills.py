import pytest

from rank_server.game.config import ProgressionConfig
from rank_server.game.engine import Player
from rank_server.game.systems.kills import apply_kill, kill_xp, streak_multiplier

CFG = ProgressionConfig()


def test_streak_multiplier_sequence():
    assert streak_multiplier(1, CFG) == 1.0
    assert streak_multiplier(2, CFG) == pytest.approx(1.1)
    assert streak_multiplier(3, CFG) == pytest.approx(1.2)
    assert streak_multiplier(101, CFG) == pytest.approx(11.0)


def test_streak_multiplier_capped():
    assert streak_multiplier(102, CFG) == pytest.approx(11.0)
    assert streak_multiplier(10_000, CFG) == pytest.approx(11.0)


def test_streak_multiplier_never_below_one():
    assert streak_multiplier(0, CFG) == 1.0


def test_kill_xp_scales_with_victim_rank():
    assert kill_xp(0, 1, CFG) == 100.0
    assert kill_xp(5, 1, CFG) == 150.0
    assert kill_xp(5, 3, CFG) == pytest.approx(150.0 * 1.2)


def test_apply_kill_awards_and_resets_victim():
    killer = Player(playerId="a", name="A", lastTick=0.0)
    victim = Player(playerId="b", name="B", lastTick=0.0, rank=5, killStreak=7)

    gained, events = apply_kill(killer, victim, CFG)

    assert gained == 150.0
    assert killer.xp == 150.0
    assert killer.killStreak == 1
    assert victim.killStreak == 0
    assert events == []


def test_apply_kill_ranks_up_killer():
    killer = Player(playerId="a", name="A", lastTick=0.0, xp=250.0)
    victim = Player(playerId="b", name="B", lastTick=0.0)

    gained, events = apply_kill(killer, victim, CFG)

    assert gained == 100.0
    assert killer.rank == 1
    assert killer.xp == pytest.approx(50.0)
    assert [e.rank for e in events] == [1]


def test_self_kill_awards_once_and_ends_with_zero_streak():
    p = Player(playerId="a", name="A", lastTick=0.0, killStreak=3)
    gained, _ = apply_kill(p, p, CFG)
    # Streak went to 4 before the award, then reset as victim.
    assert gained == pytest.approx(100.0 * 1.3)
    assert p.killStreak == 0


def test_long_streak_award_stays_at_cap(engine):
    engine.add_player("a", "A")
    engine.add_player("b", "B")
    gains = [engine.record_kill("a", "b").gainedXp for _ in range(120)]

    assert gains[100] == pytest.approx(100.0 * 11.0)
    assert gains[101:] == pytest.approx([100.0 * 11.0] * 19)
    assert engine.get_player_info("a").killStreak == 120
