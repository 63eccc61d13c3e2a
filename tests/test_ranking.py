import pytest

from rank_server.game.config import ProgressionConfig
from rank_server.game.engine import Player
from rank_server.game.systems.ranking import apply_rank_ups, xp_threshold

CFG = ProgressionConfig()


def make_player(xp: float = 0.0, rank: int = 0) -> Player:
    return Player(playerId="p1", name="Alice", lastTick=0.0, xp=xp, rank=rank)


def test_threshold_curve():
    assert xp_threshold(0, CFG) == 300.0
    assert xp_threshold(1, CFG) == 450.0
    assert xp_threshold(2, CFG) == 675.0
    assert xp_threshold(10, CFG) == pytest.approx(300.0 * 1.5**10)


def test_exact_threshold_promotes_once_with_zero_left():
    p = make_player(xp=300.0)
    events = apply_rank_ups(p, CFG)
    assert p.rank == 1
    assert p.xp == 0.0
    assert [e.rank for e in events] == [1]


def test_450_at_rank_zero_is_one_rank_with_150_left():
    # 450 - 300 = 150 remains, and 150 < threshold(1) = 450.
    p = make_player(xp=450.0)
    events = apply_rank_ups(p, CFG)
    assert p.rank == 1
    assert p.xp == 150.0
    assert len(events) == 1


def test_multiple_ranks_in_one_award():
    p = make_player(xp=300.0 + 450.0 + 675.0 + 10.0)
    events = apply_rank_ups(p, CFG)
    assert p.rank == 3
    assert p.xp == pytest.approx(10.0)
    assert [(e.name, e.rank) for e in events] == [("Alice", 1), ("Alice", 2), ("Alice", 3)]


def test_below_threshold_no_change():
    p = make_player(xp=299.9)
    assert apply_rank_ups(p, CFG) == []
    assert p.rank == 0
    assert p.xp == 299.9


def test_xp_capped_after_rank_ups():
    cfg = ProgressionConfig(xp_cap_factor=0.5)
    p = make_player(xp=200.0)
    apply_rank_ups(p, cfg)
    assert p.rank == 0
    assert p.xp == 150.0


def test_cap_invariant_holds_with_defaults():
    for xp in (0.0, 299.0, 300.0, 1e6, 1e9):
        p = make_player(xp=xp)
        apply_rank_ups(p, CFG)
        assert 0.0 <= p.xp <= xp_threshold(p.rank, CFG) * CFG.xp_cap_factor


def test_rank_never_decreases():
    p = make_player(xp=0.0, rank=7)
    apply_rank_ups(p, CFG)
    assert p.rank == 7
