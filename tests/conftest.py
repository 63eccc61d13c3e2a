import pytest

from rank_server.game.engine import RankingEngine


class FakeClock:
    def __init__(self, t: float = 1000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, sec: float) -> None:
        self.t += sec


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rank_ups():
    return []


@pytest.fixture
def engine(clock, rank_ups):
    return RankingEngine(clock=clock, observers=[rank_ups.append])
