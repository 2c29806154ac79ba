import random

import pytest

from engine.game import Game


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture()
def steady_rng() -> random.Random:
    """Never triggers a deliberate mistake at any difficulty."""
    return FixedRandom(0.999)


@pytest.fixture()
def mistake_rng() -> random.Random:
    """Always triggers a deliberate mistake when random_factor > 0."""
    return FixedRandom(0.0)


def play(*moves: str, **kwargs) -> Game:
    """A game from the initial position with ``moves`` (UCI) played."""
    game = Game.new(**kwargs)
    for text in moves:
        outcome = game.play_uci(text)
        assert outcome, f"{text} was rejected: {outcome}"
    return game
