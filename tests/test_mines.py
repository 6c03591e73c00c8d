"""Tests for mine type assignment."""

import random
from collections import Counter
from unittest.mock import MagicMock

import pytest

from terramine.engine.mines import MINE_WEIGHTS, MineType, assign_mine_type


class TestAssignMineType:
    """Tests for the weighted roll."""

    @pytest.mark.parametrize(
        "roll,expected",
        [
            (0.0, MineType.ROCK),
            (0.5999, MineType.ROCK),
            (0.6001, MineType.COAL),
            (0.8999, MineType.COAL),
            (0.9001, MineType.GOLD),
            (0.9899, MineType.GOLD),
            (0.9901, MineType.DIAMOND),
            (0.99999, MineType.DIAMOND),
        ],
    )
    def test_thresholds(self, roll, expected):
        rng = MagicMock()
        rng.random.return_value = roll
        assert assign_mine_type(rng) == expected

    def test_weights_sum_to_100(self):
        assert sum(MINE_WEIGHTS.values()) == 100

    def test_distribution_roughly_matches_weights(self):
        rng = random.Random(42)
        counts = Counter(assign_mine_type(rng) for _ in range(20_000))
        assert counts[MineType.ROCK] / 20_000 == pytest.approx(0.60, abs=0.02)
        assert counts[MineType.COAL] / 20_000 == pytest.approx(0.30, abs=0.02)
        assert counts[MineType.GOLD] / 20_000 == pytest.approx(0.09, abs=0.01)
        assert counts[MineType.DIAMOND] / 20_000 == pytest.approx(0.01, abs=0.005)

    def test_values_are_lowercase_names(self):
        assert [m.value for m in MineType] == ["rock", "coal", "gold", "diamond"]
