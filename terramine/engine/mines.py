"""Property categories and how they are rolled at purchase time."""

import enum
import random


class MineType(str, enum.Enum):
    """Category of an owned property; decides its income rate."""

    ROCK = "rock"
    COAL = "coal"
    GOLD = "gold"
    DIAMOND = "diamond"


# Cumulative percent thresholds: 60 / 30 / 9 / 1
MINE_WEIGHTS: dict[MineType, int] = {
    MineType.ROCK: 60,
    MineType.COAL: 30,
    MineType.GOLD: 9,
    MineType.DIAMOND: 1,
}


def assign_mine_type(rng: random.Random | None = None) -> MineType:
    """Roll a category from the weighted distribution."""
    roll = (rng or random).random() * 100
    threshold = 0
    for mine_type, weight in MINE_WEIGHTS.items():
        threshold += weight
        if roll < threshold:
            return mine_type
    return MineType.DIAMOND
