"""
Randomized Selectors — /roll and /dinner
========================================
"""

import random
from enum import Enum
from typing import Sequence

from washroom.config import DINNER_USAGE


class RollOutcome(Enum):
    NOVELTY = "novelty"  # send the animation instead of a die
    DICE = "dice"


def roll_outcome(rng: random.Random = random) -> RollOutcome:
    """One in three rolls is the novelty animation."""
    if rng.randrange(3) == 0:
        return RollOutcome.NOVELTY
    return RollOutcome.DICE


def pick_dinner(candidates: Sequence[str], rng: random.Random = random) -> str:
    """Pick one candidate uniformly; no candidates gives the usage hint."""
    if not candidates:
        return DINNER_USAGE
    return candidates[rng.randrange(len(candidates))]
