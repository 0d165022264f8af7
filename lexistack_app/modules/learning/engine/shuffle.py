"""Fisher-Yates shuffling that never mutates its input."""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar('T')


def shuffled(sequence: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a new list holding ``sequence`` in random order."""
    rng = rng or random
    result = list(sequence)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result
