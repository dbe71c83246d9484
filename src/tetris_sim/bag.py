"""7-bag piece randomizer.

The bag is a plain tuple of :class:`TetrominoType` values owned by the engine.
Drawing pops the head; whenever the bag runs empty it is refilled with a
freshly shuffled full set, so every run of seven draws taken from one fill is a
permutation of all seven shapes.

The source of randomness is injected.  Anything with a ``shuffle(list)``
method works, which lets tests pass a seeded :class:`random.Random` or a stub
that leaves the canonical order untouched.
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, Tuple

from .tetromino import Tetromino, TetrominoType

Bag = Tuple[TetrominoType, ...]


class Shuffler(Protocol):
    def shuffle(self, x: List[TetrominoType]) -> None:
        ...


def new_bag(rng: Optional[Shuffler] = None, *, shuffle: bool = True) -> Bag:
    """Return a full bag of the seven shapes.

    With ``shuffle=False`` the shapes keep their declaration order
    (I, O, T, S, Z, J, L), which gives a fully deterministic piece sequence.
    """

    pieces = list(TetrominoType)
    if shuffle:
        (rng or random).shuffle(pieces)
    return tuple(pieces)


def draw(
    bag: Sequence[TetrominoType],
    rng: Optional[Shuffler] = None,
    *,
    x: int = 0,
    y: int = 0,
    shuffle: bool = True,
) -> Tuple[Tetromino, Bag]:
    """Draw the next piece from ``bag``.

    Returns the new piece, placed at ``(x, y)`` in its spawn rotation, and the
    bag that remains.  The returned bag is never empty: it is refilled as soon
    as the last shape has been taken.
    """

    remaining = tuple(bag) or new_bag(rng, shuffle=shuffle)
    shape, remaining = remaining[0], remaining[1:]
    if not remaining:
        remaining = new_bag(rng, shuffle=shuffle)
    return Tetromino(shape, 0, x, y), remaining
