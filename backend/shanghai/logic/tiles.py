"""
Tile representation utilities for Shanghai mahjong.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, model_validator

from shanghai.logic.enums import NUMBERED_SUITS, Suit

# tile indices
# characters (m): 0-8
# dots (p): 9-17
# bamboo (s): 18-26
# honors (z): 27-33 (E, S, W, N, white, green, red)
# bonus (f): 34-41 (flowers and seasons)

NUM_TILE_TYPES = 34
NUM_BONUS_TYPES = 8
NUM_INDEXED_TYPES = NUM_TILE_TYPES + NUM_BONUS_TYPES
COPIES_PER_TILE = 4
STANDARD_TILE_COUNT = NUM_TILE_TYPES * COPIES_PER_TILE  # 136

HONOR_START = 27
BONUS_START = 34
SUIT_SIZE = 9
MAX_RUN_BASE_RANK = 7

_MAX_RANK: dict[Suit, int] = {
    Suit.CHARACTERS: 9,
    Suit.DOTS: 9,
    Suit.BAMBOO: 9,
    Suit.HONOR: 7,
    Suit.BONUS: NUM_BONUS_TYPES,
}

_SUIT_OFFSET: dict[Suit, int] = {
    Suit.CHARACTERS: 0,
    Suit.DOTS: 9,
    Suit.BAMBOO: 18,
    Suit.HONOR: HONOR_START,
    Suit.BONUS: BONUS_START,
}


class Tile(BaseModel):
    """Immutable tile value. Copies of the same rank compare equal."""

    model_config = ConfigDict(frozen=True)

    suit: Suit
    rank: int

    @model_validator(mode="after")
    def _check_rank(self) -> Tile:
        max_rank = _MAX_RANK[self.suit]
        if not (1 <= self.rank <= max_rank):
            raise ValueError(f"rank for suit {self.suit.value!r} must be in [1, {max_rank}], got {self.rank}")
        return self

    @property
    def index(self) -> int:
        """Position of this tile in the 42-slot index space."""
        return _SUIT_OFFSET[self.suit] + self.rank - 1

    def __str__(self) -> str:
        return f"{self.suit.value}{self.rank}"


_TILES_BY_INDEX: tuple[Tile, ...] = tuple(
    Tile(suit=suit, rank=rank) for suit in Suit for rank in range(1, _MAX_RANK[suit] + 1)
)


def index_to_tile(index: int) -> Tile:
    """Convert a 42-slot index to its tile."""
    if not (0 <= index < NUM_INDEXED_TYPES):
        raise ValueError(f"tile index must be in [0, {NUM_INDEXED_TYPES - 1}], got {index}")
    return _TILES_BY_INDEX[index]


def tile_from_code(code: str) -> Tile:
    """
    Parse compact notation such as "m1", "z7" or "f3".
    """
    if len(code) < 2 or not code[1:].isdigit():  # noqa: PLR2004
        raise ValueError(f"invalid tile code: {code!r}")
    try:
        suit = Suit(code[0])
    except ValueError:
        raise ValueError(f"invalid tile suit in code: {code!r}") from None
    return Tile(suit=suit, rank=int(code[1:]))


def is_honor(tile: Tile) -> bool:
    return tile.suit == Suit.HONOR


def is_bonus(tile: Tile) -> bool:
    return tile.suit == Suit.BONUS


def is_numbered(tile: Tile) -> bool:
    return tile.suit in NUMBERED_SUITS


def sort_tiles(tiles: Iterable[Tile]) -> list[Tile]:
    """Sort tiles by their index."""
    return sorted(tiles, key=lambda t: t.index)


def count_tile(tiles: Iterable[Tile], tile: Tile) -> int:
    return sum(1 for t in tiles if t == tile)


def hand_to_counts(tiles: Iterable[Tile]) -> list[int]:
    """
    Convert tiles to a 34-slot rank-count vector.

    Bonus tiles are skipped: they never take part in a winning shape.
    """
    counts = [0] * NUM_TILE_TYPES
    for tile in tiles:
        if is_bonus(tile):
            continue
        counts[tile.index] += 1
    return counts


def build_tile_set(num_bonus_tiles: int) -> list[Tile]:
    """
    Build the unshuffled supply: 4 copies of each of the 34 ranks plus
    one copy of each of the first num_bonus_tiles bonus tiles.
    """
    if not (0 <= num_bonus_tiles <= NUM_BONUS_TYPES):
        raise ValueError(f"num_bonus_tiles must be in [0, {NUM_BONUS_TYPES}], got {num_bonus_tiles}")
    tiles = [_TILES_BY_INDEX[i] for i in range(NUM_TILE_TYPES) for _ in range(COPIES_PER_TILE)]
    tiles.extend(_TILES_BY_INDEX[BONUS_START + i] for i in range(num_bonus_tiles))
    return tiles
