"""
Wall state and operations for a Shanghai table.

The wall is a single draw pile. Tiles are drawn from the front; there is no
dead wall, so kong replacement draws come from the same pile and exhaust it
like any other draw.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from shanghai.logic.enums import Suit, WallMode
from shanghai.logic.rng import shuffle_tiles
from shanghai.logic.tiles import STANDARD_TILE_COUNT, SUIT_SIZE, Tile, build_tile_set, sort_tiles

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.settings import GameSettings


class Wall(BaseModel):
    """Immutable draw pile for one hand."""

    model_config = ConfigDict(frozen=True)

    tiles: tuple[Tile, ...] = ()

    def __len__(self) -> int:
        return len(self.tiles)


def make_single_suit_tiles(count: int = STANDARD_TILE_COUNT) -> list[Tile]:
    """Debug supply: characters m1..m9 cycling, in that order."""
    return [Tile(suit=Suit.CHARACTERS, rank=(i % SUIT_SIZE) + 1) for i in range(count)]


def make_same_tile_tiles(tile: Tile, count: int = STANDARD_TILE_COUNT) -> list[Tile]:
    """Debug supply: every tile is a copy of one tile."""
    return [tile] * count


def create_wall(seed: str, hand_number: int, settings: GameSettings) -> Wall:
    """
    Build the wall for a hand according to settings.wall_mode.

    Standard walls are a seeded shuffle of the full supply. Debug walls are
    unshuffled and hold no bonus tiles.
    """
    if settings.wall_mode == WallMode.DEBUG_SINGLE_SUIT:
        return Wall(tiles=tuple(make_single_suit_tiles()))
    if settings.wall_mode == WallMode.DEBUG_SAME_TILE:
        return Wall(tiles=tuple(make_same_tile_tiles(settings.debug_tile)))
    supply = build_tile_set(settings.num_bonus_tiles)
    return Wall(tiles=tuple(shuffle_tiles(supply, seed, hand_number)))


def create_wall_from_tiles(tiles: Sequence[Tile]) -> Wall:
    """
    Create a wall from an explicit tile order (for tests and replays).

    The first tile in the sequence is the first tile drawn.
    """
    return Wall(tiles=tuple(tiles))


def deal_initial_hands(wall: Wall, num_players: int, hand_size: int) -> tuple[Wall, list[list[Tile]]]:
    """
    Deal hand_size tiles to each seat in seat order, one seat at a time.

    Returns (updated_wall, hands) where each hand is sorted by tile index.
    """
    needed = num_players * hand_size
    if len(wall.tiles) < needed:
        raise ValueError(f"Wall has {len(wall.tiles)} tiles, need at least {needed} for dealing")

    hands: list[list[Tile]] = []
    pos = 0
    for _ in range(num_players):
        hands.append(sort_tiles(wall.tiles[pos : pos + hand_size]))
        pos += hand_size

    return wall.model_copy(update={"tiles": wall.tiles[pos:]}), hands


def draw_tile(wall: Wall) -> tuple[Wall, Tile | None]:
    """Draw from the front of the wall. Returns (new_wall, tile) or (wall, None) if empty."""
    if not wall.tiles:
        return wall, None
    return wall.model_copy(update={"tiles": wall.tiles[1:]}), wall.tiles[0]


def is_wall_exhausted(wall: Wall) -> bool:
    return len(wall.tiles) == 0


def tiles_remaining(wall: Wall) -> int:
    return len(wall.tiles)
