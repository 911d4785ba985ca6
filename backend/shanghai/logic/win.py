"""
Win-pattern recognition for the four supported Shanghai shapes.

Only all-honors, flush, mixed flush and all-triplets hands win; an ordinary
run-and-triplet hand spread over several suits does not. The structural
search works on a 34-slot count vector owned by the caller and always
restores it before returning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from shanghai.logic.enums import MeldType, WinShape
from shanghai.logic.tiles import (
    MAX_RUN_BASE_RANK,
    NUM_TILE_TYPES,
    hand_to_counts,
    index_to_tile,
    is_bonus,
    is_honor,
    is_numbered,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import Meld

KONG_COUNTED_TILES = 3
PAIR_SIZE = 2
SET_SIZE = 3


class WinCheckResult(NamedTuple):
    is_win: bool
    shape: WinShape | None = None
    label: str | None = None


REJECTED = WinCheckResult(is_win=False)


def tiles_for_win(hand: Iterable[Tile], melds: Iterable[Meld], extra: Tile | None = None) -> list[Tile]:
    """
    Build the recognizer input for a seat.

    Hand tiles plus exposed meld tiles, kongs counted as three tiles, bonus
    melds excluded. `extra` is the claimed discard for a win on discard.
    """
    tiles = [t for t in hand if not is_bonus(t)]
    for meld in melds:
        if meld.type == MeldType.BONUS:
            continue
        if meld.type == MeldType.KONG:
            tiles.extend(meld.tiles[:KONG_COUNTED_TILES])
        else:
            tiles.extend(meld.tiles)
    if extra is not None and not is_bonus(extra):
        tiles.append(extra)
    return tiles


def is_all_honors(tiles: Sequence[Tile]) -> bool:
    playable = [t for t in tiles if not is_bonus(t)]
    return bool(playable) and all(is_honor(t) for t in playable)


def is_flush(tiles: Sequence[Tile]) -> bool:
    """One numbered suit and no honors, bonus ignored."""
    playable = [t for t in tiles if not is_bonus(t)]
    if not playable or any(is_honor(t) for t in playable):
        return False
    return len({t.suit for t in playable}) == 1


def is_mixed_flush(tiles: Sequence[Tile]) -> bool:
    """One numbered suit plus at least one honor, bonus ignored."""
    playable = [t for t in tiles if not is_bonus(t)]
    numbered_suits = {t.suit for t in playable if is_numbered(t)}
    return len(numbered_suits) == 1 and any(is_honor(t) for t in playable)


def is_all_triplets_with_pair(counts: list[int], tile_count: int) -> bool:
    """
    Check for triplets plus one pair.

    Some slot must give up a pair so that every remaining count is a
    multiple of three.
    """
    if tile_count < PAIR_SIZE or (tile_count - PAIR_SIZE) % SET_SIZE != 0:
        return False

    for i in range(NUM_TILE_TYPES):
        if counts[i] < PAIR_SIZE:
            continue
        counts[i] -= PAIR_SIZE
        ok = all(c % SET_SIZE == 0 for c in counts)
        counts[i] += PAIR_SIZE
        if ok:
            return True
    return False


def is_standard_hand(counts: list[int], tile_count: int) -> bool:
    """Check for sets plus one pair (runs only in numbered suits)."""
    if tile_count < PAIR_SIZE or (tile_count - PAIR_SIZE) % SET_SIZE != 0:
        return False

    for i in range(NUM_TILE_TYPES):
        if counts[i] < PAIR_SIZE:
            continue
        counts[i] -= PAIR_SIZE
        ok = _can_form_all_melds(counts)
        counts[i] += PAIR_SIZE
        if ok:
            return True
    return False


def _can_form_all_melds(counts: list[int]) -> bool:
    i = next((k for k in range(NUM_TILE_TYPES) if counts[k] > 0), -1)
    if i == -1:
        return True

    # triplet
    if counts[i] >= SET_SIZE:
        counts[i] -= SET_SIZE
        ok = _can_form_all_melds(counts)
        counts[i] += SET_SIZE
        if ok:
            return True

    # run
    tile = index_to_tile(i)
    if is_numbered(tile) and tile.rank <= MAX_RUN_BASE_RANK and counts[i + 1] > 0 and counts[i + 2] > 0:
        counts[i] -= 1
        counts[i + 1] -= 1
        counts[i + 2] -= 1
        ok = _can_form_all_melds(counts)
        counts[i] += 1
        counts[i + 1] += 1
        counts[i + 2] += 1
        if ok:
            return True

    return False


def check_win(tiles: Sequence[Tile]) -> WinCheckResult:
    """
    Classify a candidate hand.

    Precedence: all honors, flush all-triplets, flush, mixed flush,
    all triplets. Anything else is rejected.
    """
    playable = [t for t in tiles if not is_bonus(t)]
    if not playable:
        return REJECTED

    if is_all_honors(playable):
        return _accept(WinShape.ALL_HONORS)

    counts = hand_to_counts(playable)
    tile_count = len(playable)
    all_triplets = is_all_triplets_with_pair(counts, tile_count)

    if is_flush(playable) and is_standard_hand(counts, tile_count):
        return _accept(WinShape.FLUSH_ALL_TRIPLETS if all_triplets else WinShape.FLUSH)

    if is_mixed_flush(playable) and is_standard_hand(counts, tile_count):
        return _accept(WinShape.MIXED_FLUSH)

    if all_triplets:
        return _accept(WinShape.ALL_TRIPLETS)

    return REJECTED


def _accept(shape: WinShape) -> WinCheckResult:
    return WinCheckResult(is_win=True, shape=shape, label=shape.value)
