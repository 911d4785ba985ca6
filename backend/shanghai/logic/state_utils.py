"""
Immutable state update utilities using Pydantic model_copy.

These helpers never mutate their input; they always return new state
objects with the requested changes applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shanghai.logic.enums import RoundPhase
from shanghai.logic.exceptions import InvalidDiscardError, InvalidMeldError
from shanghai.logic.state import PendingClaim, TablePlayer, TableState
from shanghai.logic.wall import tiles_remaining

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import DiscardRecord, Meld

_PLAYER_FIELDS = set(TablePlayer.model_fields)


def update_player(state: TableState, seat: int, **updates: object) -> TableState:
    """
    Return new table state with the player at seat updated.

    Raises:
        ValueError: If seat is out of bounds or update fields are invalid

    """
    if not (0 <= seat < len(state.players)):
        raise ValueError(f"Invalid seat {seat}, expected 0-{len(state.players) - 1}")
    invalid_fields = set(updates) - _PLAYER_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid player fields: {invalid_fields}")
    players = list(state.players)
    players[seat] = state.players[seat].model_copy(update=updates)
    return state.model_copy(update={"players": tuple(players)})


def add_tile_to_player(state: TableState, seat: int, tile: Tile) -> TableState:
    player = state.players[seat]
    return update_player(state, seat, tiles=(*player.tiles, tile))


def add_meld_to_player(state: TableState, seat: int, meld: Meld) -> TableState:
    player = state.players[seat]
    return update_player(state, seat, melds=(*player.melds, meld))


def remove_tile_at(tiles: Sequence[Tile], index: int) -> tuple[tuple[Tile, ...], Tile]:
    """
    Remove the tile at a position, keeping the order of the rest.

    Raises InvalidDiscardError for a non-integer or out-of-range index.
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidDiscardError(f"tile index must be an integer, got {index!r}")
    if not (0 <= index < len(tiles)):
        raise InvalidDiscardError(f"tile index {index} out of range for hand of {len(tiles)}")
    return (*tiles[:index], *tiles[index + 1 :]), tiles[index]


def remove_tiles(tiles: Sequence[Tile], to_remove: Sequence[Tile]) -> tuple[Tile, ...]:
    """
    Remove one copy of each tile in to_remove (first occurrence wins).

    Raises InvalidMeldError if any tile is missing.
    """
    remaining = list(tiles)
    for tile in to_remove:
        try:
            remaining.remove(tile)
        except ValueError:
            raise InvalidMeldError(f"tile {tile} not in hand") from None
    return tuple(remaining)


def next_seat(state: TableState, seat: int) -> int:
    return (seat + 1) % len(state.players)


def advance_turn(state: TableState) -> TableState:
    return state.model_copy(update={"current_seat": next_seat(state, state.current_seat)})


def open_claim_window(state: TableState, claim: PendingClaim) -> TableState:
    return state.model_copy(update={"pending_claim": claim, "phase": RoundPhase.CLAIM})


def close_claim_window(state: TableState, phase: RoundPhase) -> TableState:
    """Drop the pending claim and move to a non-claim phase."""
    return state.model_copy(update={"pending_claim": None, "phase": phase})


def pop_last_discard(state: TableState) -> tuple[TableState, DiscardRecord]:
    if not state.discards:
        raise InvalidMeldError("discard log is empty")
    return state.model_copy(update={"discards": state.discards[:-1]}), state.discards[-1]


def count_tiles_in_play(state: TableState) -> int:
    """Wall + hands + melds + discards."""
    total = tiles_remaining(state.wall) + len(state.discards)
    for player in state.players:
        total += len(player.tiles)
        total += sum(len(meld.tiles) for meld in player.melds)
    return total
