"""
Meld operations for a Shanghai table (chow, pung, kong, bonus set-aside).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shanghai.logic.enums import KongOrigin, MeldType
from shanghai.logic.exceptions import InvalidMeldError
from shanghai.logic.restrictions import (
    can_chow_by_restriction,
    can_pung_kong_by_restriction,
    restriction_state_from_melds,
)
from shanghai.logic.state_utils import add_meld_to_player, remove_tiles, update_player
from shanghai.logic.tiles import SUIT_SIZE, Tile, count_tile, is_bonus, is_numbered, sort_tiles
from shanghai.logic.types import ChowPair, Meld

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.state import TablePlayer, TableState

logger = structlog.get_logger()

TILES_FOR_PUNG = 2
TILES_FOR_DISCARD_KONG = 3
TILES_FOR_CONCEALED_KONG = 4


def chow_options(hand: Sequence[Tile], tile: Tile) -> list[ChowPair]:
    """
    List the hand pairs that complete a run with tile, lowest run first.

    Each option is the two tiles taken from hand. Honors and bonus tiles
    cannot be chowed.
    """
    if not is_numbered(tile):
        return []

    n = tile.rank
    candidates = [(n - 2, n - 1), (n - 1, n + 1), (n + 1, n + 2)]
    options: list[ChowPair] = []
    for low, high in candidates:
        if low < 1 or high > SUIT_SIZE:
            continue
        a = Tile(suit=tile.suit, rank=low)
        b = Tile(suit=tile.suit, rank=high)
        if a in hand and b in hand:
            options.append((a, b))
    return options


def can_pung(hand: Sequence[Tile], tile: Tile) -> bool:
    return not is_bonus(tile) and count_tile(hand, tile) >= TILES_FOR_PUNG


def can_kong_on_discard(hand: Sequence[Tile], tile: Tile) -> bool:
    return not is_bonus(tile) and count_tile(hand, tile) >= TILES_FOR_DISCARD_KONG


def restricted_chow_options(player: TablePlayer, tile: Tile) -> list[ChowPair]:
    """Chow options for a player, empty when the suit restriction forbids chow."""
    state = restriction_state_from_melds(player.melds)
    if not can_chow_by_restriction(state, tile).ok:
        return []
    return chow_options(player.tiles, tile)


def concealed_kong_options(player: TablePlayer) -> list[Tile]:
    """Tiles held four times, allowed by the suit restriction, lowest first."""
    state = restriction_state_from_melds(player.melds)
    seen: list[Tile] = []
    for tile in sort_tiles(player.tiles):
        if tile in seen or is_bonus(tile):
            continue
        if count_tile(player.tiles, tile) >= TILES_FOR_CONCEALED_KONG and can_pung_kong_by_restriction(state, tile).ok:
            seen.append(tile)
    return seen


def promoted_kong_options(player: TablePlayer) -> list[Tile]:
    """Tiles in hand that match one of the player's exposed pungs, lowest first."""
    state = restriction_state_from_melds(player.melds)
    options = [
        meld.tiles[0]
        for meld in player.melds
        if meld.type == MeldType.PUNG
        and meld.tiles[0] in player.tiles
        and can_pung_kong_by_restriction(state, meld.tiles[0]).ok
    ]
    return sort_tiles(options)


def own_turn_kong_options(player: TablePlayer) -> list[Tile]:
    return sort_tiles({*concealed_kong_options(player), *promoted_kong_options(player)})


def call_chow(state: TableState, seat: int, discarder_seat: int, tile: Tile, pair: ChowPair) -> TableState:
    """Take pair from seat's hand and expose a chow with the discarded tile."""
    player = state.players[seat]
    if pair not in chow_options(player.tiles, tile):
        raise InvalidMeldError(f"{pair[0]}{pair[1]} does not make a run with {tile}")
    check = can_chow_by_restriction(restriction_state_from_melds(player.melds), tile)
    if not check.ok:
        raise InvalidMeldError(check.reason or "chow not allowed")

    new_tiles = remove_tiles(player.tiles, pair)
    meld = Meld(
        type=MeldType.CHOW,
        tiles=tuple(sort_tiles((*pair, tile))),
        from_seat=discarder_seat,
        called_tile=tile,
    )
    state = update_player(state, seat, tiles=new_tiles)
    logger.debug("chow called", seat=seat, tile=str(tile), from_seat=discarder_seat)
    return add_meld_to_player(state, seat, meld)


def call_pung(state: TableState, seat: int, discarder_seat: int, tile: Tile) -> TableState:
    player = state.players[seat]
    if not can_pung(player.tiles, tile):
        raise InvalidMeldError(f"need {TILES_FOR_PUNG} copies of {tile} to pung")
    check = can_pung_kong_by_restriction(restriction_state_from_melds(player.melds), tile)
    if not check.ok:
        raise InvalidMeldError(check.reason or "pung not allowed")

    new_tiles = remove_tiles(player.tiles, [tile] * TILES_FOR_PUNG)
    meld = Meld(type=MeldType.PUNG, tiles=(tile,) * 3, from_seat=discarder_seat, called_tile=tile)
    state = update_player(state, seat, tiles=new_tiles)
    logger.debug("pung called", seat=seat, tile=str(tile), from_seat=discarder_seat)
    return add_meld_to_player(state, seat, meld)


def call_kong_from_discard(state: TableState, seat: int, discarder_seat: int, tile: Tile) -> TableState:
    player = state.players[seat]
    if not can_kong_on_discard(player.tiles, tile):
        raise InvalidMeldError(f"need {TILES_FOR_DISCARD_KONG} copies of {tile} to kong")
    check = can_pung_kong_by_restriction(restriction_state_from_melds(player.melds), tile)
    if not check.ok:
        raise InvalidMeldError(check.reason or "kong not allowed")

    new_tiles = remove_tiles(player.tiles, [tile] * TILES_FOR_DISCARD_KONG)
    meld = Meld(
        type=MeldType.KONG,
        tiles=(tile,) * 4,
        from_seat=discarder_seat,
        kong_origin=KongOrigin.FROM_DISCARD,
        called_tile=tile,
    )
    state = update_player(state, seat, tiles=new_tiles)
    logger.debug("kong called on discard", seat=seat, tile=str(tile), from_seat=discarder_seat)
    return add_meld_to_player(state, seat, meld)


def call_concealed_kong(state: TableState, seat: int, tile: Tile) -> TableState:
    player = state.players[seat]
    if tile not in concealed_kong_options(player):
        raise InvalidMeldError(f"no concealed kong of {tile} available")

    new_tiles = remove_tiles(player.tiles, [tile] * TILES_FOR_CONCEALED_KONG)
    meld = Meld(type=MeldType.KONG, tiles=(tile,) * 4, kong_origin=KongOrigin.CONCEALED)
    state = update_player(state, seat, tiles=new_tiles)
    logger.debug("concealed kong declared", seat=seat, tile=str(tile))
    return add_meld_to_player(state, seat, meld)


def call_promoted_kong(state: TableState, seat: int, tile: Tile) -> TableState:
    """Upgrade an exposed pung to a kong in place, keeping its from_seat."""
    player = state.players[seat]
    if tile not in promoted_kong_options(player):
        raise InvalidMeldError(f"no pung of {tile} to promote")

    melds = list(player.melds)
    pos = next(i for i, m in enumerate(melds) if m.type == MeldType.PUNG and m.tiles[0] == tile)
    pung = melds[pos]
    melds[pos] = Meld(
        type=MeldType.KONG,
        tiles=(tile,) * 4,
        from_seat=pung.from_seat,
        kong_origin=KongOrigin.PROMOTED,
        called_tile=pung.called_tile,
    )
    new_tiles = remove_tiles(player.tiles, [tile])
    logger.debug("pung promoted to kong", seat=seat, tile=str(tile))
    return update_player(state, seat, tiles=new_tiles, melds=tuple(melds))


def set_aside_bonus(state: TableState, seat: int, tile: Tile) -> TableState:
    """Move a bonus tile straight into the seat's melds."""
    if not is_bonus(tile):
        raise InvalidMeldError(f"{tile} is not a bonus tile")
    return add_meld_to_player(state, seat, Meld(type=MeldType.BONUS, tiles=(tile,)))
