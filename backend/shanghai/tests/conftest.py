from __future__ import annotations

from typing import TYPE_CHECKING

from shanghai.logic.enums import KongOrigin, MeldType, RoundPhase
from shanghai.logic.settings import GameSettings
from shanghai.logic.state import PendingClaim, TablePlayer, TableState
from shanghai.logic.tiles import Tile, tile_from_code
from shanghai.logic.types import DiscardRecord, Meld
from shanghai.logic.wall import Wall

if TYPE_CHECKING:
    from collections.abc import Sequence

# A fixed seed for deterministic tests (128 hex chars = 64 bytes)
FIXED_SEED = "ab" * 64


# ============================================================================
# Tile Helpers
# ============================================================================


def t(code: str) -> Tile:
    """Shorthand for tile_from_code."""
    return tile_from_code(code)


def ts(codes: str) -> list[Tile]:
    """Parse a space separated list of tile codes: ts("m1 m2 z7")."""
    return [tile_from_code(code) for code in codes.split()]


def pung(code: str, from_seat: int | None = 1) -> Meld:
    tile = t(code)
    return Meld(type=MeldType.PUNG, tiles=(tile,) * 3, from_seat=from_seat, called_tile=tile)


def chow(codes: str, from_seat: int = 3) -> Meld:
    tiles = ts(codes)
    return Meld(type=MeldType.CHOW, tiles=tuple(tiles), from_seat=from_seat, called_tile=tiles[0])


def kong(code: str, origin: KongOrigin = KongOrigin.FROM_DISCARD, from_seat: int | None = 1) -> Meld:
    tile = t(code)
    return Meld(
        type=MeldType.KONG,
        tiles=(tile,) * 4,
        from_seat=None if origin == KongOrigin.CONCEALED else from_seat,
        kong_origin=origin,
    )


def bonus(code: str) -> Meld:
    return Meld(type=MeldType.BONUS, tiles=(t(code),))


# ============================================================================
# Test State Builder Helpers
# ============================================================================


def create_player(
    seat: int = 0,
    *,
    tiles: Sequence[Tile] | None = None,
    melds: Sequence[Meld] | None = None,
) -> TablePlayer:
    """Create a TablePlayer with sensible defaults for testing."""
    return TablePlayer(
        seat=seat,
        tiles=tuple(tiles) if tiles is not None else (),
        melds=tuple(melds) if melds is not None else (),
    )


def create_table_state(
    *,
    players: Sequence[TablePlayer] | None = None,
    wall: Sequence[Tile] | None = None,
    discards: Sequence[DiscardRecord] | None = None,
    current_seat: int = 0,
    phase: RoundPhase = RoundPhase.DRAW,
    pending_claim: PendingClaim | None = None,
    last_drawn_tile: Tile | None = None,
    settings: GameSettings | None = None,
) -> TableState:
    """Create a TableState with sensible defaults for testing.

    total_tiles is derived from the tiles actually placed on the table so
    the tile count invariant holds for hand-built states.
    """
    if players is None:
        players = tuple(create_player(seat=i) for i in range(4))
    wall_tiles = tuple(wall) if wall is not None else ()
    discard_log = tuple(discards) if discards is not None else ()
    total = len(wall_tiles) + len(discard_log)
    for player in players:
        total += len(player.tiles) + sum(len(m.tiles) for m in player.melds)
    return TableState(
        settings=settings if settings is not None else GameSettings(),
        seed=FIXED_SEED,
        wall=Wall(tiles=wall_tiles),
        players=tuple(players),
        discards=discard_log,
        current_seat=current_seat,
        phase=phase,
        pending_claim=pending_claim,
        last_drawn_tile=last_drawn_tile,
        total_tiles=total,
    )


def filler_hands(count: int = 4, size: int = 13) -> list[list[Tile]]:
    """Identical hands of isolated tiles over three suits and honors.

    No seat can win, pung, kong or chow on a discard from another.
    """
    pool = ts("m1 m4 m7 p2 p5 p8 s3 s6 s9 z1 z2 z3 z4")
    return [list(pool[:size]) for _ in range(count)]


def build_supply(hands: Sequence[Sequence[Tile]], wall: Sequence[Tile] = ()) -> list[Tile]:
    """Explicit tile supply: each seat's hand in seat order, then the wall (first drawn first)."""
    supply: list[Tile] = []
    for hand in hands:
        supply.extend(hand)
    supply.extend(wall)
    return supply
