"""
Table lifecycle: building the wall, dealing, and resetting for the next hand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shanghai.logic.events import GameEvent, TableStartedEvent
from shanghai.logic.exceptions import InvalidActionError
from shanghai.logic.melds import set_aside_bonus
from shanghai.logic.rng import generate_seed
from shanghai.logic.settings import DEALER_SEAT, GameSettings, validate_settings
from shanghai.logic.state import TablePlayer, TableState
from shanghai.logic.state_utils import add_tile_to_player, update_player
from shanghai.logic.tiles import is_bonus, sort_tiles
from shanghai.logic.turn import end_hand_exhausted
from shanghai.logic.wall import create_wall, create_wall_from_tiles, deal_initial_hands, draw_tile, tiles_remaining

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.tiles import Tile

logger = structlog.get_logger()


def _replace_initial_bonus_tiles(state: TableState) -> tuple[TableState, bool]:
    """
    Set aside bonus tiles dealt into hands and draw replacements.

    Seats are handled in order; each repeats until its hand holds no bonus
    tile. Returns (new_state, exhausted).
    """
    for seat in range(len(state.players)):
        while True:
            player = state.players[seat]
            bonus_tiles = [t for t in player.tiles if is_bonus(t)]
            if not bonus_tiles:
                break
            kept = tuple(t for t in player.tiles if not is_bonus(t))
            state = update_player(state, seat, tiles=kept)
            for tile in bonus_tiles:
                state = set_aside_bonus(state, seat, tile)
                new_wall, replacement = draw_tile(state.wall)
                if replacement is None:
                    return state, True
                state = add_tile_to_player(state.model_copy(update={"wall": new_wall}), seat, replacement)
        state = update_player(state, seat, tiles=tuple(sort_tiles(state.players[seat].tiles)))
    return state, False


def init_table(
    settings: GameSettings | None = None,
    *,
    seed: str | None = None,
    hand_number: int = 0,
    tiles: Sequence[Tile] | None = None,
) -> tuple[TableState, list[GameEvent]]:
    """
    Build a wall, deal every seat and return the table ready for the dealer's draw.

    The wall is a seeded shuffle unless an explicit supply is given (first
    tile drawn first).
    """
    settings = settings if settings is not None else GameSettings()
    validate_settings(settings)
    seed = seed if seed is not None else generate_seed()

    if tiles is not None:
        needed = settings.num_players * settings.initial_hand_size
        if len(tiles) < needed:
            raise InvalidActionError(f"tile supply has {len(tiles)} tiles, need at least {needed} to deal")
        wall = create_wall_from_tiles(tiles)
    else:
        wall = create_wall(seed, hand_number, settings)

    total_tiles = len(wall)
    wall, hands = deal_initial_hands(wall, settings.num_players, settings.initial_hand_size)
    state = TableState(
        settings=settings,
        seed=seed,
        hand_number=hand_number,
        wall=wall,
        players=tuple(TablePlayer(seat=seat, tiles=tuple(hand)) for seat, hand in enumerate(hands)),
        current_seat=DEALER_SEAT,
        dealer_seat=DEALER_SEAT,
        total_tiles=total_tiles,
    )

    state, exhausted = _replace_initial_bonus_tiles(state)
    events: list[GameEvent] = [
        TableStartedEvent(
            dealer_seat=DEALER_SEAT,
            hand_number=hand_number,
            wall_count=tiles_remaining(state.wall),
        ),
    ]
    logger.info("table dealt", hand_number=hand_number, wall_count=tiles_remaining(state.wall))
    if exhausted:
        state, end_events = end_hand_exhausted(state)
        events.extend(end_events)
    return state, events


def reset_table(state: TableState, tiles: Sequence[Tile] | None = None) -> tuple[TableState, list[GameEvent]]:
    """Start the next hand at the same table with the same settings and seed."""
    return init_table(
        state.settings,
        seed=state.seed,
        hand_number=state.hand_number + 1,
        tiles=tiles,
    )
