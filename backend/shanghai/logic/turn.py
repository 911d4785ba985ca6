"""
Turn orchestration for a Shanghai table.

Covers the draw phase (with the bonus replacement loop), discards and the
claim eligibility they open, self-drawn wins, own-turn kongs and the two
ways a hand ends.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shanghai.logic.enums import RoundPhase, RoundResultType, WinMode
from shanghai.logic.events import (
    ClaimPromptEvent,
    DiscardEvent,
    DrawEvent,
    GameEvent,
    MeldEvent,
    RoundEndEvent,
    seat_target,
)
from shanghai.logic.exceptions import InvalidMeldError, InvalidWinError
from shanghai.logic.melds import (
    call_concealed_kong,
    call_promoted_kong,
    can_kong_on_discard,
    can_pung,
    concealed_kong_options,
    own_turn_kong_options,
    restricted_chow_options,
    set_aside_bonus,
)
from shanghai.logic.restrictions import (
    can_chow_by_restriction,
    can_pung_kong_by_restriction,
    restriction_state_from_melds,
)
from shanghai.logic.scoring import compute_settlement, evaluate_win
from shanghai.logic.state import PendingClaim
from shanghai.logic.state_utils import (
    add_tile_to_player,
    advance_turn,
    next_seat,
    open_claim_window,
    remove_tile_at,
    update_player,
)
from shanghai.logic.tiles import is_bonus
from shanghai.logic.types import DiscardRecord, GameResult, WinnerRecord
from shanghai.logic.wall import draw_tile, is_wall_exhausted, tiles_remaining
from shanghai.logic.win import tiles_for_win

if TYPE_CHECKING:
    from shanghai.logic.state import TableState
    from shanghai.logic.tiles import Tile

logger = structlog.get_logger()


def draw_with_bonus_replacement(state: TableState, seat: int) -> tuple[TableState, Tile | None, list[Tile]]:
    """
    Draw for seat until a non-bonus tile arrives or the wall empties.

    Bonus tiles go straight into the seat's melds. Returns
    (new_state, kept_tile, bonus_tiles); kept_tile is None on exhaustion.
    """
    bonus_tiles: list[Tile] = []
    while True:
        new_wall, tile = draw_tile(state.wall)
        if tile is None:
            return state, None, bonus_tiles
        state = state.model_copy(update={"wall": new_wall})
        if is_bonus(tile):
            state = set_aside_bonus(state, seat, tile)
            bonus_tiles.append(tile)
            continue
        return add_tile_to_player(state, seat, tile), tile, bonus_tiles


def end_hand_exhausted(state: TableState) -> tuple[TableState, list[GameEvent]]:
    """End the hand with no winner because the wall ran out."""
    logger.info("wall exhausted, hand ends without a winner")
    new_state = state.model_copy(
        update={
            "phase": RoundPhase.END,
            "pending_claim": None,
            "end_reason": RoundResultType.EXHAUSTIVE_DRAW,
            "last_drawn_tile": None,
        },
    )
    return new_state, [RoundEndEvent(end_reason=RoundResultType.EXHAUSTIVE_DRAW)]


def end_hand_with_result(state: TableState, result: GameResult) -> tuple[TableState, list[GameEvent]]:
    """End the hand with a win and settle the points."""
    settlement = compute_settlement(result, state.settings)
    new_state = state.model_copy(
        update={
            "phase": RoundPhase.END,
            "pending_claim": None,
            "result": result,
            "end_reason": RoundResultType.WIN,
            "last_drawn_tile": None,
        },
    )
    logger.info(
        "hand won",
        winners=result.winner_seats,
        win_mode=result.win_mode,
        winning_tile=str(result.winning_tile),
    )
    return new_state, [RoundEndEvent(end_reason=RoundResultType.WIN, result=result, settlement=settlement)]


def process_draw_phase(
    state: TableState,
    seat: int,
    *,
    is_replacement: bool = False,
) -> tuple[TableState, list[GameEvent]]:
    """
    Draw a tile for seat and move to the discard phase.

    Used both for the regular draw and for the replacement draw after a
    kong. An empty wall ends the hand.
    """
    new_state, tile, bonus_tiles = draw_with_bonus_replacement(state, seat)
    draw_event = DrawEvent(
        seat=seat,
        tile=tile,
        bonus_tiles=bonus_tiles,
        is_replacement=is_replacement,
        wall_count=tiles_remaining(new_state.wall),
        target=seat_target(seat),
    )
    if tile is None:
        end_state, end_events = end_hand_exhausted(new_state)
        return end_state, [draw_event, *end_events]

    logger.debug("tile drawn", seat=seat, tile=str(tile), bonus=len(bonus_tiles), replacement=is_replacement)
    new_state = new_state.model_copy(
        update={
            "phase": RoundPhase.DISCARD,
            "current_seat": seat,
            "last_drawn_tile": tile,
        },
    )
    return new_state, [draw_event]


def compute_claim_eligibility(state: TableState, tile: Tile, discarder_seat: int) -> PendingClaim:
    """
    Work out who may claim a discard.

    Win, kong and pung are checked for every other seat; chow only for the
    next seat in turn order. Kong also needs a replacement tile in the wall.
    """
    settings = state.settings
    chow_seat = next_seat(state, discarder_seat)
    win_seats: set[int] = set()
    kong_seats: set[int] = set()
    pung_seats: set[int] = set()

    for seat, player in enumerate(state.players):
        if seat == discarder_seat:
            continue
        if evaluate_win(player.tiles, player.melds, settings, extra=tile).is_win:
            win_seats.add(seat)
        restriction = restriction_state_from_melds(player.melds)
        if not can_pung_kong_by_restriction(restriction, tile).ok:
            continue
        if can_kong_on_discard(player.tiles, tile) and not is_wall_exhausted(state.wall):
            kong_seats.add(seat)
        if can_pung(player.tiles, tile):
            pung_seats.add(seat)

    chow_options = restricted_chow_options(state.players[chow_seat], tile)
    chow_check = can_chow_by_restriction(restriction_state_from_melds(state.players[chow_seat].melds), tile)
    return PendingClaim(
        tile=tile,
        from_seat=discarder_seat,
        chow_seat=chow_seat,
        win_seats=frozenset(win_seats),
        kong_seats=frozenset(kong_seats),
        pung_seats=frozenset(pung_seats),
        chow_eligible=bool(chow_options),
        chow_options=tuple(chow_options),
        chow_blocked_reason=chow_check.reason,
    )


def process_discard(state: TableState, seat: int, index: int) -> tuple[TableState, list[GameEvent]]:
    """
    Discard the tile at index and open a claim window if anyone can use it.

    The turn passes to the next seat either way; with nobody eligible that
    seat goes straight to its draw.
    """
    player = state.players[seat]
    new_tiles, tile = remove_tile_at(player.tiles, index)
    new_state = update_player(state, seat, tiles=new_tiles)
    new_state = new_state.model_copy(
        update={
            "discards": (*new_state.discards, DiscardRecord(seat=seat, tile=tile)),
            "last_drawn_tile": None,
        },
    )
    new_state = advance_turn(new_state)
    events: list[GameEvent] = [DiscardEvent(seat=seat, tile=tile)]
    logger.debug("tile discarded", seat=seat, tile=str(tile))

    claim = compute_claim_eligibility(new_state, tile, seat)
    if not claim.has_any_eligibility:
        return new_state.model_copy(update={"phase": RoundPhase.DRAW}), events

    new_state = open_claim_window(new_state, claim)
    events.append(
        ClaimPromptEvent(
            tile=tile,
            from_seat=seat,
            win_seats=sorted(claim.win_seats),
            kong_seats=sorted(claim.kong_seats),
            pung_seats=sorted(claim.pung_seats),
            chow_seat=claim.chow_seat if claim.chow_eligible else None,
            chow_options=list(claim.chow_options),
        ),
    )
    return new_state, events


def process_self_draw_win(state: TableState, seat: int) -> tuple[TableState, list[GameEvent]]:
    """
    End the hand with a self-drawn win.

    Only allowed when the seat's last acquisition was a draw.
    """
    if state.last_drawn_tile is None:
        raise InvalidWinError("self-drawn win requires a tile just drawn from the wall")

    player = state.players[seat]
    evaluation = evaluate_win(player.tiles, player.melds, state.settings)
    if not evaluation.is_win or evaluation.check.shape is None:
        raise InvalidWinError(evaluation.reason or "hand does not win")

    winner = WinnerRecord(
        seat=seat,
        tiles=tuple(tiles_for_win(player.tiles, player.melds)),
        hand=player.tiles,
        melds=player.melds,
        shape=evaluation.check.shape,
        label=evaluation.check.label or evaluation.check.shape.value,
        win_mode=WinMode.SELF_DRAW,
        winning_tile=state.last_drawn_tile,
        pre_win_hand_size=len(player.tiles),
    )
    result = GameResult(
        winners=(winner,),
        win_mode=WinMode.SELF_DRAW,
        winning_tile=state.last_drawn_tile,
    )
    return end_hand_with_result(state, result)


def process_own_turn_kong(state: TableState, seat: int, tile: Tile | None = None) -> tuple[TableState, list[GameEvent]]:
    """
    Declare a concealed or promoted kong on one's own turn, then draw a replacement.

    With no tile given the lowest available kong is declared.
    """
    player = state.players[seat]
    options = own_turn_kong_options(player)
    if not options:
        raise InvalidMeldError("no kong available")
    if tile is None:
        tile = options[0]
    if tile not in options:
        raise InvalidMeldError(f"no kong of {tile} available")

    if tile in concealed_kong_options(player):
        new_state = call_concealed_kong(state, seat, tile)
    else:
        new_state = call_promoted_kong(state, seat, tile)

    meld = next(m for m in new_state.players[seat].melds if m.tiles[0] == tile and m.kong_origin is not None)
    events: list[GameEvent] = [
        MeldEvent(
            meld_type=meld.type,
            seat=seat,
            tiles=list(meld.tiles),
            from_seat=meld.from_seat,
            kong_origin=meld.kong_origin,
        ),
    ]
    new_state, draw_events = process_draw_phase(new_state, seat, is_replacement=True)
    return new_state, [*events, *draw_events]
