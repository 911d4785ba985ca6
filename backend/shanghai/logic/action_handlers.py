"""
Action handlers for table commands.

Each handler validates its command against the current state and returns an
ActionResult with the events produced and the new immutable state. Domain
errors raised by the logic modules are caught here and turned into rejected
results carrying an ErrorEvent; the state is left untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import structlog

from shanghai.logic.claim_resolution import record_action, record_pass, resolve_pending_claim
from shanghai.logic.enums import ClaimRung, GameErrorCode, RoundPhase, TableAction
from shanghai.logic.events import ErrorEvent, GameEvent, seat_target
from shanghai.logic.exceptions import GameRuleError, InvalidActionError, InvalidClaimError
from shanghai.logic.table import reset_table
from shanghai.logic.turn import (
    process_discard,
    process_draw_phase,
    process_own_turn_kong,
    process_self_draw_win,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from shanghai.logic.state import TableState
    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import ChowPair

logger = structlog.get_logger()

_ERROR_CODES: dict[TableAction, GameErrorCode] = {
    TableAction.DRAW: GameErrorCode.INVALID_ACTION,
    TableAction.DISCARD: GameErrorCode.INVALID_DISCARD,
    TableAction.DECLARE_WIN: GameErrorCode.INVALID_WIN,
    TableAction.DECLARE_KONG: GameErrorCode.INVALID_KONG,
    TableAction.DECLARE_PUNG: GameErrorCode.INVALID_PUNG,
    TableAction.DECLARE_CHOW: GameErrorCode.INVALID_CHOW,
    TableAction.PASS: GameErrorCode.INVALID_PASS,
    TableAction.RESET: GameErrorCode.GAME_ERROR,
}


class ActionResult(NamedTuple):
    """
    Result of an action handler execution.

    new_state is None when the command was rejected; the caller keeps its
    current state in that case.
    """

    events: list[GameEvent]
    new_state: TableState | None = None
    detail: str = ""

    @property
    def accepted(self) -> bool:
        return self.new_state is not None


class _Rejection(Exception):  # noqa: N818
    def __init__(self, code: GameErrorCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


def _reject(seat: int | None, action: TableAction, code: GameErrorCode, message: str) -> ActionResult:
    logger.warning("command rejected", seat=seat, action=action, code=code, reason=message)
    target = seat_target(seat) if seat is not None else "all"
    return ActionResult([ErrorEvent(code=code, message=message, target=target)], detail=message)


def _require_seat(state: TableState, seat: int) -> None:
    if isinstance(seat, bool) or not isinstance(seat, int) or not (0 <= seat < len(state.players)):
        raise _Rejection(GameErrorCode.INVALID_ACTION, f"invalid seat {seat!r}")


def _require_open(state: TableState) -> None:
    if state.phase == RoundPhase.END:
        raise _Rejection(GameErrorCode.GAME_ENDED, "hand has ended, reset the table")


def _require_phase(state: TableState, *phases: RoundPhase) -> None:
    if state.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise _Rejection(GameErrorCode.WRONG_PHASE, f"command needs phase {allowed}, table is in {state.phase.value}")


def _require_active(state: TableState, seat: int) -> None:
    if state.current_seat != seat:
        raise _Rejection(GameErrorCode.NOT_YOUR_TURN, "not your turn")


def _run(
    state: TableState,
    seat: int | None,
    action: TableAction,
    step: Callable[[], tuple[TableState, list[GameEvent]]],
) -> ActionResult:
    try:
        new_state, events = step()
    except _Rejection as e:
        return _reject(seat, action, e.code, e.message)
    except GameRuleError as e:
        return _reject(seat, action, _ERROR_CODES[action], str(e))
    logger.debug("command accepted", seat=seat, action=action, phase=new_state.phase)
    return ActionResult(events, new_state=new_state, detail="ok")


def _record_claim_action(
    state: TableState,
    seat: int,
    rung: ClaimRung,
    chow_pair: ChowPair | None = None,
) -> tuple[TableState, list[GameEvent]]:
    claim = state.pending_claim
    if claim is None:
        raise InvalidClaimError("no claim window is open")
    new_claim, events = record_action(claim, seat, rung, chow_pair)
    new_state, resolve_events = resolve_pending_claim(state.model_copy(update={"pending_claim": new_claim}))
    return new_state, [*events, *resolve_events]


def handle_draw(state: TableState, seat: int) -> ActionResult:
    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.DRAW)
        _require_active(state, seat)
        return process_draw_phase(state, seat)

    return _run(state, seat, TableAction.DRAW, step)


def handle_discard(state: TableState, seat: int, index: int) -> ActionResult:
    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.DISCARD)
        _require_active(state, seat)
        return process_discard(state, seat, index)

    return _run(state, seat, TableAction.DISCARD, step)


def handle_declare_win(state: TableState, seat: int) -> ActionResult:
    """Self-drawn win in the discard phase, or a win decision in the claim window."""

    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.DISCARD, RoundPhase.CLAIM)
        if state.phase == RoundPhase.CLAIM:
            return _record_claim_action(state, seat, ClaimRung.WIN)
        _require_active(state, seat)
        return process_self_draw_win(state, seat)

    return _run(state, seat, TableAction.DECLARE_WIN, step)


def handle_declare_kong(state: TableState, seat: int, tile: Tile | None = None) -> ActionResult:
    """Own-turn kong in the discard phase, or a kong decision in the claim window."""

    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.DISCARD, RoundPhase.CLAIM)
        if state.phase == RoundPhase.CLAIM:
            claim = state.pending_claim
            if claim is not None and tile is not None and tile != claim.tile:
                raise InvalidClaimError(f"kong must use the contested tile {claim.tile}")
            return _record_claim_action(state, seat, ClaimRung.KONG)
        _require_active(state, seat)
        return process_own_turn_kong(state, seat, tile)

    return _run(state, seat, TableAction.DECLARE_KONG, step)


def handle_declare_pung(state: TableState, seat: int) -> ActionResult:
    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.CLAIM)
        return _record_claim_action(state, seat, ClaimRung.PUNG)

    return _run(state, seat, TableAction.DECLARE_PUNG, step)


def handle_declare_chow(state: TableState, seat: int, pair: ChowPair | None = None) -> ActionResult:
    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.CLAIM)
        return _record_claim_action(state, seat, ClaimRung.CHOW, pair)

    return _run(state, seat, TableAction.DECLARE_CHOW, step)


def handle_pass(state: TableState, seat: int) -> ActionResult:
    def step() -> tuple[TableState, list[GameEvent]]:
        _require_seat(state, seat)
        _require_open(state)
        _require_phase(state, RoundPhase.CLAIM)
        claim = state.pending_claim
        if claim is None:
            raise InvalidActionError("no claim window is open")
        new_claim, events = record_pass(claim, seat)
        new_state, resolve_events = resolve_pending_claim(state.model_copy(update={"pending_claim": new_claim}))
        return new_state, [*events, *resolve_events]

    return _run(state, seat, TableAction.PASS, step)


def handle_reset(state: TableState, tiles: Sequence[Tile] | None = None) -> ActionResult:
    return _run(state, None, TableAction.RESET, lambda: reset_table(state, tiles))
