"""
Per-table engine: the command surface used by the session collaborator.

One TableEngine owns the state of one table. Commands are expected to be
applied strictly one at a time; each accepted command replaces the state
wholesale. No exception crosses this surface: every command returns a
CommandOutcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from shanghai.logic.action_handlers import (
    ActionResult,
    handle_declare_chow,
    handle_declare_kong,
    handle_declare_pung,
    handle_declare_win,
    handle_discard,
    handle_draw,
    handle_pass,
    handle_reset,
)
from shanghai.logic.enums import ClaimRung, RoundResultType
from shanghai.logic.events import CommandOutcome
from shanghai.logic.scoring import compute_settlement
from shanghai.logic.table import init_table
from shanghai.logic.types import ClaimView, SeatView, TableSnapshot
from shanghai.logic.wall import tiles_remaining

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.enums import ClaimDecision
    from shanghai.logic.settings import GameSettings
    from shanghai.logic.state import PendingClaim, TableState
    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import ChowPair


def _claim_view(claim: PendingClaim) -> ClaimView:
    decisions: dict[int, dict[str, ClaimDecision]] = {}
    for rung in ClaimRung:
        for seat, decision in claim.decisions(rung).items():
            decisions.setdefault(seat, {})[rung.value] = decision
    return ClaimView(
        tile=claim.tile,
        from_seat=claim.from_seat,
        chow_seat=claim.chow_seat,
        win_seats=sorted(claim.win_seats),
        kong_seats=sorted(claim.kong_seats),
        pung_seats=sorted(claim.pung_seats),
        chow_options=list(claim.chow_options),
        decisions=decisions,
    )


def build_snapshot(state: TableState) -> TableSnapshot:
    """Project the full table state for the view collaborator."""
    settlement = None
    if state.result is not None and state.end_reason == RoundResultType.WIN:
        settlement = compute_settlement(state.result, state.settings)
    return TableSnapshot(
        seats=tuple(SeatView(seat=p.seat, hand=p.tiles, melds=p.melds) for p in state.players),
        discards=state.discards,
        wall_count=tiles_remaining(state.wall),
        current_seat=state.current_seat,
        dealer_seat=state.dealer_seat,
        phase=state.phase,
        pending_claim=_claim_view(state.pending_claim) if state.pending_claim is not None else None,
        result=state.result,
        end_reason=state.end_reason,
        settlement=settlement,
    )


class TableEngine:
    """
    Authoritative engine for one table.

    The table is dealt on construction, from a seeded shuffle or from an
    explicit tile supply. Invalid settings raise UnsupportedSettingsError
    here; after construction commands never raise.
    """

    def __init__(
        self,
        table_id: str,
        settings: GameSettings | None = None,
        *,
        seed: str | None = None,
        tiles: Sequence[Tile] | None = None,
    ) -> None:
        self.table_id = table_id
        self._logger = structlog.get_logger().bind(table_id=table_id)
        self._state, _ = init_table(settings, seed=seed, tiles=tiles)
        self._logger.info("table created", seed=self._state.seed)

    @property
    def state(self) -> TableState:
        return self._state

    def _apply(self, result: ActionResult) -> CommandOutcome:
        if result.new_state is not None:
            self._state = result.new_state
        return CommandOutcome(accepted=result.accepted, detail=result.detail, events=result.events)

    def draw(self, seat: int) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_draw(self._state, seat))

    def discard(self, seat: int, index: int) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_discard(self._state, seat, index))

    def declare_win(self, seat: int) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_declare_win(self._state, seat))

    def declare_kong(self, seat: int, tile: Tile | None = None) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_declare_kong(self._state, seat, tile))

    def declare_pung(self, seat: int) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_declare_pung(self._state, seat))

    def declare_chow(self, seat: int, pair: ChowPair | None = None) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_declare_chow(self._state, seat, pair))

    def pass_claim(self, seat: int) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            return self._apply(handle_pass(self._state, seat))

    def reset_table(self, tiles: Sequence[Tile] | None = None) -> CommandOutcome:
        with structlog.contextvars.bound_contextvars(table_id=self.table_id):
            outcome = self._apply(handle_reset(self._state, tiles))
        if outcome.accepted:
            self._logger.info("table reset", hand_number=self._state.hand_number)
        return outcome

    def snapshot(self) -> TableSnapshot:
        return build_snapshot(self._state)
