"""Claim arbitration -- record decisions on a discard and resolve the window.

Priority is win > kong > pung > chow. A rung is acted on only once every
eligible seat at that rung and above has decided, except that a single win
declaration resolves the window at once: every win-eligible seat is then
treated as a winner ("one shout, all eat") and re-validated. Ties at kong or
pung go to the lowest seat number.

Execution that finds the table out of step with the window (the discard is
gone, tiles are missing from hand) downgrades that seat to pass and
arbitration runs again.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import structlog

from shanghai.logic.enums import (
    CLAIM_PRIORITY,
    ClaimDecision,
    ClaimResolutionKind,
    ClaimRung,
    RoundPhase,
    WinMode,
)
from shanghai.logic.events import ClaimDecisionEvent, GameEvent, MeldEvent
from shanghai.logic.exceptions import ClaimConsistencyError, InvalidClaimError, InvalidMeldError
from shanghai.logic.melds import call_chow, call_kong_from_discard, call_pung
from shanghai.logic.scoring import evaluate_win
from shanghai.logic.state_utils import close_claim_window, pop_last_discard
from shanghai.logic.tiles import Tile, sort_tiles
from shanghai.logic.turn import end_hand_with_result, process_draw_phase
from shanghai.logic.types import ChowPair, GameResult, WinnerRecord
from shanghai.logic.win import tiles_for_win

if TYPE_CHECKING:
    from shanghai.logic.state import PendingClaim, TableState

logger = structlog.get_logger()

_RUNG_TO_KIND = {
    ClaimRung.WIN: ClaimResolutionKind.WIN,
    ClaimRung.KONG: ClaimResolutionKind.KONG,
    ClaimRung.PUNG: ClaimResolutionKind.PUNG,
    ClaimRung.CHOW: ClaimResolutionKind.CHOW,
}

_DECISION_FIELDS = {
    ClaimRung.WIN: "win_decisions",
    ClaimRung.KONG: "kong_decisions",
    ClaimRung.PUNG: "pung_decisions",
}


class ClaimResolution(NamedTuple):
    """Outcome of one arbitration step."""

    kind: ClaimResolutionKind
    seats: tuple[int, ...] = ()
    chow_pair: ChowPair | None = None


_WAIT = ClaimResolution(ClaimResolutionKind.WAIT)


# ---------------------------------------------------------------------------
# Recording decisions
# ---------------------------------------------------------------------------


def _set_decision(claim: PendingClaim, seat: int, rung: ClaimRung, decision: ClaimDecision) -> PendingClaim:
    if rung == ClaimRung.CHOW:
        update: dict[str, object] = {"chow_decision": decision}
        if decision == ClaimDecision.PASS:
            update["chow_pair"] = None
        return claim.model_copy(update=update)
    field = _DECISION_FIELDS[rung]
    decisions = dict(getattr(claim, field))
    decisions[seat] = decision
    return claim.model_copy(update={field: decisions})


def _chosen_chow_pair(claim: PendingClaim, chow_pair: object) -> ChowPair:
    """The caller's pair in rank order, or the lowest option when none is given."""
    if chow_pair is None:
        return claim.chow_options[0]
    if (
        not isinstance(chow_pair, (tuple, list))
        or len(chow_pair) != 2  # noqa: PLR2004
        or not all(isinstance(tile, Tile) for tile in chow_pair)
    ):
        raise InvalidClaimError(f"chow pair must be two tiles, got {chow_pair!r}")
    low, high = sort_tiles(chow_pair)
    if (low, high) not in claim.chow_options:
        raise InvalidClaimError(f"{low}{high} is not a chow option for {claim.tile}")
    return low, high


def record_action(
    claim: PendingClaim,
    seat: int,
    rung: ClaimRung,
    chow_pair: ChowPair | None = None,
) -> tuple[PendingClaim, list[GameEvent]]:
    """
    Record that seat acts on rung.

    Higher rungs the seat is still undecided on are recorded as pass.
    Raises InvalidClaimError if the seat is not eligible or already decided.
    """
    if seat not in claim.eligible_seats(rung):
        if rung == ClaimRung.CHOW and seat == claim.chow_seat and claim.chow_blocked_reason:
            raise InvalidClaimError(f"seat {seat} cannot chow on {claim.tile}: {claim.chow_blocked_reason}")
        raise InvalidClaimError(f"seat {seat} is not eligible to {rung.value} on {claim.tile}")
    if seat in claim.decisions(rung):
        raise InvalidClaimError(f"seat {seat} already decided on {rung.value}")

    pair = _chosen_chow_pair(claim, chow_pair) if rung == ClaimRung.CHOW else None

    events: list[GameEvent] = []
    for higher in CLAIM_PRIORITY[: CLAIM_PRIORITY.index(rung)]:
        if higher in claim.undecided_rungs(seat):
            claim = _set_decision(claim, seat, higher, ClaimDecision.PASS)
            events.append(ClaimDecisionEvent(seat=seat, rung=higher, decision=ClaimDecision.PASS))

    if rung == ClaimRung.CHOW:
        claim = claim.model_copy(update={"chow_decision": ClaimDecision.ACT, "chow_pair": pair})
    else:
        claim = _set_decision(claim, seat, rung, ClaimDecision.ACT)
    events.append(ClaimDecisionEvent(seat=seat, rung=rung, decision=ClaimDecision.ACT))
    return claim, events


def record_pass(claim: PendingClaim, seat: int) -> tuple[PendingClaim, list[GameEvent]]:
    """Record pass on every rung the seat is still undecided on."""
    undecided = claim.undecided_rungs(seat)
    if not undecided:
        raise InvalidClaimError(f"seat {seat} has nothing to pass on")
    events: list[GameEvent] = []
    for rung in undecided:
        claim = _set_decision(claim, seat, rung, ClaimDecision.PASS)
        events.append(ClaimDecisionEvent(seat=seat, rung=rung, decision=ClaimDecision.PASS))
    return claim, events


# ---------------------------------------------------------------------------
# Arbitration
# ---------------------------------------------------------------------------


def _all_decided(claim: PendingClaim, rung: ClaimRung) -> bool:
    decisions = claim.decisions(rung)
    return all(seat in decisions for seat in claim.eligible_seats(rung))


def _acting_seats(claim: PendingClaim, rung: ClaimRung) -> list[int]:
    return sorted(seat for seat, d in claim.decisions(rung).items() if d == ClaimDecision.ACT)


def decide_pending_claim(claim: PendingClaim) -> ClaimResolution:
    """
    Decide what the window resolves to with the decisions recorded so far.

    Pure function of the claim: the same set of decisions gives the same
    outcome whatever order they arrived in.
    """
    if _acting_seats(claim, ClaimRung.WIN):
        return ClaimResolution(ClaimResolutionKind.WIN, tuple(sorted(claim.win_seats)))
    if not _all_decided(claim, ClaimRung.WIN):
        return _WAIT

    for rung in (ClaimRung.KONG, ClaimRung.PUNG, ClaimRung.CHOW):
        if not _all_decided(claim, rung):
            return _WAIT
        actors = _acting_seats(claim, rung)
        if actors:
            pair = claim.chow_pair if rung == ClaimRung.CHOW else None
            return ClaimResolution(_RUNG_TO_KIND[rung], (actors[0],), pair)

    return ClaimResolution(ClaimResolutionKind.ALL_PASS)


def _check_discard_still_claimable(state: TableState, claim: PendingClaim, seat: int) -> None:
    if not state.discards:
        raise ClaimConsistencyError(seat=seat, reason="discard log is empty")
    last = state.discards[-1]
    if last.seat != claim.from_seat or last.tile != claim.tile:
        raise ClaimConsistencyError(seat=seat, reason="contested tile is no longer the last discard")


def _build_claimed_winners(state: TableState, claim: PendingClaim, seats: tuple[int, ...]) -> list[WinnerRecord]:
    """Re-validate each deemed winner; seats whose hand no longer wins are dropped."""
    winners: list[WinnerRecord] = []
    for seat in seats:
        player = state.players[seat]
        evaluation = evaluate_win(player.tiles, player.melds, state.settings, extra=claim.tile)
        if not evaluation.is_win or evaluation.check.shape is None:
            logger.warning("win failed re-validation, treated as pass", seat=seat, reason=evaluation.reason)
            continue
        winners.append(
            WinnerRecord(
                seat=seat,
                tiles=tuple(tiles_for_win(player.tiles, player.melds, claim.tile)),
                hand=(*player.tiles, claim.tile),
                melds=player.melds,
                shape=evaluation.check.shape,
                label=evaluation.check.label or evaluation.check.shape.value,
                win_mode=WinMode.CLAIMED_DISCARD,
                winning_tile=claim.tile,
                from_seat=claim.from_seat,
                pre_win_hand_size=len(player.tiles),
            ),
        )
    return winners


def _execute_meld_claim(
    state: TableState,
    claim: PendingClaim,
    resolution: ClaimResolution,
) -> tuple[TableState, list[GameEvent]]:
    """Pop the discard, form the meld and hand the turn to the claimant."""
    seat = resolution.seats[0]
    _check_discard_still_claimable(state, claim, seat)

    new_state, _ = pop_last_discard(state)
    try:
        if resolution.kind == ClaimResolutionKind.KONG:
            new_state = call_kong_from_discard(new_state, seat, claim.from_seat, claim.tile)
        elif resolution.kind == ClaimResolutionKind.PUNG:
            new_state = call_pung(new_state, seat, claim.from_seat, claim.tile)
        else:
            if resolution.chow_pair is None:
                raise ClaimConsistencyError(seat=seat, reason="no chow pair recorded")
            new_state = call_chow(new_state, seat, claim.from_seat, claim.tile, resolution.chow_pair)
    except InvalidMeldError as e:
        raise ClaimConsistencyError(seat=seat, reason=str(e)) from e

    meld = new_state.players[seat].melds[-1]
    new_state = close_claim_window(new_state, RoundPhase.DISCARD).model_copy(
        update={"current_seat": seat, "last_drawn_tile": None},
    )
    events: list[GameEvent] = [
        MeldEvent(
            meld_type=meld.type,
            seat=seat,
            tiles=list(meld.tiles),
            from_seat=meld.from_seat,
            kong_origin=meld.kong_origin,
        ),
    ]
    if resolution.kind == ClaimResolutionKind.KONG:
        new_state, draw_events = process_draw_phase(new_state, seat, is_replacement=True)
        events.extend(draw_events)
    return new_state, events


def _rung_for_kind(kind: ClaimResolutionKind) -> ClaimRung:
    return next(rung for rung, k in _RUNG_TO_KIND.items() if k == kind)


def resolve_pending_claim(state: TableState) -> tuple[TableState, list[GameEvent]]:
    """
    Resolve the open window as far as the recorded decisions allow.

    Returns the state unchanged (and no events) while decisions are still
    outstanding.
    """
    while state.pending_claim is not None:
        claim = state.pending_claim
        resolution = decide_pending_claim(claim)

        if resolution.kind == ClaimResolutionKind.WAIT:
            return state, []

        if resolution.kind == ClaimResolutionKind.ALL_PASS:
            logger.debug("all seats passed", tile=str(claim.tile), from_seat=claim.from_seat)
            return close_claim_window(state, RoundPhase.DRAW), []

        if resolution.kind == ClaimResolutionKind.WIN:
            winners = _build_claimed_winners(state, claim, resolution.seats)
            if winners:
                result = GameResult(
                    winners=tuple(winners),
                    win_mode=WinMode.CLAIMED_DISCARD,
                    winning_tile=claim.tile,
                    discarder_seat=claim.from_seat,
                )
                end_state, end_events = end_hand_with_result(state, result)
                return end_state, end_events
            for seat in claim.win_seats:
                claim = _set_decision(claim, seat, ClaimRung.WIN, ClaimDecision.PASS)
            state = state.model_copy(update={"pending_claim": claim})
            continue

        try:
            new_state, meld_events = _execute_meld_claim(state, claim, resolution)
        except ClaimConsistencyError as e:
            logger.warning("claim downgraded to pass", seat=e.seat, reason=e.reason, kind=resolution.kind)
            claim = _set_decision(claim, e.seat, _rung_for_kind(resolution.kind), ClaimDecision.PASS)
            state = state.model_copy(update={"pending_claim": claim})
            continue
        return new_state, meld_events

    return state, []
