"""
Scoring for Shanghai hands.

Two jobs live here:

- the bonus floor applied when a win is declared: a hand that earns no
  bonus-equivalent points may only win as a flush
- settlement of a finished hand: each winner's tier and score, and the
  zero-sum point transfer across seats

Counted bonus points (the fallback tier, and the floor check) come from
bonus tiles, kongs and honor triplets. Compound tiers are checked before
their components.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import structlog

from shanghai.logic.enums import FLUSH_SHAPES, MeldType, ScoreTier, WinMode
from shanghai.logic.rules import get_rule
from shanghai.logic.tiles import HONOR_START, NUM_TILE_TYPES, hand_to_counts, is_honor
from shanghai.logic.types import ScoreSettlement, WinnerScore
from shanghai.logic.win import (
    REJECTED,
    WinCheckResult,
    is_all_honors,
    is_all_triplets_with_pair,
    is_flush,
    tiles_for_win,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from shanghai.logic.enums import WinShape
    from shanghai.logic.settings import GameSettings
    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import GameResult, Meld, WinnerRecord

logger = structlog.get_logger()

HONOR_TRIPLET_SIZE = 3
REASON_NOT_A_WINNING_SHAPE = "hand does not form a winning shape"
REASON_BONUS_FLOOR = "hand without bonus points can only win as a flush"


class WinEvaluation(NamedTuple):
    check: WinCheckResult
    bonus_points: int
    reason: str | None = None

    @property
    def is_win(self) -> bool:
        return self.check.is_win


def bonus_equivalent_points(hand: Sequence[Tile], melds: Sequence[Meld], settings: GameSettings) -> int:
    """
    Count bonus points earned by a hand, excluding the base.

    `hand` is the concealed hand including the winning tile.
    """
    points = 0
    for meld in melds:
        if meld.type == MeldType.BONUS:
            points += settings.points_per_bonus_tile
        elif meld.type == MeldType.KONG:
            if meld.is_concealed_kong:
                points += settings.points_per_concealed_kong
            else:
                points += settings.points_per_exposed_kong
            if is_honor(meld.tiles[0]):
                points += settings.honor_kong_extra_points
        elif meld.type == MeldType.PUNG and is_honor(meld.tiles[0]):
            points += settings.points_per_exposed_honor_triplet

    counts = hand_to_counts(hand)
    concealed_honor_triplets = sum(1 for i in range(HONOR_START, NUM_TILE_TYPES) if counts[i] >= HONOR_TRIPLET_SIZE)
    points += concealed_honor_triplets * settings.points_per_concealed_honor_triplet
    return points


def passes_bonus_floor(shape: WinShape | None, bonus_points: int, settings: GameSettings) -> bool:
    if not settings.require_bonus_points_unless_flush:
        return True
    return bonus_points > 0 or shape in FLUSH_SHAPES


def evaluate_win(
    hand: Sequence[Tile],
    melds: Sequence[Meld],
    settings: GameSettings,
    extra: Tile | None = None,
) -> WinEvaluation:
    """
    Check a seat's candidate against the active rule and the bonus floor.

    `extra` is the claimed discard for a win on discard; for a self-drawn win
    the drawn tile is already in hand.
    """
    candidate = tiles_for_win(hand, melds, extra)
    check = get_rule(settings.rule_id).check_win(candidate)
    concealed = [*hand, extra] if extra is not None else list(hand)
    bonus_points = bonus_equivalent_points(concealed, melds, settings)
    if not check.is_win:
        return WinEvaluation(REJECTED, bonus_points, REASON_NOT_A_WINNING_SHAPE)
    if not passes_bonus_floor(check.shape, bonus_points, settings):
        return WinEvaluation(REJECTED, bonus_points, REASON_BONUS_FLOOR)
    return WinEvaluation(check, bonus_points)


def _is_last_tile_wait(winner: WinnerRecord) -> bool:
    expected = 2 if winner.win_mode == WinMode.SELF_DRAW else 1
    return winner.pre_win_hand_size == expected


def score_winner(winner: WinnerRecord, settings: GameSettings) -> WinnerScore:
    """Pick the scoring tier for one winner."""
    tiles = list(winner.tiles)
    all_triplets = is_all_triplets_with_pair(hand_to_counts(tiles), len(tiles))
    all_honors = is_all_honors(tiles)
    flush = is_flush(tiles)
    counted_points = bonus_equivalent_points(winner.hand, winner.melds, settings)

    if all_honors and all_triplets:
        tier = ScoreTier.ALL_HONORS_TRIPLETS
    elif flush and all_triplets:
        tier = ScoreTier.FLUSH_ALL_TRIPLETS
    elif all_honors:
        tier = ScoreTier.ALL_HONORS
    elif flush:
        tier = ScoreTier.FLUSH
    elif _is_last_tile_wait(winner):
        tier = ScoreTier.LAST_TILE_WAIT
    elif all_triplets:
        tier = ScoreTier.ALL_TRIPLETS
    else:
        tier = ScoreTier.COUNTED_BONUS

    if tier == ScoreTier.COUNTED_BONUS:
        score = min(settings.counted_points_cap, settings.counted_base_points + counted_points)
    else:
        score = settings.tier_values[tier]

    return WinnerScore(seat=winner.seat, tier=tier, score=score, counted_points=counted_points)


def compute_settlement(result: GameResult, settings: GameSettings) -> ScoreSettlement:
    """
    Compute every winner's score and the point transfer.

    Self-draw: each other seat pays the winner the tier score. Claimed win:
    the discarder alone pays each winner. Deltas always sum to zero.
    """
    deltas = [0] * settings.num_players
    scores: list[WinnerScore] = []

    for winner in result.winners:
        winner_score = score_winner(winner, settings)
        scores.append(winner_score)
        if result.win_mode == WinMode.SELF_DRAW:
            for seat in range(settings.num_players):
                if seat == winner.seat:
                    continue
                deltas[seat] -= winner_score.score
                deltas[winner.seat] += winner_score.score
        else:
            if result.discarder_seat is None:
                raise ValueError("claimed win requires a discarder seat")
            deltas[result.discarder_seat] -= winner_score.score
            deltas[winner.seat] += winner_score.score

    logger.info(
        "hand settled",
        winners=result.winner_seats,
        tiers=[s.tier for s in scores],
        deltas=deltas,
    )
    return ScoreSettlement(scores=tuple(scores), deltas=tuple(deltas))
