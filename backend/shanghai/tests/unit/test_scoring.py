"""
Unit tests for the bonus floor, tier selection and settlement.
"""

import pytest

from shanghai.logic.enums import KongOrigin, ScoreTier, WinMode, WinShape
from shanghai.logic.scoring import (
    REASON_BONUS_FLOOR,
    REASON_NOT_A_WINNING_SHAPE,
    bonus_equivalent_points,
    compute_settlement,
    evaluate_win,
    passes_bonus_floor,
    score_winner,
)
from shanghai.logic.settings import GameSettings
from shanghai.logic.types import GameResult, WinnerRecord
from shanghai.logic.win import check_win, tiles_for_win
from shanghai.tests.conftest import bonus, kong, pung, t, ts

NO_POINTS_TRIPLETS = "m1 m1 m1 p2 p2 p2 s3 s3 s3 m4 m4 m4 s5 s5"


def _winner(
    hand: str,
    melds=(),
    *,
    seat: int = 0,
    win_mode: WinMode = WinMode.SELF_DRAW,
    pre_win_hand_size: int | None = None,
    from_seat: int | None = None,
) -> WinnerRecord:
    hand_tiles = ts(hand)
    tiles = tiles_for_win(hand_tiles, melds)
    check = check_win(tiles)
    assert check.is_win
    if pre_win_hand_size is None:
        pre_win_hand_size = len(hand_tiles) if win_mode == WinMode.SELF_DRAW else len(hand_tiles) - 1
    return WinnerRecord(
        seat=seat,
        tiles=tuple(tiles),
        hand=tuple(hand_tiles),
        melds=tuple(melds),
        shape=check.shape,
        label=check.label,
        win_mode=win_mode,
        winning_tile=hand_tiles[-1],
        from_seat=from_seat,
        pre_win_hand_size=pre_win_hand_size,
    )


class TestBonusEquivalentPoints:
    def test_every_source_counted(self):
        melds = [
            bonus("f1"),
            kong("m1", KongOrigin.CONCEALED),
            kong("z1"),
            pung("z2"),
            pung("m5"),
        ]
        # 1 bonus + 2 concealed kong + (1 + 1) honor kong + 1 honor pung + 2 concealed honor triplet
        assert bonus_equivalent_points(ts("z3 z3 z3 p1 p1"), melds, GameSettings()) == 8

    def test_promoted_kong_counts_as_exposed(self):
        assert bonus_equivalent_points([], [kong("s7", KongOrigin.PROMOTED)], GameSettings()) == 1

    def test_plain_hand_has_none(self):
        assert bonus_equivalent_points(ts(NO_POINTS_TRIPLETS), [], GameSettings()) == 0


class TestBonusFloor:
    def test_flush_exempt(self):
        settings = GameSettings()
        assert passes_bonus_floor(WinShape.FLUSH, 0, settings)
        assert passes_bonus_floor(WinShape.FLUSH_ALL_TRIPLETS, 0, settings)

    def test_other_shapes_need_points(self):
        settings = GameSettings()
        assert not passes_bonus_floor(WinShape.MIXED_FLUSH, 0, settings)
        assert not passes_bonus_floor(WinShape.ALL_TRIPLETS, 0, settings)
        assert passes_bonus_floor(WinShape.ALL_TRIPLETS, 1, settings)

    def test_can_be_disabled(self):
        settings = GameSettings(require_bonus_points_unless_flush=False)
        assert passes_bonus_floor(WinShape.ALL_TRIPLETS, 0, settings)


class TestEvaluateWin:
    def test_zero_point_triplets_rejected_by_floor(self):
        evaluation = evaluate_win(ts(NO_POINTS_TRIPLETS), [], GameSettings())
        assert not evaluation.is_win
        assert evaluation.reason == REASON_BONUS_FLOOR

    def test_bonus_tile_lifts_floor(self):
        evaluation = evaluate_win(ts(NO_POINTS_TRIPLETS), [bonus("f1")], GameSettings())
        assert evaluation.is_win
        assert evaluation.check.shape == WinShape.ALL_TRIPLETS
        assert evaluation.bonus_points == 1

    def test_extra_tile_completes_hand(self):
        hand = ts("m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9")
        evaluation = evaluate_win(hand, [], GameSettings(), extra=t("m2"))
        assert evaluation.check.shape == WinShape.FLUSH

    def test_extra_honor_counts_toward_concealed_triplet(self):
        hand = ts("p1 p2 p3 p4 p5 p6 p7 p8 p9 z1 z1 z2 z2")
        evaluation = evaluate_win(hand, [], GameSettings(), extra=t("z1"))
        assert evaluation.is_win
        assert evaluation.bonus_points == 2

    def test_not_a_shape(self):
        evaluation = evaluate_win(ts("m1 m2 m3 p4 p5 p6 s7 s8 s9 s2 s3 s4 m1 m1"), [], GameSettings())
        assert evaluation.reason == REASON_NOT_A_WINNING_SHAPE


class TestScoreWinner:
    @pytest.mark.parametrize(
        ("hand", "tier", "score"),
        [
            ("z1 z1 z1 z2 z2 z2 z3 z3 z3 z4 z4 z4 z5 z5", ScoreTier.ALL_HONORS_TRIPLETS, 100),
            ("m1 m1 m1 m2 m2 m2 m3 m3 m3 m4 m4 m4 m5 m5", ScoreTier.FLUSH_ALL_TRIPLETS, 60),
            ("z1 z1 z2 z3 z4 z5 z6 z7 z7 z6 z5 z4 z3 z2", ScoreTier.ALL_HONORS, 50),
            ("m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9 m5", ScoreTier.FLUSH, 40),
            ("m1 m1 m1 p2 p2 p2 s3 s3 s3 z1 z1 z1 z2 z2", ScoreTier.ALL_TRIPLETS, 20),
        ],
    )
    def test_tiers(self, hand, tier, score):
        result = score_winner(_winner(hand), GameSettings())
        assert result.tier == tier
        assert result.score == score

    def test_last_tile_wait_claimed(self):
        melds = [pung("m1"), pung("p2"), pung("s3"), pung("z1")]
        winner = _winner("z2 z2", melds, win_mode=WinMode.CLAIMED_DISCARD, from_seat=1)
        assert winner.pre_win_hand_size == 1
        assert score_winner(winner, GameSettings()).tier == ScoreTier.LAST_TILE_WAIT

    def test_last_tile_wait_self_draw(self):
        melds = [pung("m1"), pung("p2"), pung("s3"), pung("z1")]
        winner = _winner("z2 z2", melds)
        assert winner.pre_win_hand_size == 2
        assert score_winner(winner, GameSettings()).tier == ScoreTier.LAST_TILE_WAIT

    def test_flush_beats_last_tile_wait(self):
        melds = [pung("m1"), pung("m2"), pung("m3"), pung("m4")]
        winner = _winner("m9 m9", melds)
        assert score_winner(winner, GameSettings()).tier == ScoreTier.FLUSH_ALL_TRIPLETS

    def test_mixed_flush_triplets_scores_all_triplets(self):
        result = score_winner(_winner("m1 m1 m1 m2 m2 m2 z1 z1 z1 z2 z2 z2 z3 z3"), GameSettings())
        assert result.tier == ScoreTier.ALL_TRIPLETS

    def test_mixed_flush_counted(self):
        result = score_winner(_winner("p1 p2 p3 p4 p5 p6 p7 p8 p9 z1 z1 z1 z2 z2"), GameSettings())
        assert result.tier == ScoreTier.COUNTED_BONUS
        assert result.counted_points == 2
        assert result.score == 4

    def test_counted_capped(self):
        melds = [bonus(f"f{i}") for i in range(1, 9)]
        result = score_winner(_winner("p1 p2 p3 p4 p5 p6 p7 p8 p9 z1 z1 z1 z2 z2", melds), GameSettings())
        assert result.counted_points == 10
        assert result.score == 10

    def test_tier_values_come_from_settings(self):
        settings = GameSettings(tier_values={**GameSettings().tier_values, ScoreTier.FLUSH: 77})
        result = score_winner(_winner("m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9 m5"), settings)
        assert result.score == 77


class TestSettlement:
    def test_self_draw_paid_by_everyone(self):
        winner = _winner("m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9 m5", seat=2)
        result = GameResult(winners=(winner,), win_mode=WinMode.SELF_DRAW, winning_tile=t("m5"))
        settlement = compute_settlement(result, GameSettings())
        assert settlement.deltas == (-40, -40, 120, -40)
        assert sum(settlement.deltas) == 0

    def test_claimed_win_paid_by_discarder_per_winner(self):
        first = _winner(
            "m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9 m5",
            seat=1,
            win_mode=WinMode.CLAIMED_DISCARD,
            from_seat=0,
        )
        second = _winner(
            "z1 z1 z1 z2 z2 z2 z3 z3 z3 z4 z4 z4 m5 m5",
            seat=3,
            win_mode=WinMode.CLAIMED_DISCARD,
            from_seat=0,
        )
        result = GameResult(
            winners=(first, second),
            win_mode=WinMode.CLAIMED_DISCARD,
            winning_tile=t("m5"),
            discarder_seat=0,
        )
        settlement = compute_settlement(result, GameSettings())
        assert [s.seat for s in settlement.scores] == [1, 3]
        assert settlement.deltas == (-60, 40, 0, 20)
        assert sum(settlement.deltas) == 0

    def test_claimed_win_needs_discarder(self):
        winner = _winner("m1 m1 m1 m2 m3 m4 m5 m6 m7 m8 m9 m9 m9 m5", win_mode=WinMode.CLAIMED_DISCARD)
        result = GameResult(winners=(winner,), win_mode=WinMode.CLAIMED_DISCARD, winning_tile=t("m5"))
        with pytest.raises(ValueError, match="discarder"):
            compute_settlement(result, GameSettings())
