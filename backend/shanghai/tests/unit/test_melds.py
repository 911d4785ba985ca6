"""
Unit tests for meld formation: chow options, claimed melds, own-turn kongs
and bonus set-aside.
"""

import pytest

from shanghai.logic.enums import KongOrigin, MeldType
from shanghai.logic.exceptions import InvalidMeldError
from shanghai.logic.melds import (
    call_chow,
    call_concealed_kong,
    call_kong_from_discard,
    call_promoted_kong,
    call_pung,
    can_kong_on_discard,
    can_pung,
    chow_options,
    concealed_kong_options,
    own_turn_kong_options,
    promoted_kong_options,
    restricted_chow_options,
    set_aside_bonus,
)
from shanghai.tests.conftest import chow, create_player, create_table_state, pung, t, ts


def _state_with_hand(seat: int, hand: str, melds=None):
    players = [create_player(seat=i) for i in range(4)]
    players[seat] = create_player(seat=seat, tiles=ts(hand), melds=melds)
    return create_table_state(players=players)


class TestChowOptions:
    def test_all_three_positions_lowest_first(self):
        options = chow_options(ts("m3 m4 m6 m7"), t("m5"))
        assert options == [(t("m3"), t("m4")), (t("m4"), t("m6")), (t("m6"), t("m7"))]

    def test_edges_of_suit(self):
        assert chow_options(ts("m2 m3 m8"), t("m1")) == [(t("m2"), t("m3"))]
        assert chow_options(ts("m7 m8"), t("m9")) == [(t("m7"), t("m8"))]

    def test_other_suit_does_not_count(self):
        assert chow_options(ts("p3 p4"), t("m5")) == []

    def test_honors_cannot_be_chowed(self):
        assert chow_options(ts("z1 z2 z3"), t("z2")) == []

    def test_restricted_options_empty_when_forbidden(self):
        player = create_player(tiles=ts("m3 m4"), melds=[pung("p1"), pung("s1")])
        assert restricted_chow_options(player, t("m5")) == []


class TestPungKongChecks:
    def test_pung_needs_two(self):
        assert can_pung(ts("z1 z1"), t("z1"))
        assert not can_pung(ts("z1"), t("z1"))

    def test_kong_needs_three(self):
        assert can_kong_on_discard(ts("s4 s4 s4"), t("s4"))
        assert not can_kong_on_discard(ts("s4 s4"), t("s4"))


class TestClaimedMelds:
    def test_call_chow(self):
        state = _state_with_hand(1, "m3 m4 z1")
        new_state = call_chow(state, 1, 0, t("m5"), (t("m3"), t("m4")))
        player = new_state.players[1]
        assert list(player.tiles) == ts("z1")
        meld = player.melds[-1]
        assert meld.type == MeldType.CHOW
        assert list(meld.tiles) == ts("m3 m4 m5")
        assert meld.from_seat == 0
        assert meld.called_tile == t("m5")

    def test_call_chow_rejects_bad_pair(self):
        state = _state_with_hand(1, "m3 m4 z1")
        with pytest.raises(InvalidMeldError, match="does not make a run"):
            call_chow(state, 1, 0, t("m5"), (t("m3"), t("z1")))

    def test_call_chow_respects_restriction(self):
        state = _state_with_hand(1, "m3 m4", melds=[chow("p1 p2 p3")])
        with pytest.raises(InvalidMeldError, match="chow locked"):
            call_chow(state, 1, 0, t("m5"), (t("m3"), t("m4")))

    def test_call_pung(self):
        state = _state_with_hand(2, "z5 z5 m1")
        new_state = call_pung(state, 2, 0, t("z5"))
        assert list(new_state.players[2].tiles) == ts("m1")
        meld = new_state.players[2].melds[-1]
        assert meld.type == MeldType.PUNG
        assert meld.from_seat == 0

    def test_call_pung_missing_tiles(self):
        state = _state_with_hand(2, "z5 m1")
        with pytest.raises(InvalidMeldError, match="copies"):
            call_pung(state, 2, 0, t("z5"))

    def test_call_kong_from_discard(self):
        state = _state_with_hand(3, "s2 s2 s2 p9")
        new_state = call_kong_from_discard(state, 3, 1, t("s2"))
        meld = new_state.players[3].melds[-1]
        assert meld.kong_origin == KongOrigin.FROM_DISCARD
        assert len(meld.tiles) == 4
        assert list(new_state.players[3].tiles) == ts("p9")


class TestOwnTurnKongs:
    def test_concealed_kong_options(self):
        player = create_player(tiles=ts("m1 m1 m1 m1 z2 z2 z2 z2 p3"))
        assert concealed_kong_options(player) == ts("m1 z2")

    def test_concealed_kong_blocked_by_chow_lock(self):
        player = create_player(tiles=ts("m1 m1 m1 m1"), melds=[chow("s1 s2 s3")])
        assert concealed_kong_options(player) == []

    def test_call_concealed_kong(self):
        state = _state_with_hand(0, "m1 m1 m1 m1 p3")
        new_state = call_concealed_kong(state, 0, t("m1"))
        meld = new_state.players[0].melds[-1]
        assert meld.is_concealed_kong
        assert meld.from_seat is None
        assert list(new_state.players[0].tiles) == ts("p3")

    def test_promoted_kong_keeps_position_and_from_seat(self):
        state = _state_with_hand(0, "z3 p3", melds=[pung("z3", from_seat=2), pung("m9", from_seat=1)])
        assert promoted_kong_options(state.players[0]) == ts("z3")
        new_state = call_promoted_kong(state, 0, t("z3"))
        melds = new_state.players[0].melds
        assert melds[0].type == MeldType.KONG
        assert melds[0].kong_origin == KongOrigin.PROMOTED
        assert melds[0].from_seat == 2
        assert melds[1].type == MeldType.PUNG
        assert list(new_state.players[0].tiles) == ts("p3")

    def test_promoted_kong_without_pung(self):
        state = _state_with_hand(0, "z3")
        with pytest.raises(InvalidMeldError, match="no pung"):
            call_promoted_kong(state, 0, t("z3"))

    def test_own_turn_options_merge_both_kinds(self):
        player = create_player(tiles=ts("p3 p3 p3 p3 z3"), melds=[pung("z3")])
        assert own_turn_kong_options(player) == ts("p3 z3")


class TestBonusSetAside:
    def test_bonus_becomes_meld(self):
        state = _state_with_hand(0, "m1")
        new_state = set_aside_bonus(state, 0, t("f4"))
        meld = new_state.players[0].melds[-1]
        assert meld.type == MeldType.BONUS
        assert list(meld.tiles) == ts("f4")

    def test_non_bonus_rejected(self):
        state = _state_with_hand(0, "m1")
        with pytest.raises(InvalidMeldError, match="not a bonus"):
            set_aside_bonus(state, 0, t("m1"))
