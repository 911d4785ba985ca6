"""
Suit restriction tracking for claims.

The table only pays out on single-suit shapes and all-triplets, so claims
that would spread a seat across suits are limited:

- the first chow locks the seat to that suit; afterwards chow, pung and kong
  of numbered tiles must match it
- before any chow, pung/kong in two or more numbered suits forbids chow
- before any chow, pung/kong in exactly one numbered suit allows chow only in
  that suit

Honors are always exempt and bonus melds are ignored. The state is derived
from the meld list on every check and never stored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from shanghai.logic.enums import NUMBERED_SUITS, MeldType, Suit

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shanghai.logic.tiles import Tile
    from shanghai.logic.types import Meld

REASON_CHOW_LOCKED = "chow locked to another suit"
REASON_TWO_SUITS_FORBID_CHOW = "two suits pung/konged forbids chow"
REASON_PUNG_SUIT_LIMITS_CHOW = "pung/kong suit limits chow to that suit"
REASON_NOT_CLAIMABLE = "bonus tiles cannot be claimed"


class RestrictionState(NamedTuple):
    chow_locked_suit: Suit | None
    pung_kong_suits: frozenset[Suit]


class RestrictionCheck(NamedTuple):
    ok: bool
    reason: str | None = None


def restriction_state_from_melds(melds: Iterable[Meld]) -> RestrictionState:
    chow_locked_suit: Suit | None = None
    pung_kong_suits: set[Suit] = set()

    for meld in melds:
        if meld.type == MeldType.BONUS:
            continue
        suit = meld.tiles[0].suit
        if suit not in NUMBERED_SUITS:
            continue
        if meld.type == MeldType.CHOW:
            if chow_locked_suit is None:
                chow_locked_suit = suit
        else:
            pung_kong_suits.add(suit)

    return RestrictionState(chow_locked_suit, frozenset(pung_kong_suits))


def can_chow_by_restriction(state: RestrictionState, tile: Tile) -> RestrictionCheck:
    if tile.suit == Suit.HONOR:
        return RestrictionCheck(ok=True)
    if tile.suit not in NUMBERED_SUITS:
        return RestrictionCheck(ok=False, reason=REASON_NOT_CLAIMABLE)

    if state.chow_locked_suit is not None:
        if tile.suit == state.chow_locked_suit:
            return RestrictionCheck(ok=True)
        return RestrictionCheck(ok=False, reason=REASON_CHOW_LOCKED)

    if len(state.pung_kong_suits) >= 2:  # noqa: PLR2004
        return RestrictionCheck(ok=False, reason=REASON_TWO_SUITS_FORBID_CHOW)

    if state.pung_kong_suits and tile.suit not in state.pung_kong_suits:
        return RestrictionCheck(ok=False, reason=REASON_PUNG_SUIT_LIMITS_CHOW)

    return RestrictionCheck(ok=True)


def can_pung_kong_by_restriction(state: RestrictionState, tile: Tile) -> RestrictionCheck:
    if tile.suit == Suit.HONOR:
        return RestrictionCheck(ok=True)
    if tile.suit not in NUMBERED_SUITS:
        return RestrictionCheck(ok=False, reason=REASON_NOT_CLAIMABLE)

    if state.chow_locked_suit is not None and tile.suit != state.chow_locked_suit:
        return RestrictionCheck(ok=False, reason=REASON_CHOW_LOCKED)

    return RestrictionCheck(ok=True)
