"""
Table state models for a Shanghai table.

All models are frozen; updates go through model_copy (see state_utils).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shanghai.logic.enums import ClaimDecision, ClaimRung, RoundPhase, RoundResultType
from shanghai.logic.settings import GameSettings
from shanghai.logic.tiles import Tile
from shanghai.logic.types import ChowPair, DiscardRecord, GameResult, Meld
from shanghai.logic.wall import Wall


class TablePlayer(BaseModel):
    """One seat: concealed hand and melds."""

    model_config = ConfigDict(frozen=True)

    seat: int
    tiles: tuple[Tile, ...] = ()
    melds: tuple[Meld, ...] = ()


class PendingClaim(BaseModel):
    """
    The open claim window on the last discard.

    Eligibility is fixed when the window opens. Decision maps hold one entry
    per seat that has decided at that rung. `chow_blocked_reason` is set when
    the suit restriction keeps the chow seat out.
    """

    model_config = ConfigDict(frozen=True)

    tile: Tile
    from_seat: int
    chow_seat: int
    win_seats: frozenset[int] = frozenset()
    kong_seats: frozenset[int] = frozenset()
    pung_seats: frozenset[int] = frozenset()
    chow_eligible: bool = False
    chow_options: tuple[ChowPair, ...] = ()
    chow_blocked_reason: str | None = None
    win_decisions: dict[int, ClaimDecision] = Field(default_factory=dict)
    kong_decisions: dict[int, ClaimDecision] = Field(default_factory=dict)
    pung_decisions: dict[int, ClaimDecision] = Field(default_factory=dict)
    chow_decision: ClaimDecision | None = None
    chow_pair: ChowPair | None = None

    def eligible_seats(self, rung: ClaimRung) -> frozenset[int]:
        if rung == ClaimRung.WIN:
            return self.win_seats
        if rung == ClaimRung.KONG:
            return self.kong_seats
        if rung == ClaimRung.PUNG:
            return self.pung_seats
        return frozenset({self.chow_seat}) if self.chow_eligible else frozenset()

    def decisions(self, rung: ClaimRung) -> dict[int, ClaimDecision]:
        if rung == ClaimRung.WIN:
            return self.win_decisions
        if rung == ClaimRung.KONG:
            return self.kong_decisions
        if rung == ClaimRung.PUNG:
            return self.pung_decisions
        return {self.chow_seat: self.chow_decision} if self.chow_decision is not None else {}

    def undecided_rungs(self, seat: int) -> list[ClaimRung]:
        return [
            rung
            for rung in ClaimRung
            if seat in self.eligible_seats(rung) and seat not in self.decisions(rung)
        ]

    @property
    def has_any_eligibility(self) -> bool:
        return bool(self.win_seats or self.kong_seats or self.pung_seats or self.chow_eligible)


class TableState(BaseModel):
    """
    Complete state of one table.

    `total_tiles` is captured when the wall is built and never changes until
    the next reset. `last_drawn_tile` is the tile the active seat just drew
    (wall or kong replacement); it is None after a chow or pung claim.
    """

    model_config = ConfigDict(frozen=True)

    settings: GameSettings = Field(default_factory=GameSettings)
    seed: str = ""
    hand_number: int = 0
    wall: Wall = Field(default_factory=Wall)
    players: tuple[TablePlayer, ...] = ()
    discards: tuple[DiscardRecord, ...] = ()
    current_seat: int = 0
    dealer_seat: int = 0
    phase: RoundPhase = RoundPhase.DRAW
    pending_claim: PendingClaim | None = None
    result: GameResult | None = None
    end_reason: RoundResultType | None = None
    last_drawn_tile: Tile | None = None
    total_tiles: int = 0

    @model_validator(mode="after")
    def _check_claim_window(self) -> TableState:
        if (self.pending_claim is not None) != (self.phase == RoundPhase.CLAIM):
            raise ValueError("pending_claim must exist exactly when phase is claim")
        return self
