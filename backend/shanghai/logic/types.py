"""
Pydantic models for table data structures that cross module boundaries.

Contains the meld record, discard log entries, round results, score
settlements and the full-information table snapshot.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator

from shanghai.logic.enums import (
    ClaimDecision,
    KongOrigin,
    MeldType,
    RoundPhase,
    RoundResultType,
    ScoreTier,
    WinMode,
    WinShape,
)
from shanghai.logic.tiles import Tile

ChowPair = tuple[Tile, Tile]

_MELD_SIZES: dict[MeldType, int] = {
    MeldType.CHOW: 3,
    MeldType.PUNG: 3,
    MeldType.KONG: 4,
    MeldType.BONUS: 1,
}


class Meld(BaseModel):
    """
    One exposed or concealed set owned by a seat.

    A single record type discriminated by `type`. `from_seat` is the discarding
    seat for claimed melds and None for self-formed ones; `kong_origin` is set
    only for kongs. `called_tile` is the discard that completed a claimed meld.
    """

    model_config = ConfigDict(frozen=True)

    type: MeldType
    tiles: tuple[Tile, ...]
    from_seat: int | None = None
    kong_origin: KongOrigin | None = None
    called_tile: Tile | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Meld:
        expected = _MELD_SIZES[self.type]
        if len(self.tiles) != expected:
            raise ValueError(f"{self.type.value} meld needs {expected} tiles, got {len(self.tiles)}")
        if (self.type == MeldType.KONG) != (self.kong_origin is not None):
            raise ValueError("kong_origin must be set for kongs and only for kongs")
        return self

    @property
    def is_concealed_kong(self) -> bool:
        return self.type == MeldType.KONG and self.kong_origin == KongOrigin.CONCEALED


class DiscardRecord(BaseModel):
    """One entry in the table's discard log."""

    model_config = ConfigDict(frozen=True)

    seat: int
    tile: Tile


class WinnerRecord(BaseModel):
    """
    Everything recorded about one winner at the moment of winning.

    `tiles` is the candidate that passed the recognizer (hand plus meld tiles,
    kongs counted as three, bonus excluded, winning tile included). `hand` is
    the concealed hand including the winning tile.
    """

    model_config = ConfigDict(frozen=True)

    seat: int
    tiles: tuple[Tile, ...]
    hand: tuple[Tile, ...]
    melds: tuple[Meld, ...]
    shape: WinShape
    label: str
    win_mode: WinMode
    winning_tile: Tile
    from_seat: int | None = None
    pre_win_hand_size: int


class GameResult(BaseModel):
    """Terminal artifact of a won hand. Winners are ordered by seat."""

    model_config = ConfigDict(frozen=True)

    winners: tuple[WinnerRecord, ...]
    win_mode: WinMode
    winning_tile: Tile
    discarder_seat: int | None = None

    @property
    def winner_seats(self) -> list[int]:
        return [w.seat for w in self.winners]


class WinnerScore(BaseModel):
    """Scoring tier and value for one winner."""

    model_config = ConfigDict(frozen=True)

    seat: int
    tier: ScoreTier
    score: int
    counted_points: int


class ScoreSettlement(BaseModel):
    """Per-winner scores and the zero-sum point transfer across seats."""

    model_config = ConfigDict(frozen=True)

    scores: tuple[WinnerScore, ...]
    deltas: tuple[int, ...]


class ClaimView(BaseModel):
    """Eligibility and decisions of the open claim window."""

    model_config = ConfigDict(frozen=True)

    tile: Tile
    from_seat: int
    chow_seat: int
    win_seats: list[int]
    kong_seats: list[int]
    pung_seats: list[int]
    chow_options: list[ChowPair]
    decisions: dict[int, dict[str, ClaimDecision]]


class SeatView(BaseModel):
    """Full-information view of one seat."""

    model_config = ConfigDict(frozen=True)

    seat: int
    hand: tuple[Tile, ...]
    melds: tuple[Meld, ...]


class TableSnapshot(BaseModel):
    """Full table state as handed to the view-projection collaborator."""

    model_config = ConfigDict(frozen=True)

    seats: tuple[SeatView, ...]
    discards: tuple[DiscardRecord, ...]
    wall_count: int
    current_seat: int
    dealer_seat: int
    phase: RoundPhase
    pending_claim: ClaimView | None = None
    result: GameResult | None = None
    end_reason: RoundResultType | None = None
    settlement: ScoreSettlement | None = None
