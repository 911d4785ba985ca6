"""Domain event models and the command outcome container.

Every accepted command produces a list of events for the transport
collaborator to route. Targets are "all" or "seat_<n>"; parse_event_target()
turns them into typed routing targets.

All layers import exclusively from this module for event types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shanghai.logic.enums import (
    ClaimDecision,
    ClaimRung,
    GameErrorCode,
    KongOrigin,
    MeldType,
    RoundResultType,
)
from shanghai.logic.tiles import Tile
from shanghai.logic.types import ChowPair, GameResult, ScoreSettlement

# ---------------------------------------------------------------------------
# Typed routing targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BroadcastTarget:
    """Event should be sent to every seat at the table."""


@dataclass(frozen=True)
class SeatTarget:
    """Event should be sent to a specific seat."""

    seat: int


EventTarget = BroadcastTarget | SeatTarget


def seat_target(seat: int) -> str:
    return f"seat_{seat}"


def parse_event_target(value: str) -> EventTarget:
    """Parse a string target into a typed EventTarget."""
    if value == "all":
        return BroadcastTarget()
    if value.startswith("seat_"):
        seat = int(value.split("_")[1])
        if seat < 0:
            raise ValueError(f"invalid seat number in target: {value}")
        return SeatTarget(seat=seat)
    raise ValueError(f"invalid target value: {value}")


# ---------------------------------------------------------------------------
# Event type enum
# ---------------------------------------------------------------------------


class EventType(StrEnum):
    """Types of table events."""

    TABLE_STARTED = "table_started"
    DRAW = "draw"
    DISCARD = "discard"
    CLAIM_PROMPT = "claim_prompt"
    CLAIM_DECISION = "claim_decision"
    MELD = "meld"
    ROUND_END = "round_end"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Domain event models
# ---------------------------------------------------------------------------


class GameEvent(BaseModel):
    """Base class for all domain table events."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    target: str


class TableStartedEvent(GameEvent):
    """Event broadcast when hands have been dealt."""

    type: Literal[EventType.TABLE_STARTED] = EventType.TABLE_STARTED
    target: str = "all"
    dealer_seat: int
    hand_number: int
    wall_count: int


class DrawEvent(GameEvent):
    """Event sent to a seat when it acquires a tile from the wall.

    `bonus_tiles` lists bonus tiles set aside before the kept tile arrived.
    `tile` is None when the wall ran out during the draw.
    """

    type: Literal[EventType.DRAW] = EventType.DRAW
    seat: int
    tile: Tile | None
    bonus_tiles: list[Tile] = Field(default_factory=list)
    is_replacement: bool = False
    wall_count: int


class DiscardEvent(GameEvent):
    """Event broadcast when a seat discards a tile."""

    type: Literal[EventType.DISCARD] = EventType.DISCARD
    target: str = "all"
    seat: int
    tile: Tile


class ClaimPromptEvent(GameEvent):
    """Event broadcast when a claim window opens on a discard."""

    type: Literal[EventType.CLAIM_PROMPT] = EventType.CLAIM_PROMPT
    target: str = "all"
    tile: Tile
    from_seat: int
    win_seats: list[int]
    kong_seats: list[int]
    pung_seats: list[int]
    chow_seat: int | None = None
    chow_options: list[ChowPair] = Field(default_factory=list)


class ClaimDecisionEvent(GameEvent):
    """Event broadcast when a seat records a decision on one rung."""

    type: Literal[EventType.CLAIM_DECISION] = EventType.CLAIM_DECISION
    target: str = "all"
    seat: int
    rung: ClaimRung
    decision: ClaimDecision


class MeldEvent(GameEvent):
    """Event broadcast when a seat forms a meld (chow, pung, kong)."""

    type: Literal[EventType.MELD] = EventType.MELD
    target: str = "all"
    meld_type: MeldType
    seat: int
    tiles: list[Tile]
    from_seat: int | None = None
    kong_origin: KongOrigin | None = None


class RoundEndEvent(GameEvent):
    """Event broadcast when the hand ends by a win or an exhausted wall."""

    type: Literal[EventType.ROUND_END] = EventType.ROUND_END
    target: str = "all"
    end_reason: RoundResultType
    result: GameResult | None = None
    settlement: ScoreSettlement | None = None


class ErrorEvent(GameEvent):
    """Event sent to a seat when its command is rejected."""

    type: Literal[EventType.ERROR] = EventType.ERROR
    code: GameErrorCode
    message: str


Event = (
    TableStartedEvent
    | DrawEvent
    | DiscardEvent
    | ClaimPromptEvent
    | ClaimDecisionEvent
    | MeldEvent
    | RoundEndEvent
    | ErrorEvent
)


# ---------------------------------------------------------------------------
# Command outcome
# ---------------------------------------------------------------------------


class CommandOutcome(BaseModel):
    """Result of one command against a table engine."""

    model_config = ConfigDict(frozen=True)

    accepted: bool
    detail: str = ""
    events: list[GameEvent] = Field(default_factory=list)
