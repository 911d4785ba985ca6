"""
String enum definitions for Shanghai mahjong table concepts.
"""

from enum import Enum


class Suit(str, Enum):
    """Tile suits, valued by their compact notation prefix."""

    CHARACTERS = "m"
    DOTS = "p"
    BAMBOO = "s"
    HONOR = "z"
    BONUS = "f"


NUMBERED_SUITS: tuple[Suit, ...] = (Suit.CHARACTERS, Suit.DOTS, Suit.BAMBOO)


class RoundPhase(str, Enum):
    """Phase of the table state machine."""

    DRAW = "draw"
    DISCARD = "discard"
    CLAIM = "claim"
    END = "end"


class MeldType(str, Enum):
    """Discriminant of the meld record."""

    CHOW = "chow"
    PUNG = "pung"
    KONG = "kong"
    BONUS = "bonus"


class KongOrigin(str, Enum):
    """How a kong was formed."""

    FROM_DISCARD = "from_discard"
    CONCEALED = "concealed"
    PROMOTED = "promoted"


class ClaimRung(str, Enum):
    """Priority rungs of the claim window, highest first."""

    WIN = "win"
    KONG = "kong"
    PUNG = "pung"
    CHOW = "chow"


CLAIM_PRIORITY: tuple[ClaimRung, ...] = (ClaimRung.WIN, ClaimRung.KONG, ClaimRung.PUNG, ClaimRung.CHOW)


class ClaimDecision(str, Enum):
    """A seat's recorded choice on one rung."""

    ACT = "act"
    PASS = "pass"  # noqa: S105


class ClaimResolutionKind(str, Enum):
    """Outcome of one arbitration step."""

    WAIT = "wait"
    WIN = "win"
    KONG = "kong"
    PUNG = "pung"
    CHOW = "chow"
    ALL_PASS = "all_pass"


class TableAction(str, Enum):
    """Commands accepted by the table engine."""

    DRAW = "draw"
    DISCARD = "discard"
    DECLARE_WIN = "declare_win"
    DECLARE_KONG = "declare_kong"
    DECLARE_PUNG = "declare_pung"
    DECLARE_CHOW = "declare_chow"
    PASS = "pass"  # noqa: S105
    RESET = "reset"


class GameErrorCode(str, Enum):
    """Error codes attached to rejected commands."""

    NOT_YOUR_TURN = "not_your_turn"
    WRONG_PHASE = "wrong_phase"
    GAME_ENDED = "game_ended"
    INVALID_DISCARD = "invalid_discard"
    INVALID_WIN = "invalid_win"
    INVALID_KONG = "invalid_kong"
    INVALID_PUNG = "invalid_pung"
    INVALID_CHOW = "invalid_chow"
    INVALID_PASS = "invalid_pass"  # noqa: S105
    INVALID_ACTION = "invalid_action"
    GAME_ERROR = "game_error"


class WinShape(str, Enum):
    """Supported winning shapes, valued by their human-readable label."""

    ALL_HONORS = "all honors"
    FLUSH_ALL_TRIPLETS = "flush all-triplets"
    FLUSH = "flush"
    MIXED_FLUSH = "mixed flush"
    ALL_TRIPLETS = "all triplets"


FLUSH_SHAPES: frozenset[WinShape] = frozenset({WinShape.FLUSH, WinShape.FLUSH_ALL_TRIPLETS})


class WinMode(str, Enum):
    """How the winning tile reached the winner."""

    SELF_DRAW = "self_draw"
    CLAIMED_DISCARD = "claimed_discard"


class ScoreTier(str, Enum):
    """Scoring tiers, compound tiers listed before their components."""

    ALL_HONORS_TRIPLETS = "all_honors_triplets"
    FLUSH_ALL_TRIPLETS = "flush_all_triplets"
    ALL_HONORS = "all_honors"
    FLUSH = "flush"
    LAST_TILE_WAIT = "last_tile_wait"
    ALL_TRIPLETS = "all_triplets"
    COUNTED_BONUS = "counted_bonus"


class RoundResultType(str, Enum):
    """Why the table reached the end phase."""

    WIN = "win"
    EXHAUSTIVE_DRAW = "exhaustive_draw"


class WallMode(str, Enum):
    """Wall construction modes. Debug modes exist for manual table testing."""

    STANDARD = "standard"
    DEBUG_SINGLE_SUIT = "debug_single_suit"
    DEBUG_SAME_TILE = "debug_same_tile"
