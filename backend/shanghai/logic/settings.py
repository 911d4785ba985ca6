"""Centralized table settings - every configurable rule and scoring constant."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from shanghai.logic.enums import ScoreTier, Suit, WallMode
from shanghai.logic.exceptions import UnsupportedSettingsError
from shanghai.logic.rules import is_registered_rule
from shanghai.logic.tiles import NUM_BONUS_TYPES, Tile

NUM_PLAYERS = 4
DEALER_SEAT = 0
MAX_HAND_SIZE = 13


class GameSettings(BaseModel):
    """
    Configuration for one Shanghai table.

    Defaults match the standard four-player ruleset.
    """

    model_config = ConfigDict(frozen=True)

    # --- Table Structure ---
    num_players: int = NUM_PLAYERS
    initial_hand_size: int = MAX_HAND_SIZE
    num_bonus_tiles: int = NUM_BONUS_TYPES
    rule_id: str = "shanghai"

    # --- Wall Construction ---
    wall_mode: WallMode = WallMode.STANDARD
    debug_tile: Tile = Tile(suit=Suit.CHARACTERS, rank=1)

    # --- Win Rules ---
    require_bonus_points_unless_flush: bool = True

    # --- Scoring ---
    tier_values: dict[ScoreTier, int] = {
        ScoreTier.ALL_HONORS_TRIPLETS: 100,
        ScoreTier.FLUSH_ALL_TRIPLETS: 60,
        ScoreTier.ALL_HONORS: 50,
        ScoreTier.FLUSH: 40,
        ScoreTier.LAST_TILE_WAIT: 20,
        ScoreTier.ALL_TRIPLETS: 20,
    }
    counted_base_points: int = 2
    counted_points_cap: int = 10
    points_per_bonus_tile: int = 1
    points_per_exposed_kong: int = 1
    points_per_concealed_kong: int = 2
    points_per_exposed_honor_triplet: int = 1
    points_per_concealed_honor_triplet: int = 2
    honor_kong_extra_points: int = 1


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the engine.

    Raises UnsupportedSettingsError listing every problem found.
    """
    errors: list[str] = []

    if settings.num_players != NUM_PLAYERS:
        errors.append(f"num_players={settings.num_players} is not supported (only 4-player tables)")

    if not (1 <= settings.initial_hand_size <= MAX_HAND_SIZE):
        errors.append(f"initial_hand_size={settings.initial_hand_size} must be in [1, {MAX_HAND_SIZE}]")

    if not (0 <= settings.num_bonus_tiles <= NUM_BONUS_TYPES):
        errors.append(f"num_bonus_tiles={settings.num_bonus_tiles} must be in [0, {NUM_BONUS_TYPES}]")

    if not is_registered_rule(settings.rule_id):
        errors.append(f"rule_id={settings.rule_id!r} is not a registered rule")

    if settings.debug_tile.suit == Suit.BONUS and settings.wall_mode == WallMode.DEBUG_SAME_TILE:
        errors.append("debug_tile must not be a bonus tile")

    missing_tiers = [
        tier.value for tier in ScoreTier if tier != ScoreTier.COUNTED_BONUS and tier not in settings.tier_values
    ]
    if missing_tiers:
        errors.append(f"tier_values is missing tiers: {', '.join(missing_tiers)}")

    if settings.counted_points_cap < settings.counted_base_points:
        errors.append("counted_points_cap must not be below counted_base_points")

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))
