"""Table configuration via environment variables."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shanghai.logic.enums import WallMode
from shanghai.logic.settings import MAX_HAND_SIZE, GameSettings, validate_settings
from shanghai.logic.tiles import NUM_BONUS_TYPES, tile_from_code


class TableEnvSettings(BaseSettings):
    model_config = {"env_prefix": "SHANGHAI_"}

    log_dir: str = Field(default="backend/logs/shanghai", min_length=1)
    rule_id: str = Field(default="shanghai", min_length=1)
    initial_hand_size: int = Field(default=MAX_HAND_SIZE, ge=1, le=MAX_HAND_SIZE)
    num_bonus_tiles: int = Field(default=NUM_BONUS_TYPES, ge=0, le=NUM_BONUS_TYPES)
    wall_mode: WallMode = WallMode.STANDARD
    debug_tile: str = "m1"

    @field_validator("debug_tile")
    @classmethod
    def validate_debug_tile(cls, v: str) -> str:
        tile_from_code(v)
        return v

    def to_game_settings(self) -> GameSettings:
        settings = GameSettings(
            rule_id=self.rule_id,
            initial_hand_size=self.initial_hand_size,
            num_bonus_tiles=self.num_bonus_tiles,
            wall_mode=self.wall_mode,
            debug_tile=tile_from_code(self.debug_tile),
        )
        validate_settings(settings)
        return settings


def load_game_settings() -> GameSettings:
    """Build validated table settings from SHANGHAI_* environment variables."""
    return TableEnvSettings().to_game_settings()
