"""
Knot Untangle - Configuration

Engine settings via environment variables (prefix KNOT_).
"""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings."""

    # App
    APP_NAME: str = "Knot Untangle"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Board geometry
    CIRCLE_RADIUS: float = 4.5
    PIN_RADIUS: float = 0.52

    # Difficulty curve
    MIN_POINTS: int = 5
    MAX_POINTS: int = 15
    LEVELS_PER_POINT: int = 10
    BASE_DENSITY: float = 1.2
    DENSITY_GAIN: float = 0.8  # added over the first 100 levels
    MAX_DENSITY: float = 2.0
    BASE_SCRAMBLE: int = 20
    SCRAMBLE_PER_LEVEL: int = 2
    MAX_LEVEL: int = 100

    # Generation
    JITTER_AMPLITUDE: float = 0.2
    STRICT_CHORDS: bool = True
    RESCRAMBLE_ATTEMPTS: int = 10

    # Tangle detection
    PARALLEL_EPSILON: float = 0.001
    ENDPOINT_EPSILON: float = 0.05

    # Play area
    CLAMP_TO_BOUNDS: bool = False
    BOUND_X: float = 9.0
    BOUND_Y: float = 14.0

    @field_validator("ENDPOINT_EPSILON")
    @classmethod
    def validate_endpoint_epsilon(cls, value: float) -> float:
        if not 0 <= value < 0.5:
            raise ValueError(f"ENDPOINT_EPSILON must be in [0, 0.5), got: {value}")
        return value

    @field_validator("PARALLEL_EPSILON", "CIRCLE_RADIUS", "PIN_RADIUS", "BOUND_X", "BOUND_Y")
    @classmethod
    def validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"value must be positive, got: {value}")
        return value

    @field_validator("JITTER_AMPLITUDE")
    @classmethod
    def validate_jitter(cls, value: float) -> float:
        if value < 0:
            raise ValueError(f"JITTER_AMPLITUDE must not be negative, got: {value}")
        return value

    @model_validator(mode="after")
    def validate_curve(self) -> "Settings":
        if self.MIN_POINTS < 3:
            raise ValueError(f"MIN_POINTS must be at least 3, got: {self.MIN_POINTS}")
        if self.MAX_POINTS < self.MIN_POINTS:
            raise ValueError(
                f"MAX_POINTS ({self.MAX_POINTS}) must not be below MIN_POINTS ({self.MIN_POINTS})"
            )
        if self.LEVELS_PER_POINT < 1:
            raise ValueError(f"LEVELS_PER_POINT must be at least 1, got: {self.LEVELS_PER_POINT}")
        # Jitter must never make two pins overlap.
        if self.JITTER_AMPLITUDE >= self.PIN_RADIUS / 2:
            raise ValueError(
                f"JITTER_AMPLITUDE ({self.JITTER_AMPLITUDE}) must stay below half "
                f"the pin radius ({self.PIN_RADIUS / 2})"
            )
        return self

    @property
    def bounds(self) -> tuple[float, float]:
        return self.BOUND_X, self.BOUND_Y

    model_config = SettingsConfigDict(
        env_prefix="KNOT_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get settings (cached)."""
    return Settings()


settings = get_settings()
