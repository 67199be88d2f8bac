"""
Knot Untangle - puzzle engine.

Level generation and tangle detection for the untangle-the-knot game.
"""

from .exceptions import InvalidLevelIndexError, InvalidReferenceError, KnotError
from .schemas import EngineStatus, EvaluationResult, LevelData, LevelMeta, Point, Rope
from .services.engine import TangleEngine, find_tangled
from .services.generator import SeededRandom, generate_level, get_solved_layout, validate_level

__version__ = "1.0.0"

__all__ = [
    "EngineStatus",
    "EvaluationResult",
    "InvalidLevelIndexError",
    "InvalidReferenceError",
    "KnotError",
    "LevelData",
    "LevelMeta",
    "Point",
    "Rope",
    "SeededRandom",
    "TangleEngine",
    "find_tangled",
    "generate_level",
    "get_solved_layout",
    "validate_level",
]
