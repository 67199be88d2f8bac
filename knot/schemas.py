"""
Knot Untangle - Pydantic Schemas

Level and evaluation data exchanged with the host.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, model_validator


# ============================================
# LEVEL
# ============================================

class Point(BaseModel):
    """Pin. z is cosmetic depth and never used by tangle math."""
    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    y: float
    z: float = 0.0
    color: str


class Rope(BaseModel):
    """Rope between two pins."""
    model_config = ConfigDict(frozen=True)

    id: str
    p1: str
    p2: str
    color: str = "#FFFFFF"

    @property
    def endpoints(self) -> frozenset:
        return frozenset((self.p1, self.p2))


class LevelMeta(BaseModel):
    """Level metadata."""
    point_count: int
    rope_count: int
    chord_count: int = 0
    scramble_count: int = 0
    density: float = 0.0
    initial_tangled: int = 0
    difficulty: float = 0.0


class LevelData(BaseModel):
    """Generated level: ordered pins (ring order) and ropes."""
    level: int
    seed: int
    points: List[Point]
    ropes: List[Rope]
    meta: LevelMeta

    @model_validator(mode="after")
    def validate_graph(self) -> "LevelData":
        point_ids = set()
        for point in self.points:
            if point.id in point_ids:
                raise ValueError(f"Duplicate point id: {point.id}")
            point_ids.add(point.id)

        rope_ids = set()
        pairs = set()
        for rope in self.ropes:
            if rope.id in rope_ids:
                raise ValueError(f"Duplicate rope id: {rope.id}")
            rope_ids.add(rope.id)

            if rope.p1 == rope.p2:
                raise ValueError(f"Rope {rope.id} connects point {rope.p1} to itself")
            for end in (rope.p1, rope.p2):
                if end not in point_ids:
                    raise ValueError(f"Rope {rope.id} references unknown point {end}")

            if rope.endpoints in pairs:
                raise ValueError(f"Rope {rope.id} duplicates pair {rope.p1}-{rope.p2}")
            pairs.add(rope.endpoints)

        return self

    def point_by_id(self) -> Dict[str, Point]:
        return {p.id: p for p in self.points}


# ============================================
# EVALUATION
# ============================================

class EngineStatus(str, Enum):
    """Lifecycle of one level instance."""
    INITIALIZING = "initializing"
    ACTIVE = "active"
    SOLVED = "solved"


class EvaluationResult(BaseModel):
    """Per-rope tangled flags and the overall solved flag."""
    tangled: Dict[str, bool]
    solved: bool

    @property
    def tangled_ids(self) -> List[str]:
        return [rope_id for rope_id, flag in self.tangled.items() if flag]
