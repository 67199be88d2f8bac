"""
Knot Untangle - Tangle Engine

Owns pin positions for one level instance and decides which ropes are
tangled and whether the level is solved.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..exceptions import InvalidReferenceError
from ..schemas import EngineStatus, EvaluationResult, LevelData, Rope
from .geometry import clamp_position, ropes_share_endpoint, segments_intersect

logger = logging.getLogger(__name__)

Position = Tuple[float, float, float]


# ============================================
# PURE EVALUATION
# ============================================

def non_adjacent_pairs(ropes: Sequence[Rope]) -> List[Tuple[Rope, Rope]]:
    """All rope pairs that share no pin."""
    pairs = []
    for i in range(len(ropes)):
        for j in range(i + 1, len(ropes)):
            if not ropes_share_endpoint(ropes[i], ropes[j]):
                pairs.append((ropes[i], ropes[j]))
    return pairs


def find_tangled(
    positions: Dict[str, Sequence[float]],
    ropes: Sequence[Rope],
    pairs: Optional[List[Tuple[Rope, Rope]]] = None,
    settings: Optional[Settings] = None,
) -> EvaluationResult:
    """
    Evaluate a layout. O(E^2) over non-adjacent rope pairs.

    A rope is tangled if it crosses at least one other rope it does not
    share a pin with. Solved means at least one rope and nothing tangled.
    """
    settings = settings or get_settings()
    if pairs is None:
        pairs = non_adjacent_pairs(ropes)

    tangled_ids = set()
    for first, second in pairs:
        if segments_intersect(
            positions[first.p1],
            positions[first.p2],
            positions[second.p1],
            positions[second.p2],
            parallel_eps=settings.PARALLEL_EPSILON,
            endpoint_eps=settings.ENDPOINT_EPSILON,
        ):
            tangled_ids.add(first.id)
            tangled_ids.add(second.id)

    tangled = {rope.id: rope.id in tangled_ids for rope in ropes}
    return EvaluationResult(
        tangled=tangled,
        solved=len(ropes) > 0 and not tangled_ids,
    )


# ============================================
# ENGINE
# ============================================

class TangleEngine:
    """
    Mutable state of one level instance.

    The host reports drags through move_point() and asks for feedback
    through evaluate(). Nothing is recomputed until evaluate() is called.
    Once solved the engine is frozen; restarting a level means building a
    new engine from a freshly generated LevelData.
    """

    def __init__(
        self,
        level_data: LevelData,
        settings: Optional[Settings] = None,
        on_complete: Optional[Callable[["TangleEngine"], None]] = None,
    ):
        self.settings = settings or get_settings()
        self.level = level_data.level
        self.ropes: List[Rope] = list(level_data.ropes)
        self.on_complete = on_complete
        self.status = EngineStatus.INITIALIZING
        self.moves = 0

        self._positions: Dict[str, Position] = {
            p.id: (p.x, p.y, p.z) for p in level_data.points
        }
        self._pairs = non_adjacent_pairs(self.ropes)
        self._dirty = True
        self._last: Optional[EvaluationResult] = None

    # ---- read-only access for the rendering layer ----

    @property
    def positions(self) -> Dict[str, Position]:
        return dict(self._positions)

    @property
    def is_solved(self) -> bool:
        return self.status == EngineStatus.SOLVED

    @property
    def tangled_ids(self) -> List[str]:
        """Tangled ropes as of the last evaluate(); empty before the first one."""
        if self._last is None:
            return []
        return self._last.tangled_ids

    def get_position(self, point_id: str) -> Position:
        try:
            return self._positions[point_id]
        except KeyError:
            raise InvalidReferenceError(point_id) from None

    # ---- host input ----

    def move_point(self, point_id: str, position: Sequence[float]) -> bool:
        """
        Store a new position for a pin.

        Returns False when the move is ignored: unknown pin or level
        already solved.
        """
        if self.is_solved:
            logger.debug("Level %s already solved, ignoring move of %s", self.level, point_id)
            return False

        current = self._positions.get(point_id)
        if current is None:
            logger.warning("Level %s: move for unknown point %r ignored", self.level, point_id)
            return False

        if len(position) not in (2, 3):
            raise ValueError(f"Position must have 2 or 3 coordinates, got {len(position)}")

        x, y = float(position[0]), float(position[1])
        z = float(position[2]) if len(position) == 3 else current[2]
        if not all(math.isfinite(v) for v in (x, y, z)):
            raise ValueError(f"Position must be finite, got {tuple(position)}")

        if self.settings.CLAMP_TO_BOUNDS:
            x, y = clamp_position(x, y, *self.settings.bounds)

        self._positions[point_id] = (x, y, z)
        self._dirty = True
        return True

    def release_point(self, point_id: str) -> EvaluationResult:
        """Drag released: count the move and evaluate."""
        if not self.is_solved and point_id in self._positions:
            self.moves += 1
        return self.evaluate()

    # ---- evaluation ----

    def evaluate(self) -> EvaluationResult:
        if self._last is not None and not self._dirty:
            return self._last.model_copy(deep=True)

        result = find_tangled(self._positions, self.ropes, self._pairs, self.settings)
        self._last = result
        self._dirty = False

        if self.status == EngineStatus.INITIALIZING:
            self.status = EngineStatus.ACTIVE

        if result.solved and self.status == EngineStatus.ACTIVE:
            self.status = EngineStatus.SOLVED
            logger.info("Level %s solved in %d moves", self.level, self.moves)
            if self.on_complete is not None:
                self.on_complete(self)

        return result.model_copy(deep=True)
