"""
Knot Untangle - Level Generator
Version: 1.0 (SOLVED-FIRST)

Approach:
- Pins start on a circle, ropes are the ring plus non-crossing chords
- The solved layout exists by construction
- Scrambling only permutes positions, so it can always be undone
"""

import logging
import math
import secrets
from typing import Dict, List, Optional, Set, Tuple

from ..config import Settings, get_settings
from ..exceptions import InvalidLevelIndexError
from ..schemas import LevelData, LevelMeta, Point, Rope
from .engine import find_tangled
from .geometry import chords_cross

logger = logging.getLogger(__name__)


# ============================================
# SEEDED RANDOM
# ============================================

class SeededRandom:
    """Deterministic PRNG so a level can be rebuilt from its seed."""

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & 0x7FFFFFFF

    def next(self) -> float:
        """Number in [0, 1)."""
        self._state = (self._state * 1103515245 + 12345) & 0x7FFFFFFF
        return self._state / 0x80000000

    def next_int(self, min_val: int, max_val: int) -> int:
        """Integer in [min, max]."""
        if min_val > max_val:
            return min_val
        return min_val + int(self.next() * (max_val - min_val + 1))

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.next()


# ============================================
# DIFFICULTY CURVE
# ============================================

PIN_COLORS = [
    "#FF3D71",  # pink
    "#3366FF",  # blue
    "#00D68F",  # green
    "#FFAA00",  # amber
    "#D948FF",  # violet
    "#00E096",  # mint
    "#FF5722",  # orange
    "#00BCD4",  # cyan
]

ROPE_COLOR = "#FFFFFF"


def check_level_index(level) -> int:
    """Reject anything that is not a finite integer >= 1."""
    if isinstance(level, bool):
        raise InvalidLevelIndexError(level)
    if isinstance(level, float):
        if not math.isfinite(level) or not level.is_integer():
            raise InvalidLevelIndexError(level)
        level = int(level)
    if not isinstance(level, int) or level < 1:
        raise InvalidLevelIndexError(level)
    return level


def get_point_count(level: int, settings: Optional[Settings] = None) -> int:
    """Pins: 5 for levels 1-9, one more every 10 levels, capped."""
    settings = settings or get_settings()
    return min(settings.MIN_POINTS + level // settings.LEVELS_PER_POINT, settings.MAX_POINTS)


def get_connection_density(level: int, settings: Optional[Settings] = None) -> float:
    """Ropes per pin."""
    settings = settings or get_settings()
    return min(settings.BASE_DENSITY + (level / 100) * settings.DENSITY_GAIN, settings.MAX_DENSITY)


def get_scramble_count(level: int, settings: Optional[Settings] = None) -> int:
    """Number of pairwise position swaps."""
    settings = settings or get_settings()
    return settings.BASE_SCRAMBLE + settings.SCRAMBLE_PER_LEVEL * level


# ============================================
# SOLVED LAYOUT
# ============================================

def circle_layout(count: int, radius: float) -> List[Tuple[float, float]]:
    """Evenly spaced positions on a circle, in ring order."""
    return [
        (math.cos(2 * math.pi * i / count) * radius, math.sin(2 * math.pi * i / count) * radius)
        for i in range(count)
    ]


def build_connections(
    count: int,
    density: float,
    rng: SeededRandom,
    strict: bool = True,
) -> Tuple[List[Tuple[int, int]], int]:
    """
    Ring plus short chords between ring indices.

    With strict=True a chord crossing an accepted chord is dropped, so the
    circle layout is guaranteed crossing-free. Returns (connections,
    chord_count).
    """
    connections: List[Tuple[int, int]] = []
    seen: Set[Tuple[int, int]] = set()

    def add(i: int, j: int) -> bool:
        key = (min(i, j), max(i, j))
        if i == j or key in seen:
            return False
        seen.add(key)
        connections.append((i, j))
        return True

    for i in range(count):
        add(i, (i + 1) % count)

    chords: List[Tuple[int, int]] = []
    extra = int(math.floor(count * density)) - count
    for _ in range(extra):
        i = rng.next_int(0, count - 1)
        offset = 2 + int(rng.next() * (count / 3))
        j = (i + offset) % count

        if strict and any(chords_cross(i, j, a, b) for a, b in chords):
            continue
        if add(i, j):
            chords.append((i, j))

    return connections, len(chords)


# ============================================
# SCRAMBLE
# ============================================

def scramble_positions(
    positions: List[Tuple[float, float]],
    swaps: int,
    rng: SeededRandom,
) -> List[Tuple[float, float]]:
    """Random pairwise swaps. The result is a permutation of the input."""
    result = list(positions)
    for _ in range(swaps):
        a = rng.next_int(0, len(result) - 1)
        b = rng.next_int(0, len(result) - 1)
        result[a], result[b] = result[b], result[a]
    return result


def jitter_positions(
    positions: List[Tuple[float, float]],
    amplitude: float,
    rng: SeededRandom,
) -> List[Tuple[float, float]]:
    return [
        (x + rng.uniform(-amplitude, amplitude), y + rng.uniform(-amplitude, amplitude))
        for x, y in positions
    ]


# ============================================
# MAIN GENERATOR FUNCTION
# ============================================

def generate_level(
    level: int,
    seed: Optional[int] = None,
    rng: Optional[SeededRandom] = None,
    settings: Optional[Settings] = None,
) -> LevelData:
    """
    Generate a solvable level.

    Guarantees:
    - Pin ids unique, every rope joins two distinct pins, no duplicate ropes
    - Putting pins back on their circle positions solves the level
    """
    level = check_level_index(level)
    settings = settings or get_settings()

    if rng is None:
        if seed is None:
            seed = secrets.randbits(31)
        rng = SeededRandom(seed)
    seed = rng.seed

    # Parameters
    count = get_point_count(level, settings)
    density = get_connection_density(level, settings)
    scramble_count = get_scramble_count(level, settings)

    logger.debug(
        "Generating level %d (seed=%d): points=%d density=%.2f scramble=%d",
        level, seed, count, density, scramble_count,
    )

    solved = circle_layout(count, settings.CIRCLE_RADIUS)
    connections, chord_count = build_connections(count, density, rng, settings.STRICT_CHORDS)

    ropes = [
        Rope(id=f"r{k}", p1=f"p{i}", p2=f"p{j}", color=ROPE_COLOR)
        for k, (i, j) in enumerate(connections)
    ]
    point_ids = [f"p{i}" for i in range(count)]

    # Scramble, then keep scrambling while the layout is already solved
    permuted = scramble_positions(solved, scramble_count, rng)
    layout = jitter_positions(permuted, settings.JITTER_AMPLITUDE, rng)
    result = find_tangled(dict(zip(point_ids, layout)), ropes, settings=settings)

    attempts = 0
    while result.solved and attempts < settings.RESCRAMBLE_ATTEMPTS:
        attempts += 1
        permuted = scramble_positions(permuted, scramble_count, rng)
        layout = jitter_positions(permuted, settings.JITTER_AMPLITUDE, rng)
        result = find_tangled(dict(zip(point_ids, layout)), ropes, settings=settings)

    if result.solved:
        logger.warning("Level %d (seed=%d) starts solved after %d re-scrambles", level, seed, attempts)

    points = [
        Point(id=point_ids[i], x=x, y=y, z=0.0, color=PIN_COLORS[i % len(PIN_COLORS)])
        for i, (x, y) in enumerate(layout)
    ]

    initial_tangled = len(result.tangled_ids)
    difficulty = (
        len(ropes) * 0.3 +
        initial_tangled * 0.4 +
        count * 0.3
    )

    return LevelData(
        level=level,
        seed=seed,
        points=points,
        ropes=ropes,
        meta=LevelMeta(
            point_count=count,
            rope_count=len(ropes),
            chord_count=chord_count,
            scramble_count=scramble_count,
            density=round(density, 3),
            initial_tangled=initial_tangled,
            difficulty=round(difficulty, 2),
        ),
    )


# ============================================
# SOLUTION HELPERS
# ============================================

def get_solved_layout(
    level_data: LevelData,
    settings: Optional[Settings] = None,
) -> Dict[str, Tuple[float, float]]:
    """Pre-scramble circle position of every pin (the solvability witness)."""
    settings = settings or get_settings()
    layout = circle_layout(len(level_data.points), settings.CIRCLE_RADIUS)
    return {point.id: layout[i] for i, point in enumerate(level_data.points)}


# ============================================
# VALIDATION
# ============================================

def validate_level(level_data: LevelData, settings: Optional[Settings] = None) -> Dict:
    """Check level structure against the difficulty curve and its witness."""
    settings = settings or get_settings()
    errors = []

    count = len(level_data.points)
    expected_count = get_point_count(level_data.level, settings)
    if count != expected_count:
        errors.append(f"Expected {expected_count} points, got {count}")

    max_ropes = int(math.floor(count * get_connection_density(level_data.level, settings)))
    rope_count = len(level_data.ropes)
    if not count <= rope_count <= max(count, max_ropes):
        errors.append(f"Rope count {rope_count} outside [{count}, {max(count, max_ropes)}]")

    # Ring must be present
    pairs = {rope.endpoints for rope in level_data.ropes}
    for i in range(count):
        ring = frozenset((f"p{i}", f"p{(i + 1) % count}"))
        if ring not in pairs:
            errors.append(f"Missing ring rope p{i}-p{(i + 1) % count}")
            break

    # Witness layout must be solved
    witness = find_tangled(get_solved_layout(level_data, settings), level_data.ropes, settings=settings)
    if not witness.solved:
        errors.append(f"Witness layout has {len(witness.tangled_ids)} tangled ropes")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "tangled_in_witness": witness.tangled_ids,
    }
