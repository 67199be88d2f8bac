import math

import pytest

from knot.config import Settings
from knot.exceptions import InvalidLevelIndexError
from knot.services.engine import TangleEngine
from knot.services.generator import (
    SeededRandom,
    build_connections,
    check_level_index,
    circle_layout,
    generate_level,
    get_connection_density,
    get_point_count,
    get_scramble_count,
    get_solved_layout,
    scramble_positions,
    validate_level,
)
from knot.services.geometry import chords_cross


def ring_index(point_id):
    return int(point_id[1:])


# ============================================
# DIFFICULTY CURVE
# ============================================

def test_point_count_curve(settings):
    assert get_point_count(1, settings) == 5
    assert get_point_count(9, settings) == 5
    assert get_point_count(10, settings) == 6
    assert get_point_count(55, settings) == 10
    assert get_point_count(100, settings) == 15
    assert get_point_count(500, settings) == 15


def test_density_curve_is_clamped(settings):
    assert get_connection_density(1, settings) == pytest.approx(1.208)
    assert get_connection_density(100, settings) == pytest.approx(2.0)
    assert get_connection_density(300, settings) == pytest.approx(2.0)


def test_scramble_count(settings):
    assert get_scramble_count(1, settings) == 22
    assert get_scramble_count(50, settings) == 120


def test_difficulty_never_decreases(settings):
    for level in range(1, 250):
        assert get_point_count(level + 1, settings) >= get_point_count(level, settings)
        assert get_connection_density(level + 1, settings) >= get_connection_density(level, settings)
        assert get_scramble_count(level + 1, settings) > get_scramble_count(level, settings)


# ============================================
# LEVEL INDEX
# ============================================

@pytest.mark.parametrize("level", [0, -1, 1.5, math.nan, math.inf, True, "3", None])
def test_invalid_level_index_is_rejected(level):
    with pytest.raises(InvalidLevelIndexError):
        generate_level(level, seed=1)


def test_integral_float_level_is_accepted():
    assert check_level_index(3.0) == 3
    assert generate_level(3.0, seed=1).level == 3


def test_invalid_level_index_is_a_value_error():
    with pytest.raises(ValueError):
        check_level_index(0)


# ============================================
# STRUCTURE
# ============================================

@pytest.mark.parametrize("level", [1, 2, 9, 10, 25, 50, 77, 99, 100, 101, 150])
def test_generated_structure(level, settings):
    data = generate_level(level, seed=level * 31 + 7, settings=settings)
    count = get_point_count(level, settings)
    max_ropes = math.floor(count * get_connection_density(level, settings))

    assert data.level == level
    assert len(data.points) == count
    assert data.meta.point_count == count
    assert count <= len(data.ropes) <= max_ropes
    assert data.meta.rope_count == len(data.ropes)
    assert data.meta.scramble_count == get_scramble_count(level, settings)

    ids = [p.id for p in data.points]
    assert len(set(ids)) == len(ids)
    pairs = set()
    for rope in data.ropes:
        assert rope.p1 != rope.p2
        assert rope.p1 in ids and rope.p2 in ids
        pairs.add(frozenset((rope.p1, rope.p2)))
    assert len(pairs) == len(data.ropes)


def test_ring_ropes_come_first(settings):
    data = generate_level(40, seed=3, settings=settings)
    count = len(data.points)
    for i in range(count):
        rope = data.ropes[i]
        assert (rope.p1, rope.p2) == (f"p{i}", f"p{(i + 1) % count}")


def test_chord_offsets_are_short(settings):
    data = generate_level(90, seed=11, settings=settings)
    count = len(data.points)
    for rope in data.ropes[count:]:
        i, j = ring_index(rope.p1), ring_index(rope.p2)
        offset = (j - i) % count
        assert 2 <= offset <= 2 + count // 3


def test_pins_stay_near_the_circle(settings):
    data = generate_level(60, seed=5, settings=settings)
    for point in data.points:
        assert point.z == 0.0
        distance = math.hypot(point.x, point.y)
        assert abs(distance - settings.CIRCLE_RADIUS) <= settings.JITTER_AMPLITUDE * math.sqrt(2) + 1e-9


def test_same_seed_same_level(settings):
    assert generate_level(33, seed=2024, settings=settings) == generate_level(33, seed=2024, settings=settings)


def test_seed_is_recorded_and_reproducible(settings):
    data = generate_level(12, settings=settings)
    assert generate_level(12, seed=data.seed, settings=settings) == data


def test_injected_rng_is_used(settings):
    data = generate_level(8, rng=SeededRandom(77), settings=settings)
    assert data.seed == 77
    assert data == generate_level(8, seed=77, settings=settings)


# ============================================
# SOLVABILITY
# ============================================

@pytest.mark.parametrize("level", range(1, 101, 3))
def test_witness_layout_solves_the_level(level, settings):
    data = generate_level(level, seed=level, settings=settings)
    engine = TangleEngine(data, settings=settings)
    engine.evaluate()

    for point_id, position in get_solved_layout(data, settings).items():
        engine.move_point(point_id, position)
    assert engine.evaluate().solved


@pytest.mark.parametrize("level", [1, 5, 20, 45, 80, 100])
def test_validate_level_accepts_generated_levels(level, settings):
    report = validate_level(generate_level(level, seed=level + 1000, settings=settings), settings)
    assert report["valid"], report["errors"]
    assert report["tangled_in_witness"] == []


def test_strict_chords_never_cross_on_the_ring():
    rng = SeededRandom(5)
    connections, chord_count = build_connections(15, 2.0, rng, strict=True)
    chords = connections[15:]
    assert len(chords) == chord_count
    for k, (a, b) in enumerate(chords):
        for c, d in chords[k + 1:]:
            assert not chords_cross(a, b, c, d)


def test_heuristic_chords_still_build_a_valid_graph():
    settings = Settings(_env_file=None, STRICT_CHORDS=False)
    data = generate_level(100, seed=9, settings=settings)
    assert len(data.points) == 15
    assert len(data.ropes) >= 15


@pytest.mark.parametrize("level", range(1, 31))
def test_levels_start_tangled(level, settings):
    data = generate_level(level, seed=level * 17, settings=settings)
    assert data.meta.initial_tangled > 0
    assert not TangleEngine(data, settings=settings).evaluate().solved


def test_validate_level_reports_a_crossing_witness(level_factory, settings):
    # Ring of 5 plus two interleaving chords: the circle layout is tangled
    edges = [(i, (i + 1) % 5) for i in range(5)] + [(0, 2), (1, 3)]
    coords = circle_layout(5, settings.CIRCLE_RADIUS)
    report = validate_level(level_factory(coords, edges), settings)

    assert not report["valid"]
    assert sorted(report["tangled_in_witness"]) == ["r5", "r6"]


# ============================================
# RANDOMNESS
# ============================================

def test_seeded_random_ranges():
    rng = SeededRandom(123)
    for _ in range(2000):
        value = rng.next()
        assert 0 <= value < 1
        assert 2 <= rng.next_int(2, 6) <= 6
        assert -0.5 <= rng.uniform(-0.5, 0.5) <= 0.5


def test_seeded_random_is_deterministic():
    first, second = SeededRandom(42), SeededRandom(42)
    assert [first.next() for _ in range(20)] == [second.next() for _ in range(20)]


def test_scramble_is_a_permutation():
    positions = circle_layout(9, 4.5)
    scrambled = scramble_positions(positions, 50, SeededRandom(8))
    assert sorted(scrambled) == sorted(positions)
