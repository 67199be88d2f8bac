import pytest

from knot.config import Settings
from knot.schemas import LevelData, LevelMeta, Point, Rope


def make_level(coords, edges, level=1):
    """LevelData from raw (x, y) coordinates and index pairs."""
    points = [Point(id=f"p{i}", x=x, y=y, color="#000000") for i, (x, y) in enumerate(coords)]
    ropes = [Rope(id=f"r{k}", p1=f"p{i}", p2=f"p{j}") for k, (i, j) in enumerate(edges)]
    return LevelData(
        level=level,
        seed=0,
        points=points,
        ropes=ropes,
        meta=LevelMeta(point_count=len(points), rope_count=len(ropes)),
    )


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def square_diagonals():
    return make_level(
        [(0, 0), (10, 0), (10, 10), (0, 10)],
        [(0, 2), (1, 3)],
    )


@pytest.fixture
def level_factory():
    return make_level
