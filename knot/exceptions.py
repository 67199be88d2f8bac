"""
Knot Untangle - Exceptions
"""


class KnotError(Exception):
    """Base error for the puzzle engine."""


class InvalidReferenceError(KnotError, KeyError):
    """A pin id that does not exist in the current level."""

    def __init__(self, point_id: str):
        self.point_id = point_id
        super().__init__(f"Unknown point id: {point_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidLevelIndexError(KnotError, ValueError):
    """Level index is not a finite integer >= 1."""

    def __init__(self, level):
        self.level = level
        super().__init__(f"Level index must be an integer >= 1, got: {level!r}")
