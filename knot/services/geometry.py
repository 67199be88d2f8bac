"""
Knot Untangle - Geometry

Segment crossing test used for tangle detection, plus helpers for the
convex ring the generator starts from.
"""

from typing import Sequence, Tuple

Vec = Sequence[float]


# ============================================
# SEGMENTS
# ============================================

def segments_intersect(
    a: Vec,
    b: Vec,
    c: Vec,
    d: Vec,
    parallel_eps: float = 0.001,
    endpoint_eps: float = 0.05,
) -> bool:
    """
    Do segments AB and CD cross in their interiors?

    Solves the 2x2 system for lambda (along AB) and gamma (along CD).
    Near-parallel segments (|det| < parallel_eps) never cross, collinear
    overlaps included. Both parameters must lie strictly inside
    (endpoint_eps, 1 - endpoint_eps), so a rope grazing close to a pin
    is not flagged.

    Only x and y are read; a trailing z is ignored.
    """
    det = (b[0] - a[0]) * (d[1] - c[1]) - (b[1] - a[1]) * (d[0] - c[0])
    if abs(det) < parallel_eps:
        return False

    lam = ((d[1] - c[1]) * (d[0] - a[0]) + (c[0] - d[0]) * (d[1] - a[1])) / det
    gamma = ((a[1] - b[1]) * (d[0] - a[0]) + (b[0] - a[0]) * (d[1] - a[1])) / det

    lo, hi = endpoint_eps, 1 - endpoint_eps
    return lo < lam < hi and lo < gamma < hi


def ropes_share_endpoint(first, second) -> bool:
    """Ropes meeting at a pin are never a tangle."""
    return bool({first.p1, first.p2} & {second.p1, second.p2})


# ============================================
# CONVEX RING
# ============================================

def chords_cross(a: int, b: int, c: int, d: int) -> bool:
    """
    Do chords (a, b) and (c, d) between ring indices cross?

    For points in convex position two chords cross exactly when their
    endpoints interleave around the ring. Chords sharing an index never
    cross.
    """
    if len({a, b, c, d}) < 4:
        return False
    lo, hi = min(a, b), max(a, b)
    return (lo < c < hi) != (lo < d < hi)


def clamp_position(x: float, y: float, bound_x: float, bound_y: float) -> Tuple[float, float]:
    """Clamp a position to [-bound_x, bound_x] x [-bound_y, bound_y]."""
    return (
        max(-bound_x, min(bound_x, x)),
        max(-bound_y, min(bound_y, y)),
    )
