"""
Centralized 2D geometry utilities for navigation graph building and steering.
Contains reusable vector math and segment intersection tests to avoid code duplication.

Scalar helpers work on plain (x, y) tuples; the batch helpers take numpy arrays
of segments laid out as rows of (x0, y0, x1, y1).
"""

import math
from typing import Optional, Tuple

import numpy as np

Vec2 = Tuple[float, float]

ZERO: Vec2 = (0.0, 0.0)


def add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def scale(v: Vec2, factor: float) -> Vec2:
    return (v[0] * factor, v[1] * factor)


def dot(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Vec2, b: Vec2) -> float:
    """Z component of the 3D cross product of two planar vectors."""
    return a[0] * b[1] - a[1] * b[0]


def length_squared(v: Vec2) -> float:
    return v[0] * v[0] + v[1] * v[1]


def length(v: Vec2) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1])


def distance_squared(a: Vec2, b: Vec2) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    return dx * dx + dy * dy


def distance(a: Vec2, b: Vec2) -> float:
    return math.sqrt(distance_squared(a, b))


def normalize_or_zero(v: Vec2) -> Vec2:
    """Return the unit vector along v, or the zero vector if v has no length."""
    mag = length(v)
    if mag == 0.0 or not math.isfinite(mag):
        return ZERO
    return (v[0] / mag, v[1] / mag)


def perpendicular(v: Vec2) -> Vec2:
    """Rotate v by +90 degrees."""
    return (-v[1], v[0])


def signum(value: float) -> float:
    """Sign of value with signum(0.0) == 1.0, matching IEEE sign-bit semantics."""
    return math.copysign(1.0, value)


def segment_intersection(a: Vec2, b: Vec2, c: Vec2, d: Vec2) -> Optional[Vec2]:
    """
    Intersect segment a-b with segment c-d.

    Endpoints are inclusive. Parallel and collinear segments never intersect.

    Returns:
        Intersection point, or None if the segments do not cross
    """
    r = sub(b, a)
    s = sub(d, c)
    denom = cross(r, s)
    if denom == 0.0:
        return None

    ac = sub(c, a)
    t = cross(ac, s) / denom
    u = cross(ac, r) / denom

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return (a[0] + r[0] * t, a[1] + r[1] * t)
    return None


def segment_edge_hits(segments: np.ndarray, edges: np.ndarray) -> np.ndarray:
    """
    Pairwise intersection matrix between segments and edges.

    Vectorized counterpart of segment_intersection over an (S, 4) array of
    segments and an (E, 4) array of edges, rows laid out as (x0, y0, x1, y1).

    Returns:
        (S, E) boolean array, True where segment s crosses edge e
    """
    if len(segments) == 0 or len(edges) == 0:
        return np.zeros((len(segments), len(edges)), dtype=bool)

    a = segments[:, None, 0:2]
    r = segments[:, None, 2:4] - a
    c = edges[None, :, 0:2]
    s = edges[None, :, 2:4] - c

    denom = r[..., 0] * s[..., 1] - r[..., 1] * s[..., 0]
    ac = c - a
    t_num = ac[..., 0] * s[..., 1] - ac[..., 1] * s[..., 0]
    u_num = ac[..., 0] * r[..., 1] - ac[..., 1] * r[..., 0]

    with np.errstate(divide="ignore", invalid="ignore"):
        t = t_num / denom
        u = u_num / denom

    return (denom != 0.0) & (t >= 0.0) & (t <= 1.0) & (u >= 0.0) & (u <= 1.0)


def segments_intersect_any(
    segments: np.ndarray,
    edges: np.ndarray,
    edge_mask: Optional[np.ndarray] = None,
) -> bool:
    """
    Check whether any segment crosses any edge.

    Args:
        segments: Query segments, one (x0, y0, x1, y1) row each
        edges: Level edges, one (x0, y0, x1, y1) row each
        edge_mask: Optional boolean array of length E; False rows are ignored

    Returns:
        True if at least one segment intersects at least one unmasked edge
    """
    if edge_mask is not None:
        edges = edges[edge_mask]

    return bool(np.any(segment_edge_hits(segments, edges)))


def capsule_sweep_segments(points: np.ndarray, radius: float) -> np.ndarray:
    """
    Build the two radius-offset segments for every consecutive pair of points.

    Each motion segment p[i] -> p[i+1] is shifted by +radius and -radius along
    its left perpendicular. Zero-length motion segments get a zero direction,
    so both of their offsets collapse onto the centreline.

    Args:
        points: (N, 2) array of sampled positions
        radius: Sweep radius

    Returns:
        (2 * (N - 1), 4) array of offset segments
    """
    if len(points) < 2:
        return np.empty((0, 4), dtype=float)

    starts = points[:-1]
    ends = points[1:]
    deltas = ends - starts
    lengths = np.hypot(deltas[:, 0], deltas[:, 1])

    directions = np.zeros_like(deltas)
    moving = lengths > 0.0
    directions[moving] = deltas[moving] / lengths[moving, None]

    normals = np.stack((-directions[:, 1], directions[:, 0]), axis=1) * radius

    left = np.hstack((starts + normals, ends + normals))
    right = np.hstack((starts - normals, ends - normals))
    return np.vstack((left, right))
