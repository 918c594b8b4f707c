"""
Geometry primitives over 3D pose landmarks.

All functions are total over their input domain: degenerate inputs produce a
defined value instead of raising, so per-frame analysis never faults.
"""

import numpy as np


def _as_vector(point) -> np.ndarray:
    """Return ``(x, y, z)`` of a landmark-like object as a float array."""
    return np.array([point.x, point.y, point.z], dtype=np.float64)


def calculate_distance(a, b) -> float:
    """Euclidean distance between two landmarks in 3D.

    Args:
        a, b: Objects with ``.x``, ``.y`` and ``.z`` attributes.

    Returns:
        float: Distance in normalized image units.
    """
    return float(np.linalg.norm(_as_vector(a) - _as_vector(b)))


def calculate_angle(a, b, c) -> float:
    """Calculate angle at joint b formed by points a-b-c in 3D space.

    Uses the law of cosines on the three pairwise distances:
    cos(θ) = (|ab|² + |bc|² - |ac|²) / (2·|ab|·|bc|)

    Args:
        a, b, c: Landmark-like objects; ``b`` is the vertex.

    Returns:
        float: Angle in degrees (0-180). A zero-length edge at the vertex
        returns 0.
    """
    ab = calculate_distance(a, b)
    bc = calculate_distance(b, c)
    ac = calculate_distance(a, c)

    if ab == 0 or bc == 0:
        return 0.0

    # Clip to [-1, 1] to absorb floating-point overshoot
    cos_angle = (ab * ab + bc * bc - ac * ac) / (2 * ab * bc)
    cos_angle = np.clip(cos_angle, -1.0, 1.0)

    return float(np.degrees(np.arccos(cos_angle)))


def midpoint_y(a, b) -> float:
    """Mean vertical coordinate of a left/right joint pair."""
    return (a.y + b.y) / 2.0


def midpoint_x(a, b) -> float:
    """Mean horizontal coordinate of a left/right joint pair."""
    return (a.x + b.x) / 2.0
