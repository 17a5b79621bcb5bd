"""Internal vector math and ray-triangle intersection.

All heavy symbols here are private (underscore-prefixed) or re-exported from
:mod:`tri2vox`.

Algorithm
---------
Möller–Trumbore ray casting against a ray *segment* ``origin → end``.
    With ``D = end - origin`` the returned parameter ``t`` is the fraction of
    the segment length at which the hit occurs, so the caller maps it back to
    world space with ``origin + t * D``.  Hits with ``t <= eps`` (behind or
    at the origin) and ``t > 1`` (past the end) are rejected, as are
    triangles whose determinant is within ``eps`` of zero (ray parallel to
    the plane, or a sliver triangle).  The barycentric bounds
    ``0 <= u``, ``0 <= v``, ``u + v <= 1`` are checked on the numerators
    scaled by ``|det|``, before any division.

The vectorised form :func:`_ray_triangles_t` tests one ray against all F
triangles of a model at once; :func:`intersect_triangle` is that same code
applied to a single triangle, so both give bit-identical answers.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt

from .config import EPSILON

_F = npt.NDArray[np.floating]

__all__ = ["sub", "cross", "dot", "intersect_triangle"]


# ===========================================================================
# Vector math: all operate along the last axis of (..., 3) arrays
# ===========================================================================

def sub(a: _F, b: _F) -> _F:
    """Element-wise ``a - b``."""
    return np.subtract(a, b)


def cross(a: _F, b: _F) -> _F:
    """Cross product along the last axis."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    ax, ay, az = a[..., 0], a[..., 1], a[..., 2]
    bx, by, bz = b[..., 0], b[..., 1], b[..., 2]
    return np.stack(
        [ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx],
        axis=-1,
    )


def dot(a: _F, b: _F) -> _F:
    """Dot product along the last axis."""
    return np.sum(np.multiply(a, b), axis=-1)


# ===========================================================================
# Möller–Trumbore
# ===========================================================================

class _TriangleBatch:
    """Per-model quantities that do not depend on the ray.

    ``v0`` is ``(F, 3)``; ``e1``/``e2`` are the edges from ``v0``.
    """

    __slots__ = ("v0", "e1", "e2")

    def __init__(self, triangles: _F) -> None:
        tris = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
        self.v0 = tris[:, 0]
        self.e1 = sub(tris[:, 1], tris[:, 0])
        self.e2 = sub(tris[:, 2], tris[:, 0])

    def __len__(self) -> int:
        return len(self.v0)


def _ray_triangles_hits(
    batch: _TriangleBatch,
    origin: _F,
    end: _F,
    eps: float = EPSILON,
) -> Tuple[_F, _F]:
    """Hit parameters and facing of segment ``origin → end`` against *batch*.

    Returns
    -------
    t:
        ``(H,)`` values in ``(eps, 1]``, one per triangle hit, in triangle
        order (unsorted).
    facing:
        ``(H,)`` sign of the determinant of each hit: ``+1`` where the
        segment runs against the normal ``e1 x e2`` (enters through the
        counter-clockwise side), ``-1`` where it runs along it.
    """
    if len(batch) == 0:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.float64)

    origin = np.asarray(origin, dtype=np.float64)
    d = sub(np.asarray(end, dtype=np.float64), origin)      # (3,)

    p = cross(d, batch.e2)                                  # (F, 3)
    det = dot(batch.e1, p)                                  # (F,)
    ok = np.abs(det) >= eps
    sign = np.where(det < 0.0, -1.0, 1.0)
    det_abs = np.abs(det)

    # u, v scaled by |det|: the bounds are tested before dividing so that
    # a point on an edge shared by two triangles is inside both
    s = sub(origin, batch.v0)                               # (F, 3)
    u_n = dot(s, p) * sign
    q = cross(s, batch.e1)                                  # (F, 3)
    v_n = dot(d, q) * sign

    inside = (u_n >= 0.0) & (u_n <= det_abs) & (v_n >= 0.0) & ((u_n + v_n) <= det_abs)
    t = dot(batch.e2, q) / np.where(ok, det, 1.0)

    hit = ok & inside & (t > eps) & (t <= 1.0)
    return t[hit], sign[hit]


def _ray_triangles_t(
    batch: _TriangleBatch,
    origin: _F,
    end: _F,
    eps: float = EPSILON,
) -> _F:
    """Hit parameters only; see :func:`_ray_triangles_hits`."""
    return _ray_triangles_hits(batch, origin, end, eps)[0]


def intersect_triangle(
    triangle: _F,
    origin: _F,
    end: _F,
    eps: float = EPSILON,
) -> Optional[float]:
    """Intersect one triangle with the segment ``origin → end``.

    Parameters
    ----------
    triangle:
        ``(3, 3)`` vertices ``[v0, v1, v2]``.
    origin, end:
        ``(3,)`` segment endpoints.
    eps:
        Determinant and near-origin tolerance.

    Returns
    -------
    float or None
        Fraction of the segment length at the hit, or ``None`` on a miss.
    """
    t = _ray_triangles_t(_TriangleBatch(triangle), origin, end, eps)
    if t.size == 0:
        return None
    return float(t[0])
