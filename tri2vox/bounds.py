"""Model bounds: the axis-aligned box that sizes the scan lattice."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np
import numpy.typing as npt

from .config import EPSILON
from .loader import as_triangles

_Array = npt.NDArray[np.floating]


@dataclass(frozen=True)
class BoundingBox:
    """Lattice extents, already padded by one step on every side."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float
    min_z: float
    max_z: float

    def axis(self, i: int) -> Tuple[float, float]:
        """``(lo, hi)`` of axis *i* (0 = x, 1 = y, 2 = z)."""
        return ((self.min_x, self.max_x), (self.min_y, self.max_y), (self.min_z, self.max_z))[i]

    def __iter__(self) -> Iterator[float]:
        return iter((self.min_x, self.max_x, self.min_y, self.max_y, self.min_z, self.max_z))

    def __str__(self) -> str:
        return (
            f"({self.min_x:g},{self.min_y:g},{self.min_z:g}) -> "
            f"({self.max_x:g},{self.max_y:g},{self.max_z:g})"
        )


def round_coordinates(triangles: _Array) -> _Array:
    """Round every vertex coordinate to one decimal."""
    return np.round(triangles, 1)


def prepare_triangles(triangles, round_input: bool = False) -> _Array:
    """Validate *triangles* into a ``(F, 3, 3)`` float64 array, optionally rounded."""
    tris = as_triangles(triangles)
    if round_input:
        tris = round_coordinates(tris)
    return tris


def model_bounds(triangles, granularity: float, round_input: bool = False) -> BoundingBox:
    """Bounding box of *triangles*, grown by *granularity* on each side.

    The padding puts every cast ray's endpoints strictly outside the model,
    so no crossing can land on a ray endpoint.

    Raises
    ------
    ValueError
        If there are no triangles.
    """
    tris = prepare_triangles(triangles, round_input)
    if len(tris) == 0:
        raise ValueError("cannot compute bounds of an empty model")

    verts = tris.reshape(-1, 3)
    lo = verts.min(axis=0) - granularity
    hi = verts.max(axis=0) + granularity
    return BoundingBox(
        min_x=float(lo[0]), max_x=float(hi[0]),
        min_y=float(lo[1]), max_y=float(hi[1]),
        min_z=float(lo[2]), max_z=float(hi[2]),
    )


def lattice(lo: float, hi: float, step: float, eps: float = EPSILON) -> _Array:
    """Sample positions ``lo, lo + step, ...`` up to and including *hi*.

    Positions are ``lo + i * step`` rather than a running sum, so they do not
    drift on long axes.  A span within *eps* steps of a whole multiple of
    *step* counts as that multiple.
    """
    n = int(np.floor((hi - lo) / step + eps))
    return lo + np.arange(n + 1, dtype=np.float64) * step
