"""Sparse, deduplicating set of occupied voxels."""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, Tuple

import numpy as np
import numpy.typing as npt

Voxel = Tuple[int, int, int]
_IntArray = npt.NDArray[np.integer]


class VoxelSet:
    """Occupied integer ``(x, y, z)`` cells.

    Backed by one hashed set of coordinate tuples, so memory follows the
    number of occupied cells rather than the bounding volume.  Inserting a
    coordinate that is already present is a no-op.  There is no removal.

    :meth:`merge` takes the internal lock and is the entry point for scan
    workers; :meth:`add` and :meth:`update` are for single-threaded use.
    """

    def __init__(self, voxels: Iterable[Voxel] = ()) -> None:
        self._cells: set[Voxel] = set()
        self._lock = threading.Lock()
        self.update(voxels)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add(self, x: int, y: int, z: int) -> None:
        self._cells.add((int(x), int(y), int(z)))

    def update(self, voxels: Iterable[Voxel]) -> None:
        self._cells.update((int(x), int(y), int(z)) for x, y, z in voxels)

    def merge(self, voxels: _IntArray) -> None:
        """Insert an ``(N, 3)`` integer array under the set's lock."""
        arr = np.asarray(voxels, dtype=np.int64).reshape(-1, 3)
        keys = [tuple(row) for row in arr.tolist()]
        with self._lock:
            self._cells.update(keys)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, voxel) -> bool:
        try:
            x, y, z = voxel
        except (TypeError, ValueError):
            return False
        return (int(x), int(y), int(z)) in self._cells

    def __iter__(self) -> Iterator[Voxel]:
        """Members in ascending ``(x, y, z)`` order."""
        return iter(sorted(self._cells))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, VoxelSet):
            return self._cells == other._cells
        return NotImplemented

    def __repr__(self) -> str:
        return f"VoxelSet({len(self)} voxels)"

    def as_set(self) -> frozenset:
        return frozenset(self._cells)

    def to_array(self) -> _IntArray:
        """``(N, 3)`` int64 array of members, sorted by x, then y, then z."""
        if not self._cells:
            return np.empty((0, 3), dtype=np.int64)
        return np.array(sorted(self._cells), dtype=np.int64)

    def extent(self) -> Tuple[Voxel, Voxel]:
        """Inclusive ``(min_corner, max_corner)`` of the members.

        Raises
        ------
        ValueError
            If the set is empty.
        """
        if not self._cells:
            raise ValueError("empty VoxelSet has no extent")
        arr = self.to_array()
        lo, hi = arr.min(axis=0), arr.max(axis=0)
        return tuple(int(v) for v in lo), tuple(int(v) for v in hi)

    def to_dense(self) -> Tuple[npt.NDArray[np.bool_], Voxel]:
        """Dense occupancy grid and its origin.

        Returns
        -------
        grid:
            Boolean array of shape ``(nz, ny, nx)`` (z-first), ``True`` where
            a voxel is present.
        origin:
            Integer ``(x, y, z)`` of ``grid[0, 0, 0]``.  ``(0, 0, 0)`` for an
            empty set, whose grid has shape ``(0, 0, 0)``.
        """
        if not self._cells:
            return np.zeros((0, 0, 0), dtype=bool), (0, 0, 0)
        (x0, y0, z0), (x1, y1, z1) = self.extent()
        grid = np.zeros((z1 - z0 + 1, y1 - y0 + 1, x1 - x0 + 1), dtype=bool)
        arr = self.to_array()
        grid[arr[:, 2] - z0, arr[:, 1] - y0, arr[:, 0] - x0] = True
        return grid, (x0, y0, z0)
