"""Column scan: triangles → occupied voxels.

For every ``(x, y)`` lattice column a vertical segment is cast from
``min_z`` to ``max_z`` through the model.  Its crossings with the surface
are sorted and read by parity: outside before the first crossing, inside
after it, outside after the next, and so on.  Lattice points inside a closed
span ``[enter, exit]`` become voxels.

Two fill strategies read the same sorted crossings:

``fill_brute_force``
    Walks every lattice z of the column with a cursor into the crossings.
    Voxels of an open span are held back until the span closes, so a
    trailing unpaired crossing emits nothing.  Reference behaviour.
``fill_run_length``
    Converts each ``(enter, exit)`` pair straight into a lattice index range.

Both compare lattice positions against ``enter - eps`` and ``exit + eps``
with the same inequalities, so they select the same indices for every
column, paired or not.

Known limitation: an odd number of crossings (open, non-manifold or
self-intersecting input) is not repaired; the unpaired last crossing is
ignored and the column is counted in the scan summary.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Tuple

import numpy as np
import numpy.typing as npt

from ._math import _TriangleBatch, _ray_triangles_hits
from .bounds import BoundingBox, lattice, model_bounds, prepare_triangles
from .config import FillStrategy, VoxelizerConfig
from .errors import VoxelizationCancelled
from .voxel_set import VoxelSet

logger = logging.getLogger(__name__)

_Array = npt.NDArray[np.floating]
_IntArray = npt.NDArray[np.integer]
ProgressCallback = Callable[[int, int], None]


# ---------------------------------------------------------------------------
# Crossings
# ---------------------------------------------------------------------------

def merge_coincident(events: _Array, eps: float, facing: Optional[_Array] = None) -> _Array:
    """Collapse crossings within *eps* of each other that face the same way.

    *events* must be sorted.  A ray through an edge or vertex shared by
    several triangles hits each of them at the same point; when they all
    face the same way that is one crossing.  A ray grazing a silhouette
    edge or vertex touches faces of both facings, and keeps one crossing
    per facing so the column's parity is unchanged.

    *facing* holds the determinant sign of each crossing (see
    :func:`tri2vox._math._ray_triangles_hits`); ``None`` treats all
    crossings as facing the same way.
    """
    if len(events) < 2:
        return events
    if facing is None:
        facing = np.ones(len(events))
    kept = []
    anchor = None
    seen: set = set()
    for e, f in zip(np.asarray(events, dtype=np.float64).tolist(), np.sign(facing).tolist()):
        if anchor is None or e - anchor > eps:
            anchor = e
            seen = set()
        if f not in seen:
            seen.add(f)
            kept.append(e)
    return np.asarray(kept, dtype=np.float64)


def column_events(
    batch: _TriangleBatch,
    x: float,
    y: float,
    z_lo: float,
    z_hi: float,
    eps: float,
    merge: bool = True,
) -> _Array:
    """Sorted world-space z of every crossing of column ``(x, y)``.

    The segment runs from ``(x, y, z_lo)`` to ``(x, y, z_hi)``; a hit at
    fraction ``t`` lies at ``z_lo + t * (z_hi - z_lo)``.
    """
    t, facing = _ray_triangles_hits(batch, (x, y, z_lo), (x, y, z_hi), eps)
    if t.size == 0:
        return t
    z = z_lo + t * (z_hi - z_lo)
    order = np.argsort(z, kind="stable")
    events = z[order]
    if merge:
        events = merge_coincident(events, eps, facing[order])
    return events


# ---------------------------------------------------------------------------
# Fill strategies: both return indices into the z lattice
# ---------------------------------------------------------------------------

def fill_run_length(events: _Array, zs: _Array, eps: float) -> _IntArray:
    """Lattice indices inside each ``(enter, exit)`` pair of *events*."""
    events = np.asarray(events, dtype=np.float64)
    spans = []
    for i in range(0, len(events) - 1, 2):
        enter, exit_ = events[i], events[i + 1]
        start = int(np.searchsorted(zs, enter - eps, side="left"))
        stop = int(np.searchsorted(zs, exit_ + eps, side="right"))
        if stop > start:
            spans.append(np.arange(start, stop))
    if not spans:
        return np.empty(0, dtype=np.intp)
    return np.unique(np.concatenate(spans))


def fill_brute_force(events: _Array, zs: _Array, eps: float) -> _IntArray:
    """Lattice indices found inside by stepping through the whole column."""
    crossings = np.asarray(events, dtype=np.float64).tolist()
    n_events = len(crossings)
    inside = False
    cursor = 0
    pending: list[int] = []
    committed: list[int] = []

    for k, z in enumerate(np.asarray(zs, dtype=np.float64).tolist()):
        while cursor < n_events:
            e = crossings[cursor]
            if not inside and e - eps <= z:
                inside = True
            elif inside and e + eps < z:
                inside = False
                committed.extend(pending)
                pending = []
            else:
                break
            cursor += 1
        if inside:
            pending.append(k)

    # an exit past the last lattice point still closes the span;
    # a span with no exit left is dropped
    if inside and cursor < n_events:
        committed.extend(pending)
    return np.unique(np.asarray(committed, dtype=np.intp))


_FILLS = {
    FillStrategy.RUN_LENGTH: fill_run_length,
    FillStrategy.BRUTE_FORCE: fill_brute_force,
}


# ---------------------------------------------------------------------------
# One column
# ---------------------------------------------------------------------------

def _floor(values, eps: float) -> _IntArray:
    # positions a rounding error below an integer belong to that integer
    return np.floor(np.asarray(values, dtype=np.float64) + eps).astype(np.int64)


def scan_column(
    batch: _TriangleBatch,
    x: float,
    y: float,
    bounds: BoundingBox,
    zs: _Array,
    config: VoxelizerConfig,
) -> Tuple[_IntArray, int]:
    """Voxels of one column.

    Returns
    -------
    voxels:
        ``(K, 3)`` int64 array (possibly empty).
    n_events:
        Number of crossings after merging.
    """
    eps = config.epsilon
    events = column_events(
        batch, x, y, bounds.min_z, bounds.max_z, eps, config.merge_coincident_events
    )
    if events.size == 0:
        return np.empty((0, 3), dtype=np.int64), 0

    idx = _FILLS[config.fill_strategy](events, zs, eps)
    if idx.size == 0:
        return np.empty((0, 3), dtype=np.int64), len(events)

    z_cells = np.unique(_floor(zs[idx], eps))
    out = np.empty((len(z_cells), 3), dtype=np.int64)
    out[:, 0] = _floor(x, eps)
    out[:, 1] = _floor(y, eps)
    out[:, 2] = z_cells
    return out, len(events)


# ---------------------------------------------------------------------------
# Whole model
# ---------------------------------------------------------------------------

def voxelize(
    triangles,
    config: Optional[VoxelizerConfig] = None,
    *,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
) -> VoxelSet:
    """Voxelize a closed triangle mesh.

    Parameters
    ----------
    triangles:
        ``(F, 3, 3)`` array or any iterable of nine-number triangle records.
    config:
        Scan options; defaults to :class:`VoxelizerConfig()`.
    progress:
        Called as ``progress(done_columns, total_columns)`` from the calling
        thread after every finished row of columns.
    cancel:
        Checked between columns; once set the scan raises
        :class:`~tri2vox.errors.VoxelizationCancelled`.

    Returns
    -------
    VoxelSet
        Occupied integer cells.  Empty for an empty model.

    Raises
    ------
    MalformedInputError
        If a triangle record is not nine finite numbers.
    VoxelizationCancelled
        If *cancel* was set before the scan finished.
    """
    if config is None:
        config = VoxelizerConfig()
    tris = prepare_triangles(triangles, config.round_input_coordinates)
    voxels = VoxelSet()
    if len(tris) == 0:
        logger.info("Empty model, nothing to voxelize")
        return voxels

    g = config.granularity
    bounds = model_bounds(tris, g)
    xs = lattice(bounds.min_x, bounds.max_x, g, config.epsilon)
    ys = lattice(bounds.min_y, bounds.max_y, g, config.epsilon)
    zs = lattice(bounds.min_z, bounds.max_z, g, config.epsilon)
    total = len(xs) * len(ys)
    logger.info(
        "Model bound by %s; shooting %d rays (%s, %d workers)",
        bounds, total, config.fill_strategy.value, config.workers,
    )

    batch = _TriangleBatch(tris)

    def _scan_row(x: float) -> Tuple[_IntArray, int]:
        found = []
        odd = 0
        for y in ys:
            if cancel is not None and cancel.is_set():
                raise VoxelizationCancelled("voxelization cancelled")
            cells, n_events = scan_column(batch, float(x), float(y), bounds, zs, config)
            if n_events % 2:
                odd += 1
                logger.debug("Column (%g, %g) has %d crossings", x, y, n_events)
            if len(cells):
                found.append(cells)
        if not found:
            return np.empty((0, 3), dtype=np.int64), odd
        return np.concatenate(found), odd

    done = 0
    odd_columns = 0

    def _collect(result: Tuple[_IntArray, int]) -> None:
        nonlocal done, odd_columns
        cells, odd = result
        voxels.merge(cells)
        odd_columns += odd
        done += len(ys)
        if progress is not None:
            progress(done, total)

    if config.workers == 1 or len(xs) == 1:
        for x in xs:
            _collect(_scan_row(x))
    else:
        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = [executor.submit(_scan_row, x) for x in xs]
            try:
                for future in as_completed(futures):
                    _collect(future.result())
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    if odd_columns:
        logger.warning(
            "%d of %d columns had an odd number of crossings; the mesh is probably not closed",
            odd_columns, total,
        )
    logger.info("%d voxels from %d rays", len(voxels), total)
    return voxels
