"""Triangle loading.

Two on-disk formats are understood:

* **Raw triangles** — plain text, one triangle per line, nine
  whitespace-separated numbers ``x1 y1 z1 x2 y2 z2 x3 y3 z3``.  Blank lines
  are ignored.
* **STL** — binary or ASCII.  Normals are discarded.

Everything is returned as a ``(F, 3, 3)`` float64 array where
``triangles[i, j]`` is the j-th vertex of the i-th triangle.  Any record that
is not nine finite numbers raises :class:`~tri2vox.errors.MalformedInputError`
naming the record; nothing is skipped or repaired.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import numpy.typing as npt

from .errors import MalformedInputError

_Array = npt.NDArray[np.floating]


# ---------------------------------------------------------------------------
# In-memory records
# ---------------------------------------------------------------------------

def _record_to_floats(index: int, record) -> list:
    flat = np.ravel(np.asarray(record, dtype=object))
    if flat.size != 9:
        raise MalformedInputError(
            f"expected 9 coordinates, got {flat.size}", record=index, text=repr(record)
        )
    values = []
    for item in flat:
        try:
            value = float(item)
        except (TypeError, ValueError):
            raise MalformedInputError(
                f"non-numeric coordinate {item!r}", record=index, text=repr(record)
            ) from None
        if not np.isfinite(value):
            raise MalformedInputError(
                f"non-finite coordinate {item!r}", record=index, text=repr(record)
            )
        values.append(value)
    return values


def as_triangles(records: Union[_Array, Iterable]) -> _Array:
    """Validate *records* into a ``(F, 3, 3)`` float64 array.

    *records* is either an array already shaped ``(F, 3, 3)`` / ``(F, 9)`` or
    any iterable of per-triangle records, each nine numbers (flat or as three
    triples).
    """
    if isinstance(records, np.ndarray) and records.dtype.kind in "fiu":
        if records.size == 0:
            return np.empty((0, 3, 3), dtype=np.float64)
        if records.ndim >= 2 and records[0].size == 9:
            arr = records.astype(np.float64).reshape(len(records), 3, 3)
            bad = ~np.isfinite(arr).reshape(len(arr), -1).all(axis=1)
            if bad.any():
                index = int(np.argmax(bad))
                raise MalformedInputError(
                    "non-finite coordinate", record=index, text=repr(records[index].tolist())
                )
            return arr
    rows = [_record_to_floats(i, rec) for i, rec in enumerate(records)]
    if not rows:
        return np.empty((0, 3, 3), dtype=np.float64)
    return np.array(rows, dtype=np.float64).reshape(-1, 3, 3)


# ---------------------------------------------------------------------------
# Raw triangle text
# ---------------------------------------------------------------------------

def parse_raw_triangles(text: str) -> _Array:
    """Parse raw-triangle text (one nine-number record per line)."""
    rows = []
    for index, line in enumerate(text.splitlines()):
        line = line.strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 9:
            raise MalformedInputError(
                f"expected 9 coordinates, got {len(parts)}", record=index, text=line
            )
        rows.append(_record_to_floats(index, parts))
    if not rows:
        return np.empty((0, 3, 3), dtype=np.float64)
    return np.array(rows, dtype=np.float64).reshape(-1, 3, 3)


def load_raw_triangles(path: Union[str, Path]) -> _Array:
    """Read a raw-triangle text file; record indices in errors are 0-based line numbers."""
    return parse_raw_triangles(Path(path).read_text(encoding="utf-8", errors="replace"))


# ---------------------------------------------------------------------------
# STL
# ---------------------------------------------------------------------------

_STL_HEADER = 84
_STL_FACET = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attr", "<u2"),
])


def _binary_facet_count(raw: bytes) -> Optional[int]:
    """Facet count when *raw* has exactly the size of a binary STL, else ``None``.

    Only the size is trusted: plenty of binary files start their header with
    ``solid`` like an ASCII one.
    """
    if len(raw) < _STL_HEADER:
        return None
    count = int(np.frombuffer(raw, dtype="<u4", count=1, offset=80)[0])
    if len(raw) != _STL_HEADER + _STL_FACET.itemsize * count:
        return None
    return count


def load_stl(path: Union[str, Path]) -> _Array:
    """Load an STL file (binary or ASCII) as a ``(F, 3, 3)`` array."""
    raw = Path(path).read_bytes()
    count = _binary_facet_count(raw)
    if count is None:
        return _load_ascii_stl(raw.decode("ascii", errors="replace"))
    facets = np.frombuffer(raw, dtype=_STL_FACET, count=count, offset=_STL_HEADER)
    return as_triangles(facets["vertices"].astype(np.float64))


def _load_ascii_stl(text: str) -> _Array:
    verts: list[list[float]] = []
    for line in text.splitlines():
        line = line.strip()
        if not line.startswith("vertex"):
            continue
        parts = line.split()
        facet = len(verts) // 3
        if len(parts) != 4:
            raise MalformedInputError(
                f"vertex line needs 3 coordinates, got {len(parts) - 1}", record=facet, text=line
            )
        try:
            verts.append([float(parts[1]), float(parts[2]), float(parts[3])])
        except ValueError:
            raise MalformedInputError("non-numeric vertex", record=facet, text=line) from None
    if len(verts) % 3:
        raise MalformedInputError(
            f"{len(verts)} vertices do not form whole triangles", record=len(verts) // 3
        )
    return as_triangles(np.array(verts, dtype=np.float64).reshape(-1, 3, 3))


def load_triangles(path: Union[str, Path]) -> _Array:
    """Load *path* by extension: ``.stl`` as STL, anything else as raw triangles."""
    path = Path(path)
    if path.suffix.lower() == ".stl":
        return load_stl(path)
    return load_raw_triangles(path)
