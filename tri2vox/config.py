"""Voxelizer configuration.

Every knob of the scan travels in one :class:`VoxelizerConfig` value that is
passed explicitly to :func:`tri2vox.voxelize`; nothing is read from module
globals at scan time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from .errors import ConfigError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
EPSILON: float = 1e-6
DEFAULT_NODE_NAME: str = "default:dirt"


def _to_number(kind, value, message: str):
    try:
        return kind(value)
    except (TypeError, ValueError, OverflowError):
        raise ConfigError(f"{message}, got {value!r}") from None


class FillStrategy(Enum):
    """How a column's sorted crossings are turned into voxels.

    ``BRUTE_FORCE`` walks every lattice step of the column and is the
    reference behaviour.  ``RUN_LENGTH`` jumps straight to each interior
    span; it is cheaper for thin solids in tall bounding boxes and yields the
    same voxels.
    """

    RUN_LENGTH = "run-length"
    BRUTE_FORCE = "brute-force"

    @classmethod
    def parse(cls, value: Union[str, "FillStrategy"]) -> "FillStrategy":
        """Accept an enum member, its value, or its name (any case, ``_`` or ``-``)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        for member in cls:
            if member.value == key:
                return member
        choices = ", ".join(m.value for m in cls)
        raise ConfigError(f"unknown fill strategy {value!r} (expected one of: {choices})")


@dataclass(frozen=True)
class VoxelizerConfig:
    """Options consumed by the scan.

    Parameters
    ----------
    granularity:
        Lattice step for columns and z-steps.  Column count grows
        quadratically as this shrinks.
    round_input_coordinates:
        Round every vertex coordinate to one decimal before use.  Removes
        floating-point noise at the cost of model fidelity.
    fill_strategy:
        See :class:`FillStrategy`.
    epsilon:
        Numerical tolerance of the intersection test and of the span
        comparisons.
    merge_coincident_events:
        Collapse crossings closer than *epsilon* that face the same way
        into one.  A ray through an edge or vertex shared by several
        triangles otherwise reports one hit per triangle.
    node_name:
        Node written for every voxel by the WorldEdit serializer.
    workers:
        Threads scanning rows of columns.  ``1`` scans inline.
    """

    granularity: float = 1.0
    round_input_coordinates: bool = True
    fill_strategy: FillStrategy = FillStrategy.BRUTE_FORCE
    epsilon: float = EPSILON
    merge_coincident_events: bool = True
    node_name: str = DEFAULT_NODE_NAME
    workers: int = 1

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "fill_strategy", FillStrategy.parse(self.fill_strategy))

        g = _to_number(float, self.granularity, "granularity must be a positive number")
        if not math.isfinite(g) or g <= 0.0:
            raise ConfigError(f"granularity must be a positive number, got {self.granularity!r}")
        object.__setattr__(self, "granularity", g)

        eps = _to_number(float, self.epsilon, "epsilon must be a positive number")
        if not math.isfinite(eps) or eps <= 0.0:
            raise ConfigError(f"epsilon must be a positive number, got {self.epsilon!r}")
        object.__setattr__(self, "epsilon", eps)

        workers = _to_number(int, self.workers, "workers must be an integer >= 1")
        if workers != self.workers or workers < 1:
            raise ConfigError(f"workers must be an integer >= 1, got {self.workers!r}")
        object.__setattr__(self, "workers", workers)

        if not self.node_name or not isinstance(self.node_name, str):
            raise ConfigError("node_name must be a non-empty string")

    def with_options(self, **changes) -> "VoxelizerConfig":
        """Return a copy with *changes* applied (validated again)."""
        return replace(self, **changes)
