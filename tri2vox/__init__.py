"""tri2vox — triangle mesh to solid voxels (numpy).

Converts a closed triangle soup into the set of integer lattice cells that
lie inside it, ready to be placed as blocks in a voxel world.  Output can be
written as a Minetest WorldEdit schematic.

Quick start
-----------
>>> from tri2vox import VoxelizerConfig, voxelize, write_worldedit
>>> from tri2vox.loader import load_triangles
>>> triangles = load_triangles("teapot.txt")          # or "teapot.stl"
>>> voxels = voxelize(triangles, VoxelizerConfig(granularity=0.5))
>>> write_worldedit("teapot.we", voxels)

Closed-mesh requirement
-----------------------
Inside/outside is decided by the parity of crossings along vertical rays
(Möller–Trumbore).  The result is only meaningful for **closed**
(watertight, 2-manifold) meshes.  Columns with an odd number of crossings
are not repaired; their unpaired crossing is ignored.

Performance
-----------
Cost is O(C × F) where C = number of columns and F = number of triangles;
each column tests all triangles in one vectorised numpy call.  Halving
``granularity`` quadruples C.  ``workers`` spreads rows of columns across
threads.
"""

from ._math import intersect_triangle
from .bounds import BoundingBox, model_bounds
from .config import FillStrategy, VoxelizerConfig
from .errors import ConfigError, MalformedInputError, Tri2VoxError, VoxelizationCancelled
from .loader import load_triangles
from .scan import voxelize
from .schematic import to_worldedit, write_worldedit
from .voxel_set import VoxelSet

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "VoxelizerConfig",
    "FillStrategy",

    # Core
    "intersect_triangle",
    "BoundingBox",
    "model_bounds",
    "voxelize",
    "VoxelSet",

    # I/O
    "load_triangles",
    "to_worldedit",
    "write_worldedit",

    # Errors
    "Tri2VoxError",
    "MalformedInputError",
    "ConfigError",
    "VoxelizationCancelled",
]
