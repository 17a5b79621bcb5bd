"""Minetest WorldEdit schematic (``.we``) output.

The file is one line of Lua::

    return { { ["y"] = 0, ["x"] = 0, ["name"] = "default:dirt", ["z"] = 0, ["meta"] = { ["inventory"] = {  }, ["fields"] = {  } }, ["param2"] = 0, ["param1"] = 0 }, ... }

Every voxel gets the same node name and default metadata.  Coordinates are
written axis for axis as they come out of the scan.
"""

from __future__ import annotations

import os
from typing import Iterable, Tuple, Union

from .config import DEFAULT_NODE_NAME

_NODE = (
    '{{ ["y"] = {y}, ["x"] = {x}, ["name"] = "{name}", ["z"] = {z}, '
    '["meta"] = {{ ["inventory"] = {{  }}, ["fields"] = {{  }} }}, '
    '["param2"] = 0, ["param1"] = 0 }}'
)


def _lua_string(name: str) -> str:
    return name.replace("\\", "\\\\").replace('"', '\\"')


def worldedit_node(x: int, y: int, z: int, name: str = DEFAULT_NODE_NAME) -> str:
    """One node table."""
    return _NODE.format(x=int(x), y=int(y), z=int(z), name=_lua_string(name))


def to_worldedit(voxels: Iterable[Tuple[int, int, int]], name: str = DEFAULT_NODE_NAME) -> str:
    """Render *voxels* as WorldEdit schematic text."""
    nodes = ", ".join(worldedit_node(x, y, z, name) for x, y, z in voxels)
    if not nodes:
        return "return { }"
    return f"return {{ {nodes} }}"


def write_worldedit(
    path: Union[str, os.PathLike],
    voxels: Iterable[Tuple[int, int, int]],
    name: str = DEFAULT_NODE_NAME,
) -> None:
    """Write *voxels* to *path* (creates parent directories if needed)."""
    out_dir = os.path.dirname(os.fspath(path))
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(to_worldedit(voxels, name))
