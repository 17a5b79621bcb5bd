"""Command line: convert a triangle file into a WorldEdit schematic.

Usage
-----
tri2vox model.txt                      # writes model.txt.we
tri2vox model.stl --granularity 0.5    # finer lattice, ~4x the rays
tri2vox model.txt --strategy run-length --workers 4 --npy model.npy
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .config import DEFAULT_NODE_NAME, EPSILON, FillStrategy, VoxelizerConfig
from .errors import Tri2VoxError
from .loader import load_triangles
from .scan import voxelize
from .schematic import write_worldedit

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tri2vox",
        description="Converts a raw-triangle or STL model into a Minetest WorldEdit schematic.",
    )
    parser.add_argument("input", type=Path, help="Raw-triangle text file or .stl file to convert")
    parser.add_argument(
        "--out", "-o", type=Path, default=None,
        help="Output .we path (default: INPUT with '.we' appended)",
    )
    parser.add_argument(
        "--granularity", "-g", type=float, default=1.0,
        help="Lattice step; smaller values cost quadratically more rays (default 1)",
    )
    parser.add_argument(
        "--no-round", dest="round_input", action="store_false",
        help="Keep vertex coordinates as read instead of rounding to one decimal",
    )
    parser.add_argument(
        "--strategy", default=FillStrategy.BRUTE_FORCE.value,
        choices=[s.value for s in FillStrategy],
        help="Column fill strategy (default brute-force)",
    )
    parser.add_argument(
        "--epsilon", type=float, default=EPSILON,
        help=f"Intersection tolerance (default {EPSILON:g})",
    )
    parser.add_argument(
        "--no-merge", dest="merge_events", action="store_false",
        help="Keep coincident crossings instead of merging them",
    )
    parser.add_argument(
        "--node", default=DEFAULT_NODE_NAME,
        help=f"Node placed for every voxel (default {DEFAULT_NODE_NAME})",
    )
    parser.add_argument(
        "--workers", "-j", type=int, default=1,
        help="Threads scanning rows of columns (default 1)",
    )
    parser.add_argument(
        "--npy", type=Path, default=None,
        help="Also save the dense (nz, ny, nx) occupancy grid to this .npy path",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="No progress output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    if not args.input.is_file() or not os.access(args.input, os.R_OK):
        print(f"Cannot read '{args.input}'.\n", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    show = not args.quiet
    out_path = args.out if args.out is not None else Path(f"{args.input}.we")

    try:
        config = VoxelizerConfig(
            granularity=args.granularity,
            round_input_coordinates=args.round_input,
            fill_strategy=args.strategy,
            epsilon=args.epsilon,
            merge_coincident_events=args.merge_events,
            node_name=args.node,
            workers=args.workers,
        )

        if show:
            print(f"Opening and reading '{args.input}'.", flush=True)
        triangles = load_triangles(args.input)
        if show:
            print(f"Loaded {len(triangles):,} triangles.", flush=True)

        def _progress(done: int, total: int) -> None:
            print(f"\r{done:,}/{total:,} rays", end="", flush=True)

        voxels = voxelize(triangles, config, progress=_progress if show else None)
    except Tri2VoxError as exc:
        if show:
            print(flush=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if show:
        print(f"\n{len(voxels):,} nodes will be generated.", flush=True)
        print(f"Writing schematic file '{out_path}'.", flush=True)
    write_worldedit(out_path, voxels, config.node_name)

    if args.npy is not None:
        grid, origin = voxels.to_dense()
        args.npy.parent.mkdir(parents=True, exist_ok=True)
        np.save(args.npy, grid)
        if show:
            print(f"Saved occupancy grid {grid.shape} (origin {origin}) to {args.npy}", flush=True)

    return 0


if __name__ == "__main__":
    sys.exit(main())
