"""Tests for WorldEdit schematic output."""

import os

from tri2vox import VoxelSet, to_worldedit, voxelize, write_worldedit
from tri2vox.schematic import worldedit_node

from _meshes import box_triangles

_META = '["meta"] = { ["inventory"] = {  }, ["fields"] = {  } }, ["param2"] = 0, ["param1"] = 0 }'


class TestWorldEditNode:
    def test_layout(self):
        node = worldedit_node(1, -2, 3)
        assert node == '{ ["y"] = -2, ["x"] = 1, ["name"] = "default:dirt", ["z"] = 3, ' + _META

    def test_custom_name(self):
        assert '["name"] = "default:stone"' in worldedit_node(0, 0, 0, "default:stone")

    def test_name_is_escaped(self):
        assert '["name"] = "a\\"b"' in worldedit_node(0, 0, 0, 'a"b')


class TestToWorldEdit:
    def test_empty(self):
        assert to_worldedit(VoxelSet()) == "return { }"

    def test_single_line(self):
        text = to_worldedit(VoxelSet([(0, 0, 0), (1, 0, 0)]))
        assert "\n" not in text
        assert text.startswith("return { { ")
        assert text.endswith(" } }")
        assert text.count('["name"]') == 2

    def test_no_trailing_comma(self):
        text = to_worldedit(VoxelSet([(0, 0, 0)]))
        assert not text.rstrip(" }").endswith(",")

    def test_cube(self):
        text = to_worldedit(voxelize(box_triangles()), "default:stone")
        assert text.count('"default:stone"') == 8


class TestWriteWorldEdit:
    def test_creates_nested_dirs(self, tmp_path):
        path = os.path.join(tmp_path, "a", "b", "cube.we")
        write_worldedit(path, VoxelSet([(0, 0, 0)]))
        assert os.path.isfile(path)

    def test_round_trip_text(self, tmp_path):
        voxels = VoxelSet([(0, 0, 0), (0, 1, 2)])
        path = tmp_path / "out.we"
        write_worldedit(path, voxels, "default:dirt")
        assert path.read_text(encoding="utf-8") == to_worldedit(voxels)
