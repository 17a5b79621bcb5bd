"""Tests for triangle loading and validation."""
from __future__ import annotations

import numpy as np
import numpy.testing as npt
import pytest

from tri2vox import MalformedInputError, load_triangles
from tri2vox.loader import as_triangles, load_stl, parse_raw_triangles

from _meshes import box_triangles, write_ascii_stl, write_binary_stl, write_raw


# ---------------------------------------------------------------------------
# Raw triangle text
# ---------------------------------------------------------------------------

class TestParseRawTriangles:
    def test_one_line_per_triangle(self):
        tris = parse_raw_triangles("0 0 0 1 0 0 0 1 0\n0 0 1 1 0 1 0 1 1\n")
        assert tris.shape == (2, 3, 3)
        npt.assert_array_equal(tris[1, 2], [0.0, 1.0, 1.0])

    def test_blank_lines_and_extra_whitespace(self):
        tris = parse_raw_triangles("\n  0 0 0   1 0 0\t0 1 0  \n\n")
        assert tris.shape == (1, 3, 3)

    def test_empty_text(self):
        assert parse_raw_triangles("").shape == (0, 3, 3)

    def test_wrong_count_names_record(self):
        with pytest.raises(MalformedInputError) as info:
            parse_raw_triangles("0 0 0 1 0 0 0 1 0\n0 0 0 1 0 0 0 1\n")
        assert info.value.record == 1
        assert "expected 9" in str(info.value)
        assert info.value.text == "0 0 0 1 0 0 0 1"

    def test_non_numeric(self):
        with pytest.raises(MalformedInputError) as info:
            parse_raw_triangles("0 0 0 1 0 0 0 one 0\n")
        assert info.value.record == 0

    def test_non_finite(self):
        with pytest.raises(MalformedInputError):
            parse_raw_triangles("0 0 0 1 0 0 0 nan 0\n")

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_raw_triangles("1 2 3\n")


# ---------------------------------------------------------------------------
# In-memory records
# ---------------------------------------------------------------------------

class TestAsTriangles:
    def test_flat_records(self):
        tris = as_triangles([[0, 0, 0, 1, 0, 0, 0, 1, 0]])
        assert tris.shape == (1, 3, 3)
        assert tris.dtype == np.float64

    def test_nested_records(self):
        tris = as_triangles([[(0, 0, 0), (1, 0, 0), (0, 1, 0)]])
        npt.assert_array_equal(tris[0, 1], [1.0, 0.0, 0.0])

    def test_array_passthrough(self):
        box = box_triangles()
        npt.assert_array_equal(as_triangles(box), box)

    def test_flat_array(self):
        assert as_triangles(box_triangles().reshape(12, 9)).shape == (12, 3, 3)

    def test_generator(self):
        tris = as_triangles(tri.ravel() for tri in box_triangles())
        assert tris.shape == (12, 3, 3)

    def test_empty(self):
        assert as_triangles([]).shape == (0, 3, 3)

    def test_short_record(self):
        with pytest.raises(MalformedInputError) as info:
            as_triangles([[0] * 9, [0] * 8])
        assert info.value.record == 1

    def test_non_numeric_record(self):
        with pytest.raises(MalformedInputError):
            as_triangles([[0, 0, 0, 1, 0, 0, 0, None, 0]])

    def test_non_finite_array(self):
        box = box_triangles()
        box[3, 1, 2] = np.inf
        with pytest.raises(MalformedInputError) as info:
            as_triangles(box)
        assert info.value.record == 3


# ---------------------------------------------------------------------------
# STL
# ---------------------------------------------------------------------------

class TestLoadStl:
    def test_binary_shape(self, tmp_path):
        stl = tmp_path / "box.stl"
        stl.write_bytes(write_binary_stl(box_triangles()))
        loaded = load_stl(stl)
        assert loaded.shape == (12, 3, 3)
        assert loaded.dtype == np.float64

    def test_binary_values(self, tmp_path):
        tris = box_triangles((0, 0, 0), (2, 3, 4))
        stl = tmp_path / "box.stl"
        stl.write_bytes(write_binary_stl(tris))
        npt.assert_allclose(load_stl(stl), tris, atol=1e-6)

    def test_binary_with_solid_header(self, tmp_path):
        data = write_binary_stl(box_triangles())
        stl = tmp_path / "box.stl"
        stl.write_bytes(b"solid exported".ljust(80, b" ") + data[80:])
        assert load_stl(stl).shape == (12, 3, 3)

    def test_binary_without_facets(self, tmp_path):
        stl = tmp_path / "empty.stl"
        stl.write_bytes(write_binary_stl(np.empty((0, 3, 3))))
        assert load_stl(stl).shape == (0, 3, 3)

    def test_ascii_values(self, tmp_path):
        tris = box_triangles((0, 0, 0), (2, 3, 4))
        stl = tmp_path / "box.stl"
        stl.write_text(write_ascii_stl(tris))
        npt.assert_allclose(load_stl(stl), tris, atol=1e-5)

    def test_ascii_bad_vertex(self, tmp_path):
        stl = tmp_path / "bad.stl"
        stl.write_text("solid x\nfacet normal 0 0 0\nouter loop\nvertex 0 0\nendloop\nendfacet\nendsolid x\n")
        with pytest.raises(MalformedInputError):
            load_stl(stl)

    def test_ascii_partial_facet(self, tmp_path):
        stl = tmp_path / "bad.stl"
        stl.write_text("solid x\nvertex 0 0 0\nvertex 1 0 0\nendsolid x\n")
        with pytest.raises(MalformedInputError):
            load_stl(stl)


class TestLoadTriangles:
    def test_raw_by_default(self, tmp_path):
        path = tmp_path / "model.txt"
        path.write_text(write_raw(box_triangles()))
        npt.assert_allclose(load_triangles(path), box_triangles())

    def test_stl_by_extension(self, tmp_path):
        path = tmp_path / "model.STL"
        path.write_bytes(write_binary_stl(box_triangles()))
        assert load_triangles(path).shape == (12, 3, 3)
