"""Tests for STL decoding and the decoded mesh model."""

import struct
from pathlib import Path

import jax.numpy as jnp
import numpy as np
import pytest

from urdf_bridge.core import DecodedMesh, unit_cube
from urdf_bridge.errors import MalformedMesh, TruncatedFile
from urdf_bridge.io import decode_stl, is_binary_stl, load_stl
from urdf_bridge.transforms import convention

WEDGE = Path(__file__).parent / "fixtures" / "wedge_ascii.stl"


def make_binary_stl(triangles, normals=None, header=b"binary test"):
    """Pack triangles into a binary STL buffer."""
    data = header.ljust(80, b"\0")[:80] + struct.pack("<I", len(triangles))
    for i, triangle in enumerate(triangles):
        normal = normals[i] if normals is not None else (0.0, 0.0, 0.0)
        flat = [c for vertex in triangle for c in vertex]
        data += struct.pack("<12fH", *normal, *flat, 0)
    return data


def make_ascii_stl(facets, name="test"):
    """Render (normal, (v0, v1, v2)) facets as ASCII STL text."""
    lines = [f"solid {name}"]
    for normal, triangle in facets:
        lines.append("  facet normal {} {} {}".format(*normal))
        lines.append("    outer loop")
        for vertex in triangle:
            lines.append("      vertex {} {} {}".format(*vertex))
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines).encode("ascii")


TRIANGLE = ((1.0, 2.0, 3.0), (4.0, 5.0, 6.0), (7.0, 8.0, 9.0))
RECORD = 50


def test_binary_single_triangle_reverses_winding():
    """Test one binary triangle v0, v1, v2 comes out as transformed v2, v1, v0."""
    mesh = decode_stl(make_binary_stl([TRIANGLE], normals=[(0.0, 0.0, 1.0)]))

    assert isinstance(mesh, DecodedMesh)
    assert mesh.triangle_count == 1
    assert mesh.vertex_count == 3
    expected = convention.position(jnp.array([TRIANGLE[2], TRIANGLE[1], TRIANGLE[0]]))
    np.testing.assert_allclose(mesh.vertices, expected)
    np.testing.assert_array_equal(mesh.indices, jnp.array([0, 1, 2]))
    # Normal (0, 0, 1) goes through the position mapping, once per vertex
    np.testing.assert_allclose(mesh.normals, jnp.tile(jnp.array([0.0, 1.0, 0.0]), (3, 1)))


def test_binary_bounds_from_final_vertices():
    """Test bounds are computed after the coordinate mapping."""
    mesh = decode_stl(make_binary_stl([TRIANGLE]))
    np.testing.assert_allclose(mesh.bounds.minimum, jnp.array([1.0, 3.0, 2.0]))
    np.testing.assert_allclose(mesh.bounds.maximum, jnp.array([7.0, 9.0, 8.0]))
    np.testing.assert_allclose(mesh.bounds.center, jnp.array([4.0, 6.0, 5.0]))
    np.testing.assert_allclose(mesh.bounds.size, jnp.array([6.0, 6.0, 6.0]))


def test_binary_with_solid_header_is_binary():
    """Test an 84 + 2 * 50 byte buffer counting 2 triangles is binary despite 'solid'."""
    data = make_binary_stl([TRIANGLE, TRIANGLE], header=b"solid test")
    assert len(data) == 84 + 2 * 50
    assert data[:1] == b"s"
    assert is_binary_stl(data)

    mesh = decode_stl(data)
    assert mesh.triangle_count == 2


def test_ascii_detected_when_size_does_not_match():
    """Test 'solid test' text that fails the binary size formula is ASCII."""
    data = make_ascii_stl([((0, 0, 1), TRIANGLE)])
    assert data.startswith(b"solid test")
    assert not is_binary_stl(data)
    assert decode_stl(data).triangle_count == 1


def test_ascii_and_binary_decode_identically():
    """Test the two encodings of the same facets produce the same buffers."""
    facets = [((0.0, 0.0, 1.0), TRIANGLE), ((1.0, 0.0, 0.0), ((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)))]
    ascii_mesh = decode_stl(make_ascii_stl(facets))
    binary_mesh = decode_stl(make_binary_stl([t for _, t in facets], normals=[n for n, _ in facets]))

    np.testing.assert_allclose(ascii_mesh.vertices, binary_mesh.vertices)
    np.testing.assert_allclose(ascii_mesh.normals, binary_mesh.normals)
    np.testing.assert_array_equal(ascii_mesh.indices, binary_mesh.indices)


def test_ascii_fixture():
    """Test decoding the wedge fixture file."""
    mesh = load_stl(WEDGE)

    assert mesh.triangle_count == 2
    np.testing.assert_allclose(
        mesh.vertices,
        jnp.array([
            [0.0, 0.0, 1.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 0.0],
        ]),
    )
    np.testing.assert_allclose(mesh.normals[:3], jnp.tile(jnp.array([0.0, 1.0, 0.0]), (3, 1)))
    np.testing.assert_allclose(mesh.normals[3:], jnp.tile(jnp.array([0.0, 0.0, -1.0]), (3, 1)))
    np.testing.assert_allclose(mesh.bounds.minimum, jnp.zeros(3))
    np.testing.assert_allclose(mesh.bounds.maximum, jnp.ones(3))


def test_ascii_keywords_are_case_insensitive():
    """Test upper-case ASCII keywords decode."""
    data = make_ascii_stl([((0, 0, 1), TRIANGLE)]).decode("ascii").upper().encode("ascii")
    assert decode_stl(data).triangle_count == 1


def test_ascii_non_numeric_vertex_raises():
    """Test a non-numeric vertex token is a MalformedMesh."""
    data = make_ascii_stl([((0, 0, 1), ((0, 0, 0), (1, "abc", 0), (0, 1, 0)))])
    with pytest.raises(MalformedMesh):
        decode_stl(data)


def test_truncated_file():
    """Test fewer than 84 bytes is a TruncatedFile, which is a MalformedMesh."""
    with pytest.raises(TruncatedFile):
        decode_stl(b"solid tiny")
    with pytest.raises(MalformedMesh):
        decode_stl(b"\0" * 83)


def test_truncated_binary_record():
    """Test a binary buffer missing declared records is a MalformedMesh."""
    data = make_binary_stl([TRIANGLE, TRIANGLE, TRIANGLE])[:-60]
    assert not is_binary_stl(data)
    with pytest.raises(MalformedMesh):
        decode_stl(data)


def test_empty_binary_mesh():
    """Test a binary STL with zero triangles has zero bounds."""
    mesh = decode_stl(make_binary_stl([]))
    assert mesh.triangle_count == 0
    assert mesh.vertices.shape == (0, 3)
    np.testing.assert_array_equal(mesh.bounds.minimum, jnp.zeros(3))
    np.testing.assert_array_equal(mesh.bounds.maximum, jnp.zeros(3))


def test_unit_cube_placeholder():
    """Test the placeholder cube size, bounds and outward winding."""
    cube = unit_cube()

    assert cube.triangle_count == 12
    assert cube.vertex_count == 36
    np.testing.assert_allclose(cube.bounds.minimum, -0.5 * jnp.ones(3))
    np.testing.assert_allclose(cube.bounds.maximum, 0.5 * jnp.ones(3))

    # Emitted triangles and their normals agree, and normals point away from the centre
    triangles = cube.vertices.reshape(12, 3, 3)
    normals = cube.normals.reshape(12, 3, 3)[:, 0, :]
    cross = jnp.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0])
    assert bool(jnp.all(jnp.sum(cross * normals, axis=-1) > 0))
    centroids = triangles.mean(axis=1)
    assert bool(jnp.all(jnp.sum(centroids * normals, axis=-1) > 0))


def test_solid_header_truncated_binary_raises():
    """Test a 'solid' header on a binary file missing a record is a MalformedMesh."""
    data = make_binary_stl([TRIANGLE, TRIANGLE, TRIANGLE], header=b"solid part exported")[:-RECORD]
    assert not is_binary_stl(data)
    with pytest.raises(MalformedMesh):
        decode_stl(data)


def test_solid_header_truncated_ascii_safe_binary_raises():
    """Test binary records that happen to be valid ASCII still fail on truncation."""
    zeros = ((0.0, 0.0, 0.0),) * 3
    data = make_binary_stl([zeros, zeros], header=b"solid zeros")[:-RECORD]
    with pytest.raises(MalformedMesh):
        decode_stl(data)


def test_solid_header_padded_binary_decodes():
    """Test trailing padding after complete records is ignored."""
    data = make_binary_stl([TRIANGLE], header=b"solid padded") + b"\0" * 10
    assert not is_binary_stl(data)
    mesh = decode_stl(data)
    assert mesh.triangle_count == 1
    expected = convention.position(jnp.array([TRIANGLE[2], TRIANGLE[1], TRIANGLE[0]]))
    np.testing.assert_allclose(mesh.vertices, expected)
