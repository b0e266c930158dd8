"""Decoded triangle mesh PyTree and its construction from source triangles.

Meshes are stored as unindexed triangle soups: every three consecutive
vertices form one triangle and ``indices[i] == i``. All buffers are in the
target convention.
"""

import numpy as np
import jax.numpy as jnp
from jax import Array
from flax import struct

from urdf_bridge.transforms import convention


@struct.dataclass
class BoundingBox:
    """Axis-aligned bounds of a mesh in the target convention."""
    minimum: Array
    maximum: Array

    @property
    def center(self) -> Array:
        return (self.minimum + self.maximum) / 2.0

    @property
    def size(self) -> Array:
        return self.maximum - self.minimum


@struct.dataclass
class DecodedMesh:
    """Immutable vertex, normal and index buffers of one mesh asset.

    Attributes:
        vertices: Array of shape (3 * num_triangles, 3).
        normals: Array of shape (3 * num_triangles, 3), one per vertex.
        indices: int32 array of shape (3 * num_triangles,).
        bounds: BoundingBox recomputed from ``vertices``.
    """
    vertices: Array
    normals: Array
    indices: Array
    bounds: BoundingBox

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0]) // 3


def from_source_triangles(triangles, normals) -> DecodedMesh:
    """
    Build a DecodedMesh from triangles in the source convention.

    Every vertex and normal is mapped with ``convention.position``. The
    handedness flip inverts triangle orientation, so each triangle is
    emitted with its vertices in reverse order (2, 1, 0) to keep outward
    faces outward.

    Args:
        triangles: (T, 3, 3) vertex positions, source convention
        normals: (T, 3) facet normals, source convention

    Returns:
        DecodedMesh with 3 * T vertices
    """
    triangles = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
    normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    num_triangles = triangles.shape[0]

    reversed_triangles = triangles[:, ::-1, :]
    per_vertex_normals = np.repeat(normals[:, None, :], 3, axis=1)

    vertices = convention.position(reversed_triangles.reshape(-1, 3))
    vertex_normals = convention.position(per_vertex_normals.reshape(-1, 3))
    indices = jnp.arange(3 * num_triangles, dtype=jnp.int32)

    if num_triangles == 0:
        bounds = BoundingBox(minimum=jnp.zeros(3), maximum=jnp.zeros(3))
    else:
        bounds = BoundingBox(
            minimum=jnp.min(vertices, axis=0),
            maximum=jnp.max(vertices, axis=0),
        )

    return DecodedMesh(
        vertices=vertices,
        normals=vertex_normals,
        indices=indices,
        bounds=bounds,
    )


# (normal, u, v) per face with u x v == normal, so corners walked
# (-u-v, +u-v, +u+v, -u+v) are counter-clockwise seen from outside.
_CUBE_FACES = (
    ((1, 0, 0), (0, 1, 0), (0, 0, 1)),
    ((-1, 0, 0), (0, 0, 1), (0, 1, 0)),
    ((0, 1, 0), (0, 0, 1), (1, 0, 0)),
    ((0, -1, 0), (1, 0, 0), (0, 0, 1)),
    ((0, 0, 1), (1, 0, 0), (0, 1, 0)),
    ((0, 0, -1), (0, 1, 0), (1, 0, 0)),
)


def unit_cube() -> DecodedMesh:
    """Placeholder 1x1x1 cube centred at the origin, 12 triangles."""
    triangles = []
    normals = []
    for n, u, v in _CUBE_FACES:
        n, u, v = (np.asarray(x, dtype=np.float64) for x in (n, u, v))
        corners = [
            0.5 * (n + su * u + sv * v)
            for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1))
        ]
        triangles.append((corners[0], corners[1], corners[2]))
        triangles.append((corners[0], corners[2], corners[3]))
        normals.extend([n, n])
    return from_source_triangles(np.array(triangles), np.array(normals))
