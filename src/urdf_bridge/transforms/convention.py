"""Source-to-target coordinate convention mapping in JAX.

URDF documents and STL assets are authored in a right-handed frame with
X forward, Y left and Z up. Hosts consuming this package use a left-handed
frame with X right, Y up and Z forward. The three functions below convert
positions, roll-pitch-yaw rotations and joint axes between the two.

All functions are pure, JIT-able and broadcast over leading dimensions:
inputs of shape (..., 3) produce outputs of shape (..., 3).
"""

import jax
import jax.numpy as jnp
from typing import Sequence, Union

Array = jax.Array
VectorLike = Union[Array, Sequence[float]]

# Target-convention up vector. Default joint axis when <axis> is omitted.
UP = (0.0, 1.0, 0.0)


def _as_vectors(v: VectorLike) -> Array:
    v = jnp.asarray(v, dtype=jnp.float64)
    if v.shape[-1:] != (3,):
        raise ValueError(f"expected vectors of shape (..., 3), got {v.shape}")
    return v


def position(v: VectorLike) -> Array:
    """
    Map source positions (x, y, z) to target positions (x, z, y).

    Swapping Y and Z alone flips handedness, so no sign change is needed.
    The same mapping is used for STL vertices and facet normals.

    Args:
        v: (..., 3) positions in the source convention

    Returns:
        (..., 3) positions in the target convention
    """
    v = _as_vectors(v)
    return jnp.stack([v[..., 0], v[..., 2], v[..., 1]], axis=-1)


def rotation(rpy: VectorLike) -> Array:
    """
    Map source roll-pitch-yaw (radians) to target X-Y-Z Euler angles.

    (roll, pitch, yaw) -> (-pitch, yaw, roll). This is a per-axis
    relabelling, not a change of basis of the full rotation matrix: it is
    exact for rotations about a single axis and approximate for composed
    rotations. Hosts that already compensate for this depend on it as is.

    Args:
        rpy: (..., 3) roll, pitch, yaw angles in the source convention

    Returns:
        (..., 3) Euler angles in the target convention, radians
    """
    rpy = _as_vectors(rpy)
    roll, pitch, yaw = rpy[..., 0], rpy[..., 1], rpy[..., 2]
    return jnp.stack([-pitch, yaw, roll], axis=-1)


def axis(v: VectorLike) -> Array:
    """
    Map a source joint axis (x, y, z) to the target axis (-y, z, x).

    Source X (forward) becomes target Z, source Y (left) becomes target -X
    and source Z (up) becomes target Y.

    Args:
        v: (..., 3) axis vectors in the source convention

    Returns:
        (..., 3) axis vectors in the target convention
    """
    v = _as_vectors(v)
    return jnp.stack([-v[..., 1], v[..., 2], v[..., 0]], axis=-1)
