"""Physics descriptors derived from parsed joints and inertials.

This module turns URDF joints into engine-agnostic joint specifications and
link inertials into rigid-body specifications. Nothing here creates engine
objects: hosts read the descriptors and instantiate their own joints and
bodies.
"""

import enum
import logging
from typing import Optional, Tuple

import jax.numpy as jnp
from jax import Array
from flax import struct

from .core.robot_model import Inertial, Joint, JointType

console_logger = logging.getLogger(__name__)

# Off-diagonal inertia magnitude above which an axis-aligned tensor is only
# an approximation.
INERTIA_EPSILON = 1e-3


class Motion(enum.Enum):
    NONE = "none"
    ROTATIONAL = "rotational"
    TRANSLATIONAL = "translational"
    UNSUPPORTED = "unsupported"


@struct.dataclass
class AngularLimit:
    """Rotation range in radians."""
    lower: float
    upper: float


@struct.dataclass
class LinearLimit:
    """Translation bound along the free axis, from the URDF upper limit."""
    limit: float


@struct.dataclass
class Drive:
    """Spring-damper applied along the joint's degree of freedom."""
    damper: float
    spring: float = 0.0


@struct.dataclass
class JointSpec:
    """Engine-agnostic description of one physics joint.

    Attributes:
        name: Source joint name.
        type: Source joint type.
        parent: Parent link name.
        child: Child link name.
        motion: Kind of degree of freedom, UNSUPPORTED for floating and
                planar joints.
        axis: Array of shape (3,) in the target convention, None when the
              joint has no degree of freedom. For prismatic joints this is
              the snapped basis axis.
        free_axis: Index (0, 1, 2) of the free translation axis for
                   prismatic joints, None otherwise.
        angular_limit: Rotation range for limited revolute joints.
        linear_limit: Translation bound for limited prismatic joints.
        drive: Damper from <dynamics>, None when absent.
    """
    name: str = struct.field(pytree_node=False)
    type: JointType = struct.field(pytree_node=False)
    parent: Optional[str] = struct.field(pytree_node=False)
    child: Optional[str] = struct.field(pytree_node=False)
    motion: Motion = struct.field(pytree_node=False)
    axis: Optional[Array] = None
    free_axis: Optional[int] = struct.field(pytree_node=False, default=None)
    angular_limit: Optional[AngularLimit] = None
    linear_limit: Optional[LinearLimit] = None
    drive: Optional[Drive] = None

    @property
    def is_noop(self) -> bool:
        return self.motion is Motion.UNSUPPORTED

    @property
    def locked_axes(self) -> Tuple[int, ...]:
        """Translation axes a prismatic joint must lock."""
        if self.free_axis is None:
            return ()
        return tuple(i for i in range(3) if i != self.free_axis)


@struct.dataclass
class BodySpec:
    """Rigid-body mass properties of one link.

    Attributes:
        link: Link name.
        mass: Mass.
        center_of_mass: Array of shape (3,), target convention.
        inertia_diagonal: Array of shape (3,), principal moments remapped
                          to target axes.
        approximated: True when off-diagonal inertia was dropped.
        use_gravity: Whether the host body is affected by gravity.
    """
    link: str = struct.field(pytree_node=False)
    mass: float
    center_of_mass: Array
    inertia_diagonal: Array
    approximated: bool = struct.field(pytree_node=False, default=False)
    use_gravity: bool = struct.field(pytree_node=False, default=True)


def map_joint(joint: Joint) -> JointSpec:
    """Derive the physics joint specification of a parsed joint.

    Args:
        joint: Parsed joint with its axis in the target convention.

    Returns:
        JointSpec. Floating and planar joints map to a no-op spec.
    """
    spec = JointSpec(
        name=joint.name,
        type=joint.type,
        parent=joint.parent,
        child=joint.child,
        motion=Motion.NONE,
    )
    drive = Drive(damper=joint.dynamics.damping) if joint.dynamics is not None else None

    if joint.type is JointType.FIXED:
        return spec

    if joint.type in (JointType.REVOLUTE, JointType.CONTINUOUS):
        angular_limit = None
        # Continuous joints stay unbounded even when a <limit> is given
        if joint.type is JointType.REVOLUTE and joint.limit is not None:
            angular_limit = AngularLimit(lower=joint.limit.lower, upper=joint.limit.upper)
        return spec.replace(
            motion=Motion.ROTATIONAL,
            axis=joint.axis,
            angular_limit=angular_limit,
            drive=drive,
        )

    if joint.type is JointType.PRISMATIC:
        free_axis = snap_axis(joint.axis)
        linear_limit = None
        if joint.limit is not None:
            linear_limit = LinearLimit(limit=joint.limit.upper)
        return spec.replace(
            motion=Motion.TRANSLATIONAL,
            axis=jnp.eye(3)[free_axis],
            free_axis=free_axis,
            linear_limit=linear_limit,
            drive=drive,
        )

    console_logger.debug(f"Joint type {joint.type.value} maps to a no-op spec: {joint.name}")
    return spec.replace(motion=Motion.UNSUPPORTED)


def snap_axis(axis: Array) -> int:
    """
    Index of the basis axis nearest to ``axis``.

    The largest-magnitude component of the normalised axis wins; ties go to
    the lowest index and a zero axis snaps to X.
    """
    axis = jnp.asarray(axis, dtype=jnp.float64)
    norm = float(jnp.linalg.norm(axis))
    if norm > 0.0:
        axis = axis / norm
    return int(jnp.argmax(jnp.abs(axis)))


def map_inertial(
    link_name: str,
    inertial: Inertial,
    epsilon: float = INERTIA_EPSILON,
    use_gravity: bool = True,
) -> BodySpec:
    """Derive rigid-body mass properties of a link.

    Only the diagonal of the inertia tensor is kept. It is remapped into the
    target axes the same way positions are, (ixx, iyy, izz) becoming
    (ixx, izz, iyy). Any off-diagonal component beyond ``epsilon`` marks the
    result as approximated.
    """
    inertia = inertial.inertia
    if inertia is None:
        return BodySpec(
            link=link_name,
            mass=inertial.mass,
            center_of_mass=inertial.origin.position,
            inertia_diagonal=jnp.zeros(3),
            use_gravity=use_gravity,
        )

    approximated = any(abs(value) > epsilon for value in inertia.off_diagonal())
    return BodySpec(
        link=link_name,
        mass=inertial.mass,
        center_of_mass=inertial.origin.position,
        inertia_diagonal=jnp.array([inertia.ixx, inertia.izz, inertia.iyy]),
        approximated=approximated,
        use_gravity=use_gravity,
    )
