"""Immutable PyTree data model for parsed URDF robots.

This module defines the typed tree produced by the URDF parser. Every node is
a frozen ``flax.struct`` dataclass: numeric vectors are JAX arrays already
expressed in the target convention, while names and enums are static fields
so a whole robot can be passed through ``jax.tree_util`` and ``jax.jit``.
"""

import enum
from typing import Optional, Tuple, Union

import jax.numpy as jnp
from jax import Array
from flax import struct


class JointType(enum.Enum):
    """Permitted relative motion of a joint's child link."""
    FIXED = "fixed"
    REVOLUTE = "revolute"
    CONTINUOUS = "continuous"
    PRISMATIC = "prismatic"
    FLOATING = "floating"
    PLANAR = "planar"


@struct.dataclass
class Origin:
    """Pose of a frame relative to its parent frame.

    Attributes:
        position: Array of shape (3,), target convention.
        rotation: Array of shape (3,) of X-Y-Z Euler angles in radians,
                  target convention.
    """
    position: Array
    rotation: Array

    @classmethod
    def identity(cls) -> "Origin":
        return cls(position=jnp.zeros(3), rotation=jnp.zeros(3))


# Geometry is a closed tagged union. Consumers dispatch with isinstance over
# Box, Cylinder, Sphere and Mesh.

@struct.dataclass
class Box:
    """Axis-aligned box. ``size`` is in source axes (x, y, z extents)."""
    size: Array


@struct.dataclass
class Cylinder:
    radius: float = 0.5
    length: float = 1.0


@struct.dataclass
class Sphere:
    radius: float = 0.5


@struct.dataclass
class Mesh:
    """Reference to an external mesh asset.

    Attributes:
        filename: Filename exactly as written in the document, possibly a
                  ``package://`` URI. None when the attribute is missing.
        scale: Array of shape (3,) in source axes, (1, 1, 1) by default.
    """
    filename: Optional[str] = struct.field(pytree_node=False)
    scale: Array


Geometry = Union[Box, Cylinder, Sphere, Mesh]


@struct.dataclass
class Color:
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0

    def as_array(self) -> Array:
        return jnp.array([self.r, self.g, self.b, self.a])


@struct.dataclass
class Material:
    name: str = struct.field(pytree_node=False, default="default_material")
    color: Optional[Color] = None
    texture: Optional[str] = struct.field(pytree_node=False, default=None)


@struct.dataclass
class Visual:
    origin: Origin
    geometry: Optional[Geometry] = None
    material: Optional[Material] = None


@struct.dataclass
class Collision:
    origin: Origin
    geometry: Optional[Geometry] = None


@struct.dataclass
class Inertia:
    """Inertia tensor components in source units and source axes."""
    ixx: float = 0.0
    ixy: float = 0.0
    ixz: float = 0.0
    iyy: float = 0.0
    iyz: float = 0.0
    izz: float = 0.0

    def off_diagonal(self) -> Tuple[float, float, float]:
        return (self.ixy, self.ixz, self.iyz)


@struct.dataclass
class Inertial:
    """Mass properties of a link.

    Attributes:
        origin: Centre of mass frame, target convention.
        mass: Link mass. 1.0 when absent or unparsable in the document.
        inertia: Optional inertia tensor.
    """
    origin: Origin
    mass: float = 1.0
    inertia: Optional[Inertia] = None


@struct.dataclass
class Link:
    """Rigid body segment. A link without visual, collision or inertial
    data is a valid pure frame."""
    name: str = struct.field(pytree_node=False)
    visual: Optional[Visual] = None
    collision: Optional[Collision] = None
    inertial: Optional[Inertial] = None


@struct.dataclass
class Limit:
    """Joint limits in radians (rotational) or metres (prismatic), SI
    effort and velocity."""
    lower: float = 0.0
    upper: float = 0.0
    effort: float = 0.0
    velocity: float = 0.0


@struct.dataclass
class Dynamics:
    damping: float = 0.0
    friction: float = 0.0


@struct.dataclass
class Joint:
    """Constraint connecting a parent link to a child link.

    Attributes:
        name: Joint name.
        type: JointType, FIXED when missing or unrecognised.
        parent: Parent link name, None when not given.
        child: Child link name, None when not given.
        origin: Child frame relative to the parent frame, target convention.
        axis: Array of shape (3,), target convention.
        limit: Optional limits.
        dynamics: Optional damping and friction.
    """
    name: str = struct.field(pytree_node=False)
    type: JointType = struct.field(pytree_node=False)
    parent: Optional[str] = struct.field(pytree_node=False)
    child: Optional[str] = struct.field(pytree_node=False)
    origin: Origin
    axis: Array
    limit: Optional[Limit] = None
    dynamics: Optional[Dynamics] = None


@struct.dataclass
class Robot:
    """Immutable tree of links and joints parsed from one URDF document.

    Attributes:
        name: Robot name.
        links: Links in document order. Names are expected to be unique.
        joints: Joints in document order.
        materials: Named materials declared at robot level.
    """
    name: str = struct.field(pytree_node=False)
    links: Tuple[Link, ...] = ()
    joints: Tuple[Joint, ...] = ()
    materials: Tuple[Material, ...] = ()

    @property
    def link_names(self) -> Tuple[str, ...]:
        return tuple(link.name for link in self.links)

    @property
    def joint_names(self) -> Tuple[str, ...]:
        return tuple(joint.name for joint in self.joints)

    def get_link(self, name: str) -> Link:
        for link in self.links:
            if link.name == name:
                return link
        raise KeyError(f"Link '{name}' not found in robot '{self.name}'")

    def child_joints(self, link_name: str) -> Tuple[Joint, ...]:
        """Joints whose parent is ``link_name``, in document order."""
        return tuple(j for j in self.joints if j.parent == link_name)

    def root_links(self) -> Tuple[Link, ...]:
        """Links that are not the child of any joint, in document order."""
        children = {j.child for j in self.joints}
        return tuple(link for link in self.links if link.name not in children)
