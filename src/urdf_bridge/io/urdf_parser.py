"""URDF parser for loading robot descriptions into immutable PyTrees.

This module walks a URDF document once, top-down, and builds a Robot tree.
Every origin position, origin rotation and joint axis is converted into the
target convention exactly once on the way in.

Missing or unparsable optional values never raise: each field falls back to
its own default (for example an unparsable ``mass`` becomes 1.0). Only a
document that is not XML or whose root is not ``robot`` is rejected.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import jax.numpy as jnp
from lxml import etree

from urdf_bridge.core.robot_model import (
    Box,
    Collision,
    Color,
    Cylinder,
    Dynamics,
    Geometry,
    Inertia,
    Inertial,
    Joint,
    JointType,
    Limit,
    Link,
    Material,
    Mesh,
    Origin,
    Robot,
    Sphere,
    Visual,
)
from urdf_bridge.errors import MalformedDocument
from urdf_bridge.transforms import convention
from .numeric import float_or, vector_or

console_logger = logging.getLogger(__name__)

_JOINT_TYPES = {t.value: t for t in JointType}


def load_urdf(urdf_path: Union[str, Path]) -> Robot:
    """Load a URDF file and convert it to a Robot PyTree.

    Args:
        urdf_path: Path to the URDF file to load.

    Returns:
        Robot: The parsed robot tree in the target convention.
    """
    return parse_urdf(Path(urdf_path).read_bytes())


def parse_urdf(document: Union[str, bytes]) -> Robot:
    """Parse URDF text into a Robot PyTree.

    Args:
        document: URDF XML as text or UTF-8 bytes.

    Returns:
        Robot: Links and joints in document order.

    Raises:
        MalformedDocument: If the text is not XML or the root element is
            not ``robot``.
    """
    if isinstance(document, str):
        document = document.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(document, parser)
    except etree.XMLSyntaxError as e:
        raise MalformedDocument(f"Invalid URDF: {e}") from e

    if root is None or root.tag != "robot":
        raise MalformedDocument("Invalid URDF: No robot element found")

    # Robot-level materials first, visuals may refer to them by name
    materials: Dict[str, Material] = {}
    for material_elem in root.findall("material"):
        material = _parse_material(material_elem)
        if material_elem.get("name"):
            materials.setdefault(material.name, material)

    links = tuple(_parse_link(elem, materials) for elem in root.findall("link"))
    joints = tuple(_parse_joint(elem) for elem in root.findall("joint"))

    robot = Robot(
        name=root.get("name", "unnamed_robot"),
        links=links,
        joints=joints,
        materials=tuple(materials.values()),
    )
    console_logger.debug(
        f"Parsed robot '{robot.name}': {len(links)} links, {len(joints)} joints, "
        f"{len(materials)} named materials"
    )
    return robot


def _parse_link(link_elem, materials: Dict[str, Material]) -> Link:
    visual_elem = link_elem.find("visual")
    collision_elem = link_elem.find("collision")
    inertial_elem = link_elem.find("inertial")

    return Link(
        name=link_elem.get("name", "unnamed_link"),
        visual=_parse_visual(visual_elem, materials) if visual_elem is not None else None,
        collision=_parse_collision(collision_elem) if collision_elem is not None else None,
        inertial=_parse_inertial(inertial_elem) if inertial_elem is not None else None,
    )


def _parse_visual(visual_elem, materials: Dict[str, Material]) -> Visual:
    material = None
    material_elem = visual_elem.find("material")
    if material_elem is not None:
        material = _parse_material(material_elem)
        # A bare reference like <material name="blue"/> takes the robot-level definition
        if material.color is None and material.texture is None:
            material = materials.get(material.name, material)

    return Visual(
        origin=_parse_origin(visual_elem.find("origin")),
        geometry=_parse_geometry(visual_elem.find("geometry")),
        material=material,
    )


def _parse_collision(collision_elem) -> Collision:
    return Collision(
        origin=_parse_origin(collision_elem.find("origin")),
        geometry=_parse_geometry(collision_elem.find("geometry")),
    )


def _parse_inertial(inertial_elem) -> Inertial:
    mass_elem = inertial_elem.find("mass")
    inertia_elem = inertial_elem.find("inertia")

    mass = 1.0
    if mass_elem is not None:
        mass = float_or(mass_elem.get("value"), 1.0)
        # Negative mass takes the default too
        if mass < 0.0:
            mass = 1.0

    inertia = None
    if inertia_elem is not None:
        inertia = Inertia(**{
            key: float_or(inertia_elem.get(key), 0.0)
            for key in ("ixx", "ixy", "ixz", "iyy", "iyz", "izz")
        })

    return Inertial(
        origin=_parse_origin(inertial_elem.find("origin")),
        mass=mass,
        inertia=inertia,
    )


def _parse_origin(origin_elem) -> Origin:
    """Parse an <origin> element, identity when absent."""
    if origin_elem is None:
        return Origin.identity()

    xyz = vector_or(origin_elem.get("xyz"), 3, 0.0)
    rpy = vector_or(origin_elem.get("rpy"), 3, 0.0)
    return Origin(
        position=convention.position(xyz),
        rotation=convention.rotation(rpy),
    )


def _parse_geometry(geometry_elem) -> Optional[Geometry]:
    """Parse the first shape of a <geometry> element.

    When several shapes are present, box wins over cylinder, cylinder over
    sphere and sphere over mesh.
    """
    if geometry_elem is None:
        return None

    box_elem = geometry_elem.find("box")
    if box_elem is not None:
        return Box(size=jnp.array(vector_or(box_elem.get("size"), 3, 0.0)))

    cylinder_elem = geometry_elem.find("cylinder")
    if cylinder_elem is not None:
        return Cylinder(
            radius=float_or(cylinder_elem.get("radius"), 0.5),
            length=float_or(cylinder_elem.get("length"), 1.0),
        )

    sphere_elem = geometry_elem.find("sphere")
    if sphere_elem is not None:
        return Sphere(radius=float_or(sphere_elem.get("radius"), 0.5))

    mesh_elem = geometry_elem.find("mesh")
    if mesh_elem is not None:
        scale_attr = mesh_elem.get("scale")
        if scale_attr and scale_attr.strip():
            scale = vector_or(scale_attr, 3, 0.0)
        else:
            scale = [1.0, 1.0, 1.0]
        return Mesh(filename=mesh_elem.get("filename"), scale=jnp.array(scale))

    return None


def _parse_material(material_elem) -> Material:
    color = None
    color_elem = material_elem.find("color")
    if color_elem is not None:
        rgba_attr = color_elem.get("rgba")
        if rgba_attr and rgba_attr.strip():
            color = Color(*vector_or(rgba_attr, 4, 1.0))

    texture = None
    texture_elem = material_elem.find("texture")
    if texture_elem is not None:
        texture = texture_elem.get("filename")

    return Material(
        name=material_elem.get("name", "default_material"),
        color=color,
        texture=texture,
    )


def _parse_joint(joint_elem) -> Joint:
    parent_elem = joint_elem.find("parent")
    child_elem = joint_elem.find("child")
    axis_elem = joint_elem.find("axis")
    limit_elem = joint_elem.find("limit")
    dynamics_elem = joint_elem.find("dynamics")

    if axis_elem is not None:
        axis = convention.axis(vector_or(axis_elem.get("xyz"), 3, 0.0))
    else:
        axis = jnp.array(convention.UP)

    limit = None
    if limit_elem is not None:
        limit = Limit(**{
            key: float_or(limit_elem.get(key), 0.0)
            for key in ("lower", "upper", "effort", "velocity")
        })

    dynamics = None
    if dynamics_elem is not None:
        dynamics = Dynamics(
            damping=float_or(dynamics_elem.get("damping"), 0.0),
            friction=float_or(dynamics_elem.get("friction"), 0.0),
        )

    return Joint(
        name=joint_elem.get("name", "unnamed_joint"),
        type=_parse_joint_type(joint_elem.get("type")),
        parent=parent_elem.get("link") if parent_elem is not None else None,
        child=child_elem.get("link") if child_elem is not None else None,
        origin=_parse_origin(joint_elem.find("origin")),
        axis=axis,
        limit=limit,
        dynamics=dynamics,
    )


def _parse_joint_type(type_attr: Optional[str]) -> JointType:
    """Case-insensitive joint type, FIXED when missing or unknown."""
    return _JOINT_TYPES.get((type_attr or "").lower(), JointType.FIXED)
