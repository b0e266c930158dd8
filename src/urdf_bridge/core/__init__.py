"""Core data structures for urdf_bridge.

This module provides the immutable robot tree, decoded mesh buffers and the
import issue taxonomy.
"""

from .robot_model import (
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
from .mesh import BoundingBox, DecodedMesh, from_source_triangles, unit_cube
from .issues import ImportIssue, IssueKind, check_robot

__all__ = [
    "Box",
    "Collision",
    "Color",
    "Cylinder",
    "Dynamics",
    "Geometry",
    "Inertia",
    "Inertial",
    "Joint",
    "JointType",
    "Limit",
    "Link",
    "Material",
    "Mesh",
    "Origin",
    "Robot",
    "Sphere",
    "Visual",
    "BoundingBox",
    "DecodedMesh",
    "from_source_triangles",
    "unit_cube",
    "ImportIssue",
    "IssueKind",
    "check_robot",
]
