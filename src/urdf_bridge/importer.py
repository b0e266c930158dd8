"""One-call import of a URDF document and its STL assets.

``import_robot`` parses the document, decodes every referenced STL mesh once,
maps joints and inertials to physics descriptors and collects every
non-fatal condition as an ImportIssue. Only a malformed document raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .core.issues import ImportIssue, IssueKind, check_robot, report
from .core.mesh import DecodedMesh
from .core.robot_model import Geometry, Mesh, Robot
from .io.mesh_library import MeshLibrary, MeshResolver, resolve_mesh_path
from .io.urdf_parser import parse_urdf
from .physics import INERTIA_EPSILON, BodySpec, JointSpec, map_inertial, map_joint

console_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportOptions:
    """Switches controlling what an import produces.

    Attributes:
        import_visual_meshes: Decode meshes referenced by visuals.
        import_collision_meshes: Decode meshes referenced by collisions.
        create_physics: Map link inertials to BodySpecs.
        use_gravity: Carried on every BodySpec for the host to apply.
        create_joints: Map joints to JointSpecs.
        scale_factor: Uniform scale the host applies to the robot root.
        inertia_epsilon: Off-diagonal inertia threshold for
                         INERTIA_APPROXIMATION.
    """
    import_visual_meshes: bool = True
    import_collision_meshes: bool = True
    create_physics: bool = True
    use_gravity: bool = True
    create_joints: bool = True
    scale_factor: float = 1.0
    inertia_epsilon: float = INERTIA_EPSILON

    def __post_init__(self):
        if self.scale_factor <= 0.0:
            raise ValueError(f"scale_factor must be positive, got {self.scale_factor}")
        if self.inertia_epsilon < 0.0:
            raise ValueError(f"inertia_epsilon must be non-negative, got {self.inertia_epsilon}")


@dataclass(frozen=True)
class ImportResult:
    """Everything a host needs to build its scene and physics objects.

    Attributes:
        robot: Parsed robot tree.
        meshes: Decoded meshes keyed by resolved relative path. Placeholder
                cubes stand in for assets that failed to decode.
        joint_specs: One spec per joint, in document order.
        bodies: Rigid-body specs keyed by link name.
        issues: Every reported condition, in the order it was found.
        options: Options the import ran with.
    """
    robot: Robot
    meshes: Dict[str, DecodedMesh] = field(default_factory=dict)
    joint_specs: Tuple[JointSpec, ...] = ()
    bodies: Dict[str, BodySpec] = field(default_factory=dict)
    issues: Tuple[ImportIssue, ...] = ()
    options: ImportOptions = field(default_factory=ImportOptions)

    def mesh_for(self, geometry: Optional[Geometry]) -> Optional[DecodedMesh]:
        """Decoded mesh of a Mesh geometry, None for primitives or
        unresolved assets."""
        if not isinstance(geometry, Mesh) or not geometry.filename:
            return None
        return self.meshes.get(resolve_mesh_path(geometry.filename))

    def issues_of(self, kind: IssueKind) -> Tuple[ImportIssue, ...]:
        return tuple(issue for issue in self.issues if issue.kind is kind)

    def instantiable_joints(self) -> Tuple[JointSpec, ...]:
        """Joint specs a host should instantiate: supported types whose
        parent and child links both exist."""
        link_names = set(self.robot.link_names)
        return tuple(
            spec for spec in self.joint_specs
            if not spec.is_noop
            and spec.parent in link_names
            and spec.child in link_names
        )


def import_robot(
    document: Union[str, bytes],
    resolver: Optional[MeshResolver] = None,
    options: Optional[ImportOptions] = None,
) -> ImportResult:
    """Import a URDF document and the STL meshes it references.

    Args:
        document: URDF XML text or bytes.
        resolver: Returns the bytes of a mesh given its relative path, or
                  None when it cannot be found. Without a resolver every
                  mesh is reported as not found.
        options: Import switches, defaults when omitted.

    Returns:
        ImportResult with the robot, meshes, physics specs and issues.

    Raises:
        MalformedDocument: If the document cannot be parsed as a robot.
    """
    options = options or ImportOptions()

    robot = parse_urdf(document)
    console_logger.info(
        f"Parsed URDF: {robot.name} with {len(robot.links)} links and {len(robot.joints)} joints"
    )

    issues: List[ImportIssue] = list(check_robot(robot))

    library = MeshLibrary(resolver)
    for link in robot.links:
        if options.import_visual_meshes and link.visual is not None:
            _load_geometry(library, link.visual.geometry)
        if options.import_collision_meshes and link.collision is not None:
            _load_geometry(library, link.collision.geometry)
    issues.extend(library.issues)

    bodies: Dict[str, BodySpec] = {}
    if options.create_physics:
        for link in robot.links:
            if link.inertial is None or link.name in bodies:
                continue
            body = map_inertial(
                link.name, link.inertial, options.inertia_epsilon, options.use_gravity
            )
            if body.approximated:
                issues.append(report(
                    IssueKind.INERTIA_APPROXIMATION, link.name,
                    f"Off-diagonal inertia elements detected for {link.name}. "
                    f"Using simplified approximation.",
                ))
            bodies[link.name] = body

    joint_specs: Tuple[JointSpec, ...] = ()
    if options.create_joints:
        joint_specs = tuple(map_joint(joint) for joint in robot.joints)

    meshes = {path: mesh for path, mesh in library.meshes.items() if mesh is not None}
    console_logger.info(
        f"Successfully imported URDF: {robot.name} ({len(meshes)} meshes, "
        f"{len(joint_specs)} joints, {len(issues)} issues)"
    )

    return ImportResult(
        robot=robot,
        meshes=meshes,
        joint_specs=joint_specs,
        bodies=bodies,
        issues=tuple(issues),
        options=options,
    )


def _load_geometry(library: MeshLibrary, geometry: Optional[Geometry]) -> None:
    if isinstance(geometry, Mesh):
        library.get(geometry.filename)
