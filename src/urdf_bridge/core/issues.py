"""Non-fatal conditions reported while importing a robot.

Only a malformed document aborts an import. Everything else is downgraded to
an ImportIssue so that one bad link, joint or mesh never blocks the rest of
the robot.
"""

import enum
import logging
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .robot_model import JointType, Robot

console_logger = logging.getLogger(__name__)


class IssueKind(enum.Enum):
    UNRESOLVED_JOINT_ENDPOINT = "unresolved_joint_endpoint"
    UNSUPPORTED_JOINT_TYPE = "unsupported_joint_type"
    MALFORMED_MESH = "malformed_mesh"
    MESH_NOT_FOUND = "mesh_not_found"
    UNSUPPORTED_MESH_FORMAT = "unsupported_mesh_format"
    INERTIA_APPROXIMATION = "inertia_approximation"
    DUPLICATE_LINK_NAME = "duplicate_link_name"


UNSUPPORTED_JOINT_TYPES = (JointType.FLOATING, JointType.PLANAR)


@dataclass(frozen=True)
class ImportIssue:
    """A reported condition scoped to one subject.

    Attributes:
        kind: Category of the condition.
        subject: Name of the joint or link, or the mesh path, it concerns.
        message: Human-readable description.
    """
    kind: IssueKind
    subject: Optional[str]
    message: str


def report(kind: IssueKind, subject: Optional[str], message: str) -> ImportIssue:
    """Create an ImportIssue and log it as a warning."""
    console_logger.warning(message)
    return ImportIssue(kind=kind, subject=subject, message=message)


def check_robot(robot: Robot) -> Tuple[ImportIssue, ...]:
    """Report duplicate link names, unresolved joint endpoints and
    unsupported joint types. The robot itself is left untouched."""
    issues: List[ImportIssue] = []

    counts = Counter(robot.link_names)
    for name, count in counts.items():
        if count > 1:
            issues.append(report(
                IssueKind.DUPLICATE_LINK_NAME, name,
                f"Link name '{name}' appears {count} times in robot '{robot.name}'",
            ))

    for joint in robot.joints:
        missing = [
            role for role, link_name in (("parent", joint.parent), ("child", joint.child))
            if link_name not in counts
        ]
        if missing:
            issues.append(report(
                IssueKind.UNRESOLVED_JOINT_ENDPOINT, joint.name,
                f"Joint '{joint.name}': {' and '.join(missing)} link not found "
                f"(parent={joint.parent!r}, child={joint.child!r})",
            ))
        if joint.type in UNSUPPORTED_JOINT_TYPES:
            issues.append(report(
                IssueKind.UNSUPPORTED_JOINT_TYPE, joint.name,
                f"Joint type {joint.type.value} not supported: {joint.name}",
            ))

    return tuple(issues)

