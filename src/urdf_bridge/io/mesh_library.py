"""Per-import cache of decoded mesh assets.

The library never touches the file system itself. Mesh filenames are
reduced to a relative path (``package://<name>/`` is stripped) and handed to
a host-supplied resolver that returns the asset bytes.
"""

import logging
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Optional

from urdf_bridge.core.issues import ImportIssue, IssueKind, report
from urdf_bridge.core.mesh import DecodedMesh, unit_cube
from urdf_bridge.errors import MalformedMesh
from .stl_decoder import decode_stl

console_logger = logging.getLogger(__name__)

PACKAGE_SCHEME = "package://"

# Returns the asset bytes for a relative path, or None when it cannot be found.
MeshResolver = Callable[[str], Optional[bytes]]


def resolve_mesh_path(filename: str) -> str:
    """Strip a ``package://<name>/`` prefix, leaving the relative path.

    >>> resolve_mesh_path("package://arm_description/meshes/base.stl")
    'meshes/base.stl'
    """
    if not filename.startswith(PACKAGE_SCHEME):
        return filename
    parts = filename[len(PACKAGE_SCHEME):].split("/")
    if len(parts) > 1:
        return "/".join(parts[1:])
    return parts[0]


class MeshLibrary:
    """Decodes each distinct mesh reference once per import.

    Undecodable STL assets are replaced by a unit cube placeholder and
    reported as MALFORMED_MESH. Missing assets and non-STL formats yield
    None and are reported; OBJ and COLLADA are left to the host's own
    importers.
    """

    def __init__(self, resolver: Optional[MeshResolver] = None):
        self.resolver = resolver
        self.meshes: Dict[str, Optional[DecodedMesh]] = {}
        self.issues: List[ImportIssue] = []

    def get(self, filename: Optional[str]) -> Optional[DecodedMesh]:
        if not filename:
            return None

        path = resolve_mesh_path(filename)
        if path in self.meshes:
            return self.meshes[path]

        mesh = self._load(path)
        self.meshes[path] = mesh
        return mesh

    def _load(self, path: str) -> Optional[DecodedMesh]:
        extension = PurePosixPath(path).suffix.lower()
        if extension != ".stl":
            self.issues.append(report(
                IssueKind.UNSUPPORTED_MESH_FORMAT, path,
                f"Mesh format '{extension}' is left to the host importer: {path}",
            ))
            return None

        data = self._fetch(path)
        if data is None:
            self.issues.append(report(
                IssueKind.MESH_NOT_FOUND, path, f"Mesh file not found: {path}",
            ))
            return None

        try:
            return decode_stl(data)
        except MalformedMesh as e:
            self.issues.append(report(
                IssueKind.MALFORMED_MESH, path,
                f"Failed to load STL file: {path}. Error: {e}. Using placeholder cube.",
            ))
            return unit_cube()

    def _fetch(self, path: str) -> Optional[bytes]:
        if self.resolver is None:
            return None
        try:
            return self.resolver(path)
        except OSError as e:
            console_logger.debug(f"Resolver failed for {path}: {e}")
            return None
