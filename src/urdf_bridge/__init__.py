"""
urdf_bridge: engine-agnostic URDF and STL import.

This library parses URDF robot descriptions and STL meshes into immutable,
JAX-native PyTrees expressed in a left-handed, Y-up host convention, together
with physics joint and body descriptors a host engine can instantiate.
"""

import jax
jax.config.update("jax_enable_x64", True)

# Import core modules
from . import transforms
from . import core
from . import io
from . import physics
from .errors import MalformedDocument, MalformedMesh, TruncatedFile
from .importer import ImportOptions, ImportResult, import_robot

__version__ = "0.1.0"
__all__ = [
    "transforms",
    "core",
    "io",
    "physics",
    "MalformedDocument",
    "MalformedMesh",
    "TruncatedFile",
    "ImportOptions",
    "ImportResult",
    "import_robot",
]
