"""I/O utilities for reading robot descriptions and mesh assets.

This module provides the URDF parser, the STL decoder and the per-import
mesh library that caches decoded assets.
"""

from .urdf_parser import load_urdf, parse_urdf
from .stl_decoder import decode_stl, is_binary_stl, load_stl
from .mesh_library import MeshLibrary, MeshResolver, resolve_mesh_path

__all__ = [
    "load_urdf",
    "parse_urdf",
    "decode_stl",
    "is_binary_stl",
    "load_stl",
    "MeshLibrary",
    "MeshResolver",
    "resolve_mesh_path",
]
