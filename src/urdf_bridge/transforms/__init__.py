"""
Coordinate convention transforms.

This module provides pure, JIT-compilable mappings from the URDF/STL source
convention (right-handed, Z-up) to the host target convention (left-handed,
Y-up):
- position: vertex and origin positions
- rotation: origin roll-pitch-yaw angles
- axis: joint axes

All functions are stateless and deterministic.
"""

from . import convention
from .convention import UP, axis, position, rotation

__all__ = [
    "convention",
    "UP",
    "axis",
    "position",
    "rotation",
]
