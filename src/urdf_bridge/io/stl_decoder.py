"""STL decoder producing target-convention triangle soups.

Both the binary and the ASCII encodings are supported. A buffer is treated as
binary whenever its length matches the triangle count in its header, even if
the header happens to start with ``solid``. Otherwise a ``solid`` header
selects the ASCII reader, provided the body is ASCII text with facet or
vertex lines; anything else is read as binary, so truncated records raise
MalformedMesh and trailing padding is ignored.
"""

import logging
import re
import struct
from pathlib import Path
from typing import List, Union

import numpy as np

from urdf_bridge.core.mesh import DecodedMesh, from_source_triangles
from urdf_bridge.errors import MalformedMesh, TruncatedFile
from .numeric import parse_decimal

console_logger = logging.getLogger(__name__)

HEADER_SIZE = 80
PREAMBLE_SIZE = HEADER_SIZE + 4
RECORD_SIZE = 50

# normal, three vertices, attribute byte count
_RECORD_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attributes", "<u2"),
])

_ASCII_KEYWORD = re.compile(r"^\s*(?:facet|vertex)\b", re.IGNORECASE | re.MULTILINE)


def load_stl(stl_path: Union[str, Path]) -> DecodedMesh:
    """Read and decode an STL file."""
    return decode_stl(Path(stl_path).read_bytes())


def decode_stl(data: bytes) -> DecodedMesh:
    """Decode an ASCII or binary STL buffer.

    Args:
        data: Raw file contents.

    Returns:
        DecodedMesh in the target convention with reversed winding.

    Raises:
        TruncatedFile: If fewer than 84 bytes are given.
        MalformedMesh: If a triangle record or a number cannot be decoded.
    """
    if len(data) < PREAMBLE_SIZE:
        raise TruncatedFile(
            f"STL file is too small: {len(data)} bytes, need at least {PREAMBLE_SIZE}"
        )

    if is_binary_stl(data):
        return _decode_binary(data)

    header = data[:HEADER_SIZE].decode("ascii", errors="replace").lower()
    if header.startswith("solid"):
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError:
            text = None
        if text is not None and _ASCII_KEYWORD.search(text):
            return _decode_ascii(text)
        console_logger.debug("STL header starts with 'solid' but the body is not ASCII facets, reading as binary")
    return _decode_binary(data)


def declared_triangle_count(data: bytes) -> int:
    """Little-endian uint32 triangle count stored after the 80-byte header."""
    (count,) = struct.unpack_from("<I", data, HEADER_SIZE)
    return count


def is_binary_stl(data: bytes) -> bool:
    """True when the buffer is exactly 84 + 50 * count bytes long."""
    if len(data) < PREAMBLE_SIZE:
        return False
    return len(data) == PREAMBLE_SIZE + RECORD_SIZE * declared_triangle_count(data)


def _decode_binary(data: bytes) -> DecodedMesh:
    count = declared_triangle_count(data)
    available = (len(data) - PREAMBLE_SIZE) // RECORD_SIZE
    if available < count:
        raise MalformedMesh(
            f"Binary STL declares {count} triangles but only {available} complete records are present"
        )

    records = np.frombuffer(data, dtype=_RECORD_DTYPE, count=count, offset=PREAMBLE_SIZE)
    console_logger.debug(f"Decoding binary STL with {count} triangles")
    return from_source_triangles(records["vertices"], records["normal"])


def _decode_ascii(text: str) -> DecodedMesh:
    triangles: List[List[List[float]]] = []
    normals: List[List[float]] = []

    current_normal = [0.0, 0.0, 0.0]
    pending: List[List[float]] = []

    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        parts = raw_line.split()
        if not parts:
            continue
        keyword = parts[0].lower()

        if keyword == "facet" and len(parts) > 1 and parts[1].lower() == "normal":
            if len(parts) >= 5:
                current_normal = _parse_triple(parts[2:5], line_number)
            pending = []
        elif keyword == "vertex":
            if len(parts) >= 4:
                pending.append(_parse_triple(parts[1:4], line_number))
                if len(pending) == 3:
                    triangles.append(list(pending))
                    normals.append(current_normal)

    console_logger.debug(f"Decoded ASCII STL with {len(triangles)} triangles")
    return from_source_triangles(
        np.array(triangles, dtype=np.float64).reshape(-1, 3, 3),
        np.array(normals, dtype=np.float64).reshape(-1, 3),
    )


def _parse_triple(tokens: List[str], line_number: int) -> List[float]:
    values = [parse_decimal(token) for token in tokens]
    if any(value is None for value in values):
        raise MalformedMesh(
            f"Non-numeric value on ASCII STL line {line_number}: {' '.join(tokens)}"
        )
    return values
