"""Exceptions raised by the URDF and STL readers."""


class MalformedDocument(ValueError):
    """The URDF text is not well-formed XML or has no ``robot`` root element."""


class MalformedMesh(ValueError):
    """An STL asset could not be decoded."""


class TruncatedFile(MalformedMesh):
    """An STL buffer is shorter than the 84-byte binary header and count."""
