"""
GLTF Error Kinds

Every failure raised while loading or viewing a document derives from
GLTFError and identifies the offending entity by its JSON array name
(``kind``), its position in that array (``index``) and, where known, the
JSON location of the offending value (``path``).
"""

from typing import Optional


class GLTFError(Exception):
    """Base exception for loader errors."""

    def __init__(self, message: str, kind: Optional[str] = None,
                 index: Optional[int] = None, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.index = index
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {self.path})"
        return self.message


class MalformedContainer(GLTFError):
    """Raised when a .glb envelope is structurally invalid."""

    def __init__(self, message: str):
        super().__init__(message, kind="glb")


class InvalidJson(GLTFError):
    """Raised when the JSON text cannot be decoded."""

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message, kind="json")
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is not None:
            return f"{self.message} (offset {self.offset})"
        return self.message


class UnsupportedVersion(GLTFError):
    """Raised when the asset or container version is not 2.0."""

    def __init__(self, message: str, version=None):
        super().__init__(message, kind="asset", path="asset.version")
        self.version = version


class InvalidProperty(GLTFError):
    """Raised for a missing, wrongly typed or semantically invalid property."""
    pass


class IndexOutOfRange(GLTFError, IndexError):
    """Raised when an index reference falls outside its target array."""

    def __init__(self, kind: str, index, path: Optional[str] = None,
                 length: Optional[int] = None):
        message = f"Index {index} out of range for '{kind}'"
        if length is not None:
            message += f" (length {length})"
        super().__init__(message, kind=kind, index=index, path=path)
        self.length = length


class CyclicNodeGraph(GLTFError):
    """Raised when the node hierarchy is not a forest."""

    def __init__(self, index: int, reason: str):
        super().__init__(f"Node {index}: {reason}", kind="nodes", index=index,
                         path=f"nodes[{index}]")
        self.reason = reason


class InvalidAccessorLayout(GLTFError):
    """Raised for offset, stride, alignment or bounds violations."""

    def __init__(self, kind: str, index: int, reason: str, path: Optional[str] = None):
        super().__init__(f"{kind}[{index}]: {reason}", kind=kind, index=index,
                         path=path or f"{kind}[{index}]")
        self.reason = reason


class UnsupportedExtension(GLTFError):
    """Raised when a required extension is not implemented by the loader."""

    def __init__(self, name: str):
        super().__init__(f"Required extension '{name}' is not supported",
                         kind="extensionsRequired", path="extensionsRequired")
        self.name = name


class BufferUnavailable(GLTFError):
    """Raised when the bytes of a buffer (or image) cannot be obtained."""

    def __init__(self, index: int, reason: str, kind: str = "buffers"):
        super().__init__(f"{kind}[{index}] unavailable: {reason}", kind=kind,
                         index=index, path=f"{kind}[{index}]")
        self.reason = reason


class TypeMismatch(GLTFError, TypeError):
    """Raised when a view is requested with a shape the accessor does not have."""

    def __init__(self, index: int, message: str):
        super().__init__(message, kind="accessors", index=index,
                         path=f"accessors[{index}]")
