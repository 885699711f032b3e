"""
GLTF Import Options

Configuration for loading a document. Options are frozen so a single
instance can be shared by loads running on different threads.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, FrozenSet, Mapping, Optional

from .extensions import SUPPORTED_EXTENSIONS, ExtensionDecoder


ByteLoader = Callable[[str], bytes]


class ValidationLevel:
    """How much checking runs before a document is handed out"""
    # Only the invariants the loader needs to read data safely
    MINIMAL = 0
    # Minimal checks plus the semantic rules of the format
    COMPLETE = 1


@dataclass(frozen=True)
class ImportOptions:
    """
    Options controlling parsing and validation.

    Attributes:
        capture_extras: Keep ``extras`` payloads and unknown object keys.
        capture_names: Keep entity ``name`` fields (required for lookups by name).
        validation: A ValidationLevel value.
        supported_extensions: Extra extension names the caller handles itself;
            they pass the required-extension gate.
        extension_decoders: Extension name to a callable turning the raw JSON
            object into a typed value.
        byte_loader: Callable returning the bytes behind an external URI.
    """
    capture_extras: bool = True
    capture_names: bool = True
    validation: int = ValidationLevel.COMPLETE
    supported_extensions: FrozenSet[str] = frozenset()
    extension_decoders: Mapping[str, ExtensionDecoder] = field(
        default_factory=lambda: MappingProxyType({}), hash=False)
    byte_loader: Optional[ByteLoader] = None

    def __post_init__(self):
        if self.validation not in (ValidationLevel.MINIMAL, ValidationLevel.COMPLETE):
            raise ValueError(f"Unknown validation level: {self.validation}")
        # Normalize caller-supplied containers into immutable ones
        object.__setattr__(self, 'supported_extensions', frozenset(self.supported_extensions))
        object.__setattr__(self, 'extension_decoders',
                           MappingProxyType(dict(self.extension_decoders)))

    def is_extension_supported(self, name: str) -> bool:
        return name in SUPPORTED_EXTENSIONS or name in self.supported_extensions


DEFAULT_IMPORT_OPTIONS = ImportOptions()
