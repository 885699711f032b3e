"""
GLTF Core - Python Implementation

A Python module that loads and validates glTF 2.0 assets (.gltf and .glb)
into an immutable, index-addressed document, with typed, lazy views over
accessor data.
"""

__version__ = "1.0.0"

# Core functionality
from .gltf_document import GLTFDocument
from .gltf_state import GLTFState
from .structures import *
from .accessor_view import AccessorView
from .readers import ChannelReader, MorphTarget, PrimitiveReader, SkinReader
from .import_options import DEFAULT_IMPORT_OPTIONS, ImportOptions, ValidationLevel
from .extensions import SUPPORTED_EXTENSIONS, ExtensionMap, freeze_json, thaw_json
from .buffer_resolver import FileSystemLoader
from .glb_container import GLBContainer, is_glb, pack_glb, unwrap_glb
from .errors import (
    BufferUnavailable,
    CyclicNodeGraph,
    GLTFError,
    IndexOutOfRange,
    InvalidAccessorLayout,
    InvalidJson,
    InvalidProperty,
    MalformedContainer,
    TypeMismatch,
    UnsupportedExtension,
    UnsupportedVersion,
)
from .logger import logger, get_logger, set_log_level

__all__ = [
    'GLTFDocument',
    'GLTFState',
    'AccessorView',
    'PrimitiveReader',
    'SkinReader',
    'ChannelReader',
    'MorphTarget',
    'ImportOptions',
    'ValidationLevel',
    'DEFAULT_IMPORT_OPTIONS',
    'SUPPORTED_EXTENSIONS',
    'ExtensionMap',
    'freeze_json',
    'thaw_json',
    'FileSystemLoader',
    'GLBContainer',
    'is_glb',
    'pack_glb',
    'unwrap_glb',
    'GLTFError',
    'MalformedContainer',
    'InvalidJson',
    'UnsupportedVersion',
    'InvalidProperty',
    'IndexOutOfRange',
    'CyclicNodeGraph',
    'InvalidAccessorLayout',
    'UnsupportedExtension',
    'BufferUnavailable',
    'TypeMismatch',
    'logger',
    'get_logger',
    'set_log_level',
]
