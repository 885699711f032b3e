"""
GLTF State Management

This module contains the GLTFState class which holds a parsed, not yet
validated document: every top-level array as a list of descriptors with
index fields that still have to be bounds-checked.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .extensions import EMPTY_EXTENSIONS, ExtensionMap
from .structures import *


# JSON array name for each entity kind, in the order the validator walks them
ENTITY_KINDS = (
    "buffers",
    "bufferViews",
    "accessors",
    "images",
    "samplers",
    "textures",
    "materials",
    "meshes",
    "cameras",
    "skins",
    "animations",
    "nodes",
    "scenes",
)


@dataclass
class GLTFState:
    """
    Container for parsed GLTF data.

    Entities are addressed by their position in these lists; the lists are
    only appended to while parsing.
    """

    asset: GLTFAsset = field(default_factory=GLTFAsset)

    buffers: List[GLTFBuffer] = field(default_factory=list)
    buffer_views: List[GLTFBufferView] = field(default_factory=list)
    accessors: List[GLTFAccessor] = field(default_factory=list)
    images: List[GLTFImage] = field(default_factory=list)
    samplers: List[GLTFTextureSampler] = field(default_factory=list)
    textures: List[GLTFTexture] = field(default_factory=list)
    materials: List[GLTFMaterial] = field(default_factory=list)
    meshes: List[GLTFMesh] = field(default_factory=list)
    cameras: List[GLTFCamera] = field(default_factory=list)
    skins: List[GLTFSkin] = field(default_factory=list)
    animations: List[GLTFAnimation] = field(default_factory=list)
    nodes: List[GLTFNode] = field(default_factory=list)
    scenes: List[GLTFScene] = field(default_factory=list)

    scene: Optional[int] = None

    extensions_used: Tuple[str, ...] = ()
    extensions_required: Tuple[str, ...] = ()
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Dict[str, Any]] = None

    def entities(self, kind: str) -> List[Any]:
        """Get the list for a JSON array name, e.g. 'bufferViews'"""
        return getattr(self, _KIND_ATTRIBUTES[kind])

    def count(self, kind: str) -> int:
        """Get the number of entities of a kind"""
        return len(self.entities(kind))

    def uses_extension(self, name: str) -> bool:
        return name in self.extensions_used

    def __str__(self) -> str:
        """String representation of the GLTF state"""
        return (f"GLTFState(nodes={len(self.nodes)}, meshes={len(self.meshes)}, "
                f"materials={len(self.materials)}, textures={len(self.textures)}, "
                f"buffers={len(self.buffers)}, accessors={len(self.accessors)}, "
                f"animations={len(self.animations)})")


_KIND_ATTRIBUTES = {
    "buffers": "buffers",
    "bufferViews": "buffer_views",
    "accessors": "accessors",
    "images": "images",
    "samplers": "samplers",
    "textures": "textures",
    "materials": "materials",
    "meshes": "meshes",
    "cameras": "cameras",
    "skins": "skins",
    "animations": "animations",
    "nodes": "nodes",
    "scenes": "scenes",
}
