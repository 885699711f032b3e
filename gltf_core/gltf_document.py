"""
GLTF Document

This module contains the GLTFDocument class, the main interface for loading
.gltf and .glb files. A document is only handed out once it has been fully
parsed, validated and had its buffers resolved; after that it is read-only
and can be shared between threads.
"""

from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from .accessor_view import AccessorView, read_sparse_indices
from .buffer_resolver import BufferResolver, FileSystemLoader, resolve_image_bytes
from .errors import GLTFError, IndexOutOfRange
from .extensions import ExtensionMap
from .glb_container import is_glb, unwrap_glb
from .gltf_parser import GLTFParser
from .gltf_state import ENTITY_KINDS, GLTFState
from .import_options import DEFAULT_IMPORT_OPTIONS, ImportOptions
from .logger import get_logger
from .readers import ChannelReader, PrimitiveReader, SkinReader
from .structures import *
from .validator import GLTFValidator


logger = get_logger('document')


class GLTFDocument:
    """
    A validated, immutable glTF 2.0 document.

    Use ``GLTFDocument.load_from_file`` or ``GLTFDocument.load_from_bytes``
    to obtain one. Entities are exposed as tuples addressed by index, exactly
    as they appear in the JSON arrays.
    """

    GLTF_VERSION = "2.0"

    def __init__(self, state: GLTFState, buffers: Tuple[memoryview, ...],
                 options: ImportOptions = DEFAULT_IMPORT_OPTIONS, byte_loader=None):
        """
        Freeze a validated state. Callers normally go through the load methods.

        Args:
            state: Parsed and validated state
            buffers: Resolved byte region for every buffer
            options: Options the state was loaded with
            byte_loader: Loader for external image URIs
        """
        self.logger = logger
        self.options = options
        self._byte_loader = byte_loader

        self.asset: GLTFAsset = state.asset
        self.extensions_used: Tuple[str, ...] = tuple(state.extensions_used)
        self.extensions_required: Tuple[str, ...] = tuple(state.extensions_required)
        self.extensions: ExtensionMap = state.extensions
        self.extras: Any = state.extras
        self.unknown = state.unknown
        self.scene: Optional[int] = state.scene

        self._entities: Dict[str, tuple] = {
            kind: tuple(state.entities(kind)) for kind in ENTITY_KINDS
        }
        self._buffer_data = tuple(buffers)

        parents = [None] * len(self.nodes)
        for i, node in enumerate(self.nodes):
            for child in node.children:
                parents[child] = i
        self._parents: Tuple[Optional[int], ...] = tuple(parents)

    # Loading

    @classmethod
    def load_from_file(cls, file_path: Union[str, Path],
                       options: Optional[ImportOptions] = None) -> "GLTFDocument":
        """
        Load a GLTF file from disk.

        Args:
            file_path: Path to the GLTF file (.gltf or .glb)
            options: Import options; external URIs resolve next to the file
                unless ``options.byte_loader`` is set

        Returns:
            The loaded document

        Raises:
            GLTFError: the file is not a valid, loadable document
            OSError: the file itself cannot be read
        """
        path = Path(file_path)
        options = options if options is not None else DEFAULT_IMPORT_OPTIONS
        logger.debug(f"Loading GLTF file: {path}")

        with open(path, 'rb') as f:
            data = f.read()

        binary = True if path.suffix.lower() == '.glb' else None
        byte_loader = options.byte_loader or FileSystemLoader(path.parent)
        return cls._load(data, options, binary, byte_loader)

    @classmethod
    def load_from_bytes(cls, data: Union[bytes, bytearray, memoryview],
                        options: Optional[ImportOptions] = None,
                        binary: Optional[bool] = None) -> "GLTFDocument":
        """
        Load a GLTF document from memory.

        Args:
            data: .gltf JSON text or a .glb container
            options: Import options
            binary: True to require a .glb container, False to require JSON,
                None to detect from the magic bytes

        Returns:
            The loaded document
        """
        options = options if options is not None else DEFAULT_IMPORT_OPTIONS
        return cls._load(data, options, binary, options.byte_loader)

    @classmethod
    def _load(cls, data, options: ImportOptions, binary: Optional[bool],
              byte_loader) -> "GLTFDocument":
        try:
            return cls._run_pipeline(data, options, binary, byte_loader)
        except GLTFError as e:
            logger.error(f"Failed to load GLTF document: {type(e).__name__}: {e}")
            raise

    @classmethod
    def _run_pipeline(cls, data, options: ImportOptions, binary: Optional[bool],
                      byte_loader) -> "GLTFDocument":
        if binary is None:
            binary = is_glb(data)

        glb_binary = None
        if binary:
            container = unwrap_glb(data)
            json_data = container.json
            glb_binary = container.binary
        else:
            json_data = data

        state = GLTFParser(options).parse(json_data)
        GLTFValidator(state, options).validate()

        buffers = BufferResolver(state, glb_binary, byte_loader).resolve()

        for i, accessor in enumerate(state.accessors):
            if accessor.sparse is not None:
                read_sparse_indices(accessor, i, state.buffer_views, buffers)

        document = cls(state, buffers, options, byte_loader)
        logger.debug(f"Loaded {document}")
        return document

    # Entity access

    @property
    def buffers(self) -> Tuple[GLTFBuffer, ...]:
        return self._entities["buffers"]

    @property
    def buffer_views(self) -> Tuple[GLTFBufferView, ...]:
        return self._entities["bufferViews"]

    @property
    def accessors(self) -> Tuple[GLTFAccessor, ...]:
        return self._entities["accessors"]

    @property
    def images(self) -> Tuple[GLTFImage, ...]:
        return self._entities["images"]

    @property
    def samplers(self) -> Tuple[GLTFTextureSampler, ...]:
        return self._entities["samplers"]

    @property
    def textures(self) -> Tuple[GLTFTexture, ...]:
        return self._entities["textures"]

    @property
    def materials(self) -> Tuple[GLTFMaterial, ...]:
        return self._entities["materials"]

    @property
    def meshes(self) -> Tuple[GLTFMesh, ...]:
        return self._entities["meshes"]

    @property
    def cameras(self) -> Tuple[GLTFCamera, ...]:
        return self._entities["cameras"]

    @property
    def skins(self) -> Tuple[GLTFSkin, ...]:
        return self._entities["skins"]

    @property
    def animations(self) -> Tuple[GLTFAnimation, ...]:
        return self._entities["animations"]

    @property
    def nodes(self) -> Tuple[GLTFNode, ...]:
        return self._entities["nodes"]

    @property
    def scenes(self) -> Tuple[GLTFScene, ...]:
        return self._entities["scenes"]

    def get(self, kind: str, index: int) -> Any:
        """
        Get an entity by JSON array name and index.

        Raises:
            KeyError: unknown kind
            IndexOutOfRange: no entity at that index
        """
        if kind not in self._entities:
            raise KeyError(f"Unknown entity kind: {kind}")
        entities = self._entities[kind]
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(entities):
            raise IndexOutOfRange(kind, index, length=len(entities))
        return entities[index]

    def get_buffer(self, index: int) -> GLTFBuffer:
        return self.get("buffers", index)

    def get_buffer_view(self, index: int) -> GLTFBufferView:
        return self.get("bufferViews", index)

    def get_accessor(self, index: int) -> GLTFAccessor:
        return self.get("accessors", index)

    def get_image(self, index: int) -> GLTFImage:
        return self.get("images", index)

    def get_sampler(self, index: int) -> GLTFTextureSampler:
        return self.get("samplers", index)

    def get_texture(self, index: int) -> GLTFTexture:
        return self.get("textures", index)

    def get_material(self, index: int) -> GLTFMaterial:
        return self.get("materials", index)

    def get_mesh(self, index: int) -> GLTFMesh:
        return self.get("meshes", index)

    def get_camera(self, index: int) -> GLTFCamera:
        return self.get("cameras", index)

    def get_skin(self, index: int) -> GLTFSkin:
        return self.get("skins", index)

    def get_animation(self, index: int) -> GLTFAnimation:
        return self.get("animations", index)

    def get_node(self, index: int) -> GLTFNode:
        return self.get("nodes", index)

    def get_scene(self, index: int) -> GLTFScene:
        return self.get("scenes", index)

    def count(self, kind: str) -> int:
        return len(self._entities[kind])

    def find_index(self, kind: str, name: str) -> Optional[int]:
        """
        Find the first entity of a kind with the given name.

        Raises:
            ValueError: the document was loaded without capturing names
        """
        if not self.options.capture_names:
            raise ValueError("Names were not captured; load with capture_names=True to look up by name")
        for i, entity in enumerate(self._entities[kind]):
            if getattr(entity, 'name', None) == name:
                return i
        return None

    # Scene graph

    @property
    def default_scene(self) -> Optional[GLTFScene]:
        """The scene named by the top-level ``scene`` property, if any"""
        if self.scene is None:
            return None
        return self.scenes[self.scene]

    def node_parent(self, index: int) -> Optional[int]:
        self.get_node(index)
        return self._parents[index]

    def root_nodes(self) -> Tuple[int, ...]:
        """Indices of all nodes without a parent"""
        return tuple(i for i, parent in enumerate(self._parents) if parent is None)

    def walk_scene(self, scene: Optional[int] = None) -> Iterator[Tuple[int, Optional[int], int]]:
        """
        Walk a scene depth-first.

        Args:
            scene: Scene index; defaults to the default scene, then scene 0.
                A document without scenes yields nothing.

        Yields:
            (node index, parent index or None, depth) in pre-order
        """
        if scene is None:
            if not self.scenes:
                return
            scene = self.scene if self.scene is not None else 0
        roots = self.get_scene(scene).nodes

        stack = [(root, None, 0) for root in reversed(roots)]
        while stack:
            index, parent, depth = stack.pop()
            yield index, parent, depth
            for child in reversed(self.nodes[index].children):
                stack.append((child, index, depth + 1))

    # Data access

    def buffer_data(self, index: int) -> memoryview:
        """Read-only bytes of a buffer"""
        self.get_buffer(index)
        return self._buffer_data[index]

    def buffer_view_data(self, index: int) -> memoryview:
        view = self.get_buffer_view(index)
        return self._buffer_data[view.buffer][view.byte_offset:view.byte_offset + view.byte_length]

    def image_data(self, index: int) -> memoryview:
        """
        Encoded bytes of an image (PNG, JPEG, ...). Pixels are not decoded.

        External image URIs are fetched on each call through the byte loader.
        """
        image = self.get_image(index)
        return resolve_image_bytes(image, index, self.buffer_views, self._buffer_data,
                                   self._byte_loader)

    def accessor_view(self, index: int, expected_type=None, expected_component_type=None,
                      expected_component_count: Optional[int] = None) -> AccessorView:
        """
        Get a typed view over an accessor.

        Args:
            index: Accessor index
            expected_type: Accessor type (or collection of types) to require
            expected_component_type: Component type (or collection) to require
            expected_component_count: Components per element to require

        Raises:
            IndexOutOfRange: no accessor at that index
            TypeMismatch: the accessor does not have the requested shape
        """
        accessor = self.get_accessor(index)
        return AccessorView(accessor, index, self.buffer_views, self._buffer_data,
                            expected_type=expected_type,
                            expected_component_type=expected_component_type,
                            expected_component_count=expected_component_count)

    def primitive_reader(self, mesh: int, primitive: int = 0) -> PrimitiveReader:
        primitives = self.get_mesh(mesh).primitives
        if not 0 <= primitive < len(primitives):
            raise IndexOutOfRange("meshes", mesh, f"meshes[{mesh}].primitives[{primitive}]",
                                  len(primitives))
        return PrimitiveReader(self, primitives[primitive])

    def skin_reader(self, skin: int) -> SkinReader:
        return SkinReader(self, self.get_skin(skin))

    def channel_reader(self, animation: int, channel: int) -> ChannelReader:
        anim = self.get_animation(animation)
        if not 0 <= channel < len(anim.channels):
            raise IndexOutOfRange("animations", animation,
                                  f"animations[{animation}].channels[{channel}]", len(anim.channels))
        return ChannelReader(self, anim, anim.channels[channel])

    def __str__(self) -> str:
        """String representation"""
        return (f"GLTFDocument(nodes={len(self.nodes)}, meshes={len(self.meshes)}, "
                f"materials={len(self.materials)}, accessors={len(self.accessors)}, "
                f"buffers={len(self.buffers)}, animations={len(self.animations)})")
