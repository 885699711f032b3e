"""
GLTF Document Parser

Deserializes glTF JSON into a GLTFState. Every property is type-checked as
it is read; index fields are only checked for being integers here and are
bounds-checked later by the validator.
"""

import json
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidJson, InvalidProperty, UnsupportedVersion
from .extensions import ExtensionMap, build_extension_map, freeze_json
from .gltf_state import GLTFState
from .import_options import DEFAULT_IMPORT_OPTIONS, ImportOptions
from .logger import get_logger
from .structures import *


GLTF_VERSION = "2.0"

_MISSING = object()


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _version_tuple(version: str):
    major, _, minor = version.partition(".")
    return int(major), int(minor)


class _JsonObject:
    """
    Typed reader over one JSON object.

    Keeps track of the keys that were read so the remaining ones can be
    reported as unknown.
    """

    def __init__(self, data: Any, kind: str, index: Optional[int], path: str,
                 options: ImportOptions):
        if not isinstance(data, dict):
            raise InvalidProperty(f"'{path}' must be a JSON object", kind, index, path)
        self.data = data
        self.kind = kind
        self.entity_index = index
        self.path = path
        self.options = options
        self._seen = set()

    def _error(self, key: str, message: str) -> InvalidProperty:
        path = f"{self.path}.{key}"
        return InvalidProperty(f"'{path}' {message}", self.kind, self.entity_index, path)

    def _get(self, key: str, required: bool) -> Any:
        self._seen.add(key)
        value = self.data.get(key)
        if value is None:
            if required:
                raise self._error(key, "is required")
            return _MISSING
        return value

    def integer(self, key: str, required: bool = False, default: Optional[int] = None):
        value = self._get(key, required)
        if value is _MISSING:
            return default
        if not _is_integer(value):
            raise self._error(key, f"must be an integer, got {value!r}")
        return value

    # Index fields share the integer check; bounds come later.
    index = integer

    def number(self, key: str, required: bool = False, default: Optional[float] = None):
        value = self._get(key, required)
        if value is _MISSING:
            return default
        if not _is_number(value):
            raise self._error(key, f"must be a number, got {value!r}")
        return value

    def string(self, key: str, required: bool = False, default: Optional[str] = None):
        value = self._get(key, required)
        if value is _MISSING:
            return default
        if not isinstance(value, str):
            raise self._error(key, f"must be a string, got {value!r}")
        return value

    def boolean(self, key: str, default: bool = False) -> bool:
        value = self._get(key, False)
        if value is _MISSING:
            return default
        if not isinstance(value, bool):
            raise self._error(key, f"must be a boolean, got {value!r}")
        return value

    def number_list(self, key: str, length: Optional[int] = None, required: bool = False,
                    default=None):
        value = self._get(key, required)
        if value is _MISSING:
            return default
        if not isinstance(value, list) or not all(_is_number(v) for v in value):
            raise self._error(key, "must be an array of numbers")
        if length is not None and len(value) != length:
            raise self._error(key, f"must have {length} elements, got {len(value)}")
        return tuple(value)

    def index_list(self, key: str, required: bool = False, non_empty: bool = False):
        value = self._get(key, required)
        if value is _MISSING:
            return ()
        if not isinstance(value, list) or not all(_is_integer(v) for v in value):
            raise self._error(key, "must be an array of integers")
        if non_empty and not value:
            raise self._error(key, "must not be empty")
        if len(set(value)) != len(value):
            raise self._error(key, "must not contain duplicates")
        return tuple(value)

    def string_list(self, key: str):
        value = self._get(key, False)
        if value is _MISSING:
            return ()
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise self._error(key, "must be an array of strings")
        return tuple(value)

    def index_map(self, key: str, required: bool = False):
        value = self._get(key, required)
        if value is _MISSING:
            return MappingProxyType({})
        if not isinstance(value, dict) or not all(_is_integer(v) for v in value.values()):
            raise self._error(key, "must be an object mapping names to integers")
        return MappingProxyType(dict(value))

    def as_index_map(self):
        """Read this object itself as a name -> index mapping"""
        if not all(_is_integer(v) for v in self.data.values()):
            raise InvalidProperty(f"'{self.path}' must map names to integers",
                                  self.kind, self.entity_index, self.path)
        return MappingProxyType(dict(self.data))

    def child(self, key: str, required: bool = False) -> Optional["_JsonObject"]:
        value = self._get(key, required)
        if value is _MISSING:
            return None
        return _JsonObject(value, self.kind, self.entity_index, f"{self.path}.{key}", self.options)

    def child_list(self, key: str, required: bool = False, non_empty: bool = False):
        value = self._get(key, required)
        if value is _MISSING:
            return []
        if not isinstance(value, list):
            raise self._error(key, "must be an array")
        if non_empty and not value:
            raise self._error(key, "must not be empty")
        return [_JsonObject(item, self.kind, self.entity_index, f"{self.path}.{key}[{i}]", self.options)
                for i, item in enumerate(value)]

    def name(self) -> Optional[str]:
        name = self.string("name")
        return name if self.options.capture_names else None

    def extensions(self) -> ExtensionMap:
        value = self._get("extensions", False)
        if value is _MISSING:
            return build_extension_map(None, self.options.extension_decoders)
        if not isinstance(value, dict):
            raise self._error("extensions", "must be a JSON object")
        return build_extension_map(value, self.options.extension_decoders)

    def extras(self) -> Any:
        value = self._get("extras", False)
        if value is _MISSING or not self.options.capture_extras:
            return None
        return freeze_json(value)

    def unknown(self):
        if not self.options.capture_extras:
            return None
        leftover = {k: v for k, v in self.data.items() if k not in self._seen}
        return freeze_json(leftover) if leftover else None

    def common(self) -> Dict[str, Any]:
        """extensions/extras keyword arguments shared by every descriptor"""
        return {"extensions": self.extensions(), "extras": self.extras()}


class GLTFParser:
    """
    Parses glTF JSON into a GLTFState.

    The parser is stateless between calls; one instance may parse any number
    of documents.
    """

    def __init__(self, options: Optional[ImportOptions] = None):
        self.logger = get_logger('parser')
        self.options = options if options is not None else DEFAULT_IMPORT_OPTIONS

    def parse(self, data: Union[bytes, bytearray, memoryview, str]) -> GLTFState:
        """
        Parse GLTF JSON data.

        Args:
            data: UTF-8 encoded JSON bytes, or an already decoded string

        Returns:
            GLTFState holding the parsed, unvalidated document

        Raises:
            InvalidJson, UnsupportedVersion, InvalidProperty
        """
        root = self._decode(data)
        self._check_version(root)

        top = _JsonObject(root, "root", None, "root", self.options)
        state = GLTFState()

        state.asset = self._parse_asset(top.child("asset", required=True))
        state.extensions_used = top.string_list("extensionsUsed")
        state.extensions_required = top.string_list("extensionsRequired")

        state.buffers = [self._parse_buffer(o) for o in self._entities(top, "buffers")]
        state.buffer_views = [self._parse_buffer_view(o) for o in self._entities(top, "bufferViews")]
        state.accessors = [self._parse_accessor(o) for o in self._entities(top, "accessors")]
        state.images = [self._parse_image(o) for o in self._entities(top, "images")]
        state.samplers = [self._parse_sampler(o) for o in self._entities(top, "samplers")]
        state.textures = [self._parse_texture(o) for o in self._entities(top, "textures")]
        state.materials = [self._parse_material(o) for o in self._entities(top, "materials")]
        state.meshes = [self._parse_mesh(o) for o in self._entities(top, "meshes")]
        state.cameras = [self._parse_camera(o) for o in self._entities(top, "cameras")]
        state.skins = [self._parse_skin(o) for o in self._entities(top, "skins")]
        state.animations = [self._parse_animation(o) for o in self._entities(top, "animations")]
        state.nodes = [self._parse_node(o) for o in self._entities(top, "nodes")]
        state.scenes = [self._parse_scene(o) for o in self._entities(top, "scenes")]

        state.scene = top.index("scene")
        state.extensions = top.extensions()
        state.extras = top.extras()
        state.unknown = top.unknown()

        self.logger.debug(f"Parsed {state}")
        return state

    def _decode(self, data) -> Any:
        """Decode JSON text, mapping failures to InvalidJson"""
        if isinstance(data, str):
            text = data
        else:
            try:
                text = bytes(data).decode('utf-8')
            except UnicodeDecodeError as e:
                raise InvalidJson(f"JSON is not valid UTF-8: {e.reason}", e.start) from e

        try:
            root = json.loads(text)
        except json.JSONDecodeError as e:
            # Byte offset for encoded input, character offset for str input
            offset = e.pos if isinstance(data, str) else len(text[:e.pos].encode('utf-8'))
            raise InvalidJson(f"Invalid JSON: {e.msg}", offset) from e

        if not isinstance(root, dict):
            raise InvalidJson("Top-level JSON value must be an object", 0)
        return root

    def _check_version(self, root: Dict):
        """Validate the asset version before anything else is read"""
        asset = root.get('asset')
        if not isinstance(asset, dict):
            raise UnsupportedVersion("Missing asset information")

        version = asset.get('version')
        if version is None:
            raise UnsupportedVersion("Missing GLTF version")
        if version != GLTF_VERSION:
            raise UnsupportedVersion(f"Unsupported GLTF version: {version!r}", version)

        min_version = asset.get('minVersion')
        if min_version is not None:
            try:
                supported = _version_tuple(min_version) <= _version_tuple(GLTF_VERSION)
            except (AttributeError, ValueError):
                supported = False
            if not supported:
                raise UnsupportedVersion(f"Unsupported GLTF minVersion: {min_version!r}",
                                         min_version)

    def _entities(self, top: _JsonObject, kind: str) -> List[_JsonObject]:
        value = top._get(kind, False)
        if value is _MISSING:
            return []
        if not isinstance(value, list):
            raise InvalidProperty(f"'{kind}' must be an array", kind, None, kind)
        return [_JsonObject(item, kind, i, f"{kind}[{i}]", self.options)
                for i, item in enumerate(value)]

    def _parse_asset(self, obj: _JsonObject) -> GLTFAsset:
        """Parse asset information"""
        return GLTFAsset(
            version=obj.string('version', required=True),
            generator=obj.string('generator'),
            copyright=obj.string('copyright'),
            min_version=obj.string('minVersion'),
            **obj.common(),
        )

    def _parse_buffer(self, obj: _JsonObject) -> GLTFBuffer:
        """Parse a buffer definition"""
        return GLTFBuffer(
            byte_length=obj.integer('byteLength', required=True),
            uri=obj.string('uri'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_buffer_view(self, obj: _JsonObject) -> GLTFBufferView:
        """Parse a buffer view definition"""
        return GLTFBufferView(
            buffer=obj.index('buffer', required=True),
            byte_length=obj.integer('byteLength', required=True),
            byte_offset=obj.integer('byteOffset', default=0),
            byte_stride=obj.integer('byteStride'),
            target=obj.integer('target'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_accessor(self, obj: _JsonObject) -> GLTFAccessor:
        """Parse an accessor definition"""
        sparse = None
        sparse_obj = obj.child('sparse')
        if sparse_obj is not None:
            indices_obj = sparse_obj.child('indices', required=True)
            values_obj = sparse_obj.child('values', required=True)
            sparse = GLTFSparse(
                count=sparse_obj.integer('count', required=True),
                indices=GLTFSparseIndices(
                    buffer_view=indices_obj.index('bufferView', required=True),
                    component_type=indices_obj.integer('componentType', required=True),
                    byte_offset=indices_obj.integer('byteOffset', default=0),
                    **indices_obj.common(),
                ),
                values=GLTFSparseValues(
                    buffer_view=values_obj.index('bufferView', required=True),
                    byte_offset=values_obj.integer('byteOffset', default=0),
                    **values_obj.common(),
                ),
                **sparse_obj.common(),
            )

        return GLTFAccessor(
            component_type=obj.integer('componentType', required=True),
            count=obj.integer('count', required=True),
            type=obj.string('type', required=True),
            buffer_view=obj.index('bufferView'),
            byte_offset=obj.integer('byteOffset', default=0),
            normalized=obj.boolean('normalized'),
            max=obj.number_list('max'),
            min=obj.number_list('min'),
            sparse=sparse,
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_image(self, obj: _JsonObject) -> GLTFImage:
        """Parse an image definition"""
        return GLTFImage(
            uri=obj.string('uri'),
            mime_type=obj.string('mimeType'),
            buffer_view=obj.index('bufferView'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_sampler(self, obj: _JsonObject) -> GLTFTextureSampler:
        """Parse a texture sampler definition"""
        return GLTFTextureSampler(
            mag_filter=obj.integer('magFilter'),
            min_filter=obj.integer('minFilter'),
            wrap_s=obj.integer('wrapS', default=WRAP_REPEAT),
            wrap_t=obj.integer('wrapT', default=WRAP_REPEAT),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_texture(self, obj: _JsonObject) -> GLTFTexture:
        """Parse a texture definition"""
        return GLTFTexture(
            sampler=obj.index('sampler'),
            source=obj.index('source'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_texture_info(self, obj: Optional[_JsonObject], extra: Optional[str] = None):
        if obj is None:
            return None
        kwargs = {}
        if extra is not None:
            kwargs[extra] = obj.number(extra, default=1.0)
        return GLTFTextureInfo(
            index=obj.index('index', required=True),
            tex_coord=obj.integer('texCoord', default=0),
            **kwargs,
            **obj.common(),
        )

    def _parse_material(self, obj: _JsonObject) -> GLTFMaterial:
        """Parse a material definition"""
        pbr = None
        pbr_obj = obj.child('pbrMetallicRoughness')
        if pbr_obj is not None:
            pbr = GLTFPbrMetallicRoughness(
                base_color_factor=pbr_obj.number_list('baseColorFactor', length=4,
                                                      default=(1.0, 1.0, 1.0, 1.0)),
                base_color_texture=self._parse_texture_info(pbr_obj.child('baseColorTexture')),
                metallic_factor=pbr_obj.number('metallicFactor', default=1.0),
                roughness_factor=pbr_obj.number('roughnessFactor', default=1.0),
                metallic_roughness_texture=self._parse_texture_info(
                    pbr_obj.child('metallicRoughnessTexture')),
                **pbr_obj.common(),
            )

        return GLTFMaterial(
            name=obj.name(),
            pbr_metallic_roughness=pbr,
            normal_texture=self._parse_texture_info(obj.child('normalTexture'), 'scale'),
            occlusion_texture=self._parse_texture_info(obj.child('occlusionTexture'), 'strength'),
            emissive_texture=self._parse_texture_info(obj.child('emissiveTexture')),
            emissive_factor=obj.number_list('emissiveFactor', length=3, default=(0.0, 0.0, 0.0)),
            alpha_mode=obj.string('alphaMode', default='OPAQUE'),
            alpha_cutoff=obj.number('alphaCutoff', default=0.5),
            double_sided=obj.boolean('doubleSided'),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_mesh(self, obj: _JsonObject) -> GLTFMesh:
        """Parse a mesh definition"""
        primitives = []
        for prim_obj in obj.child_list('primitives', required=True, non_empty=True):
            targets = tuple(
                target_obj.as_index_map()
                for target_obj in prim_obj.child_list('targets')
            )
            primitives.append(GLTFPrimitive(
                attributes=prim_obj.index_map('attributes', required=True),
                indices=prim_obj.index('indices'),
                material=prim_obj.index('material'),
                mode=prim_obj.integer('mode', default=PRIMITIVE_MODE_TRIANGLES),
                targets=targets,
                **prim_obj.common(),
            ))

        return GLTFMesh(
            primitives=tuple(primitives),
            weights=obj.number_list('weights'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_camera(self, obj: _JsonObject) -> GLTFCamera:
        """Parse a camera definition"""
        perspective = None
        persp_obj = obj.child('perspective')
        if persp_obj is not None:
            perspective = GLTFPerspective(
                yfov=persp_obj.number('yfov', required=True),
                znear=persp_obj.number('znear', required=True),
                aspect_ratio=persp_obj.number('aspectRatio'),
                zfar=persp_obj.number('zfar'),
                **persp_obj.common(),
            )

        orthographic = None
        ortho_obj = obj.child('orthographic')
        if ortho_obj is not None:
            orthographic = GLTFOrthographic(
                xmag=ortho_obj.number('xmag', required=True),
                ymag=ortho_obj.number('ymag', required=True),
                znear=ortho_obj.number('znear', required=True),
                zfar=ortho_obj.number('zfar', required=True),
                **ortho_obj.common(),
            )

        return GLTFCamera(
            type=obj.string('type', required=True),
            perspective=perspective,
            orthographic=orthographic,
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_skin(self, obj: _JsonObject) -> GLTFSkin:
        """Parse a skin definition"""
        return GLTFSkin(
            joints=obj.index_list('joints', required=True, non_empty=True),
            inverse_bind_matrices=obj.index('inverseBindMatrices'),
            skeleton=obj.index('skeleton'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_animation(self, obj: _JsonObject) -> GLTFAnimation:
        """Parse an animation definition"""
        samplers = tuple(
            GLTFAnimationSampler(
                input=samp_obj.index('input', required=True),
                output=samp_obj.index('output', required=True),
                interpolation=samp_obj.string('interpolation', default='LINEAR'),
                **samp_obj.common(),
            )
            for samp_obj in obj.child_list('samplers', required=True, non_empty=True)
        )

        channels = []
        for chan_obj in obj.child_list('channels', required=True, non_empty=True):
            target_obj = chan_obj.child('target', required=True)
            channels.append(GLTFAnimationChannel(
                sampler=chan_obj.index('sampler', required=True),
                target=GLTFAnimationTarget(
                    path=target_obj.string('path', required=True),
                    node=target_obj.index('node'),
                    **target_obj.common(),
                ),
                **chan_obj.common(),
            ))

        return GLTFAnimation(
            channels=tuple(channels),
            samplers=samplers,
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_node(self, obj: _JsonObject) -> GLTFNode:
        """Parse a node definition"""
        return GLTFNode(
            children=obj.index_list('children'),
            mesh=obj.index('mesh'),
            camera=obj.index('camera'),
            skin=obj.index('skin'),
            matrix=obj.number_list('matrix', length=16),
            translation=obj.number_list('translation', length=3),
            rotation=obj.number_list('rotation', length=4),
            scale=obj.number_list('scale', length=3),
            weights=obj.number_list('weights'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )

    def _parse_scene(self, obj: _JsonObject) -> GLTFScene:
        """Parse a scene definition"""
        return GLTFScene(
            nodes=obj.index_list('nodes'),
            name=obj.name(),
            **obj.common(),
            unknown=obj.unknown(),
        )


def parse_json(data, options: Optional[ImportOptions] = None) -> GLTFState:
    """Parse GLTF JSON bytes or text into a GLTFState"""
    return GLTFParser(options).parse(data)
