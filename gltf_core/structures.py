"""
GLTF Data Structures

This module contains the descriptors that make up a glTF 2.0 document.
All references between descriptors are integer indices into the top-level
arrays of the document. Descriptors are frozen once created; sequences are
tuples and JSON payloads are frozen mappings.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple

from .extensions import EMPTY_EXTENSIONS, ExtensionMap


# Component type constants
COMPONENT_TYPE_BYTE = 5120
COMPONENT_TYPE_UNSIGNED_BYTE = 5121
COMPONENT_TYPE_SHORT = 5122
COMPONENT_TYPE_UNSIGNED_SHORT = 5123
COMPONENT_TYPE_UNSIGNED_INT = 5125
COMPONENT_TYPE_FLOAT = 5126

# Accessor type constants
ACCESSOR_TYPE_SCALAR = "SCALAR"
ACCESSOR_TYPE_VEC2 = "VEC2"
ACCESSOR_TYPE_VEC3 = "VEC3"
ACCESSOR_TYPE_VEC4 = "VEC4"
ACCESSOR_TYPE_MAT2 = "MAT2"
ACCESSOR_TYPE_MAT3 = "MAT3"
ACCESSOR_TYPE_MAT4 = "MAT4"

COMPONENT_TYPE_SIZES = {
    COMPONENT_TYPE_BYTE: 1,
    COMPONENT_TYPE_UNSIGNED_BYTE: 1,
    COMPONENT_TYPE_SHORT: 2,
    COMPONENT_TYPE_UNSIGNED_SHORT: 2,
    COMPONENT_TYPE_UNSIGNED_INT: 4,
    COMPONENT_TYPE_FLOAT: 4,
}

# struct format characters, always read little-endian
COMPONENT_TYPE_PACK_FORMATS = {
    COMPONENT_TYPE_BYTE: 'b',
    COMPONENT_TYPE_UNSIGNED_BYTE: 'B',
    COMPONENT_TYPE_SHORT: 'h',
    COMPONENT_TYPE_UNSIGNED_SHORT: 'H',
    COMPONENT_TYPE_UNSIGNED_INT: 'I',
    COMPONENT_TYPE_FLOAT: 'f',
}

COMPONENT_TYPE_NAMES = {
    COMPONENT_TYPE_BYTE: "BYTE",
    COMPONENT_TYPE_UNSIGNED_BYTE: "UNSIGNED_BYTE",
    COMPONENT_TYPE_SHORT: "SHORT",
    COMPONENT_TYPE_UNSIGNED_SHORT: "UNSIGNED_SHORT",
    COMPONENT_TYPE_UNSIGNED_INT: "UNSIGNED_INT",
    COMPONENT_TYPE_FLOAT: "FLOAT",
}

# Divisors used when mapping normalized integers to floats. Signed types
# divide by their max positive value.
NORMALIZATION_DIVISORS = {
    COMPONENT_TYPE_BYTE: 127.0,
    COMPONENT_TYPE_UNSIGNED_BYTE: 255.0,
    COMPONENT_TYPE_SHORT: 32767.0,
    COMPONENT_TYPE_UNSIGNED_SHORT: 65535.0,
}

SIGNED_COMPONENT_TYPES = frozenset({COMPONENT_TYPE_BYTE, COMPONENT_TYPE_SHORT})

UNSIGNED_INDEX_COMPONENT_TYPES = frozenset({
    COMPONENT_TYPE_UNSIGNED_BYTE,
    COMPONENT_TYPE_UNSIGNED_SHORT,
    COMPONENT_TYPE_UNSIGNED_INT,
})

ACCESSOR_TYPE_COMPONENTS = {
    ACCESSOR_TYPE_SCALAR: 1,
    ACCESSOR_TYPE_VEC2: 2,
    ACCESSOR_TYPE_VEC3: 3,
    ACCESSOR_TYPE_VEC4: 4,
    ACCESSOR_TYPE_MAT2: 4,
    ACCESSOR_TYPE_MAT3: 9,
    ACCESSOR_TYPE_MAT4: 16,
}

# (columns, rows) for each accessor type
ACCESSOR_TYPE_SHAPES = {
    ACCESSOR_TYPE_SCALAR: (1, 1),
    ACCESSOR_TYPE_VEC2: (1, 2),
    ACCESSOR_TYPE_VEC3: (1, 3),
    ACCESSOR_TYPE_VEC4: (1, 4),
    ACCESSOR_TYPE_MAT2: (2, 2),
    ACCESSOR_TYPE_MAT3: (3, 3),
    ACCESSOR_TYPE_MAT4: (4, 4),
}

MATRIX_ACCESSOR_TYPES = frozenset({ACCESSOR_TYPE_MAT2, ACCESSOR_TYPE_MAT3, ACCESSOR_TYPE_MAT4})

# Buffer view targets
ARRAY_BUFFER = 34962
ELEMENT_ARRAY_BUFFER = 34963

# Primitive modes
PRIMITIVE_MODE_POINTS = 0
PRIMITIVE_MODE_LINES = 1
PRIMITIVE_MODE_LINE_LOOP = 2
PRIMITIVE_MODE_LINE_STRIP = 3
PRIMITIVE_MODE_TRIANGLES = 4
PRIMITIVE_MODE_TRIANGLE_STRIP = 5
PRIMITIVE_MODE_TRIANGLE_FAN = 6

# Sampler enums
FILTER_NEAREST = 9728
FILTER_LINEAR = 9729
MAG_FILTERS = frozenset({FILTER_NEAREST, FILTER_LINEAR})
MIN_FILTERS = frozenset({FILTER_NEAREST, FILTER_LINEAR, 9984, 9985, 9986, 9987})
WRAP_REPEAT = 10497
WRAP_MODES = frozenset({33071, 33648, WRAP_REPEAT})

INTERPOLATIONS = frozenset({"LINEAR", "STEP", "CUBICSPLINE"})
TARGET_PATHS = frozenset({"translation", "rotation", "scale", "weights"})
CAMERA_TYPES = frozenset({"perspective", "orthographic"})
ALPHA_MODES = frozenset({"OPAQUE", "MASK", "BLEND"})

MIN_BYTE_STRIDE = 4
MAX_BYTE_STRIDE = 252


def column_stride(accessor_type: str, component_type: int) -> int:
    """
    Byte distance between matrix columns.

    Matrix columns start on 4-byte boundaries, which pads MAT2/MAT3 of 1-byte
    components and MAT3 of 2-byte components. Vectors and scalars have a
    single column.
    """
    columns, rows = ACCESSOR_TYPE_SHAPES[accessor_type]
    raw = rows * COMPONENT_TYPE_SIZES[component_type]
    if accessor_type in MATRIX_ACCESSOR_TYPES:
        return (raw + 3) // 4 * 4
    return raw


def element_size(accessor_type: str, component_type: int) -> int:
    """Packed byte size of one accessor element, including matrix column padding."""
    columns, _ = ACCESSOR_TYPE_SHAPES[accessor_type]
    return columns * column_stride(accessor_type, component_type)


def _hashable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((key, _hashable(item)) for key, item in value.items()))
    if isinstance(value, tuple):
        return tuple(_hashable(item) for item in value)
    return value


def _descriptor_hash(self) -> int:
    return hash(tuple(_hashable(getattr(self, f.name)) for f in fields(self)))


def descriptor(cls):
    """Frozen dataclass whose hash also covers its frozen JSON mappings"""
    cls = dataclass(frozen=True)(cls)
    cls.__hash__ = _descriptor_hash
    return cls


@descriptor
class GLTFAsset:
    """Represents GLTF asset information"""
    version: str = "2.0"
    generator: Optional[str] = None
    copyright: Optional[str] = None
    min_version: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFBuffer:
    """Represents a GLTF buffer"""
    byte_length: int
    uri: Optional[str] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None

    @property
    def is_data_uri(self) -> bool:
        return self.uri is not None and self.uri.startswith("data:")


@descriptor
class GLTFBufferView:
    """Represents a GLTF buffer view"""
    buffer: int
    byte_length: int
    byte_offset: int = 0
    byte_stride: Optional[int] = None
    target: Optional[int] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFSparseIndices:
    """Location and component type of the sparse index array"""
    buffer_view: int
    component_type: int
    byte_offset: int = 0
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFSparseValues:
    """Location of the sparse value array"""
    buffer_view: int
    byte_offset: int = 0
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFSparse:
    """Sparse overlay of an accessor"""
    count: int
    indices: GLTFSparseIndices
    values: GLTFSparseValues
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFAccessor:
    """Represents a GLTF accessor"""
    component_type: int
    count: int
    type: str
    buffer_view: Optional[int] = None
    byte_offset: int = 0
    normalized: bool = False
    max: Optional[Tuple[float, ...]] = None
    min: Optional[Tuple[float, ...]] = None
    sparse: Optional[GLTFSparse] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None

    @property
    def component_size(self) -> int:
        return COMPONENT_TYPE_SIZES[self.component_type]

    @property
    def component_count(self) -> int:
        return ACCESSOR_TYPE_COMPONENTS[self.type]

    @property
    def element_size(self) -> int:
        return element_size(self.type, self.component_type)


@descriptor
class GLTFTextureInfo:
    """Reference from a material to a texture"""
    index: int
    tex_coord: int = 0
    scale: Optional[float] = None
    strength: Optional[float] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFPbrMetallicRoughness:
    """Metallic-roughness block of a material"""
    base_color_factor: Tuple[float, ...] = (1.0, 1.0, 1.0, 1.0)
    base_color_texture: Optional[GLTFTextureInfo] = None
    metallic_factor: float = 1.0
    roughness_factor: float = 1.0
    metallic_roughness_texture: Optional[GLTFTextureInfo] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFMaterial:
    """Represents a GLTF material"""
    name: Optional[str] = None
    pbr_metallic_roughness: Optional[GLTFPbrMetallicRoughness] = None
    normal_texture: Optional[GLTFTextureInfo] = None
    occlusion_texture: Optional[GLTFTextureInfo] = None
    emissive_texture: Optional[GLTFTextureInfo] = None
    emissive_factor: Tuple[float, ...] = (0.0, 0.0, 0.0)
    alpha_mode: str = "OPAQUE"
    alpha_cutoff: float = 0.5
    double_sided: bool = False
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None

    def texture_infos(self):
        """Yield (property path, texture info) for every texture the material references."""
        pbr = self.pbr_metallic_roughness
        if pbr is not None:
            if pbr.base_color_texture is not None:
                yield "pbrMetallicRoughness.baseColorTexture", pbr.base_color_texture
            if pbr.metallic_roughness_texture is not None:
                yield "pbrMetallicRoughness.metallicRoughnessTexture", pbr.metallic_roughness_texture
        if self.normal_texture is not None:
            yield "normalTexture", self.normal_texture
        if self.occlusion_texture is not None:
            yield "occlusionTexture", self.occlusion_texture
        if self.emissive_texture is not None:
            yield "emissiveTexture", self.emissive_texture


@descriptor
class GLTFTexture:
    """Represents a GLTF texture"""
    sampler: Optional[int] = None
    source: Optional[int] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFImage:
    """Represents a GLTF image"""
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    buffer_view: Optional[int] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFTextureSampler:
    """Represents a GLTF texture sampler"""
    mag_filter: Optional[int] = None
    min_filter: Optional[int] = None
    wrap_s: int = WRAP_REPEAT
    wrap_t: int = WRAP_REPEAT
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFPrimitive:
    """Represents a GLTF mesh primitive"""
    attributes: Mapping[str, int]
    indices: Optional[int] = None
    material: Optional[int] = None
    mode: int = PRIMITIVE_MODE_TRIANGLES
    targets: Tuple[Mapping[str, int], ...] = ()
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFMesh:
    """Represents a GLTF mesh"""
    primitives: Tuple[GLTFPrimitive, ...]
    weights: Optional[Tuple[float, ...]] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFSkin:
    """Represents a GLTF skin"""
    joints: Tuple[int, ...]
    inverse_bind_matrices: Optional[int] = None
    skeleton: Optional[int] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFPerspective:
    """Perspective projection parameters"""
    yfov: float
    znear: float
    aspect_ratio: Optional[float] = None
    zfar: Optional[float] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFOrthographic:
    """Orthographic projection parameters"""
    xmag: float
    ymag: float
    znear: float
    zfar: float
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFCamera:
    """Represents a GLTF camera"""
    type: str
    perspective: Optional[GLTFPerspective] = None
    orthographic: Optional[GLTFOrthographic] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFAnimationSampler:
    """Represents a GLTF animation sampler"""
    input: int
    output: int
    interpolation: str = "LINEAR"
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFAnimationTarget:
    """Node and property an animation channel drives"""
    path: str
    node: Optional[int] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFAnimationChannel:
    """Represents a GLTF animation channel"""
    sampler: int
    target: GLTFAnimationTarget
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None


@descriptor
class GLTFAnimation:
    """Represents a GLTF animation"""
    channels: Tuple[GLTFAnimationChannel, ...]
    samplers: Tuple[GLTFAnimationSampler, ...]
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


@descriptor
class GLTFNode:
    """Represents a GLTF node"""
    children: Tuple[int, ...] = ()
    mesh: Optional[int] = None
    camera: Optional[int] = None
    skin: Optional[int] = None
    matrix: Optional[Tuple[float, ...]] = None
    translation: Optional[Tuple[float, ...]] = None
    rotation: Optional[Tuple[float, ...]] = None
    scale: Optional[Tuple[float, ...]] = None
    weights: Optional[Tuple[float, ...]] = None
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None

    @property
    def has_trs(self) -> bool:
        return (self.translation is not None or self.rotation is not None
                or self.scale is not None)

    def local_matrix(self) -> Tuple[float, ...]:
        """
        Column-major 4x4 local transform.

        Uses ``matrix`` when present, otherwise composes T * R * S with
        identity defaults for missing components.
        """
        if self.matrix is not None:
            return tuple(float(v) for v in self.matrix)

        tx, ty, tz = self.translation if self.translation is not None else (0.0, 0.0, 0.0)
        qx, qy, qz, qw = self.rotation if self.rotation is not None else (0.0, 0.0, 0.0, 1.0)
        sx, sy, sz = self.scale if self.scale is not None else (1.0, 1.0, 1.0)

        norm = math.sqrt(qx * qx + qy * qy + qz * qz + qw * qw)
        if norm > 0.0:
            qx, qy, qz, qw = qx / norm, qy / norm, qz / norm, qw / norm

        xx, yy, zz = qx * qx, qy * qy, qz * qz
        xy, xz, yz = qx * qy, qx * qz, qy * qz
        wx, wy, wz = qw * qx, qw * qy, qw * qz

        return (
            (1.0 - 2.0 * (yy + zz)) * sx, (2.0 * (xy + wz)) * sx, (2.0 * (xz - wy)) * sx, 0.0,
            (2.0 * (xy - wz)) * sy, (1.0 - 2.0 * (xx + zz)) * sy, (2.0 * (yz + wx)) * sy, 0.0,
            (2.0 * (xz + wy)) * sz, (2.0 * (yz - wx)) * sz, (1.0 - 2.0 * (xx + yy)) * sz, 0.0,
            float(tx), float(ty), float(tz), 1.0,
        )


@descriptor
class GLTFScene:
    """Represents a GLTF scene"""
    nodes: Tuple[int, ...] = ()
    name: Optional[str] = None
    extensions: ExtensionMap = EMPTY_EXTENSIONS
    extras: Any = None
    unknown: Optional[Mapping[str, Any]] = None


# Type indices
GLTFNodeIndex = int
GLTFMeshIndex = int
GLTFSkinIndex = int
GLTFTextureIndex = int
GLTFMaterialIndex = int
GLTFBufferIndex = int
GLTFBufferViewIndex = int
GLTFAccessorIndex = int
GLTFCameraIndex = int
GLTFImageIndex = int
GLTFAnimationIndex = int
GLTFSceneIndex = int
