"""
GLTF Readers

Convenience readers that hand out typed accessor views for the common
consumers of a document: mesh primitives, skins and animation channels.
Every reader checks the shape it expects, so callers get a TypeMismatch
instead of silently misread data.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Tuple

from .accessor_view import AccessorView
from .structures import *

if TYPE_CHECKING:
    from .gltf_document import GLTFDocument


FLOAT_OR_NORMALIZED = (COMPONENT_TYPE_FLOAT, COMPONENT_TYPE_UNSIGNED_BYTE, COMPONENT_TYPE_UNSIGNED_SHORT)
JOINT_COMPONENT_TYPES = (COMPONENT_TYPE_UNSIGNED_BYTE, COMPONENT_TYPE_UNSIGNED_SHORT)

# Accessor type required for each animation target path
OUTPUT_TYPES = {
    "translation": ACCESSOR_TYPE_VEC3,
    "rotation": ACCESSOR_TYPE_VEC4,
    "scale": ACCESSOR_TYPE_VEC3,
    "weights": ACCESSOR_TYPE_SCALAR,
}


@dataclass(frozen=True)
class MorphTarget:
    """Displacement views of one morph target; absent attributes are None"""
    positions: Optional[AccessorView] = None
    normals: Optional[AccessorView] = None
    tangents: Optional[AccessorView] = None


class PrimitiveReader:
    """
    Reads vertex attributes and indices of a mesh primitive.

    Attributes that the primitive does not declare read as None.
    """

    def __init__(self, document: "GLTFDocument", primitive: GLTFPrimitive):
        self.document = document
        self.primitive = primitive

    def _attribute(self, semantic: str, **expected) -> Optional[AccessorView]:
        index = self.primitive.attributes.get(semantic)
        if index is None:
            return None
        return self.document.accessor_view(index, **expected)

    def read_positions(self) -> Optional[AccessorView]:
        return self._attribute("POSITION", expected_type=ACCESSOR_TYPE_VEC3)

    def read_normals(self) -> Optional[AccessorView]:
        return self._attribute("NORMAL", expected_type=ACCESSOR_TYPE_VEC3)

    def read_tangents(self) -> Optional[AccessorView]:
        return self._attribute("TANGENT", expected_type=ACCESSOR_TYPE_VEC4)

    def read_tex_coords(self, set_index: int = 0) -> Optional[AccessorView]:
        return self._attribute(f"TEXCOORD_{set_index}", expected_type=ACCESSOR_TYPE_VEC2)

    def read_colors(self, set_index: int = 0) -> Optional[AccessorView]:
        """Vertex colors, RGB or RGBA"""
        return self._attribute(f"COLOR_{set_index}",
                               expected_type=(ACCESSOR_TYPE_VEC3, ACCESSOR_TYPE_VEC4),
                               expected_component_type=FLOAT_OR_NORMALIZED)

    def read_joints(self, set_index: int = 0) -> Optional[AccessorView]:
        return self._attribute(f"JOINTS_{set_index}", expected_type=ACCESSOR_TYPE_VEC4,
                               expected_component_type=JOINT_COMPONENT_TYPES)

    def read_weights(self, set_index: int = 0) -> Optional[AccessorView]:
        return self._attribute(f"WEIGHTS_{set_index}", expected_type=ACCESSOR_TYPE_VEC4,
                               expected_component_type=FLOAT_OR_NORMALIZED)

    def read_indices(self) -> Optional[AccessorView]:
        """Index view, or None for non-indexed geometry"""
        if self.primitive.indices is None:
            return None
        return self.document.accessor_view(
            self.primitive.indices,
            expected_type=ACCESSOR_TYPE_SCALAR,
            expected_component_type=tuple(UNSIGNED_INDEX_COMPONENT_TYPES),
        )

    def read_morph_targets(self) -> Tuple[MorphTarget, ...]:
        targets = []
        for target in self.primitive.targets:
            views = {}
            for semantic, key, accessor_type in (("POSITION", "positions", ACCESSOR_TYPE_VEC3),
                                                 ("NORMAL", "normals", ACCESSOR_TYPE_VEC3),
                                                 ("TANGENT", "tangents", ACCESSOR_TYPE_VEC3)):
                if semantic in target:
                    views[key] = self.document.accessor_view(target[semantic], expected_type=accessor_type)
            targets.append(MorphTarget(**views))
        return tuple(targets)


class SkinReader:
    """Reads the joint list and inverse bind matrices of a skin"""

    def __init__(self, document: "GLTFDocument", skin: GLTFSkin):
        self.document = document
        self.skin = skin

    def read_inverse_bind_matrices(self) -> Optional[AccessorView]:
        """
        Get the inverse bind matrices as a MAT4 float view.

        Returns:
            The view, or None when the skin declares none (identity matrices)
        """
        if self.skin.inverse_bind_matrices is None:
            return None
        return self.document.accessor_view(
            self.skin.inverse_bind_matrices,
            expected_type=ACCESSOR_TYPE_MAT4,
            expected_component_type=COMPONENT_TYPE_FLOAT,
        )

    def joints(self) -> Tuple[GLTFNode, ...]:
        return tuple(self.document.get_node(i) for i in self.skin.joints)

    def skeleton(self) -> Optional[GLTFNode]:
        if self.skin.skeleton is None:
            return None
        return self.document.get_node(self.skin.skeleton)


class ChannelReader:
    """
    Reads keyframe times and values of an animation channel.

    Outputs are shape checked against the target path; paths added by
    extensions are returned unchecked.
    """

    def __init__(self, document: "GLTFDocument", animation: GLTFAnimation,
                 channel: GLTFAnimationChannel):
        self.document = document
        self.animation = animation
        self.channel = channel
        self.sampler = animation.samplers[channel.sampler]

    @property
    def interpolation(self) -> str:
        return self.sampler.interpolation

    @property
    def path(self) -> str:
        return self.channel.target.path

    def target_node(self) -> Optional[GLTFNode]:
        if self.channel.target.node is None:
            return None
        return self.document.get_node(self.channel.target.node)

    def read_inputs(self) -> AccessorView:
        """Keyframe times in seconds"""
        return self.document.accessor_view(
            self.sampler.input,
            expected_type=ACCESSOR_TYPE_SCALAR,
            expected_component_type=COMPONENT_TYPE_FLOAT,
        )

    def read_outputs(self) -> AccessorView:
        """
        Keyframe values.

        CUBICSPLINE samplers store (in-tangent, value, out-tangent) triplets,
        so the view holds three elements per keyframe.
        """
        return self.document.accessor_view(self.sampler.output,
                                           expected_type=OUTPUT_TYPES.get(self.path))
