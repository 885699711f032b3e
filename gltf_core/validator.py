"""
GLTF Reference Validator

Checks a parsed GLTFState before any of its data is trusted: every index
reference, the node hierarchy, buffer view and accessor layouts, and the
required-extension gate. Validation is fail-fast; the first violation found
is raised and the walk order is fixed, so the same document always reports
the same error.
"""

import re
from typing import Optional

from .errors import (CyclicNodeGraph, IndexOutOfRange, InvalidAccessorLayout,
                     InvalidProperty, UnsupportedExtension)
from .gltf_state import GLTFState
from .import_options import DEFAULT_IMPORT_OPTIONS, ImportOptions, ValidationLevel
from .logger import get_logger
from .structures import *


MESH_QUANTIZATION = "KHR_mesh_quantization"

_FLOAT = (COMPONENT_TYPE_FLOAT, False)
_NORMALIZED_UINTS = ((COMPONENT_TYPE_UNSIGNED_BYTE, True), (COMPONENT_TYPE_UNSIGNED_SHORT, True))
_ALL_INTEGERS = tuple(
    (component_type, normalized)
    for component_type in (COMPONENT_TYPE_BYTE, COMPONENT_TYPE_UNSIGNED_BYTE,
                           COMPONENT_TYPE_SHORT, COMPONENT_TYPE_UNSIGNED_SHORT)
    for normalized in (False, True)
)
_NORMALIZED_SIGNED = ((COMPONENT_TYPE_BYTE, True), (COMPONENT_TYPE_SHORT, True))

# semantic -> (allowed types, allowed (componentType, normalized), extra pairs with quantization)
_ATTRIBUTE_RULES = {
    "POSITION": ({ACCESSOR_TYPE_VEC3}, (_FLOAT,), _ALL_INTEGERS),
    "NORMAL": ({ACCESSOR_TYPE_VEC3}, (_FLOAT,), _NORMALIZED_SIGNED),
    "TANGENT": ({ACCESSOR_TYPE_VEC4}, (_FLOAT,), _NORMALIZED_SIGNED),
    "TEXCOORD": ({ACCESSOR_TYPE_VEC2}, (_FLOAT,) + _NORMALIZED_UINTS, _ALL_INTEGERS),
    "COLOR": ({ACCESSOR_TYPE_VEC3, ACCESSOR_TYPE_VEC4}, (_FLOAT,) + _NORMALIZED_UINTS, ()),
    "JOINTS": ({ACCESSOR_TYPE_VEC4},
               ((COMPONENT_TYPE_UNSIGNED_BYTE, False), (COMPONENT_TYPE_UNSIGNED_SHORT, False)), ()),
    "WEIGHTS": ({ACCESSOR_TYPE_VEC4}, (_FLOAT,) + _NORMALIZED_UINTS, ()),
}

_TARGET_RULES = {
    "POSITION": ({ACCESSOR_TYPE_VEC3}, (_FLOAT,), _ALL_INTEGERS),
    "NORMAL": ({ACCESSOR_TYPE_VEC3}, (_FLOAT,), _NORMALIZED_SIGNED),
    "TANGENT": ({ACCESSOR_TYPE_VEC3}, (_FLOAT,), _NORMALIZED_SIGNED),
}

_SET_SEMANTIC = re.compile(r"^(TEXCOORD|COLOR|JOINTS|WEIGHTS)_\d+$")

_PATH_TYPES = {
    "translation": ACCESSOR_TYPE_VEC3,
    "rotation": ACCESSOR_TYPE_VEC4,
    "scale": ACCESSOR_TYPE_VEC3,
    "weights": ACCESSOR_TYPE_SCALAR,
}


def _semantic_base(semantic: str) -> Optional[str]:
    if semantic in ("POSITION", "NORMAL", "TANGENT"):
        return semantic
    match = _SET_SEMANTIC.match(semantic)
    return match.group(1) if match else None


class GLTFValidator:
    """
    Validator for a parsed document.

    Usage:
        GLTFValidator(state, options).validate()
    """

    def __init__(self, state: GLTFState, options: Optional[ImportOptions] = None):
        self.logger = get_logger('validator')
        self.state = state
        self.options = options if options is not None else DEFAULT_IMPORT_OPTIONS

    def validate(self):
        """
        Run all checks in order; raise the first violation.

        Raises:
            UnsupportedExtension, IndexOutOfRange, CyclicNodeGraph,
            InvalidAccessorLayout, InvalidProperty
        """
        self.validate_required_extensions()
        self.validate_references()
        self.validate_node_forest()
        self.validate_layouts()
        if self.options.validation == ValidationLevel.COMPLETE:
            self.validate_semantics()
        self.logger.debug("Validation passed")

    # ------------------------------------------------------------------
    # Required extensions

    def validate_required_extensions(self):
        """Gate on extensionsRequired"""
        for i, name in enumerate(self.state.extensions_required):
            if name not in self.state.extensions_used:
                raise InvalidProperty(
                    f"Required extension '{name}' is missing from extensionsUsed",
                    "root", None, f"extensionsRequired[{i}]")
            if not self.options.is_extension_supported(name):
                raise UnsupportedExtension(name)

    # ------------------------------------------------------------------
    # Index references

    def _check(self, kind: str, index: Optional[int], path: str, length: Optional[int] = None):
        if index is None:
            return
        if length is None:
            length = self.state.count(kind)
        if not 0 <= index < length:
            raise IndexOutOfRange(kind, index, path, length)

    def validate_references(self):
        """Check every index field against the bounds of its target array"""
        state = self.state
        check = self._check

        check("scenes", state.scene, "scene")

        for i, scene in enumerate(state.scenes):
            for j, node in enumerate(scene.nodes):
                check("nodes", node, f"scenes[{i}].nodes[{j}]")

        for i, node in enumerate(state.nodes):
            for j, child in enumerate(node.children):
                check("nodes", child, f"nodes[{i}].children[{j}]")
            check("meshes", node.mesh, f"nodes[{i}].mesh")
            check("cameras", node.camera, f"nodes[{i}].camera")
            check("skins", node.skin, f"nodes[{i}].skin")

        for i, mesh in enumerate(state.meshes):
            for p, prim in enumerate(mesh.primitives):
                base = f"meshes[{i}].primitives[{p}]"
                for semantic, accessor in prim.attributes.items():
                    check("accessors", accessor, f"{base}.attributes.{semantic}")
                check("accessors", prim.indices, f"{base}.indices")
                check("materials", prim.material, f"{base}.material")
                for t, target in enumerate(prim.targets):
                    for semantic, accessor in target.items():
                        check("accessors", accessor, f"{base}.targets[{t}].{semantic}")

        for i, accessor in enumerate(state.accessors):
            check("bufferViews", accessor.buffer_view, f"accessors[{i}].bufferView")
            if accessor.sparse is not None:
                check("bufferViews", accessor.sparse.indices.buffer_view,
                      f"accessors[{i}].sparse.indices.bufferView")
                check("bufferViews", accessor.sparse.values.buffer_view,
                      f"accessors[{i}].sparse.values.bufferView")

        for i, view in enumerate(state.buffer_views):
            check("buffers", view.buffer, f"bufferViews[{i}].buffer")

        for i, texture in enumerate(state.textures):
            check("samplers", texture.sampler, f"textures[{i}].sampler")
            check("images", texture.source, f"textures[{i}].source")

        for i, image in enumerate(state.images):
            check("bufferViews", image.buffer_view, f"images[{i}].bufferView")

        for i, material in enumerate(state.materials):
            for path, info in material.texture_infos():
                check("textures", info.index, f"materials[{i}].{path}.index")

        for i, skin in enumerate(state.skins):
            check("accessors", skin.inverse_bind_matrices, f"skins[{i}].inverseBindMatrices")
            check("nodes", skin.skeleton, f"skins[{i}].skeleton")
            for j, joint in enumerate(skin.joints):
                check("nodes", joint, f"skins[{i}].joints[{j}]")

        for i, animation in enumerate(state.animations):
            for s, sampler in enumerate(animation.samplers):
                check("accessors", sampler.input, f"animations[{i}].samplers[{s}].input")
                check("accessors", sampler.output, f"animations[{i}].samplers[{s}].output")
            for c, channel in enumerate(animation.channels):
                check("animation.samplers", channel.sampler,
                      f"animations[{i}].channels[{c}].sampler", len(animation.samplers))
                check("nodes", channel.target.node, f"animations[{i}].channels[{c}].target.node")

    # ------------------------------------------------------------------
    # Node hierarchy

    def validate_node_forest(self):
        """
        Check the node relation is a forest.

        Each node has at most one parent node, scene roots have no parent
        and belong to a single scene, and no node is its own ancestor.
        """
        nodes = self.state.nodes
        parents = [None] * len(nodes)

        for i, node in enumerate(nodes):
            for child in node.children:
                if child == i:
                    raise CyclicNodeGraph(i, "node is its own child")
                if parents[child] is not None:
                    raise CyclicNodeGraph(
                        child, f"node has multiple parents ({parents[child]} and {i})")
                parents[child] = i

        scene_of_root = {}
        for s, scene in enumerate(self.state.scenes):
            for root in scene.nodes:
                if parents[root] is not None:
                    raise CyclicNodeGraph(
                        root, f"root of scene {s} is a child of node {parents[root]}")
                owner = scene_of_root.setdefault(root, s)
                if owner != s:
                    raise CyclicNodeGraph(root, f"node is a root of scenes {owner} and {s}")

        # Depth-first walk from every parentless node; anything not reached
        # hangs off a cycle.
        visited = [False] * len(nodes)
        for root in range(len(nodes)):
            if parents[root] is not None:
                continue
            stack = [root]
            while stack:
                index = stack.pop()
                if visited[index]:
                    raise CyclicNodeGraph(index, "node is reachable twice")
                visited[index] = True
                stack.extend(reversed(nodes[index].children))

        for index, seen in enumerate(visited):
            if not seen:
                raise CyclicNodeGraph(index, "node is its own ancestor")

    # ------------------------------------------------------------------
    # Buffer view and accessor layout

    def validate_layouts(self):
        """Check buffer views, accessors and node transforms"""
        for i, buffer in enumerate(self.state.buffers):
            if buffer.byte_length < 1:
                raise InvalidProperty(f"buffers[{i}].byteLength must be >= 1",
                                      "buffers", i, f"buffers[{i}].byteLength")

        for i, view in enumerate(self.state.buffer_views):
            self._validate_buffer_view(i, view)

        for i, accessor in enumerate(self.state.accessors):
            self._validate_accessor(i, accessor)

        for i, node in enumerate(self.state.nodes):
            if node.matrix is not None and node.has_trs:
                raise InvalidProperty(
                    f"nodes[{i}] defines both matrix and translation/rotation/scale",
                    "nodes", i, f"nodes[{i}].matrix")

    def _validate_buffer_view(self, i: int, view: GLTFBufferView):
        buffer = self.state.buffers[view.buffer]
        if view.byte_offset < 0:
            raise InvalidAccessorLayout("bufferViews", i, f"byteOffset {view.byte_offset} is negative")
        if view.byte_length < 1:
            raise InvalidAccessorLayout("bufferViews", i, f"byteLength {view.byte_length} must be >= 1")
        if view.byte_offset + view.byte_length > buffer.byte_length:
            raise InvalidAccessorLayout(
                "bufferViews", i,
                f"byteOffset {view.byte_offset} + byteLength {view.byte_length} exceeds "
                f"buffer {view.buffer} length {buffer.byte_length}")
        stride = view.byte_stride
        if stride is not None:
            if not MIN_BYTE_STRIDE <= stride <= MAX_BYTE_STRIDE or stride % 4:
                raise InvalidAccessorLayout(
                    "bufferViews", i,
                    f"byteStride {stride} must be a multiple of 4 in "
                    f"[{MIN_BYTE_STRIDE}, {MAX_BYTE_STRIDE}]",
                    f"bufferViews[{i}].byteStride")

    def _validate_accessor(self, i: int, accessor: GLTFAccessor):
        path = f"accessors[{i}]"
        if accessor.component_type not in COMPONENT_TYPE_SIZES:
            raise InvalidProperty(f"{path}.componentType {accessor.component_type} is not valid",
                                  "accessors", i, f"{path}.componentType")
        if accessor.type not in ACCESSOR_TYPE_COMPONENTS:
            raise InvalidProperty(f"{path}.type {accessor.type!r} is not valid",
                                  "accessors", i, f"{path}.type")
        if accessor.count < 1:
            raise InvalidAccessorLayout("accessors", i, f"count {accessor.count} must be >= 1")
        if accessor.normalized and accessor.component_type not in NORMALIZATION_DIVISORS:
            raise InvalidAccessorLayout(
                "accessors", i,
                f"normalized is not allowed for {COMPONENT_TYPE_NAMES[accessor.component_type]}",
                f"{path}.normalized")

        component_size = accessor.component_size
        if accessor.byte_offset < 0 or accessor.byte_offset % component_size:
            raise InvalidAccessorLayout(
                "accessors", i,
                f"byteOffset {accessor.byte_offset} is not a non-negative multiple of "
                f"component size {component_size}", f"{path}.byteOffset")

        if accessor.buffer_view is not None:
            view = self.state.buffer_views[accessor.buffer_view]
            if (view.byte_offset + accessor.byte_offset) % component_size:
                raise InvalidAccessorLayout(
                    "accessors", i,
                    f"data start {view.byte_offset + accessor.byte_offset} is not aligned to "
                    f"component size {component_size}")
            element = accessor.element_size
            stride = view.byte_stride or element
            if stride < element:
                raise InvalidAccessorLayout(
                    "accessors", i,
                    f"bufferView {accessor.buffer_view} byteStride {stride} is smaller than "
                    f"element size {element}")
            span = accessor.byte_offset + stride * (accessor.count - 1) + element
            if span > view.byte_length:
                raise InvalidAccessorLayout(
                    "accessors", i,
                    f"accessor needs {span} bytes, bufferView {accessor.buffer_view} has "
                    f"{view.byte_length}")

        if accessor.sparse is not None:
            self._validate_sparse(i, accessor)

    def _validate_sparse(self, i: int, accessor: GLTFAccessor):
        sparse = accessor.sparse
        path = f"accessors[{i}].sparse"
        if not 1 <= sparse.count <= accessor.count:
            raise InvalidAccessorLayout(
                "accessors", i,
                f"sparse count {sparse.count} must be in [1, {accessor.count}]", f"{path}.count")

        indices = sparse.indices
        if indices.component_type not in UNSIGNED_INDEX_COMPONENT_TYPES:
            raise InvalidAccessorLayout(
                "accessors", i,
                f"sparse indices componentType {indices.component_type} must be unsigned",
                f"{path}.indices.componentType")
        index_size = COMPONENT_TYPE_SIZES[indices.component_type]
        self._check_sparse_span(i, f"{path}.indices", indices.buffer_view, indices.byte_offset,
                                index_size, sparse.count * index_size)

        values = sparse.values
        self._check_sparse_span(i, f"{path}.values", values.buffer_view, values.byte_offset,
                                accessor.component_size, sparse.count * accessor.element_size)

    def _check_sparse_span(self, i: int, path: str, view_index: int, byte_offset: int,
                           alignment: int, length: int):
        view = self.state.buffer_views[view_index]
        if byte_offset < 0 or (view.byte_offset + byte_offset) % alignment:
            raise InvalidAccessorLayout(
                "accessors", i, f"byteOffset {byte_offset} is not aligned to {alignment}",
                f"{path}.byteOffset")
        if byte_offset + length > view.byte_length:
            raise InvalidAccessorLayout(
                "accessors", i,
                f"needs {byte_offset + length} bytes, bufferView {view_index} has {view.byte_length}",
                path)

    # ------------------------------------------------------------------
    # Semantic rules (complete validation only)

    def validate_semantics(self):
        """Check the format rules beyond what is needed to read data safely"""
        state = self.state

        for i, accessor in enumerate(state.accessors):
            for bound in ("min", "max"):
                values = getattr(accessor, bound)
                if values is not None and len(values) != accessor.component_count:
                    raise InvalidProperty(
                        f"accessors[{i}].{bound} has {len(values)} values, expected "
                        f"{accessor.component_count}", "accessors", i, f"accessors[{i}].{bound}")
            if accessor.sparse is not None:
                for part in ("indices", "values"):
                    view_index = getattr(accessor.sparse, part).buffer_view
                    if state.buffer_views[view_index].byte_stride is not None:
                        raise InvalidAccessorLayout(
                            "accessors", i,
                            f"sparse {part} bufferView {view_index} must not define byteStride")

        for i, view in enumerate(state.buffer_views):
            if view.target is not None and view.target not in (ARRAY_BUFFER, ELEMENT_ARRAY_BUFFER):
                raise InvalidProperty(f"bufferViews[{i}].target {view.target} is not valid",
                                      "bufferViews", i, f"bufferViews[{i}].target")

        for i, mesh in enumerate(state.meshes):
            self._validate_mesh(i, mesh)

        for i, node in enumerate(state.nodes):
            if node.skin is not None and node.mesh is None:
                raise InvalidProperty(f"nodes[{i}] has a skin but no mesh",
                                      "nodes", i, f"nodes[{i}].skin")

        for i, skin in enumerate(state.skins):
            self._validate_skin(i, skin)

        for i, animation in enumerate(state.animations):
            self._validate_animation(i, animation)

        for i, camera in enumerate(state.cameras):
            self._validate_camera(i, camera)

        for i, image in enumerate(state.images):
            if (image.uri is None) == (image.buffer_view is None):
                raise InvalidProperty(f"images[{i}] must define exactly one of uri or bufferView",
                                      "images", i, f"images[{i}]")
            if image.buffer_view is not None and image.mime_type is None:
                raise InvalidProperty(f"images[{i}].mimeType is required with bufferView",
                                      "images", i, f"images[{i}].mimeType")

        for i, sampler in enumerate(state.samplers):
            self._validate_sampler(i, sampler)

        for i, material in enumerate(state.materials):
            if material.alpha_mode not in ALPHA_MODES:
                raise InvalidProperty(f"materials[{i}].alphaMode {material.alpha_mode!r} is not valid",
                                      "materials", i, f"materials[{i}].alphaMode")

    def _check_accessor_kind(self, kind: str, index: int, path: str, accessor_index: int,
                             types, pairs):
        accessor = self.state.accessors[accessor_index]
        if accessor.type not in types:
            raise InvalidProperty(
                f"{path} must be {'/'.join(sorted(types))}, accessor {accessor_index} is {accessor.type}",
                kind, index, path)
        if pairs is not None and (accessor.component_type, accessor.normalized) not in pairs:
            normalized = " normalized" if accessor.normalized else ""
            raise InvalidProperty(
                f"{path} cannot use{normalized} "
                f"{COMPONENT_TYPE_NAMES[accessor.component_type]} components",
                kind, index, path)

    def _attribute_rules(self, rules, semantic: str):
        base = _semantic_base(semantic)
        if base is None or base not in rules:
            return None
        types, pairs, quantized = rules[base]
        if self.state.uses_extension(MESH_QUANTIZATION):
            pairs = pairs + quantized
        return types, pairs

    def _validate_mesh(self, i: int, mesh: GLTFMesh):
        for p, prim in enumerate(mesh.primitives):
            base = f"meshes[{i}].primitives[{p}]"
            if not PRIMITIVE_MODE_POINTS <= prim.mode <= PRIMITIVE_MODE_TRIANGLE_FAN:
                raise InvalidProperty(f"{base}.mode {prim.mode} is not valid",
                                      "meshes", i, f"{base}.mode")
            if not prim.attributes:
                raise InvalidProperty(f"{base}.attributes must not be empty",
                                      "meshes", i, f"{base}.attributes")

            counts = set()
            for semantic, accessor_index in prim.attributes.items():
                counts.add(self.state.accessors[accessor_index].count)
                rules = self._attribute_rules(_ATTRIBUTE_RULES, semantic)
                if rules is not None:
                    self._check_accessor_kind("meshes", i, f"{base}.attributes.{semantic}",
                                              accessor_index, *rules)
            if len(counts) > 1:
                raise InvalidProperty(f"{base} attributes have different counts {sorted(counts)}",
                                      "meshes", i, f"{base}.attributes")

            if prim.indices is not None:
                self._check_accessor_kind(
                    "meshes", i, f"{base}.indices", prim.indices, {ACCESSOR_TYPE_SCALAR},
                    tuple((t, False) for t in UNSIGNED_INDEX_COMPONENT_TYPES))

            for t, target in enumerate(prim.targets):
                for semantic, accessor_index in target.items():
                    rules = self._attribute_rules(_TARGET_RULES, semantic)
                    if rules is not None:
                        self._check_accessor_kind("meshes", i, f"{base}.targets[{t}].{semantic}",
                                                  accessor_index, *rules)

    def _validate_skin(self, i: int, skin: GLTFSkin):
        if skin.inverse_bind_matrices is None:
            return
        path = f"skins[{i}].inverseBindMatrices"
        self._check_accessor_kind("skins", i, path, skin.inverse_bind_matrices,
                                  {ACCESSOR_TYPE_MAT4}, (_FLOAT,))
        count = self.state.accessors[skin.inverse_bind_matrices].count
        if count < len(skin.joints):
            raise InvalidProperty(f"{path} has {count} matrices for {len(skin.joints)} joints",
                                  "skins", i, path)

    def _validate_animation(self, i: int, animation: GLTFAnimation):
        for s, sampler in enumerate(animation.samplers):
            path = f"animations[{i}].samplers[{s}]"
            if sampler.interpolation not in INTERPOLATIONS:
                raise InvalidProperty(f"{path}.interpolation {sampler.interpolation!r} is not valid",
                                      "animations", i, f"{path}.interpolation")
            self._check_accessor_kind("animations", i, f"{path}.input", sampler.input,
                                      {ACCESSOR_TYPE_SCALAR}, (_FLOAT,))

        for c, channel in enumerate(animation.channels):
            path = f"animations[{i}].channels[{c}]"
            target_path = channel.target.path
            if target_path not in TARGET_PATHS:
                # Paths added by extensions are passed through untouched
                if channel.target.extensions:
                    continue
                raise InvalidProperty(f"{path}.target.path {target_path!r} is not valid",
                                      "animations", i, f"{path}.target.path")

            sampler = animation.samplers[channel.sampler]
            self._check_accessor_kind("animations", i, f"{path} output", sampler.output,
                                      {_PATH_TYPES[target_path]}, None)

            inputs = self.state.accessors[sampler.input].count
            outputs = self.state.accessors[sampler.output].count
            keyframes = outputs
            if sampler.interpolation == "CUBICSPLINE":
                if inputs < 2 or outputs % 3:
                    raise InvalidProperty(
                        f"{path} CUBICSPLINE needs at least 2 keyframes and a tangent triplet per key",
                        "animations", i, path)
                keyframes = outputs // 3
            if target_path == "weights":
                valid = keyframes % inputs == 0
            else:
                valid = keyframes == inputs
            if not valid:
                raise InvalidProperty(
                    f"{path} output count {outputs} does not match {inputs} keyframes",
                    "animations", i, path)

    def _validate_camera(self, i: int, camera: GLTFCamera):
        path = f"cameras[{i}]"
        if camera.type not in CAMERA_TYPES:
            raise InvalidProperty(f"{path}.type {camera.type!r} is not valid",
                                  "cameras", i, f"{path}.type")
        block = getattr(camera, camera.type)
        other = camera.orthographic if camera.type == "perspective" else camera.perspective
        if block is None or other is not None:
            raise InvalidProperty(f"{path} must define only the '{camera.type}' block",
                                  "cameras", i, path)
        if camera.type == "perspective":
            if block.yfov <= 0 or block.znear <= 0:
                raise InvalidProperty(f"{path}.perspective yfov and znear must be positive",
                                      "cameras", i, f"{path}.perspective")
            if block.aspect_ratio is not None and block.aspect_ratio <= 0:
                raise InvalidProperty(f"{path}.perspective.aspectRatio must be positive",
                                      "cameras", i, f"{path}.perspective.aspectRatio")
            if block.zfar is not None and block.zfar <= block.znear:
                raise InvalidProperty(f"{path}.perspective.zfar must be greater than znear",
                                      "cameras", i, f"{path}.perspective.zfar")
        else:
            if block.znear < 0 or block.zfar <= block.znear:
                raise InvalidProperty(f"{path}.orthographic needs 0 <= znear < zfar",
                                      "cameras", i, f"{path}.orthographic")

    def _validate_sampler(self, i: int, sampler: GLTFTextureSampler):
        path = f"samplers[{i}]"
        checks = (
            ("magFilter", sampler.mag_filter, MAG_FILTERS),
            ("minFilter", sampler.min_filter, MIN_FILTERS),
            ("wrapS", sampler.wrap_s, WRAP_MODES),
            ("wrapT", sampler.wrap_t, WRAP_MODES),
        )
        for name, value, allowed in checks:
            if value is not None and value not in allowed:
                raise InvalidProperty(f"{path}.{name} {value} is not valid",
                                      "samplers", i, f"{path}.{name}")


def validate_state(state: GLTFState, options: Optional[ImportOptions] = None):
    """Validate a parsed document, raising the first violation found"""
    GLTFValidator(state, options).validate()
