#!/usr/bin/env python3
"""
Reference Validator Tests using Slash Testing Framework

Tests for index bounds, node hierarchy, layout rules and the
required-extension gate.
"""

import json
import logging
import slash

from gltf_core import GLTFDocument, ImportOptions, ValidationLevel
from gltf_core.errors import (
    CyclicNodeGraph,
    IndexOutOfRange,
    InvalidAccessorLayout,
    InvalidProperty,
    UnsupportedExtension,
)
from gltf_core.gltf_parser import parse_json
from gltf_core.logger import set_log_level
from gltf_core.validator import GLTFValidator, validate_state

# Configure logging for tests
set_log_level(logging.CRITICAL)


def base_gltf(**extra):
    """Document with one 64-byte buffer, one view and one VEC3 float accessor"""
    gltf = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": 64}],
        "bufferViews": [{"buffer": 0, "byteLength": 64}],
        "accessors": [{"bufferView": 0, "componentType": 5126, "count": 4, "type": "VEC3"}],
    }
    gltf.update(extra)
    return gltf


def validate(gltf, **options):
    options = ImportOptions(**options)
    state = parse_json(json.dumps(gltf), options)
    GLTFValidator(state, options).validate()
    return state


def test_valid_document():
    state = validate(base_gltf(
        scene=0,
        scenes=[{"nodes": [0]}],
        nodes=[{"children": [1]}, {"mesh": 0}],
        meshes=[{"primitives": [{"attributes": {"POSITION": 0}}]}],
    ))
    assert len(state.nodes) == 2


@slash.parametrize(('extra', 'path'), [
    ({"scene": 1, "scenes": [{}]}, "scene"),
    ({"nodes": [{"mesh": 0}]}, "nodes[0].mesh"),
    ({"nodes": [{"children": [3]}]}, "nodes[0].children[0]"),
    ({"scenes": [{"nodes": [0]}]}, "scenes[0].nodes[0]"),
    ({"textures": [{"source": 2}]}, "textures[0].source"),
    ({"skins": [{"joints": [0]}]}, "skins[0].joints[0]"),
])
def test_index_out_of_range(extra, path):
    with slash.assert_raises(IndexOutOfRange) as caught:
        validate(base_gltf(**extra))
    assert caught.exception.path == path


def test_negative_index():
    gltf = base_gltf(meshes=[{"primitives": [{"attributes": {"POSITION": -1}}]}])

    with slash.assert_raises(IndexOutOfRange) as caught:
        validate(gltf)

    assert caught.exception.kind == "accessors"
    assert caught.exception.index == -1


def test_index_out_of_range_is_index_error():
    with slash.assert_raises(IndexError):
        validate(base_gltf(accessors=[{"bufferView": 5, "componentType": 5126,
                                       "count": 1, "type": "SCALAR"}]))


def test_channel_sampler_out_of_range():
    gltf = base_gltf(
        nodes=[{}],
        accessors=[{"componentType": 5126, "count": 2, "type": "SCALAR"}],
        animations=[{
            "samplers": [{"input": 0, "output": 0}],
            "channels": [{"sampler": 1, "target": {"node": 0, "path": "weights"}}],
        }],
    )

    with slash.assert_raises(IndexOutOfRange) as caught:
        validate(gltf)

    assert caught.exception.path == "animations[0].channels[0].sampler"


def test_two_node_cycle():
    """Node 0's child is node 1 and node 1's child is node 0"""
    gltf = base_gltf(nodes=[{"children": [1]}, {"children": [0]}])

    with slash.assert_raises(CyclicNodeGraph):
        validate(gltf)


def test_cycle_below_a_root():
    gltf = base_gltf(nodes=[{"children": [1]}, {"children": [2]}, {"children": [1]}])

    with slash.assert_raises(CyclicNodeGraph):
        validate(gltf)


def test_self_child():
    with slash.assert_raises(CyclicNodeGraph):
        validate(base_gltf(nodes=[{"children": [0]}]))


def test_multiple_parents():
    gltf = base_gltf(nodes=[{"children": [2]}, {"children": [2]}, {}])

    with slash.assert_raises(CyclicNodeGraph) as caught:
        validate(gltf)

    assert caught.exception.index == 2


def test_scene_root_with_parent():
    gltf = base_gltf(nodes=[{"children": [1]}, {}], scenes=[{"nodes": [1]}])

    with slash.assert_raises(CyclicNodeGraph):
        validate(gltf)


def test_node_shared_by_scenes_is_rejected():
    gltf = base_gltf(nodes=[{}], scenes=[{"nodes": [0]}, {"nodes": [0]}])

    with slash.assert_raises(CyclicNodeGraph):
        validate(gltf)


def test_unsupported_required_extension():
    gltf = base_gltf(extensionsUsed=["VENDOR_magic"], extensionsRequired=["VENDOR_magic"])

    with slash.assert_raises(UnsupportedExtension) as caught:
        validate(gltf)

    assert caught.exception.name == "VENDOR_magic"


def test_required_extension_checked_first():
    """The extension gate runs before reference checks"""
    gltf = base_gltf(extensionsUsed=["VENDOR_magic"], extensionsRequired=["VENDOR_magic"],
                     nodes=[{"mesh": 42}])

    with slash.assert_raises(UnsupportedExtension):
        validate(gltf)


def test_required_extension_stops_buffer_resolution():
    """No buffer is fetched when a required extension is unsupported"""
    requested = []

    def loader(uri):
        requested.append(uri)
        return b'\x00' * 64

    gltf = base_gltf(extensionsUsed=["VENDOR_magic"], extensionsRequired=["VENDOR_magic"])
    gltf["buffers"] = [{"byteLength": 64, "uri": "data.bin"}]

    with slash.assert_raises(UnsupportedExtension):
        GLTFDocument.load_from_bytes(json.dumps(gltf).encode('utf-8'),
                                     ImportOptions(byte_loader=loader))

    assert requested == []


def test_required_extension_must_be_used():
    with slash.assert_raises(InvalidProperty):
        validate(base_gltf(extensionsRequired=["KHR_mesh_quantization"]))


def test_builtin_and_declared_extensions_pass():
    validate(base_gltf(extensionsUsed=["KHR_mesh_quantization"],
                       extensionsRequired=["KHR_mesh_quantization"]))
    validate(base_gltf(extensionsUsed=["VENDOR_magic"], extensionsRequired=["VENDOR_magic"]),
             supported_extensions={"VENDOR_magic"})


def test_used_only_extension_is_ignored():
    validate(base_gltf(extensionsUsed=["VENDOR_optional"]))


def test_buffer_view_exceeds_buffer():
    gltf = base_gltf()
    gltf["bufferViews"] = [{"buffer": 0, "byteOffset": 32, "byteLength": 48}]

    with slash.assert_raises(InvalidAccessorLayout) as caught:
        validate(gltf)

    assert caught.exception.kind == "bufferViews"


@slash.parametrize('stride', [2, 6, 256])
def test_invalid_byte_stride(stride):
    gltf = base_gltf()
    gltf["bufferViews"][0]["byteStride"] = stride

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_stride_smaller_than_element():
    gltf = base_gltf()
    gltf["bufferViews"][0]["byteStride"] = 8

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_accessor_exceeds_view():
    gltf = base_gltf()
    gltf["accessors"][0]["count"] = 6

    with slash.assert_raises(InvalidAccessorLayout) as caught:
        validate(gltf)

    assert caught.exception.kind == "accessors"
    assert caught.exception.index == 0


def test_accessor_span_uses_stride():
    """count * stride, not count * element size, must fit"""
    gltf = base_gltf()
    gltf["bufferViews"][0]["byteStride"] = 20
    gltf["accessors"][0]["count"] = 3

    validate(gltf)

    gltf["accessors"][0]["count"] = 4
    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_misaligned_accessor_offset():
    gltf = base_gltf()
    gltf["accessors"][0]["byteOffset"] = 2

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_normalized_float_rejected():
    gltf = base_gltf()
    gltf["accessors"][0]["normalized"] = True

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_zero_count_rejected():
    gltf = base_gltf()
    gltf["accessors"][0]["count"] = 0

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


@slash.parametrize(('field', 'value'), [("componentType", 5124), ("type", "VEC5")])
def test_invalid_accessor_enums(field, value):
    gltf = base_gltf()
    gltf["accessors"][0][field] = value

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_sparse_span_checked():
    gltf = base_gltf()
    gltf["accessors"][0]["sparse"] = {
        "count": 2,
        "indices": {"bufferView": 0, "byteOffset": 60, "componentType": 5125},
        "values": {"bufferView": 0},
    }

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_sparse_indices_must_be_unsigned():
    gltf = base_gltf()
    gltf["accessors"][0]["sparse"] = {
        "count": 1,
        "indices": {"bufferView": 0, "componentType": 5126},
        "values": {"bufferView": 0},
    }

    with slash.assert_raises(InvalidAccessorLayout):
        validate(gltf)


def test_matrix_and_trs_exclusive():
    gltf = base_gltf(nodes=[{
        "matrix": [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1],
        "translation": [1, 2, 3],
    }])

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_zero_length_buffer():
    gltf = base_gltf()
    gltf["buffers"][0]["byteLength"] = 0

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_position_component_type():
    """Integer positions need KHR_mesh_quantization"""
    gltf = base_gltf(meshes=[{"primitives": [{"attributes": {"POSITION": 0}}]}])
    gltf["accessors"][0]["componentType"] = 5123

    with slash.assert_raises(InvalidProperty):
        validate(gltf)

    gltf["extensionsUsed"] = ["KHR_mesh_quantization"]
    validate(gltf)


def test_attribute_counts_must_match():
    gltf = base_gltf(meshes=[{"primitives": [{"attributes": {"POSITION": 0, "NORMAL": 1}}]}])
    gltf["accessors"].append({"bufferView": 0, "componentType": 5126, "count": 3, "type": "VEC3"})

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_index_accessor_type():
    gltf = base_gltf(meshes=[{"primitives": [{"attributes": {"POSITION": 0}, "indices": 0}]}])

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_skin_inverse_bind_matrices_count():
    gltf = base_gltf(
        nodes=[{"children": [1, 2]}, {}, {}],
        skins=[{"joints": [1, 2], "inverseBindMatrices": 1}],
    )
    gltf["buffers"][0]["byteLength"] = 128
    gltf["bufferViews"].append({"buffer": 0, "byteOffset": 64, "byteLength": 64})
    gltf["accessors"].append({"bufferView": 1, "componentType": 5126, "count": 1, "type": "MAT4"})

    with slash.assert_raises(InvalidProperty):
        validate(gltf)


def test_animation_output_count():
    gltf = base_gltf(
        nodes=[{}],
        animations=[{
            "samplers": [{"input": 1, "output": 0}],
            "channels": [{"sampler": 0, "target": {"node": 0, "path": "translation"}}],
        }],
    )
    gltf["accessors"].append({"componentType": 5126, "count": 3, "type": "SCALAR"})

    with slash.assert_raises(InvalidProperty):
        validate(gltf)

    gltf["accessors"][1]["count"] = 4
    validate(gltf)


def test_minimal_level_skips_semantic_rules():
    gltf = base_gltf(materials=[{"alphaMode": "SHINY"}],
                     samplers=[{"magFilter": 1}],
                     images=[{}])

    with slash.assert_raises(InvalidProperty):
        validate(gltf)

    validate(gltf, validation=ValidationLevel.MINIMAL)


def test_minimal_level_keeps_safety_rules():
    gltf = base_gltf(nodes=[{"children": [0]}])

    with slash.assert_raises(CyclicNodeGraph):
        validate(gltf, validation=ValidationLevel.MINIMAL)


def test_camera_rules():
    gltf = base_gltf(cameras=[{"type": "perspective", "perspective": {"yfov": 0.8, "znear": 1.0, "zfar": 0.5}}])

    with slash.assert_raises(InvalidProperty):
        validate(gltf)

    gltf["cameras"][0]["perspective"]["zfar"] = 100.0
    validate(gltf)


def test_validate_state_function():
    state = parse_json(json.dumps(base_gltf(nodes=[{"children": [1]}, {"children": [0]}])))

    with slash.assert_raises(CyclicNodeGraph):
        validate_state(state)
