#!/usr/bin/env python3
"""
Extension Passthrough Tests using Slash Testing Framework

Tests for frozen extension/extras payloads, per-load decoders and import options.
"""

import json
import logging
import slash

from gltf_core import GLTFDocument, ImportOptions, ValidationLevel
from gltf_core.extensions import (
    EMPTY_EXTENSIONS,
    ExtensionMap,
    build_extension_map,
    freeze_json,
    thaw_json,
)
from gltf_core.logger import set_log_level

# Configure logging for tests
set_log_level(logging.WARNING)


def lights_gltf():
    return {
        "asset": {"version": "2.0"},
        "extensionsUsed": ["KHR_lights_punctual"],
        "extensions": {"KHR_lights_punctual": {"lights": [{"type": "point", "intensity": 4.0}]}},
        "nodes": [{"extensions": {"KHR_lights_punctual": {"light": 0}},
                   "extras": {"layer": "fx", "ids": [1, 2]}}],
    }


def load(gltf, **options):
    return GLTFDocument.load_from_bytes(json.dumps(gltf).encode('utf-8'),
                                        ImportOptions(**options))


def test_freeze_and_thaw():
    value = {"a": [1, {"b": [2, 3]}], "c": None}

    frozen = freeze_json(value)

    assert frozen["a"][1]["b"] == (2, 3)
    with slash.assert_raises(TypeError):
        frozen["c"] = 1
    assert thaw_json(frozen) == value


def test_extension_map_raw():
    extensions = ExtensionMap({"VENDOR_a": {"x": [1]}})

    assert len(extensions) == 1
    assert list(extensions) == ["VENDOR_a"]
    assert extensions.raw("VENDOR_a")["x"] == (1,)
    assert extensions.raw("VENDOR_b") is None
    assert not extensions.has_decoder("VENDOR_a")


def test_decode_without_decoder():
    extensions = ExtensionMap({"VENDOR_a": {}})

    assert extensions.decode("VENDOR_b") is None
    with slash.assert_raises(KeyError):
        extensions.decode("VENDOR_a")


def test_empty_extension_map_is_shared():
    assert build_extension_map(None) is EMPTY_EXTENSIONS
    assert build_extension_map({}) is EMPTY_EXTENSIONS


def test_document_extensions_raw():
    document = load(lights_gltf())

    node = document.nodes[0]
    assert node.extensions.raw("KHR_lights_punctual")["light"] == 0
    lights = document.extensions.raw("KHR_lights_punctual")["lights"]
    assert lights[0]["intensity"] == 4.0


def test_decoders_are_per_load():
    first = load(lights_gltf(), extension_decoders={
        "KHR_lights_punctual": lambda raw: ("light", raw["light"])})
    second = load(lights_gltf(), extension_decoders={
        "KHR_lights_punctual": lambda raw: raw["light"] + 100})
    plain = load(lights_gltf())

    assert first.nodes[0].extensions.decode("KHR_lights_punctual") == ("light", 0)
    assert second.nodes[0].extensions.decode("KHR_lights_punctual") == 100
    with slash.assert_raises(KeyError):
        plain.nodes[0].extensions.decode("KHR_lights_punctual")


def test_extras_are_immutable():
    document = load(lights_gltf())
    extras = document.nodes[0].extras

    assert extras["layer"] == "fx"
    assert extras["ids"] == (1, 2)
    with slash.assert_raises(TypeError):
        extras["layer"] = "other"


def test_descriptors_are_frozen():
    document = load(lights_gltf())

    with slash.assert_raises(AttributeError):
        document.nodes[0].mesh = 3


def test_invalid_validation_level():
    with slash.assert_raises(ValueError):
        ImportOptions(validation=7)


def test_options_normalize_containers():
    options = ImportOptions(supported_extensions=["VENDOR_x"],
                            validation=ValidationLevel.MINIMAL)

    assert isinstance(options.supported_extensions, frozenset)
    assert options.is_extension_supported("VENDOR_x")
    assert options.is_extension_supported("KHR_mesh_quantization")
    assert not options.is_extension_supported("KHR_draco_mesh_compression")
