#!/usr/bin/env python3
"""
GLB Container Tests using Slash Testing Framework

Tests for splitting and packing the .glb binary envelope.
"""

import json
import logging
import struct
import slash

from gltf_core import GLTFDocument
from gltf_core.errors import InvalidJson, MalformedContainer, UnsupportedVersion
from gltf_core.glb_container import (
    GLB_CHUNK_TYPE_BIN,
    GLB_CHUNK_TYPE_JSON,
    GLB_MAGIC,
    GLBContainer,
    is_glb,
    pack_glb,
    unwrap_glb,
)
from gltf_core.logger import set_log_level

# Configure logging for tests
set_log_level(logging.WARNING)


def build_glb(chunks, version=2, length=None):
    """Assemble a .glb from (type, payload) pairs without any padding or checks"""
    body = b''
    for chunk_type, payload in chunks:
        body += struct.pack('<II', len(payload), chunk_type) + payload
    if length is None:
        length = 12 + len(body)
    return struct.pack('<III', GLB_MAGIC, version, length) + body


def minimal_json(**extra):
    gltf = {"asset": {"version": "2.0"}}
    gltf.update(extra)
    payload = json.dumps(gltf).encode('utf-8')
    return payload + b' ' * (-len(payload) % 4)


def test_unwrap_json_only():
    """A container with only a JSON chunk has no binary payload"""
    payload = minimal_json()
    container = unwrap_glb(build_glb([(GLB_CHUNK_TYPE_JSON, payload)]))

    assert bytes(container.json) == payload
    assert container.binary is None
    assert container.version == 2


def test_unwrap_json_and_bin():
    """Chunks come back as views into the input"""
    payload = minimal_json()
    binary = bytes(range(8))
    data = build_glb([(GLB_CHUNK_TYPE_JSON, payload), (GLB_CHUNK_TYPE_BIN, binary)])

    container = unwrap_glb(data)

    assert isinstance(container.json, memoryview)
    assert isinstance(container.binary, memoryview)
    assert bytes(container.binary) == binary


def test_pack_pads_chunks():
    """JSON is padded with spaces and BIN with zeros to 4-byte boundaries"""
    data = pack_glb(b'{"a":1}', b'\x01\x02\x03')

    assert len(data) % 4 == 0
    magic, version, length = struct.unpack_from('<III', data, 0)
    assert magic == GLB_MAGIC
    assert version == 2
    assert length == len(data)

    container = unwrap_glb(data)
    assert bytes(container.json) == b'{"a":1} '
    assert bytes(container.binary) == b'\x01\x02\x03\x00'


def test_container_to_bytes_round_trip():
    payload = minimal_json(scene=0, scenes=[{}])
    binary = b'\x00' * 12
    container = GLBContainer(json=memoryview(payload), binary=memoryview(binary))

    unwrapped = unwrap_glb(container.to_bytes())

    assert bytes(unwrapped.json) == payload
    assert bytes(unwrapped.binary) == binary


def test_is_glb():
    assert is_glb(pack_glb(minimal_json()))
    assert not is_glb(b'{"asset": {"version": "2.0"}}')
    assert not is_glb(b'')


def test_declared_length_mismatch():
    """Total length must equal the byte count"""
    data = build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())])

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data + b'\x00\x00\x00\x00')

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())], length=len(data) - 4))


def test_length_mismatch_stops_before_json():
    """A bad envelope is reported as such even when the JSON is garbage too"""
    data = build_glb([(GLB_CHUNK_TYPE_JSON, b'not json')], length=4096)

    with slash.assert_raises(MalformedContainer):
        GLTFDocument.load_from_bytes(data)


def test_garbage_json_in_valid_envelope():
    data = build_glb([(GLB_CHUNK_TYPE_JSON, b'{{{{')])

    with slash.assert_raises(InvalidJson):
        GLTFDocument.load_from_bytes(data)


def test_bad_magic():
    data = bytearray(build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())]))
    data[0:4] = b'gltF'

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(bytes(data))


def test_binary_flag_requires_container():
    """Asking for binary parsing of JSON text fails on the magic"""
    with slash.assert_raises(MalformedContainer):
        GLTFDocument.load_from_bytes(minimal_json(), binary=True)


def test_too_short():
    with slash.assert_raises(MalformedContainer):
        unwrap_glb(b'glTF\x02\x00')


def test_unsupported_container_version():
    data = build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())], version=1)

    with slash.assert_raises(UnsupportedVersion):
        unwrap_glb(data)


def test_length_checked_before_version():
    """A wrong declared length is a container error whatever the version says"""
    data = build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())], version=1, length=9999)

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_chunk_overrun():
    """A chunk header claiming more bytes than remain"""
    payload = minimal_json()
    body = struct.pack('<II', len(payload) + 16, GLB_CHUNK_TYPE_JSON) + payload
    data = struct.pack('<III', GLB_MAGIC, 2, 12 + len(body)) + body

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_truncated_chunk_header():
    data = build_glb([(GLB_CHUNK_TYPE_JSON, minimal_json())])
    data += b'\x00\x00\x00\x00'
    data = data[:8] + struct.pack('<I', len(data)) + data[12:]

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_misaligned_chunk():
    data = build_glb([(GLB_CHUNK_TYPE_JSON, b'{"asset":{"version":"2.0"}}')])

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_first_chunk_must_be_json():
    data = build_glb([(GLB_CHUNK_TYPE_BIN, b'\x00' * 4), (GLB_CHUNK_TYPE_JSON, minimal_json())])

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_duplicate_bin_chunk():
    data = build_glb([
        (GLB_CHUNK_TYPE_JSON, minimal_json()),
        (GLB_CHUNK_TYPE_BIN, b'\x00' * 4),
        (GLB_CHUNK_TYPE_BIN, b'\x00' * 4),
    ])

    with slash.assert_raises(MalformedContainer):
        unwrap_glb(data)


def test_unknown_chunk_is_skipped():
    """Chunks of unknown type after JSON/BIN are ignored"""
    binary = b'\x01\x02\x03\x04'
    data = build_glb([
        (GLB_CHUNK_TYPE_JSON, minimal_json()),
        (GLB_CHUNK_TYPE_BIN, binary),
        (0x12345678, b'\xff' * 8),
    ])

    container = unwrap_glb(data)

    assert bytes(container.binary) == binary
