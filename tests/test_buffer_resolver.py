#!/usr/bin/env python3
"""
Buffer Resolver Tests using Slash Testing Framework

Tests for binding buffers to embedded data URIs, the .glb binary chunk and
external files.
"""

import base64
import logging
import tempfile
import slash
from pathlib import Path

from gltf_core.buffer_resolver import (
    BufferResolver,
    FileSystemLoader,
    decode_data_uri,
    resolve_image_bytes,
)
from gltf_core.errors import BufferUnavailable
from gltf_core.gltf_state import GLTFState
from gltf_core.logger import set_log_level
from gltf_core.structures import *

# Configure logging for tests
set_log_level(logging.WARNING)


@slash.fixture
def temp_dir():
    """Fixture providing a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def data_uri(payload, mime='application/octet-stream'):
    return f"data:{mime};base64," + base64.b64encode(payload).decode('ascii')


def state_with_buffers(*buffers):
    state = GLTFState()
    state.buffers = list(buffers)
    return state


def test_decode_data_uri():
    assert decode_data_uri(data_uri(b'\x01\x02\x03')) == b'\x01\x02\x03'
    assert decode_data_uri('data:application/gltf-buffer;base64,AAEC') == b'\x00\x01\x02'


@slash.parametrize('uri', [
    'data:application/octet-stream,plain',
    'data:application/octet-stream;base64',
    'data:application/octet-stream;base64,!!!!',
    'buffer.bin',
])
def test_decode_data_uri_rejects(uri):
    with slash.assert_raises(ValueError):
        decode_data_uri(uri)


def test_resolve_data_uri():
    payload = bytes(range(16))
    state = state_with_buffers(GLTFBuffer(byte_length=16, uri=data_uri(payload)))

    regions = BufferResolver(state).resolve()

    assert len(regions) == 1
    assert bytes(regions[0]) == payload
    assert regions[0].readonly


def test_data_uri_length_mismatch():
    state = state_with_buffers(GLTFBuffer(byte_length=17, uri=data_uri(bytes(16))))

    with slash.assert_raises(BufferUnavailable) as caught:
        BufferResolver(state).resolve()

    assert caught.exception.index == 0


def test_malformed_data_uri():
    state = state_with_buffers(GLTFBuffer(byte_length=4, uri='data:application/octet-stream;base64,@@@@'))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state).resolve()


def test_bind_glb_binary():
    binary = memoryview(bytes(range(8)))
    state = state_with_buffers(GLTFBuffer(byte_length=5))

    region = BufferResolver(state, glb_binary=binary).resolve_buffer(0)

    assert bytes(region) == bytes(range(5))
    assert region.readonly


def test_glb_binary_too_long():
    """Only up to 3 bytes of chunk padding are tolerated"""
    state = state_with_buffers(GLTFBuffer(byte_length=4))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state, glb_binary=memoryview(bytes(8))).resolve()


def test_glb_binary_too_short():
    state = state_with_buffers(GLTFBuffer(byte_length=12))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state, glb_binary=memoryview(bytes(8))).resolve()


def test_uriless_buffer_needs_glb():
    state = state_with_buffers(GLTFBuffer(byte_length=4))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state).resolve()


def test_only_first_buffer_binds_to_glb():
    state = state_with_buffers(GLTFBuffer(byte_length=4), GLTFBuffer(byte_length=4))

    with slash.assert_raises(BufferUnavailable) as caught:
        BufferResolver(state, glb_binary=memoryview(bytes(4))).resolve()

    assert caught.exception.index == 1


def test_external_loader():
    requested = []

    def loader(uri):
        requested.append(uri)
        return b'\xAB' * 6

    state = state_with_buffers(GLTFBuffer(byte_length=6, uri='mesh.bin'))

    regions = BufferResolver(state, byte_loader=loader).resolve()

    assert requested == ['mesh.bin']
    assert bytes(regions[0]) == b'\xAB' * 6


def test_external_loader_failure_is_chained():
    def loader(uri):
        raise OSError("disk on fire")

    state = state_with_buffers(GLTFBuffer(byte_length=6, uri='mesh.bin'))

    with slash.assert_raises(BufferUnavailable) as caught:
        BufferResolver(state, byte_loader=loader).resolve()

    assert isinstance(caught.exception.__cause__, OSError)


def test_external_without_loader():
    state = state_with_buffers(GLTFBuffer(byte_length=6, uri='mesh.bin'))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state).resolve()


def test_file_system_loader(temp_dir):
    (temp_dir / "my data.bin").write_bytes(b'\x01\x02')
    (temp_dir / "sub").mkdir()
    (temp_dir / "sub" / "more.bin").write_bytes(b'\x03')

    loader = FileSystemLoader(temp_dir)

    assert loader('my%20data.bin') == b'\x01\x02'
    assert loader('sub/more.bin') == b'\x03'
    assert loader((temp_dir / "sub" / "more.bin").as_uri()) == b'\x03'


def test_file_system_loader_rejects_remote(temp_dir):
    with slash.assert_raises(ValueError):
        FileSystemLoader(temp_dir)('https://example.com/mesh.bin')


def test_file_system_loader_missing_file(temp_dir):
    state = state_with_buffers(GLTFBuffer(byte_length=4, uri='missing.bin'))

    with slash.assert_raises(BufferUnavailable):
        BufferResolver(state, byte_loader=FileSystemLoader(temp_dir)).resolve()


def test_image_from_buffer_view():
    payload = b'....\x89PNG....'
    views = [GLTFBufferView(buffer=0, byte_offset=4, byte_length=4)]
    image = GLTFImage(buffer_view=0, mime_type='image/png')

    data = resolve_image_bytes(image, 0, views, [memoryview(payload)])

    assert bytes(data) == b'\x89PNG'


def test_image_from_data_uri():
    image = GLTFImage(uri=data_uri(b'\xff\xd8\xff', 'image/jpeg'))

    assert bytes(resolve_image_bytes(image, 0, [], [])) == b'\xff\xd8\xff'


def test_image_loader_failure():
    def loader(uri):
        raise FileNotFoundError(uri)

    with slash.assert_raises(BufferUnavailable) as caught:
        resolve_image_bytes(GLTFImage(uri='albedo.png'), 3, [], [], loader)

    assert caught.exception.kind == "images"
    assert caught.exception.index == 3
