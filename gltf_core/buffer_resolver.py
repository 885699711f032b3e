"""
GLTF Buffer Resolver

Turns each buffer descriptor into a read-only byte region: embedded base64
data URIs are decoded, a URI-less first buffer binds to the .glb BIN chunk,
and external URIs are fetched through a caller-supplied byte loader.
"""

import base64
import binascii
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

from .errors import BufferUnavailable
from .gltf_state import GLTFState
from .import_options import ByteLoader
from .logger import get_logger
from .structures import GLTFImage


logger = get_logger('buffers')


def decode_data_uri(uri: str) -> bytes:
    """
    Decode a base64 data URI to bytes.

    Raises:
        ValueError: the URI is not a base64 data URI or the payload is malformed
    """
    if not uri.startswith('data:'):
        raise ValueError("not a data URI")

    header, separator, data = uri.partition(',')
    if not separator:
        raise ValueError("data URI has no payload separator")
    if not header.endswith(';base64'):
        raise ValueError("only base64 data URIs are supported")

    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ValueError(f"malformed base64 payload: {e}") from e


class FileSystemLoader:
    """
    Byte loader for URIs relative to a document on disk.

    URIs are percent-decoded and resolved against ``base_path``. Only
    relative references and ``file:`` URIs are served.
    """

    def __init__(self, base_path):
        self.base_path = Path(base_path)

    def __call__(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        if parsed.scheme == 'file':
            path = Path(unquote(parsed.path))
        elif parsed.scheme and len(parsed.scheme) > 1:
            raise ValueError(f"unsupported URI scheme: {parsed.scheme}")
        else:
            path = self.base_path / unquote(uri)

        logger.debug(f"Loading external resource: {path}")
        with open(path, 'rb') as f:
            return f.read()

    def __repr__(self) -> str:
        return f"FileSystemLoader({str(self.base_path)!r})"


class BufferResolver:
    """
    Resolves the bytes behind every buffer of a validated state.

    Resolution stops at the first buffer that cannot be supplied; I/O
    failures are reported once and never retried.
    """

    def __init__(self, state: GLTFState, glb_binary: Optional[memoryview] = None,
                 byte_loader: Optional[ByteLoader] = None):
        self.state = state
        self.glb_binary = glb_binary
        self.byte_loader = byte_loader

    def resolve(self) -> Tuple[memoryview, ...]:
        """Resolve all buffers, in order"""
        return tuple(self.resolve_buffer(i) for i in range(len(self.state.buffers)))

    def resolve_buffer(self, index: int) -> memoryview:
        buffer = self.state.buffers[index]
        expected = buffer.byte_length

        if buffer.uri is None:
            return self._bind_glb_binary(index, expected)

        if buffer.is_data_uri:
            try:
                data = decode_data_uri(buffer.uri)
            except ValueError as e:
                raise BufferUnavailable(index, str(e)) from e
        else:
            data = self._load_external(index, buffer.uri)

        if len(data) != expected:
            raise BufferUnavailable(
                index, f"got {len(data)} bytes, byteLength declares {expected}")

        logger.debug(f"Resolved buffer {index}: {expected} bytes")
        return memoryview(bytes(data)).toreadonly()

    def _bind_glb_binary(self, index: int, expected: int) -> memoryview:
        if self.glb_binary is None or index != 0:
            raise BufferUnavailable(index, "buffer has no uri and no GLB binary chunk to bind to")

        actual = len(self.glb_binary)
        # The BIN chunk may carry up to 3 bytes of alignment padding
        if not expected <= actual <= expected + 3:
            raise BufferUnavailable(
                index, f"GLB binary chunk is {actual} bytes, byteLength declares {expected}")

        logger.debug(f"Bound buffer {index} to GLB binary chunk ({actual} bytes)")
        return self.glb_binary[:expected].toreadonly()

    def _load_external(self, index: int, uri: str) -> bytes:
        if self.byte_loader is None:
            raise BufferUnavailable(index, f"no byte loader configured for uri {uri!r}")
        try:
            return self.byte_loader(uri)
        except Exception as e:
            raise BufferUnavailable(index, f"loading {uri!r} failed: {e}") from e


def resolve_image_bytes(image: GLTFImage, index: int, buffer_views, buffers,
                        byte_loader: Optional[ByteLoader] = None) -> memoryview:
    """
    Get the encoded bytes of an image (PNG/JPEG/...), without decoding pixels.

    Args:
        image: The image descriptor
        index: Position of the image, used in errors
        buffer_views: Buffer view descriptors of the document
        buffers: Resolved buffer regions of the document
        byte_loader: Loader for external image URIs

    Raises:
        BufferUnavailable: the image bytes cannot be obtained
    """
    if image.buffer_view is not None:
        view = buffer_views[image.buffer_view]
        region = buffers[view.buffer]
        return region[view.byte_offset:view.byte_offset + view.byte_length]

    if image.uri is None:
        raise BufferUnavailable(index, "image has neither uri nor bufferView", "images")

    if image.uri.startswith('data:'):
        try:
            return memoryview(decode_data_uri(image.uri))
        except ValueError as e:
            raise BufferUnavailable(index, str(e), "images") from e

    if byte_loader is None:
        raise BufferUnavailable(index, f"no byte loader configured for uri {image.uri!r}", "images")
    try:
        return memoryview(bytes(byte_loader(image.uri)))
    except Exception as e:
        raise BufferUnavailable(index, f"loading {image.uri!r} failed: {e}", "images") from e
