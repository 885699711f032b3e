"""
GLB Binary Container

Splits the .glb envelope into its JSON chunk and optional BIN chunk, and
packs a container back into bytes. Chunk payloads are returned as
memoryviews into the input, so unwrapping never copies the data.
"""

import struct
from dataclasses import dataclass
from typing import Optional, Union

from .errors import MalformedContainer, UnsupportedVersion
from .logger import get_logger


GLB_MAGIC = 0x46546C67  # "glTF"
GLB_VERSION = 2
GLB_HEADER_SIZE = 12
GLB_CHUNK_HEADER_SIZE = 8
GLB_CHUNK_TYPE_JSON = 0x4E4F534A  # "JSON" in little-endian
GLB_CHUNK_TYPE_BIN = 0x004E4942  # "BIN\x00" in little-endian

_HEADER = struct.Struct('<III')
_CHUNK_HEADER = struct.Struct('<II')

logger = get_logger('glb')

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class GLBContainer:
    """JSON and binary chunks of a .glb file"""
    json: memoryview
    binary: Optional[memoryview] = None
    version: int = GLB_VERSION

    def to_bytes(self) -> bytes:
        """Pack the chunks into a .glb byte string with 4-byte aligned chunks."""
        json_bytes = bytes(self.json)
        json_bytes += b' ' * (-len(json_bytes) % 4)
        chunks = _CHUNK_HEADER.pack(len(json_bytes), GLB_CHUNK_TYPE_JSON) + json_bytes

        if self.binary is not None:
            bin_bytes = bytes(self.binary)
            bin_bytes += b'\x00' * (-len(bin_bytes) % 4)
            chunks += _CHUNK_HEADER.pack(len(bin_bytes), GLB_CHUNK_TYPE_BIN) + bin_bytes

        header = _HEADER.pack(GLB_MAGIC, self.version, GLB_HEADER_SIZE + len(chunks))
        return header + chunks


def is_glb(data: BytesLike) -> bool:
    """Check if the data starts with the .glb magic"""
    return bytes(data[:4]) == b'glTF'


def pack_glb(json_data: BytesLike, binary: Optional[BytesLike] = None) -> bytes:
    """Build a .glb byte string from a JSON payload and optional binary payload."""
    return GLBContainer(
        json=memoryview(json_data),
        binary=memoryview(binary) if binary is not None else None,
    ).to_bytes()


def unwrap_glb(data: BytesLike) -> GLBContainer:
    """
    Parse a .glb envelope.

    Args:
        data: The complete file contents

    Returns:
        GLBContainer whose chunks are views into ``data``

    Raises:
        MalformedContainer: bad magic, length mismatch, chunk overrun,
            misaligned chunk or invalid chunk ordering
        UnsupportedVersion: container version other than 2
    """
    view = memoryview(data).cast('B')
    total = len(view)

    if total < GLB_HEADER_SIZE:
        raise MalformedContainer(f"GLB data too small for header: {total} bytes")

    magic, version, length = _HEADER.unpack_from(view, 0)
    logger.debug(f"GLB header: magic=0x{magic:08x}, version={version}, length={length}")

    if magic != GLB_MAGIC:
        raise MalformedContainer(
            f"Invalid GLB magic number: 0x{magic:08x} (expected 0x{GLB_MAGIC:08x})")

    if length != total:
        raise MalformedContainer(
            f"GLB declared length {length} does not match actual length {total}")

    if version != GLB_VERSION:
        raise UnsupportedVersion(f"Unsupported GLB version: {version} (expected 2)", version)

    offset = GLB_HEADER_SIZE
    json_chunk = None
    bin_chunk = None
    chunk_count = 0

    while offset < total:
        if offset + GLB_CHUNK_HEADER_SIZE > total:
            raise MalformedContainer(f"Chunk header extends beyond file at offset {offset}")

        chunk_length, chunk_type = _CHUNK_HEADER.unpack_from(view, offset)
        offset += GLB_CHUNK_HEADER_SIZE
        logger.debug(f"Chunk {chunk_count}: type=0x{chunk_type:08x}, length={chunk_length}")

        if offset + chunk_length > total:
            raise MalformedContainer(
                f"Chunk data extends beyond file: offset {offset} + length {chunk_length} > total {total}")

        if chunk_length % 4:
            raise MalformedContainer(
                f"Chunk {chunk_count} length {chunk_length} is not 4-byte aligned")

        chunk_data = view[offset:offset + chunk_length]
        offset += chunk_length

        if chunk_type == GLB_CHUNK_TYPE_JSON:
            if chunk_count != 0:
                raise MalformedContainer("JSON chunk must be the first and only JSON chunk")
            json_chunk = chunk_data
        elif chunk_count == 0:
            raise MalformedContainer(f"First chunk must be JSON, found 0x{chunk_type:08x}")
        elif chunk_type == GLB_CHUNK_TYPE_BIN:
            if bin_chunk is not None:
                raise MalformedContainer("GLB contains more than one BIN chunk")
            if chunk_count != 1:
                raise MalformedContainer("BIN chunk must directly follow the JSON chunk")
            bin_chunk = chunk_data
        else:
            logger.warning(f"Skipping unknown chunk type: 0x{chunk_type:08x}")

        chunk_count += 1

    if json_chunk is None:
        raise MalformedContainer("No JSON chunk found in GLB")

    return GLBContainer(json=json_chunk, binary=bin_chunk, version=version)
