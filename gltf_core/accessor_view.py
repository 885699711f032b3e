"""
GLTF Accessor Views

Typed, lazy views over accessor data. A view never copies the buffer: each
element is unpacked from the byte region on demand, at
``view offset + accessor offset + k * stride``. Normalization and the sparse
overlay are applied as elements are produced.
"""

import struct
from bisect import bisect_left
from collections.abc import Sequence
from typing import Any, Collection, Optional, Tuple, Union

import numpy as np

from .errors import InvalidAccessorLayout, TypeMismatch
from .structures import *


NUMPY_DTYPES = {
    COMPONENT_TYPE_BYTE: np.int8,
    COMPONENT_TYPE_UNSIGNED_BYTE: np.uint8,
    COMPONENT_TYPE_SHORT: np.int16,
    COMPONENT_TYPE_UNSIGNED_SHORT: np.uint16,
    COMPONENT_TYPE_UNSIGNED_INT: np.uint32,
    COMPONENT_TYPE_FLOAT: np.float32,
}

Expected = Union[None, str, int, Collection]


def element_format(accessor_type: str, component_type: int) -> str:
    """
    struct format for one element, padding matrix columns to 4-byte boundaries.

    Example: MAT3 of UNSIGNED_BYTE is '<3B1x3B1x3B1x'.
    """
    columns, rows = ACCESSOR_TYPE_SHAPES[accessor_type]
    char = COMPONENT_TYPE_PACK_FORMATS[component_type]
    padding = column_stride(accessor_type, component_type) - rows * COMPONENT_TYPE_SIZES[component_type]
    column = f"{rows}{char}" + (f"{padding}x" if padding else "")
    return "<" + column * columns


class _StridedReader:
    """Unpacks fixed-layout records placed at a constant stride in a byte region"""

    __slots__ = ("data", "offset", "stride", "_struct")

    def __init__(self, data: memoryview, offset: int, stride: int, fmt: str):
        self.data = data
        self.offset = offset
        self.stride = stride
        self._struct = struct.Struct(fmt)

    def read(self, k: int) -> Tuple:
        return self._struct.unpack_from(self.data, self.offset + k * self.stride)


def _matches(expected: Expected, actual) -> bool:
    if expected is None:
        return True
    if isinstance(expected, (str, int)):
        return expected == actual
    return actual in expected


def read_sparse_indices(accessor: GLTFAccessor, index: int, buffer_views,
                        buffers) -> Tuple[int, ...]:
    """
    Read and check the sparse index list of an accessor.

    Raises:
        InvalidAccessorLayout: indices not strictly increasing or out of range
    """
    sparse = accessor.sparse
    view = buffer_views[sparse.indices.buffer_view]
    size = COMPONENT_TYPE_SIZES[sparse.indices.component_type]
    reader = _StridedReader(buffers[view.buffer], view.byte_offset + sparse.indices.byte_offset,
                            size, "<" + COMPONENT_TYPE_PACK_FORMATS[sparse.indices.component_type])

    indices = tuple(reader.read(k)[0] for k in range(sparse.count))
    previous = -1
    for k, value in enumerate(indices):
        if value <= previous:
            raise InvalidAccessorLayout(
                "accessors", index, f"sparse index {value} at position {k} is not strictly increasing",
                f"accessors[{index}].sparse.indices")
        if value >= accessor.count:
            raise InvalidAccessorLayout(
                "accessors", index, f"sparse index {value} is out of range for count {accessor.count}",
                f"accessors[{index}].sparse.indices")
        previous = value
    return indices


class AccessorView(Sequence):
    """
    Lazy, restartable sequence of accessor elements.

    Scalars are produced as numbers, vectors as tuples and matrices as
    tuples of column tuples. Integer components stay ints unless the
    accessor is normalized, in which case they map to [0, 1] (unsigned) or
    [-1, 1] (signed, most negative value clamped to -1.0).

    Each iteration starts from scratch, so a view can be iterated any number
    of times and shared between threads.
    """

    def __init__(self, accessor: GLTFAccessor, index: int, buffer_views, buffers,
                 expected_type: Expected = None, expected_component_type: Expected = None,
                 expected_component_count: Optional[int] = None):
        """
        Args:
            accessor: The accessor descriptor
            index: Position of the accessor in the document
            buffer_views: Buffer view descriptors of the document
            buffers: Resolved byte regions of the document
            expected_type: Accessor type (or collection of types) the caller needs
            expected_component_type: Component type (or collection) the caller needs
            expected_component_count: Number of components per element the caller needs

        Raises:
            TypeMismatch: the accessor does not have the requested shape
        """
        if not _matches(expected_type, accessor.type):
            raise TypeMismatch(index, f"Accessor {index} is {accessor.type}, expected {expected_type}")
        if not _matches(expected_component_type, accessor.component_type):
            raise TypeMismatch(
                index,
                f"Accessor {index} has component type "
                f"{COMPONENT_TYPE_NAMES[accessor.component_type]}, expected {expected_component_type}")
        if expected_component_count is not None and expected_component_count != accessor.component_count:
            raise TypeMismatch(
                index,
                f"Accessor {index} has {accessor.component_count} components per element, "
                f"expected {expected_component_count}")

        self.accessor = accessor
        self.index = index
        self._columns, self._rows = ACCESSOR_TYPE_SHAPES[accessor.type]
        self._format = element_format(accessor.type, accessor.component_type)
        self._divisor = NORMALIZATION_DIVISORS.get(accessor.component_type) if accessor.normalized else None
        self._signed = accessor.component_type in SIGNED_COMPONENT_TYPES

        floating = accessor.component_type == COMPONENT_TYPE_FLOAT or self._divisor is not None
        self._zero = (0.0 if floating else 0,) * accessor.component_count

        self._base = None
        if accessor.buffer_view is not None:
            view = buffer_views[accessor.buffer_view]
            self._base = _StridedReader(
                buffers[view.buffer],
                view.byte_offset + accessor.byte_offset,
                view.byte_stride or accessor.element_size,
                self._format,
            )

        self._sparse_indices = ()
        self._sparse_values = None
        if accessor.sparse is not None:
            self._sparse_indices = read_sparse_indices(accessor, index, buffer_views, buffers)
            values = accessor.sparse.values
            view = buffer_views[values.buffer_view]
            self._sparse_values = _StridedReader(
                buffers[view.buffer],
                view.byte_offset + values.byte_offset,
                accessor.element_size,
                self._format,
            )

    @property
    def type(self) -> str:
        return self.accessor.type

    @property
    def component_type(self) -> int:
        return self.accessor.component_type

    @property
    def normalized(self) -> bool:
        return self._divisor is not None

    @property
    def is_sparse(self) -> bool:
        return self._sparse_values is not None

    def __len__(self) -> int:
        return self.accessor.count

    def __getitem__(self, k):
        if isinstance(k, slice):
            return [self._element(i) for i in range(*k.indices(self.accessor.count))]
        count = self.accessor.count
        if k < 0:
            k += count
        if not 0 <= k < count:
            raise IndexError(f"Element {k} out of range for accessor {self.index} (count {count})")
        return self._element(k)

    def __iter__(self):
        overrides = self._sparse_indices
        values = self._sparse_values
        position = 0
        next_override = overrides[0] if overrides else -1

        for k in range(self.accessor.count):
            if k == next_override:
                raw = values.read(position)
                position += 1
                next_override = overrides[position] if position < len(overrides) else -1
            elif self._base is not None:
                raw = self._base.read(k)
            else:
                raw = self._zero
            yield self._shape(self._convert(raw))

    def __repr__(self) -> str:
        return (f"AccessorView(index={self.index}, type={self.accessor.type}, "
                f"component_type={COMPONENT_TYPE_NAMES[self.accessor.component_type]}, "
                f"count={self.accessor.count}, sparse={self.is_sparse})")

    def _element(self, k: int) -> Any:
        if self._sparse_values is not None:
            position = bisect_left(self._sparse_indices, k)
            if position < len(self._sparse_indices) and self._sparse_indices[position] == k:
                return self._shape(self._convert(self._sparse_values.read(position)))
        raw = self._base.read(k) if self._base is not None else self._zero
        return self._shape(self._convert(raw))

    def _convert(self, raw: Tuple) -> Tuple:
        divisor = self._divisor
        if divisor is None or raw is self._zero:
            return raw
        if self._signed:
            return tuple(max(v / divisor, -1.0) for v in raw)
        return tuple(v / divisor for v in raw)

    def _shape(self, values: Tuple) -> Any:
        if self._columns == 1:
            return values[0] if self._rows == 1 else values
        rows = self._rows
        return tuple(values[c * rows:(c + 1) * rows] for c in range(self._columns))

    def to_numpy(self) -> np.ndarray:
        """
        Get the accessor data as a numpy array.

        Shape is (count,) for scalars, (count, n) for vectors and
        (count, columns, rows) for matrices. Plain accessors return a
        read-only strided view over the buffer without copying; sparse or
        normalized accessors are materialized.
        """
        accessor = self.accessor
        dtype = np.dtype(NUMPY_DTYPES[accessor.component_type]).newbyteorder('<')
        size = accessor.component_size
        col_stride = column_stride(accessor.type, accessor.component_type)

        if self._columns == 1 and self._rows == 1:
            shape, inner = (accessor.count,), ()
        elif self._columns == 1:
            shape, inner = (accessor.count, self._rows), (size,)
        else:
            shape, inner = (accessor.count, self._columns, self._rows), (col_stride, size)

        if self._base is not None:
            array = np.ndarray(shape, dtype=dtype, buffer=self._base.data,
                               offset=self._base.offset, strides=(self._base.stride,) + inner)
        else:
            array = np.zeros(shape, dtype=dtype)

        if self._sparse_values is not None:
            values = self._sparse_values
            overlay = np.ndarray((len(self._sparse_indices),) + shape[1:], dtype=dtype,
                                 buffer=values.data, offset=values.offset,
                                 strides=(values.stride,) + inner)
            array = array.copy()
            array[np.asarray(self._sparse_indices, dtype=np.intp)] = overlay

        if self._divisor is not None:
            array = array.astype(np.float32) / np.float32(self._divisor)
            if self._signed:
                array = np.maximum(array, np.float32(-1.0))

        return array
