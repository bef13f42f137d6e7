"""Tensors and the memory blobs that back them."""

from __future__ import annotations

import math
import weakref
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from .data_type import DataType
from .errors import ensure, vec_to_string
from .objects import GraphObject, next_fuid


@dataclass(eq=False)
class Blob:
    """A region of a runtime buffer starting at ``offset``."""

    runtime: Any
    buffer: Any
    offset: int = 0

    def array(self, dtype: np.dtype, count: int) -> np.ndarray:
        """A writable numpy view of ``count`` elements of ``dtype``."""
        needed = self.offset + count * dtype.itemsize
        ensure(needed <= len(self.buffer), "blob is smaller than the tensor")
        return np.frombuffer(self.buffer, dtype=dtype, count=count, offset=self.offset)

    def __str__(self) -> str:
        return f"{id(self.buffer):#x}+{self.offset}"


def _format_value(value) -> str:
    if isinstance(value, (float, np.floating)):
        return f"{float(value):g}"
    return str(value)


class Tensor(GraphObject):
    """A typed n-dimensional tensor that lives in a graph."""

    def __init__(self, shape: Sequence[int], dtype: DataType, runtime) -> None:
        super().__init__()
        self.shape = tuple(shape)
        self.dtype = DataType(dtype)
        self.runtime = runtime
        self.data: Blob | None = None
        self.fuid = next_fuid()
        self._size = math.prod(self.shape)
        self._targets: list[weakref.ref] = []
        self._source: weakref.ref | None = None

    def __copy__(self):
        clone = super().__copy__()
        clone._targets = list(self._targets)
        return clone

    def size(self) -> int:
        """Number of elements."""
        return self._size

    def nbytes(self) -> int:
        """Number of bytes the elements take."""
        return self._size * self.dtype.size()

    def rank(self) -> int:
        return len(self.shape)

    def set_shape(self, shape: Sequence[int]) -> None:
        self.shape = tuple(shape)
        self._size = math.prod(self.shape)

    def set_data(self, generator) -> None:
        """Fill the tensor with ``generator(data, size, dtype)``."""
        generator(self.raw_data(), self.size(), self.dtype)

    def set_data_blob(self, blob: Blob) -> None:
        self.data = blob

    def raw_data(self) -> np.ndarray:
        """A flat writable numpy view of the tensor's elements."""
        ensure(self.data is not None, "tensor has no data")
        return self.data.array(self.dtype.numpy_dtype(), self._size)

    def data_string(self) -> str:
        """Render the elements as nested brackets, one innermost row per line."""
        ensure(self.data is not None, "tensor has no data")
        values = self.raw_data()
        shape = self.shape or (1,)
        spans = [1] * len(shape)
        spans[-1] = shape[-1]
        for axis in range(len(shape) - 1, 0, -1):
            spans[axis - 1] = spans[axis] * shape[axis - 1]
        column = spans[-1]
        last = len(values) - 1

        parts = [f"Tensor: {self.guid}\n"]
        for i, value in enumerate(values):
            parts.append("[" * sum(1 for span in spans if i % span == 0))
            parts.append(_format_value(value))
            parts.append("]" * sum(1 for span in spans if i % span == span - 1))
            if i != last:
                parts.append(", ")
            if i % column == column - 1:
                parts.append("\n")
        return "".join(parts)

    def print_data(self) -> None:
        print(self.data_string())

    def equal_data(self, other, relative_error: float = 1e-6) -> bool:
        """Compare elements with another tensor or with a sequence of values.

        Integers must match exactly; floats within ``relative_error``,
        which is an absolute bound where either value is zero.
        """
        ensure(self.data is not None, "tensor has no data")
        if isinstance(other, Tensor):
            ensure(other.data is not None, "tensor has no data")
            ensure(self.dtype == other.dtype, "data types differ")
            ensure(self.runtime.is_cpu(), "tensor is not on the CPU")
            ensure(other.runtime.is_cpu(), "tensor is not on the CPU")
            if self.size() != other.size():
                return False
            expected = other.raw_data()
        else:
            ensure(self.size() == len(other), "element counts differ")
            expected = np.asarray(other, dtype=self.dtype.numpy_dtype())
        return _equal_arrays(self.raw_data(), expected, relative_error)

    def targets(self) -> list:
        """Operators that read this tensor."""
        return [op for op in (ref() for ref in self._targets) if op is not None]

    def source(self):
        """Operator that produces this tensor, or ``None``."""
        return self._source() if self._source is not None else None

    def _add_target(self, op) -> None:
        self._targets.append(weakref.ref(op))

    def _set_source(self, op) -> None:
        self._source = weakref.ref(op) if op is not None else None

    def _remove_target(self, op) -> None:
        self._targets = [ref for ref in self._targets if ref() is not op]

    def __str__(self) -> str:
        data = str(self.data) if self.data is not None else "nullptr data"
        text = (
            f"Tensor {self.guid}, Fuid {self.fuid}, shape {vec_to_string(self.shape)}, "
            f"dtype {self.dtype}, {self.runtime}, {data}\n"
        )
        source = self.source()
        text += f", source {source.guid}" if source is not None else ", source None"
        text += ", targets " + vec_to_string(op.guid for op in self.targets())
        return text


def _equal_arrays(a: np.ndarray, b: np.ndarray, relative_error: float) -> bool:
    if a.dtype.kind != "f":
        mismatch = np.flatnonzero(a != b)
        return mismatch.size == 0

    x = a.astype(np.float64)
    y = b.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        smaller = np.minimum(np.abs(x), np.abs(y))
        diff = np.abs(x - y)
        relative = diff / np.maximum(np.abs(x), np.abs(y))
        bad = ((smaller == 0) & (diff > relative_error)) | (
            (smaller != 0) & (relative > relative_error)
        )
    failures = np.flatnonzero(bad)
    if failures.size:
        i = int(failures[0])
        print(f"Error on {i}: {x[i]:f} {y[i]:f}")
        return False
    return True