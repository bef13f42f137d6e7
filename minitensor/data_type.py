"""Element data types, numbered as in the ONNX element-type list."""

from enum import IntEnum

import numpy as np


class DataType(IntEnum):
    """Tensor element type."""

    UNDEFINED = 0
    FLOAT32 = 1
    UINT8 = 2
    INT8 = 3
    UINT16 = 4
    INT16 = 5
    INT32 = 6
    INT64 = 7
    STRING = 8
    BOOL = 9
    FLOAT16 = 10
    DOUBLE = 11
    UINT32 = 12
    UINT64 = 13
    BFLOAT16 = 16

    def size(self) -> int:
        """Bytes taken by one element."""
        return _SIZES[self]

    def cpu_type(self) -> int:
        """Index of the host storage type, or -1 where there is none."""
        return _CPU_TYPES[self]

    def numpy_dtype(self) -> np.dtype:
        """The numpy dtype used to hold elements of this type on the host."""
        return np.dtype(_NUMPY_TYPES[self])

    def __str__(self) -> str:
        return _NAMES[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_SIZES = {
    DataType.UNDEFINED: 0,
    DataType.FLOAT32: 4,
    DataType.UINT8: 1,
    DataType.INT8: 1,
    DataType.UINT16: 2,
    DataType.INT16: 2,
    DataType.INT32: 4,
    DataType.INT64: 8,
    DataType.STRING: 32,
    DataType.BOOL: 1,
    DataType.FLOAT16: 2,
    DataType.DOUBLE: 8,
    DataType.UINT32: 4,
    DataType.UINT64: 8,
    DataType.BFLOAT16: 2,
}

_NAMES = {
    DataType.UNDEFINED: "Undefine",
    DataType.FLOAT32: "Float32",
    DataType.UINT8: "UInt8",
    DataType.INT8: "Int8",
    DataType.UINT16: "UInt16",
    DataType.INT16: "Int16",
    DataType.INT32: "Int32",
    DataType.INT64: "Int64",
    DataType.STRING: "String",
    DataType.BOOL: "Bool",
    DataType.FLOAT16: "Float16",
    DataType.DOUBLE: "Double",
    DataType.UINT32: "UInt32",
    DataType.UINT64: "UInt64",
    DataType.BFLOAT16: "BFloat16",
}

_CPU_TYPES = {
    DataType.UNDEFINED: -1,
    DataType.FLOAT32: 0,
    DataType.UINT8: 2,
    DataType.INT8: 3,
    DataType.UINT16: 4,
    DataType.INT16: 5,
    DataType.INT32: 6,
    DataType.INT64: 7,
    DataType.STRING: -1,
    DataType.BOOL: 3,
    DataType.FLOAT16: 4,
    DataType.DOUBLE: 9,
    DataType.UINT32: 1,
    DataType.UINT64: 8,
    DataType.BFLOAT16: 4,
}

# Half-precision values are kept as raw 16-bit words and booleans as bytes.
_NUMPY_TYPES = {
    DataType.UNDEFINED: np.bool_,
    DataType.FLOAT32: np.float32,
    DataType.UINT8: np.uint8,
    DataType.INT8: np.int8,
    DataType.UINT16: np.uint16,
    DataType.INT16: np.int16,
    DataType.INT32: np.int32,
    DataType.INT64: np.int64,
    DataType.STRING: "S1",
    DataType.BOOL: np.int8,
    DataType.FLOAT16: np.uint16,
    DataType.DOUBLE: np.float64,
    DataType.UINT32: np.uint32,
    DataType.UINT64: np.uint64,
    DataType.BFLOAT16: np.uint16,
}