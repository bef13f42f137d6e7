"""Single-input operators: activations, clipping and casting."""

from __future__ import annotations

from enum import IntEnum

from ..data_type import DataType
from ..errors import TensorError, ensure, vec_to_string
from ..op_type import OpType
from ..operator import Operator


class Unary(Operator):
    """Base of element-wise operators with one input and one output."""

    def __init__(self, op_type, graph, input, output) -> None:
        super().__init__(op_type, [input], [output])
        ensure(self.check_valid(graph), "invalid unary operator")

    def infer_shape(self, inputs=None):
        return [tuple(self._resolve(inputs)[0].shape)]

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        source = self.inputs[0]
        return (
            f"{self.op_type}[{self.guid}]({vec_to_string(source.shape)},"
            f"input={source.guid},output={self.outputs[0].guid})"
        )


class Relu(Unary):
    """Rectified linear unit: ``max(0, x)``."""

    def __init__(self, graph, input, output) -> None:
        super().__init__(OpType.RELU, graph, input, output)


class Clip(Operator):
    """Limit values to ``[min_value, max_value]``; either bound may be ``None``."""

    def __init__(self, graph, input, output, min_value=None, max_value=None) -> None:
        super().__init__(OpType.CLIP, [input], [output])
        self.min_value = min_value
        self.max_value = max_value
        ensure(self.check_valid(graph), "invalid clip operator")

    def infer_shape(self, inputs=None):
        return [tuple(self._resolve(inputs)[0].shape)]

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        source = self.inputs[0]
        return (
            f"{self.op_type}[{self.guid}]({vec_to_string(source.shape)},"
            f"input={source.guid},output={self.outputs[0].guid})"
        )


class CastType(IntEnum):
    """Source and target element types of a cast."""

    FLOAT_TO_FLOAT16 = 0
    FLOAT_TO_INT64 = 1
    FLOAT_TO_INT32 = 2
    FLOAT_TO_INT16 = 3
    FLOAT_TO_INT8 = 4
    FLOAT_TO_BFLOAT16 = 5
    INT32_TO_FLOAT = 6
    INT32_TO_INT8 = 7
    INT32_TO_INT16 = 8
    INT32_TO_INT64 = 9
    INT16_TO_FLOAT = 10
    INT16_TO_INT32 = 11
    INT8_TO_FLOAT = 12
    INT8_TO_INT16 = 13
    INT8_TO_INT32 = 14
    UINT8_TO_FLOAT = 15
    UINT8_TO_INT32 = 16
    UINT8_TO_INT64 = 17
    INT64_TO_INT32 = 18
    INT64_TO_UINT32 = 19
    INT64_TO_FLOAT = 20
    UINT32_TO_INT64 = 21
    FLOAT16_TO_FLOAT = 22
    BFLOAT16_TO_FLOAT = 23
    FLOAT_TO_FLOAT = 24


_CAST_TARGETS = {
    CastType.FLOAT_TO_FLOAT16: DataType.FLOAT16,
    CastType.FLOAT_TO_INT64: DataType.INT64,
    CastType.FLOAT_TO_INT32: DataType.INT32,
    CastType.FLOAT_TO_INT16: DataType.INT16,
    CastType.FLOAT_TO_INT8: DataType.INT8,
    CastType.FLOAT_TO_BFLOAT16: DataType.BFLOAT16,
    CastType.INT32_TO_FLOAT: DataType.FLOAT32,
    CastType.INT32_TO_INT8: DataType.INT8,
    CastType.INT32_TO_INT16: DataType.INT16,
    CastType.INT32_TO_INT64: DataType.INT64,
    CastType.INT16_TO_FLOAT: DataType.FLOAT32,
    CastType.INT16_TO_INT32: DataType.INT32,
    CastType.INT8_TO_FLOAT: DataType.FLOAT32,
    CastType.INT8_TO_INT16: DataType.INT16,
    CastType.INT8_TO_INT32: DataType.INT32,
    CastType.UINT8_TO_FLOAT: DataType.FLOAT32,
    CastType.UINT8_TO_INT32: DataType.INT32,
    CastType.UINT8_TO_INT64: DataType.INT64,
    CastType.INT64_TO_INT32: DataType.INT32,
    CastType.INT64_TO_UINT32: DataType.UINT32,
    CastType.INT64_TO_FLOAT: DataType.FLOAT32,
    CastType.UINT32_TO_INT64: DataType.INT64,
    CastType.FLOAT16_TO_FLOAT: DataType.FLOAT32,
    CastType.BFLOAT16_TO_FLOAT: DataType.FLOAT32,
    CastType.FLOAT_TO_FLOAT: DataType.FLOAT32,
}


class Cast(Operator):
    """Convert elements to another data type; the shape is kept."""

    def __init__(self, graph, input, output, cast_type) -> None:
        super().__init__(OpType.CAST, [input], [output])
        self.cast_type = CastType(cast_type)
        ensure(self.check_valid(graph), "invalid cast operator")

    def infer_shape(self, inputs=None):
        return [tuple(self._resolve(inputs)[0].shape)]

    def infer_data_type(self, inputs=None) -> list[DataType]:
        return [self.output_data_type()]

    def output_data_type(self) -> DataType:
        """Element type the cast produces."""
        try:
            return _CAST_TARGETS[self.cast_type]
        except KeyError:
            raise TensorError("Unimplemented") from None

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        return f"{self.op_type}[{self.guid}](output={self.outputs[0].guid})"