"""Host kernels for concat, element-wise, transpose, relu and clip."""

from __future__ import annotations

import numpy as np

from .data_type import DataType
from .errors import TensorError
from .kernels import Kernel, register_kernel
from .op_type import Device, OpType

_SUPPORTED = (DataType.FLOAT32, DataType.UINT32)


def _check_dtype(op) -> None:
    if op.dtype() not in _SUPPORTED:
        raise TensorError("Unimplemented")


def _view(tensor) -> np.ndarray:
    """The tensor's elements as an array of its own shape."""
    return tensor.raw_data().reshape(tensor.shape)


def _store(tensor, values: np.ndarray) -> None:
    out = tensor.raw_data()
    out[:] = np.asarray(values).reshape(-1)


@register_kernel(Device.CPU, OpType.CONCAT, "ConcatNaive_CPU")
class ConcatKernel(Kernel):
    """Copies every input into its slice of the output along the concat axis."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        parts = [_view(tensor) for tensor in op.inputs]
        _store(op.output(), np.concatenate(parts, axis=op.dim))


def _divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    if np.issubdtype(a.dtype, np.integer):
        return np.floor_divide(a, b)
    return np.true_divide(a, b)


_BINARY = {
    OpType.ADD: np.add,
    OpType.SUB: np.subtract,
    OpType.MUL: np.multiply,
    OpType.DIV: _divide,
}


@register_kernel(Device.CPU, OpType.DIV, "divNaive_CPU")
@register_kernel(Device.CPU, OpType.MUL, "mulNaive_CPU")
@register_kernel(Device.CPU, OpType.SUB, "subNaive_CPU")
@register_kernel(Device.CPU, OpType.ADD, "addNaive_CPU")
class ElementWiseKernel(Kernel):
    """Binary arithmetic with bidirectional broadcasting."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        function = _BINARY.get(op.op_type)
        if function is None:
            raise TensorError("Unimplemented")
        a = _view(op.inputs[0])
        b = _view(op.inputs[1])
        output = op.output()
        with np.errstate(all="ignore"):
            result = function(a, b)
        _store(output, np.broadcast_to(result, output.shape))


@register_kernel(Device.CPU, OpType.TRANSPOSE, "TransposeNaive_CPU")
class TransposeKernel(Kernel):
    """Permutes the axes of the input."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        source = _view(op.inputs[0])
        _store(op.output(), np.transpose(source, op.permute))


@register_kernel(Device.CPU, OpType.RELU, "reluNaive_CPU")
class UnaryKernel(Kernel):
    """Element-wise activations."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        if op.op_type != OpType.RELU:
            raise TensorError("Unimplemented")
        values = op.inputs[0].raw_data()
        _store(op.output(), np.maximum(values.dtype.type(0), values))


@register_kernel(Device.CPU, OpType.CLIP, "Clip_CPU")
class ClipKernel(Kernel):
    """Limits elements to the operator's bounds; a missing bound is ignored."""

    def compute(self, op, context) -> None:
        _check_dtype(op)
        values = op.inputs[0].raw_data()
        result = values
        if op.max_value is not None:
            result = np.where(values > op.max_value, op.max_value, result)
        if op.min_value is not None:
            result = np.where(values < op.min_value, op.min_value, result)
        _store(op.output(), result)