"""Shape arithmetic shared by operators and kernels."""

from collections.abc import Sequence

from .errors import TensorError, ensure
from .op_type import Device, OpType


def infer_broadcast(a: Sequence[int], b: Sequence[int]) -> tuple[int, ...]:
    """Shape produced by bidirectional broadcasting of ``a`` and ``b``."""
    rank = max(len(a), len(b))
    padded_a = (1,) * (rank - len(a)) + tuple(a)
    padded_b = (1,) * (rank - len(b)) + tuple(b)
    result = []
    for dim_a, dim_b in zip(padded_a, padded_b):
        if dim_a == dim_b or dim_b == 1:
            result.append(dim_a)
        elif dim_a == 1:
            result.append(dim_b)
        else:
            raise TensorError("Broadcasting failed: shapes are incompatible.")
    return tuple(result)


def get_real_axis(axis: int, rank: int) -> int:
    """Turn a possibly negative ``axis`` into an index in ``range(rank)``."""
    ensure(rank >= 1, "rank must be at least 1")
    ensure(-rank <= axis <= rank - 1, f"axis {axis} out of range for rank {rank}")
    return axis + rank if axis < 0 else axis


def locate_index(n: int, shape: Sequence[int]) -> tuple[int, ...]:
    """Multi-dimensional index of flat offset ``n`` in a row-major ``shape``."""
    index = []
    for extent in reversed(shape):
        n, rem = divmod(n, extent)
        index.append(rem)
    return tuple(reversed(index))


def delocate_index(
    shape_index: Sequence[int], shape: Sequence[int], stride: Sequence[int]
) -> int:
    """Flat offset of ``shape_index``, wrapping each axis to fit ``shape``."""
    ensure(len(shape_index) == len(shape), "index and shape ranks differ")
    ensure(len(shape) == len(stride), "shape and stride ranks differ")
    return sum(
        (index % extent) * step
        for index, extent, step in zip(shape_index, shape, stride)
    )


def device_to_str(device: Device) -> str:
    """Name of a device."""
    if device is Device.CPU:
        return "CPU"
    raise TensorError("Unimplemented")


def kernel_attrs_str(attrs) -> str:
    """Render a ``(device, op_type)`` kernel key as ``"CPU, Add"``."""
    device, op = attrs
    try:
        op_label = str(OpType(int(op)))
    except ValueError:
        op_label = "Unknown"
    return f"{device_to_str(device)}, {op_label}"