import pytest

from minitensor.errors import TensorError
from minitensor.op_type import Device, OpType
from minitensor.shape_utils import (
    delocate_index,
    device_to_str,
    get_real_axis,
    infer_broadcast,
    kernel_attrs_str,
    locate_index,
)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ((2, 3, 3, 4), (2, 3, 3, 4), (2, 3, 3, 4)),
        ((2, 3, 4, 5), (), (2, 3, 4, 5)),
        ((2, 3, 4, 5), (5,), (2, 3, 4, 5)),
        ((4, 5), (2, 3, 4, 5), (2, 3, 4, 5)),
        ((1, 4, 5), (2, 3, 1, 1), (2, 3, 4, 5)),
        ((3, 4, 5), (2, 1, 1, 1), (2, 3, 4, 5)),
    ],
)
def test_infer_broadcast(a, b, expected):
    assert infer_broadcast(a, b) == expected


def test_infer_broadcast_is_symmetric():
    assert infer_broadcast((1, 4, 5), (2, 3, 1, 1)) == infer_broadcast(
        (2, 3, 1, 1), (1, 4, 5)
    )


def test_infer_broadcast_incompatible():
    with pytest.raises(TensorError, match="Broadcasting failed"):
        infer_broadcast((2, 3), (4, 3))


def test_get_real_axis():
    assert get_real_axis(-1, 4) == 3
    assert get_real_axis(2, 4) == 2
    assert get_real_axis(-4, 4) == 0


@pytest.mark.parametrize("axis, rank", [(4, 4), (-5, 4), (0, 0)])
def test_get_real_axis_out_of_range(axis, rank):
    with pytest.raises(TensorError):
        get_real_axis(axis, rank)


def _row_major_strides(shape):
    strides = []
    step = 1
    for extent in reversed(shape):
        strides.append(step)
        step *= extent
    return tuple(reversed(strides))


def test_locate_delocate_round_trip():
    shape = (2, 3, 4)
    strides = _row_major_strides(shape)
    for n in range(24):
        index = locate_index(n, shape)
        assert all(0 <= i < e for i, e in zip(index, shape))
        assert delocate_index(index, shape, strides) == n


def test_locate_index_last_element():
    assert locate_index(23, (2, 3, 4)) == (1, 2, 3)


def test_delocate_index_wraps_broadcast_axes():
    index = (1, 2, 3)
    assert delocate_index(index, (1, 1, 4), (4, 4, 1)) == delocate_index(
        (0, 0, 3), (1, 1, 4), (4, 4, 1)
    )


def test_delocate_index_rank_mismatch():
    with pytest.raises(TensorError):
        delocate_index((0, 0), (2, 2, 2), (4, 2, 1))
    with pytest.raises(TensorError):
        delocate_index((0, 0), (2, 2), (1,))


def test_device_to_str():
    assert device_to_str(Device.CPU) == "CPU"
    with pytest.raises(TensorError):
        device_to_str("gpu")


def test_kernel_attrs_str():
    assert kernel_attrs_str((Device.CPU, OpType.MATMUL)) == "CPU, MatMul"
    assert kernel_attrs_str((Device.CPU, int(OpType.ADD))) == "CPU, Add"


def test_kernel_attrs_str_unknown_op_value():
    assert kernel_attrs_str((Device.CPU, 999)) == "CPU, Unknown"