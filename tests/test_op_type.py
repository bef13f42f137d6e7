import pytest

from minitensor.op_type import Device, OpType


@pytest.mark.parametrize(
    "op, label",
    [
        (OpType.UNKNOWN, "Unknown"),
        (OpType.MATMUL, "MatMul"),
        (OpType.TRANSPOSE, "Transpose"),
        (OpType.RELU, "Relu"),
    ],
)
def test_labels(op, label):
    assert str(op) == label
    assert f"{op}" == label


def test_matmul_underlying_value():
    assert int(OpType.MATMUL) == 7
    assert OpType(7) is OpType.MATMUL


def test_labels_are_unique():
    labels = [str(OpType(value)) for value in range(len(OpType))]
    assert len(set(labels)) == len(labels)
    assert labels[0] == "Unknown"


def test_values_are_contiguous_from_zero():
    count = len(OpType)
    assert [int(OpType(value)) for value in range(count)] == list(range(count))
    assert OpType(0) is OpType.UNKNOWN


def test_unknown_value_rejected():
    with pytest.raises(ValueError):
        OpType(len(OpType))


def test_device_lookup():
    assert Device(1) is Device.CPU
    with pytest.raises(ValueError):
        Device(2)