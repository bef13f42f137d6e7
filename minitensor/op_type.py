"""Operator kinds and execution devices."""

from enum import Enum, IntEnum


class OpType(IntEnum):
    """Kind of a graph operator."""

    UNKNOWN = 0
    ADD = 1
    CAST = 2
    CLIP = 3
    CONCAT = 4
    DIV = 5
    MUL = 6
    MATMUL = 7
    RELU = 8
    SUB = 9
    TRANSPOSE = 10

    def __str__(self) -> str:
        return _LABELS[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_LABELS = {
    OpType.UNKNOWN: "Unknown",
    OpType.ADD: "Add",
    OpType.CAST: "Cast",
    OpType.CLIP: "Clip",
    OpType.CONCAT: "Concat",
    OpType.DIV: "Div",
    OpType.MUL: "Mul",
    OpType.MATMUL: "MatMul",
    OpType.RELU: "Relu",
    OpType.SUB: "Sub",
    OpType.TRANSPOSE: "Transpose",
}


class Device(Enum):
    """Device a runtime executes on."""

    CPU = 1