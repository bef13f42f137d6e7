"""Binary element-wise operators with broadcasting."""

from __future__ import annotations

from ..errors import ensure, vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..shape_utils import infer_broadcast


class ElementWise(Operator):
    """Base of binary element-wise operators; unary activations are separate."""

    def __init__(self, op_type, graph, input0, input1, output) -> None:
        super().__init__(op_type, [input0, input1], [output])
        ensure(self.check_valid(graph), "invalid element-wise operator")

    def infer_shape(self, inputs=None):
        a, b = self._resolve(inputs)[:2]
        return [infer_broadcast(a.shape, b.shape)]

    def num_inputs(self) -> int:
        return 2

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a, b = self.inputs
        return (
            f"{self.op_type}[{self.guid}]("
            f"{vec_to_string(a.shape)},{vec_to_string(b.shape)},"
            f"input0={a.guid},input1={b.guid},output={self.outputs[0].guid})"
        )


class Add(ElementWise):
    """Element-wise sum."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.ADD, graph, input0, input1, output)


class Sub(ElementWise):
    """Element-wise difference."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.SUB, graph, input0, input1, output)


class Mul(ElementWise):
    """Element-wise product."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.MUL, graph, input0, input1, output)


class Div(ElementWise):
    """Element-wise quotient."""

    def __init__(self, graph, input0, input1, output) -> None:
        super().__init__(OpType.DIV, graph, input0, input1, output)