"""Batched matrix multiplication."""

from __future__ import annotations

from ..errors import ensure
from ..op_type import OpType
from ..operator import Operator
from ..shape_utils import infer_broadcast


class Matmul(Operator):
    """Matrix product over the last two axes with broadcast leading axes.

    ``trans_a``/``trans_b`` swap the last two axes of the respective input
    before multiplying; tensors are row-major.
    """

    def __init__(self, graph, a, b, c, trans_a: bool = False, trans_b: bool = False) -> None:
        super().__init__(OpType.MATMUL, [a, b], [c])
        self.trans_a = trans_a
        self.trans_b = trans_b
        self.m = 0
        self.n = 0
        self.k = 0
        ensure(self.check_valid(graph), "invalid matmul operator")

    def infer_shape(self, inputs=None):
        a, b = self._resolve(inputs)[:2]
        shape_a, shape_b = a.shape, b.shape
        ensure(len(shape_a) >= 2 and len(shape_b) >= 2, "MatMul inputs need rank >= 2")

        m, k_a = (shape_a[-1], shape_a[-2]) if self.trans_a else (shape_a[-2], shape_a[-1])
        k_b, n = (shape_b[-1], shape_b[-2]) if self.trans_b else (shape_b[-2], shape_b[-1])
        ensure(k_a == k_b, "MatMul dimension mismatch on K!")

        self.m, self.n, self.k = m, n, k_a
        batch = infer_broadcast(shape_a[:-2], shape_b[:-2])
        return [batch + (m, n)]

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        a_label = "A^T" if self.trans_a else "A"
        b_label = "B^T" if self.trans_b else "B]"
        return (
            f"Matmul([{a_label},{b_label},A={self.inputs[0].guid},"
            f"B={self.inputs[1].guid},C={self.outputs[0].guid},"
            f"mnk=[{self.m},{self.n},{self.k}])"
        )