"""Axis permutation, as in ``numpy.transpose``."""

from __future__ import annotations

from collections.abc import Sequence

from ..errors import ensure, vec_to_string
from ..op_type import OpType
from ..operator import Operator


class Transpose(Operator):
    """Permute the axes of the input; an empty permutation keeps the order."""

    def __init__(self, graph, input, output, permute: Sequence[int] = ()) -> None:
        super().__init__(OpType.TRANSPOSE, [input], [output])
        rank = input.rank()
        if not permute:
            self.permute = tuple(range(rank))
        else:
            ensure(rank == len(permute), "permutation length differs from rank")
            self.permute = tuple(permute)
        ensure(self.check_valid(graph), "invalid transpose operator")

    def infer_shape(self, inputs=None):
        source = self._resolve(inputs)[0]
        return [tuple(source.shape[axis] for axis in self.permute)]

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