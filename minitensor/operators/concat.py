"""Concatenation of tensors along one axis."""

from __future__ import annotations

from collections.abc import Sequence

from ..errors import ensure, vec_to_string
from ..op_type import OpType
from ..operator import Operator
from ..shape_utils import get_real_axis


class Concat(Operator):
    """Join tensors along ``dim``.

    Every input should have the same shape except along that axis.
    """

    def __init__(self, graph, inputs: Sequence, output, dim: int) -> None:
        inputs = list(inputs)
        super().__init__(OpType.CONCAT, inputs, [output])
        self.dim = get_real_axis(dim, inputs[0].rank())
        ensure(self.check_valid(graph), "invalid concat operator")

    def infer_shape(self, inputs=None):
        inputs = self._resolve(inputs)
        dims = list(inputs[0].shape)
        dims[self.dim] = sum(tensor.shape[self.dim] for tensor in inputs)
        return [tuple(dims)]

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return 1

    def __str__(self) -> str:
        shapes = "".join(f"{vec_to_string(t.shape)}," for t in self.inputs)
        guids = "".join(f"{t.guid}," for t in self.inputs)
        return (
            f"Concat[{self.guid}]({shapes}dim={self.dim},"
            f"input={guids}output={self.outputs[0].guid})"
        )