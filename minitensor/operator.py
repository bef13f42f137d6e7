"""Base class of graph operators."""

from __future__ import annotations

import copy
import weakref
from abc import abstractmethod
from collections.abc import Sequence

from .data_type import DataType
from .errors import ensure
from .objects import GraphObject
from .op_type import OpType


def _live(refs: list[weakref.ref]) -> list:
    return [op for op in (ref() for ref in refs) if op is not None]


class Operator(GraphObject):
    """A node of a computation graph that maps input tensors to output tensors.

    Subclasses implement :meth:`infer_shape`, :meth:`num_inputs`,
    :meth:`num_outputs` and ``__str__``. Output slots may be ``None`` when the
    operator is built inside a graph; :meth:`check_valid` then creates them.
    """

    def __init__(self, op_type, inputs: Sequence, outputs: Sequence) -> None:
        super().__init__()
        self.op_type = OpType(op_type)
        self.inputs = list(inputs)
        self.outputs = list(outputs)
        self._predecessors: list[weakref.ref] = []
        self._successors: list[weakref.ref] = []

    def _resolve(self, inputs):
        return self.inputs if inputs is None else inputs

    @abstractmethod
    def infer_shape(self, inputs=None) -> list[tuple[int, ...]] | None:
        """Output shapes for ``inputs`` (default: this operator's inputs), or ``None``."""

    def infer_data_type(self, inputs=None) -> list[DataType]:
        """Output data types; by default every output takes the first input's type."""
        inputs = self._resolve(inputs)
        return [inputs[0].dtype] * self.num_outputs()

    def check_valid(self, graph) -> bool:
        """Check the operator, creating its outputs in ``graph`` when one is given."""
        shapes = self.infer_shape()
        if shapes is None or len(shapes) != len(self.outputs):
            return False
        if graph is not None:
            dtypes = self.infer_data_type()
            for i, (shape, dtype) in enumerate(zip(shapes, dtypes)):
                ensure(
                    self.outputs[i] is None,
                    "Find empty output while operator creation",
                )
                self.outputs[i] = graph.add_tensor(shape, dtype)
            return True
        return all(
            output is not None and tuple(shape) == output.shape
            for shape, output in zip(shapes, self.outputs)
        )

    def replace_input(self, old, new) -> None:
        """Substitute ``new`` for every occurrence of ``old`` among the inputs."""
        self.inputs = [new if tensor is old else tensor for tensor in self.inputs]

    def output(self, index: int | None = None):
        """The single output, or the output at ``index``."""
        if index is None:
            ensure(len(self.outputs) == 1, "Unimplemented")
            return self.outputs[0]
        ensure(0 <= index < len(self.outputs), "Index exceeded")
        return self.outputs[index]

    def predecessors(self) -> list:
        """Operators that produce this operator's inputs."""
        return _live(self._predecessors)

    def successors(self) -> list:
        """Operators that consume this operator's outputs."""
        return _live(self._successors)

    def dtype(self) -> DataType:
        """Data type of the first input."""
        return self.inputs[0].dtype

    def out_dtype(self) -> DataType:
        """Data type of the single output."""
        return self.output().dtype

    @abstractmethod
    def num_inputs(self) -> int:
        """Number of input tensors."""

    @abstractmethod
    def num_outputs(self) -> int:
        """Number of output tensors."""

    def clone(self, inputs: Sequence, outputs: Sequence) -> Operator:
        """A copy of this operator wired to ``inputs`` and ``outputs``."""
        op = copy.copy(self)
        op.inputs = list(inputs)
        op.outputs = list(outputs)
        op._predecessors = []
        op._successors = []
        ensure(op.check_valid(None), "cloned operator is invalid")
        return op

    def _add_predecessor(self, op: Operator) -> None:
        self._predecessors.append(weakref.ref(op))

    def _add_successor(self, op: Operator) -> None:
        self._successors.append(weakref.ref(op))

    def _remove_predecessor(self, op: Operator) -> None:
        self._predecessors = [ref for ref in self._predecessors if ref() is not op]

    def _remove_successor(self, op: Operator) -> None:
        self._successors = [ref for ref in self._successors if ref() is not op]

    def _clear_links(self) -> None:
        self._predecessors = []
        self._successors = []