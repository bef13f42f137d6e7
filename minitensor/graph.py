"""Computation graphs: tensors, operators and the passes that work on them."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .allocator import Allocator
from .data_type import DataType
from .errors import TensorError, ensure, vec_to_string
from .objects import GraphObject
from .op_type import OpType
from .operators.matmul import Matmul
from .operators.transpose import Transpose
from .tensor import Blob, Tensor


def _swaps_last_two(permute: Sequence[int]) -> bool:
    """True when ``permute`` keeps every axis but exchanges the last two."""
    rank = len(permute)
    if rank < 2:
        return False
    if any(axis != i for i, axis in enumerate(permute[: rank - 2])):
        return False
    return permute[-1] == rank - 2 and permute[-2] == rank - 1


class Graph(GraphObject):
    """A set of tensors and the operators connecting them."""

    def __init__(self, runtime) -> None:
        super().__init__()
        self.runtime = runtime
        self.tensors: list[Tensor] = []
        self.operators: list = []
        self.allocator = Allocator(runtime)
        self.sorted = False

    def add_tensor(self, shape: Sequence[int], dtype: DataType = DataType.FLOAT32) -> Tensor:
        """Create a tensor of ``shape`` and ``dtype`` in this graph."""
        tensor = Tensor(shape, dtype, self.runtime)
        self.tensors.append(tensor)
        return tensor

    def attach_tensor(self, tensor: Tensor) -> Tensor:
        """Add an existing tensor; it must live on this graph's runtime."""
        ensure(
            tensor.runtime is self.runtime,
            f"Tensor runtime mismatch: cannot add a tenosr in {tensor.runtime} "
            f"to {self.runtime}",
        )
        self.tensors.append(tensor)
        return tensor

    def attach_tensors(self, tensors: Iterable[Tensor]) -> list[Tensor]:
        """Add several existing tensors."""
        tensors = list(tensors)
        for tensor in tensors:
            self.attach_tensor(tensor)
        return tensors

    def remove_operator(self, op) -> None:
        """Drop ``op`` from the operator list if present."""
        if op in self.operators:
            self.operators.remove(op)

    def remove_tensor(self, tensor: Tensor) -> None:
        """Drop ``tensor`` from the tensor list if present."""
        if tensor in self.tensors:
            self.tensors.remove(tensor)

    def get_tensor(self, fuid: int) -> Tensor | None:
        """The tensor with family id ``fuid``, or ``None``."""
        return next((t for t in self.tensors if t.fuid == fuid), None)

    def add_op(self, op_class, *args, **kwargs):
        """Build an operator whose outputs are created in this graph."""
        op = op_class(self, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def add_op_with_outputs(self, op_class, *args, **kwargs):
        """Build an operator whose output tensors are given."""
        op = op_class(None, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def _add_operator_and_connect(self, op) -> None:
        self.sorted = False
        self.operators.append(op)
        for tensor in op.inputs:
            if tensor is None:
                continue
            tensor._add_target(op)
            pred = tensor.source()
            if pred is not None:
                pred._add_successor(op)
                op._add_predecessor(pred)
        for tensor in op.outputs:
            if tensor is None:
                continue
            tensor._set_source(op)
            for succ in tensor.targets():
                succ._add_predecessor(op)
                op._add_successor(succ)

    def inputs(self) -> list[Tensor]:
        """Tensors that no operator produces."""
        return [t for t in self.tensors if t.source() is None]

    def outputs(self) -> list[Tensor]:
        """Tensors that no operator reads."""
        return [t for t in self.tensors if not t.targets()]

    def topo_sort(self) -> bool:
        """Order operators topologically; ``False`` if the graph has a cycle."""
        if self.sorted:
            return True
        ordered: list = []
        placed: set[int] = set()
        while len(ordered) < len(self.operators):
            modified = False
            for op in self.operators:
                if id(op) in placed:
                    continue
                ready = all(
                    (src := tensor.source()) is None or id(src) in placed
                    for tensor in op.inputs
                )
                if ready:
                    modified = True
                    ordered.append(op)
                    placed.add(id(op))
            if not modified:
                return False
        self.operators = ordered
        self.sorted = True
        return True

    def optimize(self) -> None:
        """Fold transposes into matmuls and cancel pairs of inverse transposes."""
        changed = True
        while changed:
            changed = False
            for op in self.operators:
                if op.op_type == OpType.MATMUL and isinstance(op, Matmul):
                    for i in range(2):
                        tensor = op.inputs[i]
                        prev = tensor.source()
                        if (
                            prev is not None
                            and prev.op_type == OpType.TRANSPOSE
                            and isinstance(prev, Transpose)
                            and _swaps_last_two(prev.permute)
                        ):
                            if i == 0:
                                op.trans_a = not op.trans_a
                            else:
                                op.trans_b = not op.trans_b
                            origin = prev.inputs[0]
                            tensor._remove_target(op)
                            origin._add_target(op)
                            op.replace_input(tensor, origin)
                            changed = True

                if op.op_type == OpType.TRANSPOSE and isinstance(op, Transpose):
                    middle = op.inputs[0]
                    prev = middle.source()
                    if (
                        prev is not None
                        and prev.op_type == OpType.TRANSPOSE
                        and isinstance(prev, Transpose)
                        and _swaps_last_two(prev.permute)
                        and _swaps_last_two(op.permute)
                    ):
                        origin = prev.inputs[0]
                        result = op.output()
                        for consumer in result.targets():
                            result._remove_target(consumer)
                            origin._add_target(consumer)
                            consumer.replace_input(result, origin)
                        changed = True

            kept = []
            for op in self.operators:
                unused = op.op_type != OpType.MATMUL and all(
                    not out.targets() for out in op.outputs
                )
                if not unused:
                    kept.append(op)
                    continue
                for tensor in op.inputs:
                    tensor._remove_target(op)
                for tensor in op.outputs:
                    if tensor.source() is op:
                        tensor._set_source(None)
            self.operators = kept

            self.tensors = [
                t for t in self.tensors if t.source() is not None or t.targets()
            ]

        for op in self.operators:
            op._clear_links()
        for op in self.operators:
            for tensor in op.inputs:
                src = tensor.source()
                if src is not None:
                    op._add_predecessor(src)
                    src._add_successor(op)
        self.sorted = False

    def shape_infer(self) -> None:
        """Recompute output shapes of every operator and update the tensors."""
        for op in self.operators:
            shapes = op.infer_shape()
            ensure(shapes is not None, "shape inference failed")
            ensure(len(shapes) == len(op.outputs), "output count mismatch")
            for new_shape, output in zip(shapes, op.outputs):
                if tuple(new_shape) != output.shape:
                    tensor = self.get_tensor(output.fuid)
                    ensure(tensor is not None, "output tensor is not in the graph")
                    tensor.set_shape(new_shape)

    def data_malloc(self) -> None:
        """Plan tensor offsets, allocate the arena and bind every tensor to it."""
        ensure(self.topo_sort(), "graph has a cycle")

        offsets: dict[int, int] = {}
        ref_count = {id(t): len(t.targets()) for t in self.tensors}

        for tensor in self.tensors:
            if tensor.source() is None and tensor.nbytes() > 0:
                offsets[id(tensor)] = self.allocator.alloc(tensor.nbytes())

        for op in self.operators:
            for tensor in op.outputs:
                if tensor.nbytes() > 0:
                    offsets[id(tensor)] = self.allocator.alloc(tensor.nbytes())
            for tensor in op.inputs:
                key = id(tensor)
                if key in ref_count:
                    ref_count[key] -= 1
                    if ref_count[key] == 0 and key in offsets:
                        self.allocator.free(offsets[key], tensor.nbytes())

        buffer = self.allocator.get_ptr()
        for tensor in self.tensors:
            key = id(tensor)
            if tensor.nbytes() > 0 and key in offsets:
                tensor.set_data_blob(Blob(self.runtime, buffer, offsets[key]))

        self.allocator.info()

    def check_valid(self) -> bool:
        """Check the graph's connectivity invariants; raise on violation."""
        for tensor in self.tensors:
            source = tensor.source()
            ensure(tensor.targets() or source is not None, "dangling tensor")
            for op in tensor.targets():
                ensure(op in self.operators, "tensor target not in graph")
            ensure(source is None or source in self.operators, "tensor source not in graph")
        for op in self.operators:
            for tensor in op.inputs:
                ensure(tensor in self.tensors, "operator input not in graph")
            for tensor in op.outputs:
                ensure(tensor in self.tensors, "operator output not in graph")
            for pred in op.predecessors():
                ensure(pred in self.operators, "predecessor not in graph")
            for succ in op.successors():
                ensure(succ in self.operators, "successor not in graph")
        seen: set[int] = set()
        for tensor in self.tensors:
            if tensor.fuid in seen:
                raise TensorError(str(tensor.fuid))
            seen.add(tensor.fuid)
        return True

    def __str__(self) -> str:
        lines = ["Graph Tensors:\n"]
        lines.extend(f"{tensor}\n" for tensor in self.tensors)
        lines.append("Graph operators:\n")
        for op in self.operators:
            preds = vec_to_string(o.guid for o in op.predecessors())
            succs = vec_to_string(o.guid for o in op.successors())
            lines.append(f"OP {op.guid}, pred {preds}, succ {succs}, {op}\n")
        return "".join(lines)