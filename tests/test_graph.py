import numpy as np
import pytest

from minitensor.data_generator import IncrementalGenerator
from minitensor.data_type import DataType
from minitensor.errors import TensorError
from minitensor.graph import Graph
from minitensor.op_type import OpType
from minitensor.operators.element_wise import Add
from minitensor.operators.matmul import Matmul
from minitensor.operators.transpose import Transpose
from minitensor.runtime import NativeCpuRuntime
from minitensor.tensor import Tensor


@pytest.fixture
def runtime():
    return NativeCpuRuntime.instance()


def test_optimize_removes_transposes(runtime):
    g = Graph(runtime)
    i1 = g.add_tensor((2, 3, 4, 5), DataType.UINT32)
    i2 = g.add_tensor((2, 3, 4, 5), DataType.UINT32)
    t1 = g.add_tensor((2, 3, 5, 4), DataType.UINT32)
    t2 = g.add_tensor((2, 3, 4, 5), DataType.UINT32)
    t3 = g.add_tensor((2, 3, 5, 4), DataType.UINT32)
    o = g.add_tensor((2, 3, 4, 4), DataType.UINT32)
    g.add_op_with_outputs(Transpose, i1, t1, (0, 1, 3, 2))
    g.add_op_with_outputs(Transpose, t1, t2, (0, 1, 3, 2))
    g.add_op_with_outputs(Transpose, i2, t3, (0, 1, 3, 2))
    g.add_op_with_outputs(Matmul, t2, t3, o)
    g.optimize()
    assert len(g.operators) == 1
    assert len(g.tensors) == 3
    assert int(g.operators[0].op_type) == 7
    op = g.operators[0]
    assert op.inputs[0].guid == g.guid + 1
    assert op.inputs[1].guid == g.guid + 2
    assert op.inputs[0] is i1
    assert op.inputs[1] is i2
    assert op.outputs[0] is o
    assert op.trans_a is False
    assert op.trans_b is True
    assert g.check_valid() is True


def test_optimize_folds_single_transpose_into_a(runtime):
    g = Graph(runtime)
    a = g.add_tensor((3, 4))
    b = g.add_tensor((3, 2))
    at = g.add_op(Transpose, a, None, (1, 0)).output()
    mm = g.add_op(Matmul, at, b, None)
    g.optimize()
    assert g.operators == [mm]
    assert mm.trans_a is True
    assert mm.inputs[0] is a
    assert mm.infer_shape() == [(4, 2)]


def test_optimize_keeps_other_permutations(runtime):
    g = Graph(runtime)
    a = g.add_tensor((3, 4, 5))
    b = g.add_tensor((4, 5, 2))
    at = g.add_op(Transpose, a, None, (1, 0, 2)).output()
    mm = g.add_op(Matmul, at, b, None)
    g.optimize()
    assert len(g.operators) == 2
    assert mm.trans_a is False
    assert mm.inputs[0] is at
    assert mm.predecessors()[0].op_type == OpType.TRANSPOSE


def test_add_op_creates_output_and_links(runtime):
    g = Graph(runtime)
    a = g.add_tensor((2, 3))
    op1 = g.add_op(Transpose, a, None, (1, 0))
    op2 = g.add_op(Transpose, op1.output(), None, (1, 0))
    assert op1.output().shape == (3, 2)
    assert op1.output() in g.tensors
    assert op2.predecessors() == [op1]
    assert op1.successors() == [op2]
    assert a.targets() == [op1]
    assert op1.output().source() is op1
    assert g.inputs() == [a]
    assert g.outputs() == [op2.output()]


def test_topo_sort_reorders(runtime):
    g = Graph(runtime)
    i = g.add_tensor((2, 2))
    t = g.add_tensor((2, 2))
    o = g.add_tensor((2, 2))
    add = g.add_op_with_outputs(Add, t, t, o)
    tr = g.add_op_with_outputs(Transpose, i, t, (1, 0))
    assert g.operators == [add, tr]
    assert g.topo_sort() is True
    assert g.operators == [tr, add]


def test_topo_sort_detects_cycle(runtime):
    g = Graph(runtime)
    a = g.add_tensor((2, 2))
    b = g.add_tensor((2, 2))
    g.add_op_with_outputs(Transpose, a, b, (0, 1))
    g.add_op_with_outputs(Transpose, b, a, (0, 1))
    assert g.topo_sort() is False


def test_shape_infer_updates_outputs(runtime):
    g = Graph(runtime)
    i = g.add_tensor((2, 3))
    t = g.add_op(Transpose, i, None, (1, 0)).output()
    i.set_shape((4, 5))
    g.shape_infer()
    assert t.shape == (5, 4)
    assert t.size() == 20


def test_get_tensor_by_fuid(runtime):
    g = Graph(runtime)
    a = g.add_tensor((1,))
    b = g.add_tensor((2,))
    assert g.get_tensor(b.fuid) is b
    assert g.get_tensor(a.fuid) is a
    assert g.get_tensor(-1) is None


def test_attach_tensor_checks_runtime(runtime):
    g = Graph(runtime)
    own = Tensor((2,), DataType.FLOAT32, runtime)
    assert g.attach_tensor(own) is own
    foreign = Tensor((2,), DataType.FLOAT32, NativeCpuRuntime())
    with pytest.raises(TensorError):
        g.attach_tensor(foreign)
    others = [Tensor((1,), DataType.FLOAT32, runtime) for _ in range(2)]
    assert g.attach_tensors(others) == others
    assert len(g.tensors) == 3


def test_remove_operator_and_tensor(runtime):
    g = Graph(runtime)
    a = g.add_tensor((2, 2))
    op = g.add_op(Transpose, a, None, (1, 0))
    g.remove_operator(op)
    g.remove_tensor(a)
    assert g.operators == []
    assert g.tensors == [op.output()]


def test_check_valid_rejects_dangling_tensor(runtime):
    g = Graph(runtime)
    g.add_tensor((2,))
    with pytest.raises(TensorError):
        g.check_valid()


def test_check_valid_accepts_connected_graph(runtime):
    g = Graph(runtime)
    a = g.add_tensor((2, 3))
    g.add_op(Transpose, a, None, (1, 0))
    assert g.check_valid() is True


def test_data_malloc_binds_tensors(runtime):
    g = Graph(runtime)
    i = g.add_tensor((2, 3))
    t = g.add_op(Transpose, i, None, (1, 0)).output()
    g.data_malloc()
    assert i.data.offset == 0
    assert t.data.offset == 24
    assert g.allocator.peak == 48
    i.set_data(IncrementalGenerator())
    assert np.array_equal(i.raw_data(), np.arange(6, dtype=np.float32))
    assert np.array_equal(t.raw_data(), np.zeros(6, dtype=np.float32))


def test_str_lists_tensors_and_operators(runtime):
    g = Graph(runtime)
    a = g.add_tensor((2, 3))
    op = g.add_op(Transpose, a, None, (1, 0))
    text = str(g)
    assert text.startswith("Graph Tensors:\n")
    assert "Graph operators:\n" in text
    assert f"OP {op.guid}, pred [], succ [], Transpose[{op.guid}]" in text