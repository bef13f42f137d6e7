# minitensor

A small tensor computation-graph framework. You describe a model as a graph
of tensors and operators. minitensor then does four things:

- it infers output shapes and data types;
- it simplifies the graph;
- it plans memory offline with a best-fit allocator that merges free blocks;
- it runs the graph with reference CPU kernels built on numpy.

## Installation

```
pip install .
```

To install and run the test suite:

```
pip install ".[test]"
pytest
```

## Concepts

- `Graph` (`minitensor.graph`) holds tensors (`graph.tensors`) and operators
  (`graph.operators`), and wires the links between producers and consumers.
  Operators are added with `add_op`, which creates the output tensors. If the
  output tensors already exist, use `add_op_with_outputs` instead.
- `Tensor` (`minitensor.tensor`) carries a shape, a `DataType` and a `Blob`.
  The blob is set once memory is planned and is a view onto the graph's
  single buffer. Useful methods:
  - `raw_data()` returns the elements as a flat numpy view.
  - `set_data(generator)` fills the tensor.
  - `equal_data(other)` compares the tensor with another tensor or with a
    list of values.
  - `data_string()` / `print_data()` render the elements.
- `DataType` (`minitensor.data_type`) is an `IntEnum` numbered like the ONNX
  element types, for example `DataType.FLOAT32` and `DataType.UINT32`.
- The operators live in `minitensor.operators`:
  - `element_wise`: `Add`, `Sub`, `Mul`, `Div`, with broadcasting
  - `transpose`: `Transpose`
  - `matmul`: `Matmul`, with the flags `trans_a` / `trans_b`
  - `concat`: `Concat`
  - `unary`: `Relu`, `Clip` and `Cast` (see `CastType`)
- `NativeCpuRuntime` (`minitensor.runtime`) executes a graph. For each
  operator it looks up the kernel registered in
  `minitensor.kernels.KernelRegistry`. The CPU kernels are in
  `minitensor.cpu_kernels` and are registered the first time `run` is
  called.
- `Allocator` (`minitensor.allocator`) simulates allocation to find the peak
  memory a graph needs, then allocates that memory once.
- The fill helpers in `minitensor.data_generator` are
  `IncrementalGenerator`, `ValueGenerator`, `OneGenerator` and
  `ZeroGenerator`. They support `FLOAT32` and `UINT32` only.

## Example

```python
from minitensor.data_generator import IncrementalGenerator, OneGenerator
from minitensor.data_type import DataType
from minitensor.graph import Graph
from minitensor.operators.concat import Concat
from minitensor.runtime import NativeCpuRuntime

runtime = NativeCpuRuntime.instance()
g = Graph(runtime)
t1 = g.add_tensor([2, 2, 3, 1], DataType.FLOAT32)
t2 = g.add_tensor([2, 2, 1, 1], DataType.FLOAT32)
op = g.add_op(Concat, [t1, t2], None, 2)

g.data_malloc()
t1.set_data(IncrementalGenerator())
t2.set_data(OneGenerator())
runtime.run(g)

print(op.output().data_string())
```

`data_malloc()` prints the arena size and the memory usage it planned.

## Graph passes

- `topo_sort()` orders the operators topologically. It returns `False` if
  the graph has a cycle.
- `shape_infer()` recomputes output shapes and updates the tensors.
- `check_valid()` checks the graph's connectivity invariants and raises if
  one is violated.
- `optimize()` applies two rewrites until nothing changes:
  1. Two consecutive `Transpose` operators that each swap the last two
     dimensions cancel out and are removed.
  2. A `Transpose` that swaps the last two dimensions and feeds a `Matmul` is
     folded into the matmul's `trans_a` / `trans_b` flag.

  Non-matmul operators whose outputs have no consumers are dropped. Tensors
  with neither a producer nor a consumer are dropped as well. Afterwards the
  predecessor and successor links are rebuilt.

## Limitations

- Kernels exist only for Concat, Add, Sub, Mul, Div, Transpose, Relu and
  Clip, and only for `FLOAT32` and `UINT32` data. `Matmul` and `Cast` take
  part in shape and type inference but cannot be executed.
- The only runtime is the CPU one.
- There is no model import or export format and no command-line tool.

## Errors

Failed checks raise `minitensor.errors.TensorError`. Examples of such checks:

- incompatible broadcast shapes
- mismatched matmul inner dimensions
- out-of-range axes
- unregistered kernels
- unsupported data types in kernels