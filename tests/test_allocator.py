import pytest

from minitensor.allocator import Allocator
from minitensor.data_type import DataType
from minitensor.errors import TensorError
from minitensor.runtime import NativeCpuRuntime
from minitensor.tensor import Tensor


@pytest.fixture
def runtime():
    return NativeCpuRuntime.instance()


def _tensor(shape, runtime):
    return Tensor(shape, DataType.FLOAT32, runtime)


def test_alloc_reuses_freed_block(runtime):
    shape = (1, 2, 2, 3)
    a, b, c, d = (_tensor(shape, runtime) for _ in range(4))
    allocator = Allocator(runtime)
    offset_a = allocator.alloc(a.nbytes())
    offset_b = allocator.alloc(b.nbytes())
    offset_c = allocator.alloc(c.nbytes())
    allocator.free(offset_b, b.nbytes())
    offset_d = allocator.alloc(d.nbytes())
    assert offset_b == offset_d
    assert not (offset_a == 0 and offset_b == 0 and offset_c == 0 and offset_d == 0)


def test_alloc_with_end_free_block(runtime, capsys):
    shape = (1, 2, 2, 3)
    a, b, c = (_tensor(shape, runtime) for _ in range(3))
    d = _tensor((2, 2, 2, 3), runtime)
    allocator = Allocator(runtime)
    allocator.alloc(a.nbytes())
    allocator.alloc(b.nbytes())
    offset_c = allocator.alloc(c.nbytes())
    allocator.info()
    allocator.free(offset_c, c.nbytes())
    offset_d = allocator.alloc(d.nbytes())
    allocator.info()
    assert offset_c == offset_d
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Used memory: ")
    assert ", peak memory: " in lines[1]


def test_get_ptr_returns_same_buffer(runtime):
    shape = (1, 2, 2, 3)
    allocator = Allocator(runtime)
    for _ in range(4):
        allocator.alloc(_tensor(shape, runtime).nbytes())
    ptr1 = allocator.get_ptr()
    ptr2 = allocator.get_ptr()
    assert ptr1 is ptr2
    assert len(ptr1) >= allocator.peak


def test_sizes_are_aligned(runtime):
    allocator = Allocator(runtime)
    first = allocator.alloc(1)
    second = allocator.alloc(1)
    assert second - first == allocator.alignment
    assert allocator.peak == 2 * allocator.alignment


def test_adjacent_frees_merge(runtime):
    allocator = Allocator(runtime)
    a = allocator.alloc(16)
    b = allocator.alloc(16)
    allocator.alloc(16)
    allocator.free(a, 16)
    allocator.free(b, 16)
    assert allocator.alloc(32) == a


def test_best_fit_is_chosen(runtime):
    allocator = Allocator(runtime)
    big = allocator.alloc(32)
    allocator.alloc(8)
    small = allocator.alloc(16)
    allocator.alloc(8)
    allocator.free(big, 32)
    allocator.free(small, 16)
    assert allocator.alloc(16) == small


def test_freeing_everything_shrinks_to_zero(runtime):
    allocator = Allocator(runtime)
    a = allocator.alloc(24)
    b = allocator.alloc(24)
    allocator.free(a, 24)
    allocator.free(b, 24)
    assert allocator.used == 0
    assert allocator.peak == 48


def test_alloc_after_arena_raises(runtime):
    allocator = Allocator(runtime)
    offset = allocator.alloc(8)
    allocator.get_ptr()
    with pytest.raises(TensorError):
        allocator.alloc(8)
    with pytest.raises(TensorError):
        allocator.free(offset, 8)