"""Execution runtimes."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .errors import TensorError
from .kernels import KernelRegistry
from .op_type import Device

_WORD = 8


class Runtime(ABC):
    """Executes graphs and provides memory on one device."""

    def __init__(self, device: Device) -> None:
        self.device = device

    @abstractmethod
    def run(self, graph) -> None:
        """Execute every operator of ``graph`` in order."""

    @abstractmethod
    def alloc(self, size: int):
        """Return a zero-filled buffer of at least ``size`` bytes."""

    @abstractmethod
    def dealloc(self, buffer) -> None:
        """Release a buffer returned by :meth:`alloc`."""

    def is_cpu(self) -> bool:
        return True

    @abstractmethod
    def __str__(self) -> str:
        """Name of the runtime."""


class NativeCpuRuntime(Runtime):
    """Runtime that executes kernels on the host."""

    _shared: NativeCpuRuntime | None = None

    def __init__(self) -> None:
        super().__init__(Device.CPU)

    @classmethod
    def instance(cls) -> NativeCpuRuntime:
        """The process-wide CPU runtime."""
        if NativeCpuRuntime._shared is None:
            NativeCpuRuntime._shared = cls()
        return NativeCpuRuntime._shared

    def run(self, graph) -> None:
        from . import cpu_kernels  # noqa: F401  (registers the host kernels)

        registry = KernelRegistry.instance()
        for op in graph.operators:
            kernel = registry.get_kernel((self.device, op.op_type))
            kernel.compute(op, self)

    def alloc(self, size: int) -> bytearray:
        return bytearray((size + _WORD - 1) // _WORD * _WORD)

    def dealloc(self, buffer) -> None:
        try:
            buffer.clear()
        except BufferError as exc:
            raise TensorError("buffer is still in use") from exc

    def __str__(self) -> str:
        return "CPU Runtime"