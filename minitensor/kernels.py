"""Kernel interface and the registry that maps (device, op type) to kernels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from .errors import TensorError, ensure
from .op_type import Device
from .shape_utils import kernel_attrs_str


class Kernel(ABC):
    """Executes one kind of operator on one device."""

    @abstractmethod
    def compute(self, op, context) -> None:
        """Run ``op`` using the runtime ``context``."""


@dataclass(frozen=True)
class KernelRecord:
    """A registered kernel with its name and registration number."""

    kernel: Kernel
    name: str
    id: int


def _normalize(key) -> tuple[Device, int]:
    device, op_type = key
    return Device(device), int(op_type)


class KernelRegistry:
    """Lookup table of kernels keyed by ``(device, op_type)``."""

    _shared: KernelRegistry | None = None

    def __init__(self) -> None:
        self._records: dict[tuple[Device, int], KernelRecord] = {}

    @classmethod
    def instance(cls) -> KernelRegistry:
        """The process-wide registry."""
        if KernelRegistry._shared is None:
            KernelRegistry._shared = cls()
        return KernelRegistry._shared

    def register(self, key, kernel: Kernel, name: str) -> bool:
        """Add ``kernel`` under ``key``; a key may be registered only once."""
        key = _normalize(key)
        ensure(key not in self._records, "Kernel already registered")
        self._records[key] = KernelRecord(kernel, name, len(self._records) + 1)
        return True

    def get_kernel(self, key) -> Kernel:
        """The kernel registered under ``key``."""
        key = _normalize(key)
        record = self._records.get(key)
        if record is None:
            raise TensorError(f"Kernel not found for key {{{kernel_attrs_str(key)}}}")
        return record.kernel

    def get_record(self, key) -> KernelRecord:
        """The full record for ``key``; raises ``KeyError`` if absent."""
        return self._records[_normalize(key)]


def register_kernel(device: Device, op_type, name: str):
    """Class decorator registering an instance of the kernel in the shared registry."""

    def decorate(kernel_class):
        KernelRegistry.instance().register((device, op_type), kernel_class(), name)
        return kernel_class

    return decorate