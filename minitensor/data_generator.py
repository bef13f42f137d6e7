"""Generators that fill tensor storage with test data."""

from __future__ import annotations

import numpy as np

from .data_type import DataType
from .errors import TensorError


class DataGenerator:
    """Fills the first ``size`` elements of a buffer; UInt32 and Float32 only."""

    def __call__(self, data, size: int, dtype: DataType) -> None:
        if dtype not in (DataType.UINT32, DataType.FLOAT32):
            raise TensorError("Unimplemented")
        self._fill(data, size)

    def _fill(self, data, size: int) -> None:
        raise TensorError("Unimplemented")


class IncrementalGenerator(DataGenerator):
    """Writes 0, 1, 2, ... into the buffer."""

    def _fill(self, data, size: int) -> None:
        data[:size] = np.arange(size)


class ValueGenerator(DataGenerator):
    """Writes one constant into every element."""

    def __init__(self, value) -> None:
        self.value = value

    def _fill(self, data, size: int) -> None:
        data[:size] = self.value


class OneGenerator(ValueGenerator):
    """Writes ones."""

    def __init__(self) -> None:
        super().__init__(1)


class ZeroGenerator(ValueGenerator):
    """Writes zeros."""

    def __init__(self) -> None:
        super().__init__(0)