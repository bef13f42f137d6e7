"""Offline memory planner that hands out offsets inside one arena."""

from __future__ import annotations

from bisect import bisect_left

from .errors import ensure

_ALIGNMENT = 8  # width of the widest supported element type


class Allocator:
    """Plans offsets for tensors and allocates the arena once planning is done.

    Freed ranges are kept in a map from start offset to length. Allocation
    picks the best-fitting free range. Freed ranges are merged with their
    neighbours, and a range reaching the end of the arena shrinks it.
    """

    def __init__(self, runtime) -> None:
        self.runtime = runtime
        self.used = 0
        self.peak = 0
        self.alignment = _ALIGNMENT
        self._buffer = None
        self._free: dict[int, int] = {}

    def _aligned(self, size: int) -> int:
        return ((size - 1) // self.alignment + 1) * self.alignment

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes (rounded up) and return their offset."""
        ensure(self._buffer is None, "arena already allocated")
        size = self._aligned(size)

        best_addr = None
        best_fragment = None
        for addr in sorted(self._free):
            block = self._free[addr]
            if block < size:
                continue
            fragment = block - size
            if best_fragment is None or fragment < best_fragment:
                best_addr, best_fragment = addr, fragment
            if fragment == 0:
                break

        if best_addr is not None:
            del self._free[best_addr]
            if best_fragment > 0:
                self._free[best_addr + size] = best_fragment
            return best_addr

        addr = self.used
        self.used += size
        self.peak = max(self.peak, self.used)
        return addr

    def free(self, addr: int, size: int) -> None:
        """Return the range at ``addr`` of ``size`` bytes to the planner."""
        ensure(self._buffer is None, "arena already allocated")
        size = self._aligned(size)

        start = addr
        length = self._free.setdefault(start, size)
        keys = sorted(self._free)
        pos = bisect_left(keys, start)

        if pos + 1 < len(keys) and start + length == keys[pos + 1]:
            length += self._free.pop(keys[pos + 1])
            self._free[start] = length

        if pos > 0:
            prev = keys[pos - 1]
            if prev + self._free[prev] == start:
                del self._free[start]
                length += self._free[prev]
                start = prev
                self._free[start] = length

        if start + length == self.used:
            self.used = start
            del self._free[start]

    def get_ptr(self):
        """Allocate the arena of ``peak`` bytes on first call and return it."""
        if self._buffer is None:
            self._buffer = self.runtime.alloc(self.peak)
            print(f"Allocator really alloc: {id(self._buffer):#x} {self.peak} bytes")
        return self._buffer

    def info(self) -> None:
        """Print current and peak usage."""
        print(f"Used memory: {self.used}, peak memory: {self.peak}")