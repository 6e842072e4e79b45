"""A pool of reusable byte buffers grouped into size classes."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Iterable

DEFAULT_POOL_CHAN_SIZE = 32

DEFAULT_LIST_SIZES = (
    8,
    16,
    64,
    256,
    512,
    1024,
    4096,
    8192,
    16384,
    32768,
    65536,
    131072,
    262144,
    524288,
    1048576,
    2097152,
    4194304,
    8388608,
    16777216,
)


class PoolMisuseError(RuntimeError):
    """Raised when a Bytes is used after being recycled or recycled twice."""


@dataclass
class ListStats:
    """Allocation statistics for one size class; size 0 means no class."""

    list_size: int
    total_new: int = 0
    total_get: int = 0
    total_unrecycled: int = 0


class _ListStatsManager:
    def __init__(self, sizes: list[int]) -> None:
        self._sizes = sizes
        self._lock = threading.Lock()
        self._stats = {size: ListStats(list_size=size) for size in sizes}
        self._stats[0] = ListStats(list_size=0)

    def list_stats(self) -> list[ListStats]:
        with self._lock:
            return [replace(self._stats[size]) for size in self._sizes]

    def record_new(self, size: int) -> None:
        with self._lock:
            self._stats[size].total_new += 1

    def record_get(self, size: int) -> None:
        with self._lock:
            stats = self._stats[size]
            stats.total_get += 1
            stats.total_unrecycled += 1

    def record_recycle(self, size: int) -> None:
        with self._lock:
            self._stats[size].total_unrecycled -= 1


class Bytes:
    """A byte buffer handed out by a SegList; call recycle when done."""

    def __init__(self, pool: _Pool | None, size: int) -> None:
        self._data = bytearray(size)
        self._pool = pool
        self._cur_len = 0
        self._dirty = False

    def _check_live(self) -> None:
        if self._dirty:
            raise PoolMisuseError("use after free")

    def copy_from(self, data: bytes, offset: int) -> int:
        """Copy data into the buffer at offset and return the count copied.

        Raises EOFError if the data would run past the buffer capacity.
        """
        self._check_live()
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        end = len(data) + offset
        if end > len(self._data):
            raise EOFError
        self._data[offset:end] = data
        if self._cur_len < end:
            self._cur_len = end
        return len(data)

    def copy_to(self, to, offset: int) -> int:
        """Fill the writable buffer `to` from offset and return the count copied.

        Raises EOFError if that would read past the current length.
        """
        self._check_live()
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        target = memoryview(to).cast("B")
        end = len(target) + offset
        if end > self._cur_len:
            raise EOFError
        target[:] = self._data[offset:end]
        return len(target)

    def __len__(self) -> int:
        self._check_live()
        return self._cur_len

    def recycle(self) -> None:
        """Return the buffer to its pool. Must be called exactly once."""
        if self._dirty:
            raise PoolMisuseError("double free")
        self._dirty = True
        if self._pool is not None:
            self._pool.put(self)

    def _memset_zero(self) -> None:
        self._data[:] = bytes(len(self._data))

    def _reset(self) -> None:
        self._cur_len = 0
        self._dirty = False


class _Pool:
    """A bounded fast queue backed by an unbounded free list."""

    def __init__(
        self,
        stats: _ListStatsManager,
        chan_size: int,
        size: int,
        no_memset_zero: bool,
    ) -> None:
        self._stats = stats
        self._size = size
        self._no_memset_zero = no_memset_zero
        self._chan_size = chan_size
        self._queue: deque[Bytes] = deque()
        self._overflow: list[Bytes] = []
        self._lock = threading.Lock()

    def get(self) -> Bytes:
        with self._lock:
            if self._queue:
                b = self._queue.popleft()
            elif self._overflow:
                b = self._overflow.pop()
            else:
                b = None
        if b is None:
            self._stats.record_new(self._size)
            b = Bytes(self, self._size)
        b._reset()
        if not self._no_memset_zero:
            b._memset_zero()
        self._stats.record_get(self._size)
        return b

    def put(self, b: Bytes) -> None:
        with self._lock:
            if len(self._queue) < self._chan_size:
                self._queue.append(b)
            else:
                self._overflow.append(b)
        self._stats.record_recycle(self._size)


class SegList:
    """Hands out Bytes from the smallest size class that fits."""

    def __init__(
        self,
        pool_chan_size: int = DEFAULT_POOL_CHAN_SIZE,
        list_sizes: Iterable[int] | None = DEFAULT_LIST_SIZES,
        no_memset_zero: bool = False,
    ) -> None:
        self._list_sizes = sorted(size for size in (list_sizes or ()) if size != 0)
        self._stats = _ListStatsManager(self._list_sizes)
        self._pools = {
            size: _Pool(self._stats, pool_chan_size, size, no_memset_zero)
            for size in self._list_sizes
        }

    def get(self, size: int) -> Bytes | None:
        """Return a Bytes of at least the given capacity, or None if size is 0."""
        if size < 0:
            raise ValueError(f"negative size: {size}")
        if size == 0:
            return None
        for list_size in self._list_sizes:
            if size <= list_size:
                return self._pools[list_size].get()
        self._stats.record_new(0)
        return Bytes(None, size)

    def list_stats(self) -> list[ListStats]:
        """Return a snapshot of the statistics for each size class."""
        return self._stats.list_stats()


def new_no_pool_seg_list() -> SegList:
    """Return a SegList that allocates every buffer fresh."""
    return SegList(pool_chan_size=0, list_sizes=None)


def total_unrecycled(seg_list: SegList) -> int:
    """Return the number of pooled buffers handed out and not yet recycled."""
    return sum(stats.total_unrecycled for stats in seg_list.list_stats())