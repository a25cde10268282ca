"""
Closable Channel
================

A bounded FIFO that a producer closes once it has nothing more to send.
Receivers block until an item is available or the channel is both closed
and empty, at which point they see end-of-stream. This is the only
synchronization primitive the engine uses between threads.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Send on a closed channel, or receive on a closed and drained one."""


class Channel(Generic[T]):
    """
    Closable FIFO channel.

    Args:
        capacity: Maximum buffered items; senders block when full.
            None means unbounded.
        name: Label used in error messages
    """

    def __init__(self, capacity: Optional[int] = None, name: str = "channel"):
        if capacity is not None and capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self.name = name
        self._items: Deque[T] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def _full(self) -> bool:
        # zero capacity still buffers one item so a send can complete
        limit = max(1, self.capacity) if self.capacity is not None else None
        return limit is not None and len(self._items) >= limit

    def send(self, item: T) -> None:
        with self._cond:
            while not self._closed and self._full():
                self._cond.wait()
            if self._closed:
                raise ChannelClosed(f"send on closed {self.name}")
            self._items.append(item)
            self._cond.notify_all()

    def close(self) -> None:
        """Mark end of stream. Closing twice is an error."""
        with self._cond:
            if self._closed:
                raise ChannelClosed(f"{self.name} already closed")
            self._closed = True
            self._cond.notify_all()

    def receive(self) -> T:
        """
        Next item, blocking while the channel is open and empty.

        Raises:
            ChannelClosed: the channel is closed and drained
        """
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                raise ChannelClosed(f"{self.name} closed and drained")
            item = self._items.popleft()
            self._cond.notify_all()
            return item

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
