"""A bounded, thread-safe token queue for stream processing."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Token(Generic[T]):
    """A data item flowing through the pipeline."""

    data: T
    index: int


@dataclass(frozen=True)
class StageType:
    """A serial stage (``workers is None``) or a parallel one with N workers."""

    workers: Optional[int] = None

    @classmethod
    def serial(cls) -> "StageType":
        return cls(None)

    @classmethod
    def parallel(cls, workers: int) -> "StageType":
        return cls(workers)

    @property
    def is_serial(self) -> bool:
        return self.workers is None

    @property
    def is_parallel(self) -> bool:
        return self.workers is not None


class PipelineFullError(Exception):
    """Raised when the pipeline already holds its maximum number of tokens."""

    def __init__(self) -> None:
        super().__init__("Pipeline at capacity")


class ConcurrentPipeline(Generic[T]):
    """A FIFO of tokens with a buffer limit (blocking) and a token limit (raising)."""

    def __init__(self, buffer_size: int, max_tokens: int) -> None:
        self._queue: Deque[Token[T]] = deque()
        self._buffer_size = buffer_size
        self._max_tokens = max_tokens
        self._in_flight = 0
        self._stopped = False
        self._cond = threading.Condition()

    def push(self, data: T) -> None:
        """Enqueue ``data``, waiting while the buffer is full.

        Raises PipelineFullError when the token limit is reached.
        """
        with self._cond:
            if self._in_flight >= self._max_tokens:
                raise PipelineFullError()
            while len(self._queue) >= self._buffer_size:
                self._cond.wait()
            index = self._in_flight
            self._in_flight += 1
            self._queue.append(Token(data, index))
            self._cond.notify_all()

    def try_pop(self) -> Optional[Token[T]]:
        """Take the oldest token, or None when the queue is empty."""
        with self._cond:
            if not self._queue:
                return None
            token = self._queue.popleft()
            self._in_flight -= 1
            self._cond.notify_all()
            return token

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    def is_stopped(self) -> bool:
        with self._cond:
            return self._stopped

    def tokens_in_flight(self) -> int:
        with self._cond:
            return self._in_flight