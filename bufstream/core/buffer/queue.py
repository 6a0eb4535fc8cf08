from collections import deque


class ChunkQueue:
    """
    FIFO of immutable byte chunks with incremental size accounting.

    `size` is the sum of the lengths of the queued chunks. It is updated on
    every enqueue/dequeue and never recomputed by traversal, so accounting is
    O(1) per operation.

    ChunkQueue emits no signals and knows nothing about scheduling. It is the
    leaf storage used by BufferedStream.
    """

    def __init__(self) -> None:
        self._chunks: deque[bytes] = deque()
        self._size = 0

    @property
    def size(self) -> int:
        """Total number of bytes currently queued."""
        return self._size

    def enqueue(self, chunk: bytes) -> None:
        self._chunks.append(chunk)
        self._size += len(chunk)

    def dequeue(self) -> bytes | None:
        """
        Remove and return the oldest chunk, or None when the queue is empty.
        """
        if not self._chunks:
            return None

        chunk = self._chunks.popleft()
        self._size -= len(chunk)
        return chunk

    def is_empty(self) -> bool:
        return not self._chunks

    def clear(self) -> None:
        self._chunks.clear()
        self._size = 0

    def __len__(self) -> int:
        return len(self._chunks)
