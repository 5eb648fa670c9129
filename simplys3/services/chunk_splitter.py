"""Split a byte stream into fixed-size chunks."""

from typing import AsyncIterable, AsyncIterator, Optional


class ChunkSplitter:
    """
    Pull fixed-size chunks out of an async stream of byte blocks.

    Every chunk is exactly ``max_chunk_bytes`` long except the last one,
    which may be shorter. No chunk is ever empty. Bytes read past a chunk
    boundary are kept as leftover and start the next chunk, so the
    concatenation of all chunks is the stream's content.

    The stream is only read inside :meth:`next_chunk`. It is closed once
    exhausted, or early through :meth:`aclose`.
    """

    def __init__(self, stream: AsyncIterable[bytes], max_chunk_bytes: int):
        if max_chunk_bytes < 1:
            raise ValueError(f"max_chunk_bytes must be at least 1, got {max_chunk_bytes}")
        self.max_chunk_bytes = max_chunk_bytes
        self._stream: AsyncIterator[bytes] = stream.__aiter__()
        self._buffer = bytearray()
        self._exhausted = False
        self.closed = False

    @property
    def buffered_bytes(self) -> int:
        """
        Bytes read from the stream but not yet handed out.

        Lets callers check how much source data the splitter is holding
        between pulls; it never exceeds max_chunk_bytes - 1 after a full
        chunk unless one stream block carried several chunks.
        """
        return len(self._buffer)

    async def next_chunk(self) -> Optional[bytes]:
        """
        Get the next chunk.
        Returns:
            A chunk of 1..max_chunk_bytes bytes, or None once the stream
            has no data left.
        """
        if self.closed:
            return None

        while len(self._buffer) < self.max_chunk_bytes and not self._exhausted:
            try:
                block = await self._stream.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                await self._close_stream()
                break
            if block:
                self._buffer += block

        if len(self._buffer) >= self.max_chunk_bytes:
            if len(self._buffer) == self.max_chunk_bytes:
                chunk = bytes(self._buffer)
                self._buffer.clear()
            else:
                chunk = bytes(self._buffer[: self.max_chunk_bytes])
                del self._buffer[: self.max_chunk_bytes]
            return chunk

        # Stream is exhausted: flush the short tail, if any
        self.closed = True
        if not self._buffer:
            return None
        chunk = bytes(self._buffer)
        self._buffer.clear()
        return chunk

    async def aclose(self) -> None:
        """Stop reading and close the underlying stream."""
        self.closed = True
        self._exhausted = True
        self._buffer.clear()
        await self._close_stream()

    async def _close_stream(self) -> None:
        close = getattr(self._stream, "aclose", None)
        if close is not None:
            await close()

    def __aiter__(self) -> "ChunkSplitter":
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.next_chunk()
        if chunk is None:
            raise StopAsyncIteration
        return chunk
