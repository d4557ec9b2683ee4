"""Bounded transfer between a source byte stream and a chunked upload."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Part:
    """A slice of the source stream, sent as one chunked-upload request."""

    offset: int
    data: bytes
    last: bool

    @property
    def end(self) -> int:
        return self.offset + len(self.data) - 1

    def content_range(self) -> str:
        """Content-Range header; the total is only known on the last part."""
        total = str(self.offset + len(self.data)) if self.last else "-1"
        return f"bytes {self.offset}-{self.end}/{total}"


def iter_parts(chunks: Iterable[bytes], part_size: int) -> Iterator[Part]:
    """
    Regroup arbitrary-sized chunks into parts of exactly part_size bytes.

    Every part except the last is full. A part is only released once at least
    one more byte is buffered, so the final part is always flagged correctly
    without knowing the total length up front. At most part_size plus one
    incoming chunk is held in memory. An empty source yields nothing.
    """
    if part_size <= 0:
        raise ValueError("part_size must be positive")

    buffer = bytearray()
    offset = 0
    for chunk in chunks:
        if not chunk:
            continue
        buffer.extend(chunk)
        while len(buffer) > part_size:
            data = bytes(buffer[:part_size])
            del buffer[:part_size]
            yield Part(offset=offset, data=data, last=False)
            offset += len(data)

    if buffer:
        yield Part(offset=offset, data=bytes(buffer), last=True)
