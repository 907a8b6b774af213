"""Reusable render buffers"""

from __future__ import annotations

__all__ = ("FrameBuffer",)

from typing import BinaryIO, List

from .exceptions import WriteError


class FrameBuffer:
    """A growable byte accumulator for a single rendered frame.

    The underlying storage is kept across frames, such that encoding a frame into a
    recycled buffer doesn't require any new allocation once the buffer has grown to
    the size of a frame.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data = bytearray()

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {len(self._data)} byte(s)>"

    @classmethod
    def allocate(cls, n: int) -> List[FrameBuffer]:
        """Returns *n* new buffers."""
        return [cls() for _ in range(n)]

    def write(self, data: bytes) -> int:
        self._data += data
        return len(data)

    def reset(self) -> None:
        """Empties the buffer."""
        del self._data[:]

    def flush_to(self, stream: BinaryIO) -> None:
        """Writes the entire content of the buffer to a stream, then empties the
        buffer.

        Args:
            stream: A binary output stream.

        Raises:
            img2ansi.exceptions.WriteError: Writing to or flushing *stream* failed.

        The buffer is emptied whether or not the write succeeds.
        """
        try:
            # Views must be released before the buffer can be emptied
            with memoryview(self._data) as view:
                written = 0
                while written < len(view):
                    with view[written:] as data:
                        n = stream.write(data)
                    # Raw streams return `None` only if nothing could be written
                    if n is None:
                        raise BlockingIOError("Output stream not ready for writing")
                    written += n
            stream.flush()
        except OSError as e:
            raise WriteError(f"Unable to write output ({e})") from e
        finally:
            self.reset()
