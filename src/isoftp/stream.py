"""
File streaming
Byte sources bounded to a file entry's recorded extent.
"""

import asyncio
import io
import logging

from .errors import NotAFile

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class ExtentStream(io.RawIOBase):
    """Read-only stream over one file entry.

    Every read() turns into exactly one bounded read on the image reader, so
    a consumer pulling chunks gets a suspension point between disc reads.
    """

    _reader = None

    def __init__(self, reader, entry, offset=0, length=None, name=None,
                 chunk_size=DEFAULT_CHUNK_SIZE):
        if not entry.is_file:
            raise NotAFile(name or entry.identifier)
        super().__init__()
        self._reader = reader
        self._entry = entry
        end = entry.size if length is None else min(entry.size, offset + length)
        self._start = min(max(offset, 0), end)
        self._end = end
        self._pos = self._start
        self.name = name or entry.identifier
        self.chunk_size = chunk_size

    @property
    def remaining(self):
        return max(self._end - self._pos, 0)

    def readable(self):
        return True

    def seekable(self):
        return True

    def tell(self):
        self._ensure_open()
        return self._pos - self._start

    def seek(self, offset, whence=io.SEEK_SET):
        """Position the stream; offsets past the end leave it exhausted"""
        self._ensure_open()
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self.tell() + offset
        elif whence == io.SEEK_END:
            target = (self._end - self._start) + offset
        else:
            raise ValueError("invalid whence (%r)" % whence)
        if target < 0:
            raise ValueError("negative seek position %d" % target)
        self._pos = self._start + target
        return target

    def readinto(self, buffer):
        self._ensure_open()
        size = min(len(buffer), self.remaining)
        if size <= 0:
            return 0
        data = self._reader.read_extent(self._entry, self._pos, size)
        n = len(data)
        buffer[:n] = data
        self._pos += n
        return n

    def chunks(self, chunk_size=None):
        """Yield the rest of the stream chunk by chunk"""
        chunk_size = chunk_size or self.chunk_size
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                return
            yield chunk

    async def achunks(self, chunk_size=None):
        """Async variant of chunks(); each disc read runs in a worker thread"""
        chunk_size = chunk_size or self.chunk_size
        while True:
            chunk = await asyncio.to_thread(self.read, chunk_size)
            if not chunk:
                return
            yield chunk

    def _ensure_open(self):
        if self.closed:
            raise ValueError("I/O operation on closed stream %s" % self.name)

    def close(self):
        if self._reader is not None:
            logger.debug("Closing stream %s at %d/%d", self.name,
                         self._pos - self._start, self._end - self._start)
            self._reader = None
        super().close()


def open_entry(reader, entry, name=None, chunk_size=DEFAULT_CHUNK_SIZE):
    return ExtentStream(reader, entry, name=name, chunk_size=chunk_size)


def open_range(reader, entry, offset, length=None, name=None,
               chunk_size=DEFAULT_CHUNK_SIZE):
    """Open a file entry starting at `offset`.

    An offset at or past the end of the file gives an empty stream rather
    than an error, so a resumed download of a complete file just ends.
    """
    return ExtentStream(reader, entry, offset=offset, length=length,
                        name=name, chunk_size=chunk_size)
