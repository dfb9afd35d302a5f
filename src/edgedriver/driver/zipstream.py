"""
Zip Stream - Read zip entries from a byte stream as it arrives.

Entries are parsed from their local file headers, so each one can be
extracted while the rest of the archive is still downloading. The
central directory at the end of the archive is read but not parsed.

Supported: stored and deflated entries, data descriptors on deflated
entries, ZIP64 sizes. Stored entries must carry their size in the local
header.

Example:
    >>> stream = ZipStream(response.aiter_bytes())
    >>> async for entry in stream.entries():
    ...     async for chunk in entry.chunks:
    ...         sink.write(chunk)
"""

import asyncio
import logging
import struct
import zlib
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Optional, Tuple

from edgedriver.exceptions.driver import StreamError

logger = logging.getLogger(__name__)

LOCAL_FILE_HEADER = b"PK\x03\x04"
DATA_DESCRIPTOR = b"PK\x07\x08"
CENTRAL_DIRECTORY = b"PK\x01\x02"
END_OF_CENTRAL_DIRECTORY = b"PK\x05\x06"
ZIP64_END_OF_CENTRAL_DIRECTORY = b"PK\x06\x06"

STORED = 0
DEFLATED = 8

_FLAG_ENCRYPTED = 0x0001
_FLAG_DATA_DESCRIPTOR = 0x0008
_FLAG_UTF8 = 0x0800

_ZIP64_EXTRA = 0x0001
_ZIP64_SENTINEL = 0xFFFFFFFF

# version, flags, method, time, date, crc32, compressed size, size, name length, extra length
_LOCAL_HEADER = struct.Struct("<5H3I2H")


class _ByteReader:
    """Buffered reader over an async iterable of byte chunks."""

    def __init__(self, source: AsyncIterable[bytes]):
        self._source = source.__aiter__()
        self._buffer = bytearray()
        self._exhausted = False
        self.received = 0

    async def _fill(self) -> bool:
        if self._exhausted:
            return False
        try:
            chunk = await self._source.__anext__()
        except StopAsyncIteration:
            self._exhausted = True
            return False
        self.received += len(chunk)
        self._buffer += chunk
        return True

    async def at_eof(self) -> bool:
        while not self._buffer:
            if not await self._fill():
                return True
        return False

    async def read_exact(self, size: int) -> bytes:
        while len(self._buffer) < size:
            if not await self._fill():
                raise StreamError("Invalid driver archive: truncated")
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    async def read_some(self, limit: int) -> bytes:
        """Up to ``limit`` buffered or newly received bytes; empty at end of stream."""
        if await self.at_eof():
            return b""
        data = bytes(self._buffer[:limit])
        del self._buffer[:limit]
        return data

    def unread(self, data: bytes) -> None:
        self._buffer[:0] = data

    async def drain(self) -> None:
        while await self.read_some(64 * 1024):
            pass


@dataclass
class _LocalHeader:
    name: str
    flags: int
    method: int
    crc32: int
    compressed_size: int
    size: int
    zip64: bool = False

    @property
    def has_data_descriptor(self) -> bool:
        return bool(self.flags & _FLAG_DATA_DESCRIPTOR)


@dataclass
class ZipEntry:
    """
    One archive entry.

    ``chunks`` yields the uncompressed payload and must be consumed before
    the next entry is requested; whatever is left is skipped.

    Attributes:
        name: Entry path inside the archive, "/"-separated
        is_dir: Whether the entry is a directory
        size: Uncompressed size, if the local header records it
        chunks: Uncompressed payload
    """
    name: str
    is_dir: bool
    size: Optional[int]
    chunks: AsyncIterator[bytes] = field(repr=False)


class ZipStream:
    """
    Sequential reader of a zip archive delivered as a byte stream.

    Inflating happens on a worker thread in steps of at most
    ``chunk_size`` output bytes, so large entries neither block the event
    loop nor sit in memory as a whole.
    """

    def __init__(self, source: AsyncIterable[bytes], chunk_size: int = 64 * 1024):
        self._reader = _ByteReader(source)
        self._chunk_size = chunk_size

    @property
    def received(self) -> int:
        """Number of bytes received from the source so far."""
        return self._reader.received

    async def entries(self) -> AsyncIterator[ZipEntry]:
        """
        Yield the archive's entries in stream order.

        Raises:
            StreamError: If the archive is malformed, truncated or uses an
                unsupported feature, or an entry fails its CRC check
        """
        while True:
            if await self._reader.at_eof():
                raise StreamError("Invalid driver archive: central directory missing")

            signature = await self._reader.read_exact(4)
            if signature in (
                CENTRAL_DIRECTORY,
                END_OF_CENTRAL_DIRECTORY,
                ZIP64_END_OF_CENTRAL_DIRECTORY,
            ):
                logger.debug(f"Reached the central directory after {self.received} bytes")
                await self._reader.drain()
                return
            if signature != LOCAL_FILE_HEADER:
                raise StreamError(f"Invalid driver archive: unexpected record {signature!r}")

            header = await self._read_local_header()
            chunks = self._payload(header)
            yield ZipEntry(
                name=header.name,
                is_dir=header.name.endswith("/"),
                size=None if header.has_data_descriptor else header.size,
                chunks=chunks,
            )
            async for _ in chunks:
                pass

    async def _read_local_header(self) -> _LocalHeader:
        (
            _version,
            flags,
            method,
            _time,
            _date,
            crc32,
            compressed_size,
            size,
            name_length,
            extra_length,
        ) = _LOCAL_HEADER.unpack(await self._reader.read_exact(_LOCAL_HEADER.size))
        raw_name = await self._reader.read_exact(name_length)
        extra = await self._reader.read_exact(extra_length)

        name = raw_name.decode("utf-8" if flags & _FLAG_UTF8 else "cp437")
        if flags & _FLAG_ENCRYPTED:
            raise StreamError(f"Encrypted archive entry {name!r} is not supported", path=name)
        if method not in (STORED, DEFLATED):
            raise StreamError(
                f"Archive entry {name!r} uses unsupported compression method {method}",
                path=name,
            )

        header = _LocalHeader(name, flags, method, crc32, compressed_size, size)
        self._apply_zip64_extra(header, extra)
        if method == STORED and header.has_data_descriptor and not header.compressed_size and not name.endswith("/"):
            raise StreamError(
                f"Stored archive entry {name!r} has no size and cannot be streamed",
                path=name,
            )
        return header

    @staticmethod
    def _apply_zip64_extra(header: _LocalHeader, extra: bytes) -> None:
        offset = 0
        while offset + 4 <= len(extra):
            kind, length = struct.unpack_from("<2H", extra, offset)
            data = extra[offset + 4:offset + 4 + length]
            offset += 4 + length
            if kind != _ZIP64_EXTRA:
                continue

            header.zip64 = True
            values = [
                struct.unpack_from("<Q", data, position)[0]
                for position in range(0, len(data) - 7, 8)
            ]
            if header.size == _ZIP64_SENTINEL and values:
                header.size = values.pop(0)
            if header.compressed_size == _ZIP64_SENTINEL and values:
                header.compressed_size = values.pop(0)

    async def _payload(self, header: _LocalHeader) -> AsyncIterator[bytes]:
        crc32 = 0
        produced = 0

        if header.method == STORED:
            remaining = header.compressed_size
            while remaining:
                data = await self._reader.read_some(min(remaining, self._chunk_size))
                if not data:
                    raise StreamError(f"Archive entry {header.name!r} is truncated", path=header.name)
                remaining -= len(data)
                crc32 = zlib.crc32(data, crc32)
                produced += len(data)
                yield data
        else:
            decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
            pending = b""
            more_output = False
            while not decompressor.eof:
                if not pending and not more_output:
                    pending = await self._reader.read_some(self._chunk_size)
                    if not pending:
                        raise StreamError(f"Archive entry {header.name!r} is truncated", path=header.name)
                try:
                    output = await asyncio.to_thread(decompressor.decompress, pending, self._chunk_size)
                except zlib.error as e:
                    raise StreamError(f"Archive entry {header.name!r} is corrupt: {e}", path=header.name) from e
                pending = decompressor.unconsumed_tail
                # A full output buffer may leave more output inside zlib
                more_output = len(output) == self._chunk_size
                if output:
                    crc32 = zlib.crc32(output, crc32)
                    produced += len(output)
                    yield output
            self._reader.unread(decompressor.unused_data)

        expected_crc32, expected_size = header.crc32, header.size
        if header.has_data_descriptor:
            expected_crc32, expected_size = await self._read_data_descriptor(header)

        if crc32 != expected_crc32 or produced != expected_size:
            raise StreamError(f"Archive entry {header.name!r} failed its CRC check", path=header.name)

    async def _read_data_descriptor(self, header: _LocalHeader) -> Tuple[int, int]:
        head = await self._reader.read_exact(4)
        if head == DATA_DESCRIPTOR:
            head = await self._reader.read_exact(4)
        (crc32,) = struct.unpack("<I", head)
        sizes = struct.Struct("<2Q" if header.zip64 else "<2I")
        _compressed_size, size = sizes.unpack(await self._reader.read_exact(sizes.size))
        return crc32, size
