"""
Archive Fetcher - Download a zip archive and extract it concurrently.

The download is received by a single parse task which reads entries as
their bytes arrive and spawns one write task per file entry. All of them
are joined by a CompletionBarrier: extraction completes when the parse
task and every write task have finished, and fails as soon as any of
them fails.

Partially extracted files are left in place when extraction fails.
"""

import asyncio
import logging
import re
from pathlib import Path, PurePosixPath
from typing import Optional, Set, Union

import aiofiles
import aiofiles.os
import httpx

from edgedriver.driver.http import open_client
from edgedriver.driver.zipstream import ZipStream
from edgedriver.exceptions.driver import DownloadError, StreamError
from edgedriver.utils.concurrency import CompletionBarrier

logger = logging.getLogger(__name__)

# Chunks buffered per entry between the parse task and its writer
ENTRY_BUFFER_CHUNKS = 8

_DRIVE = re.compile(r"^[A-Za-z]:")


def entry_destination(target_dir: Path, entry_name: str) -> Path:
    """
    Map an archive entry name to a path inside ``target_dir``.
    
    Raises:
        StreamError: If the entry would be written outside ``target_dir``
    """
    relative = PurePosixPath(entry_name.replace("\\", "/"))
    parts = relative.parts
    if (
        not parts
        or relative.is_absolute()
        or ".." in parts
        or _DRIVE.match(parts[0])
    ):
        raise StreamError(
            f"Archive entry {entry_name!r} escapes the target directory",
            path=entry_name,
        )
    return target_dir.joinpath(*parts)


class _EntrySink:
    """Bounded hand-off of one entry's chunks from the parse task to its writer."""
    
    def __init__(self, maxsize: int = ENTRY_BUFFER_CHUNKS):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize)
        self.failed = False
    
    async def put(self, chunk: bytes) -> None:
        if not self.failed:
            await self._queue.put(chunk)
    
    async def close(self) -> None:
        if not self.failed:
            await self._queue.put(None)
    
    async def get(self) -> Optional[bytes]:
        return await self._queue.get()
    
    def fail(self) -> None:
        """Stop accepting chunks and release a parse task blocked on a full buffer."""
        self.failed = True
        while not self._queue.empty():
            self._queue.get_nowait()


class ArchiveFetcher:
    """
    Streams a zip archive from a URL into a directory.
    
    Example:
        >>> fetcher = ArchiveFetcher()
        >>> written = await fetcher.fetch_and_extract(entry.download_url, "/tmp/driver")
        >>> sorted(p.name for p in written)
        ['Driver_Notes', 'msedgedriver']
    """
    
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
        chunk_size: int = 64 * 1024,
    ):
        """
        Initialize the fetcher.
        
        Args:
            client: HTTP client to use; a short-lived one is created per fetch if None
            timeout: Per-operation HTTP timeout in seconds
            chunk_size: Largest chunk handed to a writer, in bytes
        """
        self._client = client
        self._timeout = timeout
        self._chunk_size = chunk_size
    
    async def fetch_and_extract(self, url: str, target_dir: Union[str, Path]) -> Set[Path]:
        """
        Download ``url`` and extract it into ``target_dir``.
        
        Args:
            url: Archive URL
            target_dir: Destination directory, created if missing
            
        Returns:
            Paths of the extracted files
            
        Raises:
            DownloadError: If the response is not successful or has no body
            StreamError: If the archive cannot be read or an entry cannot be written
        """
        target = Path(target_dir)
        logger.info(f"Downloading Edgedriver from {url}")
        
        async with open_client(self._client, self._timeout) as client:
            try:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise DownloadError(
                            f"Failed to download binary (statusCode {response.status_code})",
                            url=url,
                            status_code=response.status_code,
                        )
                    
                    await aiofiles.os.makedirs(target, exist_ok=True)
                    return await self._extract(response, target)
            except httpx.HTTPError as e:
                raise DownloadError(f"Failed to download binary: {e}", url=url) from e
    
    async def _extract(self, response: httpx.Response, target: Path) -> Set[Path]:
        barrier = CompletionBarrier()
        barrier.spawn(self._parse(response, target, barrier), name="parse")
        results = await barrier.wait()
        
        written = {path for path in results if path is not None}
        logger.debug(f"Extracted {len(written)} files into {target}")
        return written
    
    async def _parse(
        self,
        response: httpx.Response,
        target: Path,
        barrier: CompletionBarrier,
    ) -> None:
        """Walk the archive as it downloads, spawning one writer per file."""
        stream = ZipStream(response.aiter_bytes(), self._chunk_size)
        try:
            async for entry in stream.entries():
                destination = entry_destination(target, entry.name)
                if entry.is_dir:
                    await aiofiles.os.makedirs(destination, exist_ok=True)
                    continue
                
                sink = _EntrySink()
                barrier.spawn(
                    self._write_entry(destination, sink),
                    name=f"write:{entry.name}",
                )
                try:
                    async for chunk in entry.chunks:
                        await sink.put(chunk)
                finally:
                    # The writer keeps whatever arrived before a failure
                    await sink.close()
        except httpx.HTTPError as e:
            raise StreamError(f"Download interrupted: {e}") from e
        except StreamError:
            if stream.received == 0:
                raise DownloadError(
                    f"Failed to download binary (statusCode {response.status_code})",
                    url=str(response.url),
                    status_code=response.status_code,
                ) from None
            raise
        except OSError as e:
            raise StreamError(f"Failed to extract archive: {e}", path=e.filename) from e
    
    async def _write_entry(self, destination: Path, sink: _EntrySink) -> Path:
        """Write one entry's chunks to disk as the parse task delivers them."""
        try:
            await aiofiles.os.makedirs(destination.parent, exist_ok=True)
            async with aiofiles.open(destination, "wb") as output:
                while True:
                    chunk = await sink.get()
                    if chunk is None:
                        break
                    await output.write(chunk)
        except OSError as e:
            sink.fail()
            raise StreamError(
                f"Failed to write {destination}: {e}",
                path=str(destination),
            ) from e
        return destination
