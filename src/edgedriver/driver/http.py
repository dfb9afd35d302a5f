"""
HTTP client helpers shared by the catalog resolver and archive fetcher.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


@asynccontextmanager
async def open_client(
    client: Optional[httpx.AsyncClient],
    timeout: float,
) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield ``client`` if one was injected, else a short-lived client.
    
    Injected clients are owned by the caller and left open.
    """
    if client is not None:
        yield client
        return
    
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
        yield owned
