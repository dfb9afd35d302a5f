"""
Concurrency utilities - fan-out/fan-in over asyncio tasks.
"""

import asyncio
import logging
from typing import Any, Coroutine, List, Optional, Set

logger = logging.getLogger(__name__)

# Tasks that outlived a failed barrier; referenced here until they finish
_abandoned: Set[asyncio.Task] = set()


def _observe(task: asyncio.Task) -> None:
    """Retrieve a finished task's exception so asyncio does not report it."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug(f"Task {task.get_name()} failed: {error!r}")


def _abandon(task: asyncio.Task) -> None:
    _abandoned.add(task)
    task.add_done_callback(_abandoned.discard)


class CompletionBarrier:
    """
    Wait-group with first-error semantics.
    
    Tasks may be spawned at any time, including by tasks already running
    under the barrier. ``wait()`` returns once every spawned task has
    completed, or raises the first error it observes. A failure does not
    cancel the remaining tasks: they run to completion in the background
    and their results are dropped.
    
    Example:
        >>> barrier = CompletionBarrier()
        >>> barrier.spawn(write("a.txt"))
        >>> barrier.spawn(write("b.txt"))
        >>> results = await barrier.wait()
    """
    
    def __init__(self):
        self._tasks: List[asyncio.Task] = []
        self._failed = False
    
    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> asyncio.Task:
        """Schedule a coroutine and register it with the barrier."""
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(_observe)
        if self._failed:
            _abandon(task)
        else:
            self._tasks.append(task)
        return task
    
    def __len__(self) -> int:
        return len(self._tasks)
    
    async def wait(self) -> List[Any]:
        """
        Wait for every task, failing fast.
        
        Returns:
            Task results in spawn order
            
        Raises:
            The first exception raised by any task
        """
        while True:
            for task in self._tasks:
                if task.done() and not task.cancelled() and task.exception() is not None:
                    self._fail()
                    raise task.exception()
            
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return [task.result() for task in self._tasks]
            
            # Tasks spawned meanwhile are picked up on the next pass
            await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
    
    def _fail(self) -> None:
        self._failed = True
        for task in self._tasks:
            if not task.done():
                _abandon(task)
