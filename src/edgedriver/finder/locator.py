"""
Executable Locator - Find installed executables and rank them.

Example:
    >>> locator = ExecutableLocator(SubprocessRunner())
    >>> await locator.locate(
    ...     ["microsoft-edge", "microsoft-edge-beta"],
    ...     [PriorityRule.of(r"beta$", 20)],
    ... )
    ['/usr/bin/microsoft-edge-beta', '/usr/bin/microsoft-edge']
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Sequence, Union

import aiofiles.os

from edgedriver.exceptions.process import ExecutableLookupError
from edgedriver.interfaces.process import IProcessRunner

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 10


@dataclass(frozen=True)
class PriorityRule:
    """
    Ranks paths matching ``pattern`` with ``weight``.
    
    Rules are evaluated in order and the first match wins.
    """
    pattern: Pattern[str]
    weight: int
    
    @classmethod
    def of(cls, pattern: Union[str, Pattern[str]], weight: int) -> "PriorityRule":
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        return cls(pattern=pattern, weight=weight)
    
    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


@dataclass
class CandidateExecutable:
    path: str
    weight: int


def uniq(paths: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping the first occurrence."""
    return list(dict.fromkeys(paths))


def weigh(path: str, priorities: Sequence[PriorityRule]) -> int:
    for rule in priorities:
        if rule.matches(path):
            return rule.weight
    return DEFAULT_WEIGHT


def sort_by_priority(paths: Iterable[str], priorities: Sequence[PriorityRule]) -> List[str]:
    """
    Order paths by descending weight.
    
    Paths with equal weight keep their relative order.
    """
    candidates = [CandidateExecutable(path, weigh(path, priorities)) for path in paths]
    candidates.sort(key=lambda candidate: candidate.weight, reverse=True)
    return [candidate.path for candidate in candidates]


async def is_readable(path: str) -> bool:
    return await aiofiles.os.access(path, os.R_OK)


class ExecutableLocator:
    """
    Looks executables up on PATH and ranks what it finds.
    
    Names that are not installed are skipped; locating never fails.
    """
    
    def __init__(self, runner: IProcessRunner):
        self._runner = runner
    
    async def locate(
        self,
        candidate_names: Sequence[str],
        priorities: Sequence[PriorityRule] = (),
    ) -> List[str]:
        """
        Find installed executables.
        
        Args:
            candidate_names: Executable names to look up
            priorities: Ranking rules, first match wins
            
        Returns:
            Unique readable paths, highest weight first
        """
        installations = []
        for name in candidate_names:
            try:
                path = await self._runner.find_on_path(name)
            except ExecutableLookupError:
                # Not installed
                continue
            
            if path and await is_readable(path):
                installations.append(path)
            else:
                logger.debug(f"Ignoring unreadable executable {path!r} for {name}")
        
        return sort_by_priority(uniq(installations), priorities)
