from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict, Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Produces identifiers such as 'chk-1f3a9c0d' for a given prefix."""

    def __call__(self, prefix: str) -> str:
        ...


class UuidIdGenerator:
    """Random ids: prefix plus the first hex characters of a UUID4."""

    def __init__(self, length: int = 8) -> None:
        self.length = length

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{uuid4().hex[: self.length]}"


class SequentialIdGenerator:
    """Deterministic ids counting up per prefix: 'insp-1', 'insp-2', ..."""

    def __init__(self, start: int = 1) -> None:
        self._next: DefaultDict[str, int] = defaultdict(lambda: start)

    def __call__(self, prefix: str) -> str:
        n = self._next[prefix]
        self._next[prefix] = n + 1
        return f"{prefix}-{n}"
