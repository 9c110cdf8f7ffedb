from abc import ABC, abstractmethod
from typing import List


class SortedSetBatch(ABC):
    """
    A group of pending sorted-set additions executed together.

    Members added through a batch are only visible once execute() returns.
    """

    @abstractmethod
    def add(self, key: str, member: str, score: float = 0.0) -> None:
        """Queue adding `member` with `score` to the sorted set `key`."""
        pass

    @abstractmethod
    async def execute(self) -> int:
        """
        Apply every queued addition at once and empty the batch.
        Returns the number of operations executed.
        Raises FlushError if the batch did not land.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Discard queued additions and release the batch."""
        pass


class SortedSetStore(ABC):
    """
    Abstract base class for the ordered key-value store backing the index.

    Each key holds a sorted set ordered by score, then lexicographically by member.
    """

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreUnavailableError unless the store answers."""
        pass

    @abstractmethod
    async def range_by_rank(self, key: str, start: int, stop: int) -> List[str]:
        """
        Return members ranked `start` through `stop` inclusive.
        A missing key yields an empty list. Raises QueryStoreError on failure.
        """
        pass

    @abstractmethod
    def batch(self) -> SortedSetBatch:
        """Open a new batch of additions."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the store."""
        pass
