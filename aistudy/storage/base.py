from abc import ABC, abstractmethod
from typing import List, Sequence

from aistudy.agent.structs import Turn


class MessageLog(ABC):
    """
    The Abstract Base Class (Contract) for the append-only message log.

    Rows are returned in insertion order. Implementations only need
    append-then-read-back consistency, not transactions across calls.
    """

    @abstractmethod
    async def insert(self, turn: Turn) -> None:
        pass

    @abstractmethod
    async def insert_many(self, turns: Sequence[Turn]) -> None:
        """Append several turns; either all of them are stored or none."""
        pass

    @abstractmethod
    async def get_all(self) -> List[Turn]:
        pass

    @abstractmethod
    async def delete_all(self) -> None:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    async def close(self) -> None:
        return None
