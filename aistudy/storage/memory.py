from typing import List, Sequence

from aistudy.agent.structs import Turn

from .base import MessageLog


class InMemoryMessageLog(MessageLog):
    """
    Passive list-backed log. Used when persistence is disabled and in tests.
    """

    def __init__(self, turns: Sequence[Turn] = ()):
        self._turns: List[Turn] = list(turns)

    async def insert(self, turn: Turn) -> None:
        self._turns.append(turn)

    async def insert_many(self, turns: Sequence[Turn]) -> None:
        self._turns.extend(turns)

    async def get_all(self) -> List[Turn]:
        return list(self._turns)

    async def delete_all(self) -> None:
        self._turns.clear()

    async def count(self) -> int:
        return len(self._turns)
