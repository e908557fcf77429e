from typing import List, Optional

from aistudy.agent.structs import Turn


class ConversationState:
    """
    Passive container for conversation history.

    Holds the turns appended since the last compaction, the single live
    summary turn standing in for everything before them, and the number of
    completed exchanges since that summary was made.
    """

    def __init__(self):
        self.turns: List[Turn] = []
        self.summary_turn: Optional[Turn] = None
        self.exchanges_since_summary: int = 0

    def outbound(self) -> List[Turn]:
        """Returns the context to transmit: summary first, then the turns."""
        history: List[Turn] = []
        if self.summary_turn is not None:
            history.append(self.summary_turn)
        history.extend(self.turns)
        return history

    def replace_summary(self, summary_turn: Turn, summarized_count: int) -> None:
        """Swap in a new summary covering the first ``summarized_count`` turns."""
        self.summary_turn = summary_turn
        self.turns = self.turns[summarized_count:]
        self.exchanges_since_summary = 0

    def truncate(self, length: int) -> None:
        del self.turns[length:]

    def reset(self) -> None:
        self.turns = []
        self.summary_turn = None
        self.exchanges_since_summary = 0
