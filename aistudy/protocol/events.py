from enum import Enum


class EventTypes(str, Enum):
    """
    Canonical event names shared by the chat core and its front-ends.
    Using an Enum prevents typo bugs (e.g., 'turn_done' vs 'turn_completed').
    """

    # 1. System Events
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    # 2. Conversation Events (Downstream)
    STATE_CHANGED = "state_changed"
    TURN_COMPLETED = "turn_completed"
    TURN_FAILED = "turn_failed"
    TEMPERATURE_REPLY = "temperature_reply"
    PERSONA_REPLY = "persona_reply"

    # 3. Input Events (Upstream: UI -> Core)
    USER_INPUT_SUBMITTED = "user_input_submitted"

    # 4. Context Events
    SUMMARY_UPDATED = "summary_updated"
    SUMMARY_FAILED = "summary_failed"
    HISTORY_CLEARED = "history_cleared"
    HISTORY_LOADED = "history_loaded"
