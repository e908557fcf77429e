from .base import MessageLog
from .memory import InMemoryMessageLog
from .sqlite import SqliteMessageLog

__all__ = ["MessageLog", "InMemoryMessageLog", "SqliteMessageLog"]
