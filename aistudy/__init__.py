"""AI Study Chat: a terminal chat client with rolling summary compaction."""

__version__ = "0.1.0"
