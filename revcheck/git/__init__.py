"""Version-control backends for revision checking."""

from .history import GitHistory, HistoryBackend, latest_commit

__all__ = ["GitHistory", "HistoryBackend", "latest_commit"]
