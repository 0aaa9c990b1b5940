"""Error taxonomy for revision checking runs."""

from __future__ import annotations


class RevcheckError(RuntimeError):
    """Base class for revcheck failures."""


class SourceTreeUnreadable(RevcheckError):
    """Raised when the source tree root is missing or cannot be listed."""

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Source tree {root} is unreadable: {reason}")
        self.root = root
        self.reason = reason


class UnknownRevision(RevcheckError):
    """Raised when a commit hash is not part of a path's history."""

    def __init__(self, path: str, revision: str) -> None:
        super().__init__(f"Revision {revision} does not touch {path}")
        self.path = path
        self.revision = revision


class MarkerParseFailure(RevcheckError):
    """Raised when a revision marker is present but malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class BackendQueryFailure(RevcheckError):
    """Raised when the version-control backend cannot answer a query."""

    def __init__(self, command: str, detail: str) -> None:
        super().__init__(f"`{command}` failed: {detail}")
        self.command = command
        self.detail = detail


__all__ = [
    "BackendQueryFailure",
    "MarkerParseFailure",
    "RevcheckError",
    "SourceTreeUnreadable",
    "UnknownRevision",
]
