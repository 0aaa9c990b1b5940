"""Revision marker parsing for translated documents."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import MarkerParseFailure

# Markers live in the document header; anything past this is body text.
SCAN_LIMIT = 4096

READY_STATUS = "ready"

_REVTAG_PATTERN = re.compile(
    r"<!--\s*EN-Revision:\s*(?P<hash>\S+)"
    r"(?:\s+Maintainer:\s*(?P<maintainer>\S+))?"
    r"(?:\s+Status:\s*(?P<status>\S+))?"
    r"\s*-->",
)
_REVIEWED_PATTERN = re.compile(r"<!--\s*Reviewed:\s*(?P<value>.*?)\s*-->")
_HASH_PATTERN = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")


@dataclass(frozen=True)
class RevisionMarker:
    """Revision assertion embedded in a translated file."""

    hash: str
    maintainer: str = ""
    status: str = ""
    reviewed: str = ""

    @property
    def is_wip(self) -> bool:
        return bool(self.status) and self.status.lower() != READY_STATUS


def is_commit_hash(value: str) -> bool:
    """Return True for a full-length hexadecimal commit identifier."""
    return bool(_HASH_PATTERN.match(value.lower()))


def find_marker(content: str) -> Optional[RevisionMarker]:
    """Return the revision marker near the top of ``content``.

    ``None`` means the document has no marker at all. A marker whose revision
    is not a well-formed commit id raises :class:`MarkerParseFailure`.
    """
    head = content[:SCAN_LIMIT]
    match = _REVTAG_PATTERN.search(head)
    if match is None:
        return None

    revision = match.group("hash")
    if not is_commit_hash(revision):
        raise MarkerParseFailure(f"revision tag holds {revision!r}, not a commit hash")

    reviewed = _REVIEWED_PATTERN.search(head)
    return RevisionMarker(
        hash=revision.lower(),
        maintainer=match.group("maintainer") or "",
        status=match.group("status") or "",
        reviewed=reviewed.group("value") if reviewed else "",
    )


def format_marker(marker: RevisionMarker) -> str:
    """Render a marker in the comment form understood by :func:`find_marker`."""
    parts = [f"EN-Revision: {marker.hash}"]
    if marker.maintainer:
        parts.append(f"Maintainer: {marker.maintainer}")
    if marker.status:
        parts.append(f"Status: {marker.status}")
    return "<!-- " + " ".join(parts) + " -->"


__all__ = ["RevisionMarker", "find_marker", "format_marker", "is_commit_hash"]
