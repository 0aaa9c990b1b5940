"""Helpers for building source/translation tree pairs in tests."""

from __future__ import annotations

import hashlib
import textwrap
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from revcheck.errors import BackendQueryFailure, UnknownRevision
from revcheck.models import Commit
from revcheck.revtag import RevisionMarker, format_marker

DAY = 86400


def sha(label: str) -> str:
    """Return a stable 40-character commit id for a short label."""
    return hashlib.sha1(label.encode("utf-8")).hexdigest()


def translated_doc(revision: str, *, maintainer: str = "", status: str = "", body: str = "") -> str:
    marker = format_marker(RevisionMarker(hash=revision, maintainer=maintainer, status=status))
    return f'<?xml version="1.0" encoding="utf-8"?>\n{marker}\n<chapter>{body}</chapter>\n'


class TreeBuilder:
    """Writes a source tree and a translated tree side by side."""

    def __init__(self, tmp_path: Path) -> None:
        self.source = tmp_path / "en"
        self.translated = tmp_path / "de"
        self.source.mkdir()
        self.translated.mkdir()

    def write_source(self, files: Mapping[str, str]) -> None:
        self._write(self.source, files)

    def write_translated(self, files: Mapping[str, str]) -> None:
        self._write(self.translated, files)

    @staticmethod
    def _write(root: Path, files: Mapping[str, str]) -> None:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")


class FakeHistory:
    """In-memory history backend with scripted commits and numstats."""

    def __init__(
        self,
        histories: Mapping[str, Sequence[Commit]] | None = None,
        *,
        stats: Mapping[Tuple[str, str, str], Tuple[int, int]] | None = None,
        sizes: Mapping[str, int] | None = None,
        failing: Iterable[str] = (),
        failing_diff: Iterable[str] = (),
    ) -> None:
        self.histories: Dict[str, List[Commit]] = {
            path: list(commits) for path, commits in (histories or {}).items()
        }
        self.stats = dict(stats or {})
        self.sizes = dict(sizes or {})
        self.failing = set(failing)
        self.failing_diff = set(failing_diff)
        self.calls: List[Tuple[str, str]] = []

    def commits_touching(self, path: str) -> List[Commit]:
        self.calls.append(("log", path))
        if path in self.failing:
            raise BackendQueryFailure("git log", "fatal: unable to read tree")
        return list(self.histories.get(path, []))

    def diff_stats(self, path, from_hash, to_hash, *, history=None):  # type: ignore[no-untyped-def]
        self.calls.append(("diff", path))
        if path in self.failing_diff:
            raise BackendQueryFailure("git diff", "fatal: bad object")
        known = {commit.hash for commit in (history or self.histories.get(path, []))}
        for revision in (from_hash, to_hash):
            if revision not in known:
                raise UnknownRevision(path, revision)
        return self.stats.get((path, from_hash, to_hash), (0, 0))

    def file_size(self, path: str, revision: str) -> int:
        self.calls.append(("size", path))
        return self.sizes.get(path, 0)


def linear_history(*labels: str, start: int = 1_700_000_000, step_days: int = 10) -> List[Commit]:
    """Return commits for ``labels`` (oldest first) as a newest-first history."""
    commits = [
        Commit(hash=sha(label), timestamp=start + index * step_days * DAY)
        for index, label in enumerate(labels)
    ]
    return list(reversed(commits))


__all__ = ["DAY", "FakeHistory", "TreeBuilder", "linear_history", "sha", "translated_doc"]
