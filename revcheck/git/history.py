"""Commit history queries against a git-backed document tree."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..errors import BackendQueryFailure, UnknownRevision
from ..models import Commit

SKIP_MARKER = "[skip-revcheck]"

_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x1f"
_LOG_FORMAT = "--format=%x1e%H%x1f%ct%x1f%B"


class HistoryBackend(Protocol):
    """Read-only history queries used by the classifier."""

    def commits_touching(self, path: str) -> Sequence[Commit]:
        ...

    def diff_stats(
        self,
        path: str,
        from_hash: str,
        to_hash: str,
        *,
        history: Sequence[Commit] | None = None,
    ) -> Tuple[int, int]:
        ...

    def file_size(self, path: str, revision: str) -> int:
        ...


class GitHistory:
    """Mines per-path commit data with the git command line.

    Every method issues a fresh git invocation. Callers that query the same
    path more than once should hold on to the returned history themselves.
    """

    def __init__(self, root: str | Path, runner: Callable[..., str] | None = None) -> None:
        self.root = Path(root)
        self._runner = runner or self._default_runner

    def commits_touching(self, path: str) -> List[Commit]:
        """Return commits touching ``path``, newest first."""
        output = self._run(["git", "log", _LOG_FORMAT, "--", path])
        commits: List[Commit] = []
        for record in output.split(_RECORD_SEP):
            if not record.strip():
                continue
            fields = record.split(_FIELD_SEP, 2)
            if len(fields) < 2:
                continue
            revision = fields[0].strip()
            message = fields[2] if len(fields) > 2 else ""
            try:
                timestamp = int(fields[1].strip())
            except ValueError:
                timestamp = 0
            commits.append(Commit(hash=revision, timestamp=timestamp, skip=SKIP_MARKER in message))
        return commits

    def diff_stats(
        self,
        path: str,
        from_hash: str,
        to_hash: str,
        *,
        history: Sequence[Commit] | None = None,
    ) -> Tuple[int, int]:
        """Return ``(added, deleted)`` lines for ``path`` between two commits."""
        known = {commit.hash for commit in (history if history is not None else self.commits_touching(path))}
        for revision in (from_hash, to_hash):
            if revision not in known:
                raise UnknownRevision(path, revision)
        if from_hash == to_hash:
            return 0, 0

        output = self._run(["git", "diff", "--numstat", from_hash, to_hash, "--", path])
        added = 0
        deleted = 0
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 3:
                continue
            # Binary files report "-" for both columns.
            if parts[0].isdigit():
                added += int(parts[0])
            if parts[1].isdigit():
                deleted += int(parts[1])
        return added, deleted

    def file_size(self, path: str, revision: str) -> int:
        """Return the blob size of ``path`` at ``revision`` in bytes."""
        output = self._run(["git", "cat-file", "-s", f"{revision}:./{path}"])
        try:
            return int(output.strip())
        except ValueError as exc:
            raise BackendQueryFailure("git cat-file", f"unexpected size {output.strip()!r}") from exc

    # ------------------------------------------------------------------
    # Internals

    def _run(self, args: List[str]) -> str:
        try:
            return self._runner(args, cwd=self.root, capture_output=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise BackendQueryFailure(" ".join(args[:2]), detail) from exc
        except OSError as exc:
            raise BackendQueryFailure(" ".join(args[:2]), str(exc)) from exc

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def latest_commit(history: Sequence[Commit]) -> Optional[Commit]:
    """Return the newest commit not flagged with the skip marker."""
    for commit in history:
        if not commit.skip:
            return commit
    return history[0] if history else None


__all__ = ["GitHistory", "HistoryBackend", "SKIP_MARKER", "latest_commit"]
