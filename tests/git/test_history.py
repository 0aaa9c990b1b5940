"""Tests for the git history miner."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from revcheck.errors import BackendQueryFailure, UnknownRevision
from revcheck.git.history import GitHistory, latest_commit
from revcheck.models import Commit

from tests._fixtures.trees import sha

C1, C2, C3 = sha("c1"), sha("c2"), sha("c3")


def _log_output(*entries: tuple[str, int, str]) -> str:
    return "".join(f"\x1e{revision}\x1f{timestamp}\x1f{message}\n\n" for revision, timestamp, message in entries)


def test_commits_touching_parses_log_newest_first(tmp_path: Path) -> None:
    calls: list[tuple[list[str], Path]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append((list(args), Path(cwd)))
        return _log_output(
            (C3, 1_700_200_000, "Fix typo [skip-revcheck]"),
            (C2, 1_700_100_000, "Document new flag\n\nLonger body."),
            (C1, 1_700_000_000, "Initial import"),
        )

    history = GitHistory(tmp_path, runner=runner)
    commits = history.commits_touching("reference/intro.xml")

    assert commits == [
        Commit(hash=C3, timestamp=1_700_200_000, skip=True),
        Commit(hash=C2, timestamp=1_700_100_000, skip=False),
        Commit(hash=C1, timestamp=1_700_000_000, skip=False),
    ]
    args, cwd = calls[0]
    assert args[:2] == ["git", "log"]
    assert args[-2:] == ["--", "reference/intro.xml"]
    assert cwd == tmp_path


def test_commits_touching_returns_empty_for_untracked_path(tmp_path: Path) -> None:
    history = GitHistory(tmp_path, runner=lambda args, cwd, capture_output=False: "")

    assert history.commits_touching("new.xml") == []


def test_diff_stats_sums_numstat_lines(tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        return "12\t3\tintro.xml\n-\t-\timages/logo.xml\n"

    history = GitHistory(tmp_path, runner=runner)
    known = [Commit(C2, 2), Commit(C1, 1)]

    assert history.diff_stats("intro.xml", C1, C2, history=known) == (12, 3)
    assert calls == [["git", "diff", "--numstat", C1, C2, "--", "intro.xml"]]


def test_diff_stats_rejects_revisions_outside_history(tmp_path: Path) -> None:
    history = GitHistory(tmp_path, runner=lambda args, cwd, capture_output=False: "")

    with pytest.raises(UnknownRevision) as excinfo:
        history.diff_stats("intro.xml", C3, C2, history=[Commit(C2, 2), Commit(C1, 1)])

    assert excinfo.value.revision == C3
    assert excinfo.value.path == "intro.xml"


def test_diff_stats_queries_history_when_not_supplied(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        if args[1] == "log":
            return _log_output((C2, 2, "b"), (C1, 1, "a"))
        return "1\t1\tintro.xml\n"

    history = GitHistory(tmp_path, runner=runner)

    assert history.diff_stats("intro.xml", C1, C2) == (1, 1)


def test_diff_stats_same_revision_is_empty(tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        return ""

    history = GitHistory(tmp_path, runner=runner)

    assert history.diff_stats("intro.xml", C1, C1, history=[Commit(C1, 1)]) == (0, 0)
    assert calls == []


def test_file_size_reads_blob_size(tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        calls.append(list(args))
        return "2048\n"

    history = GitHistory(tmp_path, runner=runner)

    assert history.file_size("faq/general.xml", C1) == 2048
    assert calls == [["git", "cat-file", "-s", f"{C1}:./faq/general.xml"]]


def test_backend_errors_are_wrapped(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise subprocess.CalledProcessError(128, args, stderr="fatal: not a git repository\n")

    history = GitHistory(tmp_path, runner=runner)

    with pytest.raises(BackendQueryFailure) as excinfo:
        history.commits_touching("intro.xml")

    assert "not a git repository" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, subprocess.CalledProcessError)


def test_missing_git_binary_is_a_backend_failure(tmp_path: Path) -> None:
    def runner(args, cwd, capture_output=False):  # type: ignore[no-untyped-def]
        raise FileNotFoundError(2, "No such file or directory", "git")

    history = GitHistory(tmp_path, runner=runner)

    with pytest.raises(BackendQueryFailure):
        history.file_size("intro.xml", C1)


def test_latest_commit_skips_flagged_commits() -> None:
    commits = [Commit(C3, 3, skip=True), Commit(C2, 2), Commit(C1, 1)]

    assert latest_commit(commits) == Commit(C2, 2)
    assert latest_commit([Commit(C1, 1, skip=True)]) == Commit(C1, 1, skip=True)
    assert latest_commit([]) is None
