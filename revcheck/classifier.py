"""Per-file status decision for translated documents."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

from .errors import BackendQueryFailure, MarkerParseFailure, UnknownRevision
from .git.history import HistoryBackend, latest_commit
from .logging import get_logger
from .models import UNKNOWN_HASH, Commit, FilePair, FileRecord, Status
from .revtag import find_marker

SECONDS_PER_DAY = 86400


class Classifier:
    """Resolves one :class:`FilePair` into exactly one :class:`FileRecord`.

    Rules are applied in order and the first match wins:

    1. no translated file: ``Untranslated``
    2. no source file: ``NotInEnTree``
    3. missing or malformed revision tag, or a revision that never touched the
       source file: ``RevTagProblem``
    4. tag status other than ``ready``: ``TranslatedWip``
    5. revision is the latest source commit: ``TranslatedOk``
    6. otherwise: ``TranslatedOld``

    Line counts and age are only filled in for the outcomes that need a
    translator's attention (``TranslatedOld`` and ``TranslatedWip``).
    """

    def __init__(self, history: HistoryBackend) -> None:
        self.history = history
        self.logger = get_logger("classifier")

    def classify(self, pair: FilePair) -> FileRecord:
        if pair.translated is None:
            if pair.source is None:
                raise ValueError(f"{pair.path}: neither a source nor a translated file")
            record = self._untranslated(pair, pair.source)
        elif pair.source is None:
            record = FileRecord(
                path=pair.path,
                status=Status.NOT_IN_EN_TREE,
                size_bytes=_disk_size(pair.translated),
            )
        else:
            record = self._translated(pair, pair.translated)
        self.logger.debug("%s: %s", record.path, record.status.value)
        return record

    # ------------------------------------------------------------------
    # Internals

    def _untranslated(self, pair: FilePair, source: str) -> FileRecord:
        try:
            history = self.history.commits_touching(pair.path)
            latest = latest_commit(history)
            if latest is None:
                return FileRecord(
                    path=pair.path,
                    status=Status.UNTRANSLATED,
                    size_bytes=_disk_size(source),
                    note="source file has no commits",
                )
            size = self.history.file_size(pair.path, latest.hash)
        except BackendQueryFailure as exc:
            self.logger.warning("History unavailable for %s: %s", pair.path, exc)
            return FileRecord(
                path=pair.path,
                status=Status.UNTRANSLATED,
                size_bytes=_disk_size(source),
                degraded=True,
                note=str(exc),
            )
        return FileRecord(
            path=pair.path,
            status=Status.UNTRANSLATED,
            last_source_hash=latest.hash,
            size_bytes=size,
        )

    def _translated(self, pair: FilePair, translated: str) -> FileRecord:
        size = _disk_size(translated)

        def problem(note: str, **fields: object) -> FileRecord:
            return FileRecord(
                path=pair.path,
                status=Status.REV_TAG_PROBLEM,
                size_bytes=size,
                note=note,
                **fields,  # type: ignore[arg-type]
            )

        try:
            content = Path(translated).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            return problem(f"unreadable: {exc}", degraded=True)

        try:
            marker = find_marker(content)
        except MarkerParseFailure as exc:
            return problem(exc.reason)
        if marker is None:
            return problem("revision tag missing")

        try:
            history = self.history.commits_touching(pair.path)
        except BackendQueryFailure as exc:
            self.logger.warning("History unavailable for %s: %s", pair.path, exc)
            return problem(str(exc), asserted_hash=marker.hash, maintainer=marker.maintainer, degraded=True)

        latest = latest_commit(history)
        positions: Dict[str, int] = {commit.hash: index for index, commit in enumerate(history)}
        if latest is None or marker.hash not in positions:
            return problem(
                "revision not found in source history",
                asserted_hash=marker.hash,
                last_source_hash=latest.hash if latest else UNKNOWN_HASH,
                maintainer=marker.maintainer,
            )

        asserted_index = positions[marker.hash]
        # Commits above the latest countable one are skip-revcheck commits.
        current = asserted_index <= positions[latest.hash]
        if marker.is_wip:
            status = Status.TRANSLATED_WIP
        elif current:
            status = Status.TRANSLATED_OK
        else:
            status = Status.TRANSLATED_OLD

        added = deleted = age = 0
        degraded = False
        note = ""
        if not current:
            asserted = history[asserted_index]
            age = _age_days(asserted, latest)
            try:
                added, deleted = self.history.diff_stats(
                    pair.path, marker.hash, latest.hash, history=history
                )
            except (BackendQueryFailure, UnknownRevision) as exc:
                self.logger.warning("Diff stats unavailable for %s: %s", pair.path, exc)
                degraded = True
                note = str(exc)

        return FileRecord(
            path=pair.path,
            status=status,
            last_source_hash=latest.hash,
            asserted_hash=marker.hash,
            added_lines=added,
            deleted_lines=deleted,
            age_days=age,
            size_bytes=size,
            maintainer=marker.maintainer,
            completion=marker.status,
            degraded=degraded,
            note=note,
        )


def _age_days(asserted: Commit, latest: Commit) -> int:
    return max(0, (latest.timestamp - asserted.timestamp) // SECONDS_PER_DAY)


def _disk_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0

