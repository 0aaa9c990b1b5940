"""Core data models shared across revcheck components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

UNKNOWN_HASH = "unknown"


class Status(str, Enum):
    """Terminal classification of one file in a run."""

    TRANSLATED_OK = "TranslatedOk"
    TRANSLATED_OLD = "TranslatedOld"
    TRANSLATED_WIP = "TranslatedWip"
    REV_TAG_PROBLEM = "RevTagProblem"
    NOT_IN_EN_TREE = "NotInEnTree"
    UNTRANSLATED = "Untranslated"


class VcsAccess(str, Enum):
    """Whether a translator has write access to the repository."""

    YES = "yes"
    NO = "no"
    UNKNOWN = ""


@dataclass(frozen=True)
class Commit:
    """A commit touching a single path."""

    hash: str
    timestamp: int
    skip: bool = False


@dataclass(frozen=True)
class FilePair:
    """A relative document path and its location in each tree."""

    path: str
    source: Optional[str]
    translated: Optional[str]


@dataclass(frozen=True)
class FileRecord:
    """One row of the final report."""

    path: str
    status: Status
    last_source_hash: str = UNKNOWN_HASH
    asserted_hash: str = UNKNOWN_HASH
    added_lines: int = 0
    deleted_lines: int = 0
    age_days: int = 0
    size_bytes: int = 0
    maintainer: str = ""
    completion: str = ""
    degraded: bool = False
    note: str = ""

    @property
    def directory(self) -> str:
        return self.path.rpartition("/")[0]

    @property
    def name(self) -> str:
        return self.path.rpartition("/")[2]


def zero_counts() -> Dict[Status, int]:
    return {status: 0 for status in Status}


def _frozen_counts() -> Mapping[Status, int]:
    return MappingProxyType(zero_counts())


@dataclass(frozen=True)
class RunSummary:
    """Histogram of statuses for a run."""

    counts: Mapping[Status, int] = field(default_factory=_frozen_counts)
    degraded: int = 0

    @classmethod
    def from_records(cls, records: Iterable[FileRecord]) -> RunSummary:
        counts = zero_counts()
        degraded = 0
        for record in records:
            counts[record.status] += 1
            if record.degraded:
                degraded += 1
        return cls(counts=MappingProxyType(counts), degraded=degraded)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def percentage(self, status: Status) -> float:
        total = self.total
        if total == 0:
            return 0.0
        return self.counts[status] / total * 100


@dataclass(frozen=True)
class TranslatorProfile:
    """Static translator metadata plus the per-status file counts of a run."""

    nick: str
    name: str = ""
    email: str = ""
    vcs: VcsAccess = VcsAccess.UNKNOWN
    counts: Mapping[Status, int] = field(default_factory=_frozen_counts)

    def with_counts(self, counts: Mapping[Status, int]) -> TranslatorProfile:
        return replace(self, counts=MappingProxyType(dict(counts)))

    @property
    def count_ok(self) -> int:
        return self.counts[Status.TRANSLATED_OK]

    @property
    def count_old(self) -> int:
        return self.counts[Status.TRANSLATED_OLD] + self.counts[Status.TRANSLATED_WIP]

    @property
    def count_other(self) -> int:
        return sum(self.counts.values()) - self.count_ok - self.count_old

    @property
    def is_tracked(self) -> bool:
        """False for nicks that only appear in revision markers."""
        return bool(self.name or self.email or self.vcs is not VcsAccess.UNKNOWN)


@dataclass(frozen=True)
class RevcheckRun:
    """Top-level, immutable result of a revision check."""

    source_language: str
    language: str
    generated_at: datetime
    files: Mapping[str, FileRecord]
    summary: RunSummary
    translators: Tuple[TranslatorProfile, ...] = ()
    intro: str = ""

    def by_status(self, status: Status) -> Tuple[FileRecord, ...]:
        return tuple(record for record in self.files.values() if record.status is status)
