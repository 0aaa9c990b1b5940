"""Run orchestration: walk, classify and tally a translation."""

from __future__ import annotations

import dataclasses
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, Optional

from .classifier import Classifier
from .config import RevcheckConfig
from .git.history import GitHistory, HistoryBackend
from .logging import get_logger
from .models import (
    FilePair,
    FileRecord,
    RevcheckRun,
    RunSummary,
    Status,
    TranslatorProfile,
    zero_counts,
)
from .walker import TreeWalker


class RunAggregator:
    """Builds a :class:`RevcheckRun` for one source/translated tree pair."""

    def __init__(
        self,
        config: RevcheckConfig | None = None,
        *,
        history_factory: Callable[[Path], HistoryBackend] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or RevcheckConfig(root=Path.cwd())
        self._history_factory = history_factory or GitHistory
        self._clock = clock or (lambda: datetime.now(UTC))
        self.logger = get_logger("aggregator")

    def run(
        self,
        source_root: str | Path,
        translated_root: str | Path,
        *,
        language: str | None = None,
        workers: int | None = None,
    ) -> RevcheckRun:
        """Classify every document and return the populated run.

        Raises :class:`~revcheck.errors.SourceTreeUnreadable` when the source
        root cannot be walked. Per-file backend failures never abort the run.
        """
        config = self.config
        walker = TreeWalker(
            source_root,
            translated_root,
            suffixes=config.include_suffixes,
            exclude_paths=config.exclude_paths,
        )
        language = language or config.language or walker.translated_root.name
        classifier = Classifier(self._history_factory(walker.source_root))
        self.logger.info(
            "Checking %s translation at %s against %s",
            language,
            walker.translated_root,
            walker.source_root,
        )

        profiles = self._initial_profiles()
        profile_counts: Dict[str, Dict[Status, int]] = {}
        files: Dict[str, FileRecord] = {}

        for record in self._classify(classifier, walker, workers or config.workers):
            maintainer = record.maintainer or config.owner_for(record.path)
            if maintainer != record.maintainer:
                record = dataclasses.replace(record, maintainer=maintainer)
            files[record.path] = record
            if maintainer:
                if maintainer not in profiles:
                    profiles[maintainer] = TranslatorProfile(nick=maintainer)
                counts = profile_counts.setdefault(maintainer, zero_counts())
                counts[record.status] += 1

        summary = RunSummary.from_records(files.values())
        self.logger.info("Classified %d files (%d degraded)", summary.total, summary.degraded)
        return RevcheckRun(
            source_language=config.source_language,
            language=language,
            generated_at=self._clock(),
            files=MappingProxyType(files),
            summary=summary,
            translators=tuple(
                profile.with_counts(profile_counts.get(nick, zero_counts()))
                for nick, profile in profiles.items()
            ),
            intro=config.intro,
        )

    # ------------------------------------------------------------------
    # Internals

    def _initial_profiles(self) -> Dict[str, TranslatorProfile]:
        profiles: Dict[str, TranslatorProfile] = {}
        for entry in self.config.translators:
            profiles[entry.nick] = TranslatorProfile(
                nick=entry.nick,
                name=entry.name,
                email=entry.email,
                vcs=entry.vcs,
            )
        return profiles

    def _classify(
        self, classifier: Classifier, pairs: Iterable[FilePair], workers: int
    ) -> Iterator[FileRecord]:
        if workers <= 1:
            for pair in pairs:
                yield classifier.classify(pair)
            return

        # Walk eagerly so a bad source root fails before any thread starts.
        pair_list = list(pairs)
        self.logger.debug("Classifying %d files with %d workers", len(pair_list), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="revcheck") as executor:
            # map() yields in submission order, keeping the result deterministic.
            yield from executor.map(classifier.classify, pair_list)


def run_revcheck(
    source_root: str | Path,
    translated_root: str | Path,
    config: Optional[RevcheckConfig] = None,
    *,
    language: str | None = None,
    workers: int | None = None,
) -> RevcheckRun:
    """Convenience wrapper around :class:`RunAggregator`."""
    return RunAggregator(config).run(
        source_root, translated_root, language=language, workers=workers
    )


__all__ = ["RunAggregator", "run_revcheck"]
