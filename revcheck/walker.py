"""Parallel walking of the source and translated document trees."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import CONFIG_FILENAME, DEFAULT_SUFFIXES, TRANSLATION_XML
from .errors import SourceTreeUnreadable
from .models import FilePair

_EXCLUDED_DIRS = {
    ".git",
    ".svn",
    "__pycache__",
}

_EXCLUDED_FILES = {
    CONFIG_FILENAME,
    TRANSLATION_XML,
    "README",
    "README.md",
    "LICENSE",
}


@dataclass
class IgnoreRule:
    """Gitignore-style exclusion pattern applied to relative paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            return fnmatchcase(rel_path, self.pattern)

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        has_slash="/" in pattern,
    )


class TreeWalker:
    """Pairs document files of the source tree with the translated tree.

    Iterating a walker yields :class:`FilePair` items: first every document of
    the source tree (with ``translated`` set when the same relative path exists
    in the translated tree), then the translated documents that have no source
    counterpart. Within each phase, files are grouped by directory. Each call
    to ``iter()`` walks the trees again.
    """

    def __init__(
        self,
        source_root: str | Path,
        translated_root: str | Path,
        *,
        suffixes: Sequence[str] = DEFAULT_SUFFIXES,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.source_root = Path(source_root).expanduser().resolve()
        self.translated_root = Path(translated_root).expanduser().resolve()
        self.suffixes = tuple(suffix.lower() for suffix in suffixes)
        self._rules: List[IgnoreRule] = []
        for pattern in exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self._rules.append(rule)

    def __iter__(self) -> Iterator[FilePair]:
        self._check_source_root()

        source_paths = set()
        for rel_path in self.documents(self.source_root):
            source_paths.add(rel_path)
            translated = self.translated_root / rel_path
            yield FilePair(
                path=rel_path,
                source=str(self.source_root / rel_path),
                translated=str(translated) if translated.is_file() else None,
            )

        if not self.translated_root.is_dir():
            return
        for rel_path in self.documents(self.translated_root):
            if rel_path in source_paths:
                continue
            yield FilePair(
                path=rel_path,
                source=None,
                translated=str(self.translated_root / rel_path),
            )

    def documents(self, root: Path) -> Iterator[str]:
        """Yield relative POSIX paths of document files under ``root``."""
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS or name.startswith("."):
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if self._ignored(rel_path, True):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if not self._is_document(filename) or self._ignored(rel_path, False):
                    continue
                yield rel_path

    def _check_source_root(self) -> None:
        root = self.source_root
        if not root.exists():
            raise SourceTreeUnreadable(str(root), "path not found")
        if not root.is_dir():
            raise SourceTreeUnreadable(str(root), "not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as exc:
            raise SourceTreeUnreadable(str(root), exc.strerror or str(exc)) from exc

    def _is_document(self, filename: str) -> bool:
        if filename.startswith(".") or filename in _EXCLUDED_FILES:
            return False
        return filename.lower().endswith(self.suffixes)

    def _ignored(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self._rules)


__all__ = ["IgnoreRule", "TreeWalker", "build_ignore_rule"]
