"""Plain data and text views of a revcheck run."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List

from .models import FileRecord, RevcheckRun, Status, TranslatorProfile

_ACTION_STATUSES = (Status.TRANSLATED_OLD, Status.TRANSLATED_WIP)


def record_to_dict(record: FileRecord) -> Dict[str, object]:
    return {
        "path": record.path,
        "status": record.status.value,
        "last_source_hash": record.last_source_hash,
        "asserted_hash": record.asserted_hash,
        "added_lines": record.added_lines,
        "deleted_lines": record.deleted_lines,
        "age_days": record.age_days,
        "size_bytes": record.size_bytes,
        "maintainer": record.maintainer,
        "completion": record.completion,
        "degraded": record.degraded,
        "note": record.note,
    }


def _translator_to_dict(profile: TranslatorProfile) -> Dict[str, object]:
    return {
        "nick": profile.nick,
        "name": profile.name,
        "email": profile.email,
        "vcs": profile.vcs.value,
        "counts": {status.value: count for status, count in profile.counts.items()},
        "ok": profile.count_ok,
        "old": profile.count_old,
        "other": profile.count_other,
    }


def run_to_dict(run: RevcheckRun) -> Dict[str, object]:
    """Return a JSON-serialisable view of ``run``."""
    return {
        "source_language": run.source_language,
        "language": run.language,
        "generated_at": run.generated_at.isoformat().replace("+00:00", "Z"),
        "intro": run.intro,
        "summary": {
            "counts": {status.value: count for status, count in run.summary.counts.items()},
            "total": run.summary.total,
            "degraded": run.summary.degraded,
        },
        "translators": [_translator_to_dict(profile) for profile in run.translators],
        "files": [record_to_dict(record) for record in run.files.values()],
    }


def save_json(run: RevcheckRun, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(run_to_dict(run), indent=2), encoding="utf-8")


def format_summary(run: RevcheckRun) -> str:
    """Return a short plain-text status report."""
    summary = run.summary
    lines: List[str] = [
        f"Revision check for {run.language} (source: {run.source_language})",
        f"Generated: {run.generated_at:%Y-%m-%d %H:%M:%S %Z}".rstrip(),
        "",
    ]
    width = max(len(status.value) for status in Status)
    for status in Status:
        count = summary.counts[status]
        lines.append(f"  {status.value:<{width}}  {count:>6}  {summary.percentage(status):6.2f}%")
    lines.append(f"  {'Total':<{width}}  {summary.total:>6}")
    if summary.degraded:
        lines.append(f"  {summary.degraded} file(s) classified with incomplete history")

    outdated = [record for record in run.files.values() if record.status in _ACTION_STATUSES]
    if outdated:
        lines.append("")
        lines.append("Files to update:")
        directory = None
        for record in outdated:
            if record.directory != directory:
                directory = record.directory
                lines.append(f"  {directory or '/'}")
            flag = " (wip)" if record.status is Status.TRANSLATED_WIP else ""
            owner = f" [{record.maintainer}]" if record.maintainer else ""
            lines.append(
                f"    {record.name}  +{record.added_lines} -{record.deleted_lines}"
                f"  {record.age_days}d{flag}{owner}"
            )
    return "\n".join(lines) + "\n"


__all__ = ["format_summary", "record_to_dict", "run_to_dict", "save_json"]
