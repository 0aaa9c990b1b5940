"""CLI entrypoint for revcheck."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .aggregator import RunAggregator
from .config import ConfigError, RevcheckConfig, load_config
from .errors import SourceTreeUnreadable
from .logging import configure_logging
from .report import format_summary, run_to_dict, save_json


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revcheck",
        description="Check the revision status of a documentation translation against its source tree.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument("source", help="Path to the source (English) document tree.")
    parser.add_argument("translation", help="Path to the translated document tree.")
    parser.add_argument(
        "--language",
        default=None,
        help="Language code of the translation (defaults to the config or directory name).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="revcheck.yml or translation.xml to read (defaults to the translation root).",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files classified in parallel.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Also write the JSON report to this file.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append log records to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for revcheck."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.workers is not None and args.workers < 1:
        parser.exit(2, "--workers must be at least 1\n")

    translation_root = Path(args.translation)
    try:
        if args.config is None and not translation_root.is_dir():
            # A language with no translated tree yet reports everything as untranslated.
            config = RevcheckConfig(root=translation_root)
        else:
            config = load_config(args.config or translation_root)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    try:
        run = RunAggregator(config).run(
            args.source,
            args.translation,
            language=args.language,
            workers=args.workers,
        )
    except SourceTreeUnreadable as exc:
        parser.exit(1, f"{exc}\n")

    if args.output is not None:
        save_json(run, args.output)

    if args.format == "json":
        print(json.dumps(run_to_dict(run), indent=2))
    else:
        sys.stdout.write(format_summary(run))


if __name__ == "__main__":
    main(sys.argv[1:])
