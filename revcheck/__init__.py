"""Translation revision checking for git-backed documentation trees."""

from .aggregator import RunAggregator, run_revcheck
from .classifier import Classifier
from .errors import (
    BackendQueryFailure,
    MarkerParseFailure,
    RevcheckError,
    SourceTreeUnreadable,
    UnknownRevision,
)
from .models import FileRecord, RevcheckRun, RunSummary, Status, TranslatorProfile

__all__ = [
    "BackendQueryFailure",
    "Classifier",
    "FileRecord",
    "MarkerParseFailure",
    "RevcheckError",
    "RevcheckRun",
    "RunAggregator",
    "RunSummary",
    "SourceTreeUnreadable",
    "Status",
    "TranslatorProfile",
    "UnknownRevision",
    "run_revcheck",
]
