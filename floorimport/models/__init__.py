"""Domain models for the spreadsheet import / reconciliation engine.

This package contains the value types shared by the header normalizer, the
row parser, the reconciler, the aggregator and the batch committer.
"""

from .error_record import ErrorRecord
from .fields import ABSENT, FieldKind, FieldSpec, FieldValue, Present
from .import_result import CommitOutcome, CommitProgress, ImportResult
from .parsed_row import DUPLICATE_IN_FILE, FieldChange, ParsedRow, RowAction
from .session_state import SessionState

__all__ = [
    # Field values
    "ABSENT",
    "FieldKind",
    "FieldSpec",
    "FieldValue",
    "Present",
    # Row / result models
    "DUPLICATE_IN_FILE",
    "FieldChange",
    "ParsedRow",
    "RowAction",
    "ImportResult",
    "CommitProgress",
    "CommitOutcome",
    # Logging / lifecycle
    "ErrorRecord",
    "SessionState",
]
