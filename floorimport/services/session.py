from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from ..logging.error_log import ErrorLogBuffer
from ..models.import_result import CommitOutcome, ImportResult
from ..models.session_state import ALLOWED_TRANSITIONS, SessionState
from ..profiles import EntityProfile, get_profile
from .committer import CreateFn, ProgressFn, UpdateFn
from .entity_index import Entity
from .orchestrator import commit_result, parse_file

"""Import session: select file -> preview -> commit or cancel.

A session parses once and commits at most once. Cancelling before commit is
free (nothing has been written). There is no cancellation once committing
started, and a committed (or cancelled) session cannot be reused: a retry
creates a new session, which rebuilds the existing-entity index from the
current snapshot.
"""

__all__ = [
    "ImportSession",
    "SessionStateError",
]

logger = logging.getLogger(__name__)


class SessionStateError(Exception):
    """Raised on an operation not allowed in the current session state."""


class ImportSession:
    def __init__(
        self,
        kind: str | EntityProfile,
        *,
        number_policy: str = "warn",
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.profile = get_profile(kind)
        self.number_policy = number_policy
        self.error_log = error_log
        self.state = SessionState.IDLE
        self.result: ImportResult | None = None
        self.outcome: CommitOutcome | None = None
        self.file_name = ""

    def _transition(self, target: SessionState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise SessionStateError(f"cannot go from {self.state.value} to {target.value}")
        logger.debug(f"session {self.profile.kind}: {self.state.value} -> {target.value}")
        self.state = target

    def parse(
        self,
        path: Path,
        existing: Iterable[Entity],
        lookups: Mapping[str, Sequence[Entity]] | None = None,
    ) -> ImportResult:
        self._transition(SessionState.PARSING)
        self.file_name = Path(path).name
        self.result = parse_file(
            path,
            existing,
            self.profile,
            lookups,
            number_policy=self.number_policy,
            error_log=self.error_log,
        )
        self._transition(SessionState.PREVIEW_READY)
        return self.result

    @property
    def has_valid_rows(self) -> bool:
        return self.result is not None and self.result.valid_count > 0

    def cancel(self) -> None:
        self._transition(SessionState.CANCELLED)

    async def commit(
        self,
        create: CreateFn,
        update: UpdateFn,
        *,
        on_progress: ProgressFn | None = None,
    ) -> CommitOutcome:
        if self.state is SessionState.PREVIEW_READY and not self.has_valid_rows:
            raise SessionStateError("nothing to commit: the preview has no valid rows")
        self._transition(SessionState.COMMITTING)
        self.outcome = await commit_result(
            self.result,  # type: ignore[arg-type]
            create,
            update,
            on_progress=on_progress,
            error_log=self.error_log,
            file_name=self.file_name,
        )
        self._transition(SessionState.COMMITTED)
        return self.outcome
