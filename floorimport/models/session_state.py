from __future__ import annotations

from enum import Enum

"""Import session lifecycle states.

State transitions:
    IDLE → PARSING → PREVIEW_READY → (CANCELLED | COMMITTING) → COMMITTED

PREVIEW_READY covers both "something to commit" and "nothing valid"; the
session exposes which one through its ImportResult. COMMITTING is neither
resumable nor re-entrant: a retry starts a new session.
"""

__all__ = [
    "SessionState",
    "ALLOWED_TRANSITIONS",
]


class SessionState(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    PREVIEW_READY = "preview_ready"
    CANCELLED = "cancelled"
    COMMITTING = "committing"
    COMMITTED = "committed"


ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.PARSING}),
    SessionState.PARSING: frozenset({SessionState.PREVIEW_READY}),
    SessionState.PREVIEW_READY: frozenset({SessionState.CANCELLED, SessionState.COMMITTING}),
    SessionState.COMMITTING: frozenset({SessionState.COMMITTED}),
    SessionState.CANCELLED: frozenset(),
    SessionState.COMMITTED: frozenset(),
}
