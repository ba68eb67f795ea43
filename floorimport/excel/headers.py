from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

"""Header normalizer: map synonym-laden sheet headers onto canonical field ids.

Normalization trims, collapses internal whitespace runs to a single space and
case-folds Latin text. Non-Latin scripts (Arabic headers in the factory
templates) pass through unchanged apart from whitespace handling.
Unrecognized headers are dropped silently.
"""

__all__ = [
    "normalize_header",
    "normalize_synonyms",
    "build_header_mapping",
]

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_header(text: object) -> str:
    if text is None:
        return ""
    return _WHITESPACE_RUN.sub(" ", str(text).strip()).casefold()


def normalize_synonyms(table: Mapping[str, str]) -> dict[str, str]:
    """Normalize the keys of a synonym table once, at import time.

    Raises:
        ValueError: if two synonyms normalize to the same text but point at
            different field ids (the lookup would be ambiguous)
    """
    normalized: dict[str, str] = {}
    for raw, field_id in table.items():
        key = normalize_header(raw)
        existing = normalized.get(key)
        if existing is not None and existing != field_id:
            raise ValueError(f"ambiguous header synonym {raw!r}: {existing} / {field_id}")
        normalized[key] = field_id
    return normalized


def build_header_mapping(headers: Iterable[object], synonyms: Mapping[str, str]) -> dict[str, str]:
    """Build raw header -> field id for one file.

    ``synonyms`` must already be normalized (see ``normalize_synonyms``).
    When several raw headers resolve to the same field id the first one in
    header order wins; later ones are dropped.
    """
    mapping: dict[str, str] = {}
    claimed: set[str] = set()
    for raw in headers:
        if raw is None:
            continue
        raw_text = str(raw)
        if raw_text in mapping:
            continue
        field_id = synonyms.get(normalize_header(raw_text))
        if field_id is None or field_id in claimed:
            continue
        mapping[raw_text] = field_id
        claimed.add(field_id)
    return mapping
