from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from ..models.parsed_row import FieldChange, ParsedRow, RowAction
from ..profiles.base import EntityProfile
from .entity_index import Entity, ExistingEntityIndex

"""Reconciler: classify parsed rows as new / update / rejected.

Single pass in file order. ``seen_keys`` is threaded through the fold as an
explicit accumulator: every row's keys are recorded whatever its outcome, so
the second and later occurrences of a key always carry the in-file duplicate
error while the first occurrence is judged on its own merits.

Per row:
1. mandatory fields (all missing fields reported, not only the first)
2. natural-key match -> update, with a field diff against the stored entity
3. no match -> new, alternate-key collisions are errors
4. in-file duplicate check against ``seen_keys`` (message chosen by the profile)
5. record the row keys into ``seen_keys``
"""

__all__ = [
    "reconcile_row",
    "reconcile_rows",
    "diff_entity",
]

logger = logging.getLogger(__name__)


def diff_entity(
    profile: EntityProfile, existing: Entity, incoming: Mapping[str, Any]
) -> list[FieldChange]:
    """Exact-equality diff of incoming attributes against a stored entity.

    Attributes the stored entity does not carry are not compared.
    """
    changes = []
    for attr in profile.attributes:
        name = attr.name
        if name not in incoming or name not in existing:
            continue
        old, new = existing[name], incoming[name]
        if old != new:
            changes.append(FieldChange(field_id=name, label=profile.label(name), old=old, new=new))
    return changes


def reconcile_row(
    row: ParsedRow,
    index: ExistingEntityIndex,
    profile: EntityProfile,
    seen_keys: frozenset[Hashable],
) -> tuple[ParsedRow, frozenset[Hashable]]:
    """Reconcile one row; returns the classified row and the updated key set."""
    resolved, reference_errors = profile.resolve(row, index)
    matched = profile.match(row, resolved, index)

    errors = list(row.errors)
    errors.extend(profile.mandatory_errors(row, matched))
    errors.extend(reference_errors)

    is_duplicate = False
    changes: list[FieldChange] = []
    if matched is not None:
        action = RowAction.UPDATE
        matched_id = matched.get("id")
        matched_id = None if matched_id is None else str(matched_id)
        payload = profile.update_payload(resolved)
        changes = diff_entity(profile, matched, payload)
    else:
        action = RowAction.NEW
        matched_id = None
        payload = profile.create_payload(resolved)
        collisions = profile.collision_errors(row, resolved, index)
        if collisions:
            is_duplicate = True
            errors.extend(collisions)

    errors.extend(profile.value_errors(row, matched))
    warnings = list(row.warnings) + profile.value_warnings(row)

    keys = profile.seen_keys(row, resolved)
    repeated = keys & seen_keys
    if repeated:
        is_duplicate = True
        errors.extend(profile.duplicate_errors(row, repeated))

    reconciled = replace(
        row,
        errors=errors,
        warnings=warnings,
        action=action,
        matched_id=matched_id,
        changes=changes,
        payload=payload,
        is_duplicate=is_duplicate,
    )
    return reconciled, seen_keys | keys


def reconcile_rows(
    rows: Iterable[ParsedRow], index: ExistingEntityIndex, profile: EntityProfile
) -> list[ParsedRow]:
    """Fold ``reconcile_row`` over the rows in file order."""
    seen_keys: frozenset[Hashable] = frozenset()
    out: list[ParsedRow] = []
    for row in rows:
        reconciled, seen_keys = reconcile_row(row, index, profile, seen_keys)
        if reconciled.errors:
            logger.debug(f"row {reconciled.row_index} rejected: {'; '.join(reconciled.errors)}")
        out.append(reconciled)
    return out
