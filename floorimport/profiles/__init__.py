"""Entity profiles for the two import call sites (products, production reports)."""

from __future__ import annotations

from .base import EntityAttribute, EntityProfile
from .products import ProductProfile
from .reports import ReportProfile

__all__ = [
    "EntityAttribute",
    "EntityProfile",
    "ProductProfile",
    "ReportProfile",
    "PROFILES",
    "get_profile",
]

# 起動時に一度だけ同義語テーブルを正規化する
PROFILES: dict[str, EntityProfile] = {
    "products": ProductProfile(),
    "reports": ReportProfile(),
}


def get_profile(kind: str | EntityProfile) -> EntityProfile:
    if isinstance(kind, EntityProfile):
        return kind
    try:
        return PROFILES[kind]
    except KeyError:
        raise ValueError(f"unknown import kind: {kind!r} (expected one of {sorted(PROFILES)})") from None
