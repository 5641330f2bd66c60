"""Utility helpers for the dub/sub scanner."""

from __future__ import annotations

from typing import Iterable


def normalize_language_tag(value: object) -> str:
    """Return a stripped, lowercase language tag (empty when missing)."""

    if value is None:
        return ""
    return str(value).strip().lower()


def distinct_language_tags(values: Iterable[object] | None) -> frozenset[str]:
    """Collapse raw stream language values into a set of non-empty tags."""

    if not values:
        return frozenset()
    tags = (normalize_language_tag(value) for value in values)
    return frozenset(tag for tag in tags if tag)


def split_setting_list(value: object, *, name: str) -> list[str]:
    """Split a comma separated setting (or iterable) into stripped entries.

    Empty entries are dropped and duplicates removed while keeping the first
    occurrence's position.
    """

    if value is None:
        return []
    if isinstance(value, str):
        raw_values = [part.strip() for part in value.split(",")]
    elif isinstance(value, Iterable):
        raw_values = [str(part).strip() for part in value]
    else:
        raise TypeError(f"{name} must be a string or iterable of strings")

    cleaned: list[str] = []
    for entry in raw_values:
        if entry and entry not in cleaned:
            cleaned.append(entry)
    return cleaned
