from __future__ import annotations

from ..domain import PREFERENCE_EVERYONE, Participant


def _normalize(value: str | None) -> str | None:
    if value is None:
        return None
    v = str(value).strip().lower()
    return v or None


def _accepts(preference: str | None, gender: str | None) -> bool:
    pref = _normalize(preference)
    g = _normalize(gender)
    if pref is None or g is None:
        return True
    if pref == PREFERENCE_EVERYONE:
        return True
    return pref == g


def preferences_compatible(a: Participant, b: Participant) -> bool:
    return _accepts(a.preference, b.gender) and _accepts(b.preference, a.gender)
