"""Shared normalization helpers for job and candidate schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable


class EducationLevel(str, Enum):
    """Ordered education enumeration, lowest first."""

    NONE = "none"
    HIGHSCHOOL = "highschool"
    BACHELOR = "bachelor"
    MASTER = "master"
    PHD = "phd"

    @property
    def rank(self) -> int:
        return _EDUCATION_ORDER.index(self)


_EDUCATION_ORDER: tuple[EducationLevel, ...] = (
    EducationLevel.NONE,
    EducationLevel.HIGHSCHOOL,
    EducationLevel.BACHELOR,
    EducationLevel.MASTER,
    EducationLevel.PHD,
)

_EDUCATION_ALIASES: dict[str, EducationLevel] = {
    "none": EducationLevel.NONE,
    "no degree": EducationLevel.NONE,
    "highschool": EducationLevel.HIGHSCHOOL,
    "high school": EducationLevel.HIGHSCHOOL,
    "high_school": EducationLevel.HIGHSCHOOL,
    "secondary": EducationLevel.HIGHSCHOOL,
    "bachelor": EducationLevel.BACHELOR,
    "bachelors": EducationLevel.BACHELOR,
    "bachelor's": EducationLevel.BACHELOR,
    "undergraduate": EducationLevel.BACHELOR,
    "bs": EducationLevel.BACHELOR,
    "bsc": EducationLevel.BACHELOR,
    "ba": EducationLevel.BACHELOR,
    "btech": EducationLevel.BACHELOR,
    "b.tech": EducationLevel.BACHELOR,
    "master": EducationLevel.MASTER,
    "masters": EducationLevel.MASTER,
    "master's": EducationLevel.MASTER,
    "ms": EducationLevel.MASTER,
    "msc": EducationLevel.MASTER,
    "ma": EducationLevel.MASTER,
    "mba": EducationLevel.MASTER,
    "mtech": EducationLevel.MASTER,
    "m.tech": EducationLevel.MASTER,
    "phd": EducationLevel.PHD,
    "ph.d": EducationLevel.PHD,
    "ph.d.": EducationLevel.PHD,
    "doctorate": EducationLevel.PHD,
    "doctoral": EducationLevel.PHD,
}


def normalize_token(value: str) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    return " ".join(value.split()).lower()


def normalize_skills(values: Any) -> tuple[str, ...]:
    """Normalize a skill collection into a deduplicated tuple.

    Order of first occurrence is preserved so metadata stays stable. A plain
    string is treated as a comma-separated list.
    """
    if values is None:
        return ()
    if isinstance(values, str):
        values = values.split(",")
    if not isinstance(values, Iterable):
        raise ValueError("skills must be a list of strings")

    seen: dict[str, None] = {}
    for item in values:
        if not isinstance(item, str):
            raise ValueError(f"skill entries must be strings, got {type(item).__name__}")
        token = normalize_token(item)
        if token:
            seen.setdefault(token, None)
    return tuple(seen)


def parse_education_level(value: Any) -> EducationLevel | None:
    """Map a loose education label onto the enumeration.

    Returns ``None`` for blank input; raises ``ValueError`` for unknown labels.
    """
    if value is None:
        return None
    if isinstance(value, EducationLevel):
        return value
    if not isinstance(value, str):
        raise ValueError(f"education level must be a string, got {type(value).__name__}")
    token = normalize_token(value)
    if not token:
        return None
    try:
        return _EDUCATION_ALIASES[token]
    except KeyError as exc:
        raise ValueError(f"unknown education level: {value!r}") from exc
