from __future__ import annotations

import fnmatch
import pwd
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from .entry import FileEntry, FileType

Predicate = Callable[[FileEntry], bool]

_TYPE_MAP = {t.value: t for t in FileType if t is not FileType.UNKNOWN}


@dataclass(frozen=True)
class FilterCriteria:
    types: frozenset[FileType] | None = None
    uid: int | None = None
    nouser: bool = False
    name: str | None = None
    path: str | None = None
    extended: bool = False  # -ls output, not a filter

    def __post_init__(self) -> None:
        if self.uid is not None and self.nouser:
            raise ValueError("-user and -nouser cannot be combined")
        if self.types is not None and not self.types:
            raise ValueError("type filter needs at least one type")


def parse_types(chars: str) -> frozenset[FileType]:
    if not chars:
        raise ValueError("missing argument to -type")
    unknown = [ch for ch in chars if ch not in _TYPE_MAP]
    if unknown:
        raise ValueError(f"unknown argument to -type: {unknown[0]}")
    return frozenset(_TYPE_MAP[ch] for ch in chars)


def resolve_user(text: str) -> int:
    """Return the uid for a decimal id or a user name known to the host."""
    if text.isascii() and text.isdigit():
        return int(text)
    try:
        return pwd.getpwnam(text).pw_uid
    except KeyError:
        raise ValueError(f"'{text}' is not the name of a known user") from None


@lru_cache(maxsize=None)
def user_exists(uid: int) -> bool:
    try:
        pwd.getpwuid(uid)
    except KeyError:
        return False
    return True


def has_no_owner(entry: FileEntry) -> bool:
    return not user_exists(entry.uid)


def active_filters(criteria: FilterCriteria) -> list[tuple[str, Predicate]]:
    checks: list[tuple[str, Predicate]] = []

    if criteria.types is not None:
        types = criteria.types
        checks.append(("type", lambda e: e.type in types))

    if criteria.uid is not None:
        uid = criteria.uid
        checks.append(("user", lambda e: e.uid == uid))

    if criteria.nouser:
        checks.append(("nouser", has_no_owner))

    if criteria.name is not None:
        name_pattern = criteria.name
        checks.append(("name", lambda e: fnmatch.fnmatchcase(e.name, name_pattern)))

    if criteria.path is not None:
        path_pattern = criteria.path
        checks.append(("path", lambda e: fnmatch.fnmatchcase(e.path, path_pattern)))

    return checks


def matches(entry: FileEntry, checks: Sequence[tuple[str, Predicate]]) -> bool:
    return all(check(entry) for _, check in checks)


def should_include(entry: FileEntry, criteria: FilterCriteria) -> bool:
    return matches(entry, active_filters(criteria))
