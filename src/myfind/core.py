from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from .entry import FileEntry
from .filters import FilterCriteria, active_filters, matches

ErrorHandler = Callable[[str, str, OSError], None]

SEP = "/"
_SELF_AND_PARENT = (".", "..")
DEBUG_CATEGORIES = ("stat", "search", "tree")


def eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


@dataclass
class Debug:
    cats: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def parse(cls, spec: str | None) -> Debug:
        if not spec:
            return cls()
        cats = frozenset(c.strip() for c in spec.split(",") if c.strip())
        unknown = cats - set(DEBUG_CATEGORIES) - {"all"}
        if unknown:
            raise ValueError(f"unknown debug category: {sorted(unknown)[0]}")
        return cls(cats)

    def on(self, cat: str) -> bool:
        return "all" in self.cats or cat in self.cats

    def log(self, cat: str, msg: str) -> None:
        if self.on(cat):
            eprint(f"[DEBUG:{cat}] {msg}")


def report_error(action: str, path: str, err: OSError) -> None:
    if err.errno is None:
        eprint(f"myfind: {action} '{path}': {err}")
    else:
        eprint(f"myfind: {action} '{path}': [Errno {err.errno}] {err.strerror}")


def ignore_error(action: str, path: str, err: OSError) -> None:  # noqa: ARG001
    return None


def join_path(path1: str, path2: str) -> str:
    """Join two path segments, keeping exactly one separator at the seam.

    Only the boundary is touched; ``.``/``..`` and repeated separators
    inside either segment are left as they are.
    """
    if not path1:
        return path2
    if not path2:
        return path1

    trailing = path1.endswith(SEP)
    leading = path2.startswith(SEP)
    if trailing and leading:
        return path1[:-1] + path2
    if trailing or leading:
        return path1 + path2
    return path1 + SEP + path2


@dataclass
class DirectoryListing:
    path: str
    names: list[str] = field(default_factory=list)
    error: OSError | None = None  # read/close failure after opening


def list_directory(path: str) -> DirectoryListing:
    """Read every child name of ``path`` and close the directory.

    Opening failures raise ``OSError``. A failure while reading keeps the
    names collected so far and is recorded on the listing.
    """
    listing = DirectoryListing(path)
    it = os.scandir(path)
    try:
        while True:
            try:
                entry = next(it)
            except StopIteration:
                break
            except OSError as e:
                listing.error = e
                break
            if entry.name not in _SELF_AND_PARENT:
                listing.names.append(entry.name)
    finally:
        try:
            it.close()
        except OSError as e:
            if listing.error is None:
                listing.error = e
    return listing


def _capture(path: str, on_error: ErrorHandler, debug: Debug) -> FileEntry | None:
    try:
        st = os.lstat(path)
    except OSError as e:
        on_error("cannot access", path, e)
        return None
    if debug.on("stat"):
        debug.log("stat", f"lstat({path!r}) mode={stat.filemode(st.st_mode)}")

    target = ""
    if stat.S_ISLNK(st.st_mode):
        try:
            target = os.readlink(path)
        except OSError:
            target = ""
    return FileEntry.from_stat(path, st, target)


def _expand(path: str, on_error: ErrorHandler, debug: Debug) -> list[str]:
    try:
        listing = list_directory(path)
    except OSError as e:
        on_error("cannot open directory", path, e)
        return []
    if listing.error is not None:
        on_error("error reading directory", path, listing.error)
    debug.log("search", f"{path}: {len(listing.names)} entries")
    return listing.names


def walk(
    root: str,
    on_error: ErrorHandler = report_error,
    debug: Debug | None = None,
) -> Iterator[FileEntry]:
    """Yield every entry under ``root`` depth-first, parents before children.

    Symbolic links are reported, never followed. Each directory is read
    completely and closed before any of its children is visited, so at
    most one directory handle is open at a time regardless of depth.
    """
    if debug is None:
        debug = Debug()

    pending: list[tuple[str, Iterator[str]]] = []
    path = root
    while True:
        entry = _capture(path, on_error, debug)
        if entry is not None:
            yield entry
            if entry.is_dir:
                names = _expand(path, on_error, debug)
                if names:
                    pending.append((path, iter(names)))
                    debug.log("tree", f"enter {path} (depth {len(pending)})")

        while pending:
            parent, names_left = pending[-1]
            name = next(names_left, None)
            if name is None:
                pending.pop()
                debug.log("tree", f"leave {parent}")
                continue
            path = join_path(parent, name)
            break
        else:
            return


def search(
    root: str,
    criteria: FilterCriteria,
    on_error: ErrorHandler = report_error,
    debug: Debug | None = None,
) -> Iterator[FileEntry]:
    checks = active_filters(criteria)
    for entry in walk(root, on_error=on_error, debug=debug):
        if matches(entry, checks):
            yield entry
