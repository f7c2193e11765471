from __future__ import annotations

import grp
import os
import pwd
import stat
import sys
import time
from functools import lru_cache
from typing import TextIO

from .entry import FileEntry, FileType

_SIX_MONTHS = 182 * 24 * 3600


@lru_cache(maxsize=None)
def user_name(uid: int) -> str:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


@lru_cache(maxsize=None)
def group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def format_mtime(mtime: float, now: float | None = None) -> str:
    if now is None:
        now = time.time()
    lt = time.localtime(mtime)
    month = time.strftime("%b", lt)
    if abs(now - mtime) < _SIX_MONTHS:
        return f"{month} {lt.tm_mday:2d} {time.strftime('%H:%M', lt)}"
    return f"{month} {lt.tm_mday:2d}  {lt.tm_year}"


def format_ls_line(entry: FileEntry, now: float | None = None) -> str:
    """Render ``entry`` the way ``find -ls`` does.

    Columns: inode, size in 1K blocks, permissions, link count, owner,
    group, size in bytes, modification time, path.
    """
    kblocks = (entry.blocks + 1) // 2
    line = (
        f"{entry.ino:>7} {kblocks:>4} {stat.filemode(entry.mode)} {entry.nlink:3d} "
        f"{user_name(entry.uid):<8} {group_name(entry.gid):<8} {entry.size:8d} "
        f"{format_mtime(entry.mtime, now)} {entry.path}"
    )
    if entry.type is FileType.SYMLINK and entry.link_target:
        line += f" -> {entry.link_target}"
    return line


class Reporter:
    def __init__(
        self,
        stream: TextIO | None = None,
        extended: bool = False,
        null: bool = False,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.extended = extended
        self.terminator = "\0" if null else "\n"

    def format(self, entry: FileEntry) -> str:
        if self.extended:
            return format_ls_line(entry)
        return entry.path

    def report(self, entry: FileEntry) -> None:
        line = self.format(entry) + self.terminator
        # Paths may carry undecodable bytes as surrogates; emit them raw.
        buffer = getattr(self.stream, "buffer", None)
        if buffer is None:
            self.stream.write(line)
        else:
            buffer.write(os.fsencode(line))

    def flush(self) -> None:
        self.stream.flush()
