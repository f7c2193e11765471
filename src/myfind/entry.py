from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from enum import Enum


class FileType(Enum):
    """Entry type tags, keyed by the letter ``-type`` accepts for them."""

    BLOCK_DEVICE = "b"
    CHAR_DEVICE = "c"
    DIRECTORY = "d"
    FIFO = "p"
    REGULAR = "f"
    SYMLINK = "l"
    SOCKET = "s"
    UNKNOWN = "?"

    @classmethod
    def from_mode(cls, mode: int) -> FileType:
        for test, tag in _MODE_TESTS:
            if test(mode):
                return tag
        return cls.UNKNOWN


_MODE_TESTS = (
    (stat.S_ISREG, FileType.REGULAR),
    (stat.S_ISDIR, FileType.DIRECTORY),
    (stat.S_ISLNK, FileType.SYMLINK),
    (stat.S_ISBLK, FileType.BLOCK_DEVICE),
    (stat.S_ISCHR, FileType.CHAR_DEVICE),
    (stat.S_ISFIFO, FileType.FIFO),
    (stat.S_ISSOCK, FileType.SOCKET),
)


@dataclass(frozen=True)
class FileEntry:
    path: str
    type: FileType
    mode: int = 0
    ino: int = 0
    nlink: int = 1
    uid: int = 0
    gid: int = 0
    size: int = 0
    blocks: int = 0
    mtime: float = 0.0
    link_target: str = ""

    @property
    def name(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep)) or self.path

    @property
    def is_dir(self) -> bool:
        return self.type is FileType.DIRECTORY

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result, link_target: str = "") -> FileEntry:
        return cls(
            path=path,
            type=FileType.from_mode(st.st_mode),
            mode=st.st_mode,
            ino=st.st_ino,
            nlink=st.st_nlink,
            uid=st.st_uid,
            gid=st.st_gid,
            size=st.st_size,
            blocks=getattr(st, "st_blocks", 0),
            mtime=st.st_mtime,
            link_target=link_target,
        )
