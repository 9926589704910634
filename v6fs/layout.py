"""On-disk structures of the Unix Version 6 file system."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List, Tuple

# Disk layout: boot block, superblock, then the inode area.
BOOTBLOCK_SECTOR = 0
SUPERBLOCK_SECTOR = 1
INODE_START_SECTOR = 2
ROOT_INUMBER = 1
BOOTBLOCK_MAGIC_NUM = 0o407

# Inode mode bits.
IALLOC = 0o100000
IFMT = 0o60000
IFDIR = 0o40000
IFCHR = 0o20000
IFBLK = 0o60000
ILARG = 0o10000
ISUID = 0o4000
ISGID = 0o2000
ISVTX = 0o1000
IREAD = 0o400
IWRITE = 0o200
IEXEC = 0o100

_SUPERBLOCK = struct.Struct("<HHH100HH100HBBBB2H48H")
_INODE = struct.Struct("<HBBBBH8H2H2H")
_DIRENT = struct.Struct("<H14s")

SUPERBLOCK_SIZE = _SUPERBLOCK.size
INODE_SIZE = _INODE.size
DIRENT_SIZE = _DIRENT.size
DIRENT_NAME_LEN = 14


class FileSystemError(Exception):
    """Raised when the file system cannot be read or an entry is not found."""


def _require(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise FileSystemError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass(frozen=True)
class Superblock:
    """The superblock stored in sector 1."""

    isize: int
    fsize: int
    nfree: int
    free: Tuple[int, ...]
    ninode: int
    inode: Tuple[int, ...]
    flock: int
    ilock: int
    fmod: int
    ronly: int
    time: Tuple[int, int]
    pad: Tuple[int, ...]

    @classmethod
    def from_bytes(cls, data) -> "Superblock":
        data = bytes(data)
        _require(data, SUPERBLOCK_SIZE, "superblock")
        fields = _SUPERBLOCK.unpack_from(data)
        isize, fsize, nfree = fields[0:3]
        free = tuple(fields[3:103])
        ninode = fields[103]
        inode = tuple(fields[104:204])
        flock, ilock, fmod, ronly = fields[204:208]
        time = (fields[208], fields[209])
        pad = tuple(fields[210:])
        return cls(isize, fsize, nfree, free, ninode, inode,
                   flock, ilock, fmod, ronly, time, pad)


@dataclass(frozen=True)
class Inode:
    """An on-disk inode."""

    mode: int
    nlink: int
    uid: int
    gid: int
    size0: int
    size1: int
    addr: Tuple[int, ...]
    atime: Tuple[int, int]
    mtime: Tuple[int, int]

    @classmethod
    def from_bytes(cls, data) -> "Inode":
        data = bytes(data)
        _require(data, INODE_SIZE, "inode")
        mode, nlink, uid, gid, size0, size1, *rest = _INODE.unpack_from(data)
        return cls(
            mode=mode,
            nlink=nlink,
            uid=uid,
            gid=gid,
            size0=size0,
            size1=size1,
            addr=tuple(rest[:8]),
            atime=(rest[8], rest[9]),
            mtime=(rest[10], rest[11]),
        )

    def size(self) -> int:
        """File size in bytes, stored as a 24-bit number."""
        return (self.size0 << 16) | self.size1

    def is_allocated(self) -> bool:
        return bool(self.mode & IALLOC)

    def is_directory(self) -> bool:
        return (self.mode & IFMT) == IFDIR

    def is_large(self) -> bool:
        return bool(self.mode & ILARG)


@dataclass(frozen=True)
class DirEntry:
    """A directory entry: inode number and a NUL-padded 14-byte name."""

    inumber: int
    raw_name: bytes

    @classmethod
    def from_bytes(cls, data) -> "DirEntry":
        data = bytes(data)
        _require(data, DIRENT_SIZE, "directory entry")
        inumber, raw_name = _DIRENT.unpack_from(data)
        return cls(inumber, raw_name)

    def name(self) -> str:
        """The entry name up to the first NUL byte."""
        return self.raw_name.split(b"\0", 1)[0].decode("latin-1")


def parse_dir_entries(data) -> List[DirEntry]:
    """Split a block of directory data into entries; a trailing partial entry is ignored."""
    data = bytes(data)
    return [
        DirEntry(inumber, raw_name)
        for inumber, raw_name in _DIRENT.iter_unpack(
            data[: len(data) - len(data) % DIRENT_SIZE]
        )
    ]