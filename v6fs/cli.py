"""Command-line inspection of a V6 disk image."""

from __future__ import annotations

import getopt
import sys
from typing import List, Optional, TextIO

from .checksum import (
    checksum_by_inumber,
    checksum_by_pathname,
    checksum_to_string,
    checksums_equal,
)
from .diskimg import SECTOR_SIZE, DiskImage, DiskImageError
from .filesystem import UnixFileSystem
from .layout import DIRENT_SIZE, ROOT_INUMBER, DirEntry, FileSystemError, parse_dir_entries

PROG = "v6fs"
MAXPATH = 1024
MAX_DIR_ENTRIES = 10000


def _usage(err: TextIO) -> int:
    err.write(f"Usage: {PROG} <options> diskimagePath\n")
    err.write("where <options> can be:\n")
    err.write("-q     don't print extra info\n")
    err.write("-i     print all inode checksums\n")
    err.write("-p     print all pathname checksums\n")
    return 1


def get_dir_entries(fs, inumber: int, max_entries: int = MAX_DIR_ENTRIES) -> List[DirEntry]:
    """Return up to ``max_entries`` entries of a directory."""
    inode = fs.iget(inumber)
    if not inode.is_allocated() or not inode.is_directory():
        raise FileSystemError(f"inode {inumber} is not an allocated directory")
    if max_entries < 1:
        raise FileSystemError("max_entries must be at least 1")
    size = inode.size()
    if size % DIRENT_SIZE:
        raise FileSystemError(f"directory {inumber} has a size of {size} bytes")
    entries: List[DirEntry] = []
    for block_num in range((size + SECTOR_SIZE - 1) // SECTOR_SIZE):
        try:
            block = fs.get_block(inumber, block_num)
        except FileSystemError as exc:
            raise FileSystemError("Error reading directory") from exc
        for entry in parse_dir_entries(block):
            entries.append(entry)
            if len(entries) >= max_entries:
                return entries
    return entries


def dump_inode_checksums(fs, out: TextIO, err: TextIO) -> None:
    """Write the checksum of every allocated inode."""
    for inumber in range(1, fs.superblock.isize * 16):
        try:
            inode = fs.iget(inumber)
        except FileSystemError:
            err.write(f"Can't read inode {inumber} \n")
            return
        if not inode.is_allocated():
            continue
        try:
            chksum = checksum_by_inumber(fs, inumber)
        except FileSystemError:
            err.write(f"Inode {inumber} can't compute chksum\n")
            continue
        out.write(
            f"Inode {inumber} mode 0x{inode.mode:x} size {inode.size()} "
            f"checksum {checksum_to_string(chksum)}\n"
        )


def _dump_path_and_children(fs, pathname: str, inumber: int, out: TextIO, err: TextIO) -> None:
    try:
        inode = fs.iget(inumber)
    except FileSystemError:
        err.write(f"Can't read inode {inumber} \n")
        return
    try:
        by_inumber = checksum_by_inumber(fs, inumber)
        by_path = checksum_by_pathname(fs, pathname)
    except FileSystemError:
        err.write(f"Can't checksum inode {inumber} path {pathname}\n")
        return
    if not checksums_equal(by_inumber, by_path):
        err.write(f"Pathname checksum of {pathname} differs from inode {inumber}\n")
        return
    out.write(
        f"Path {pathname} {inumber} mode 0x{inode.mode:x} size {inode.size()} "
        f"checksum {checksum_to_string(by_path)}\n"
    )
    if not inode.is_directory():
        return
    prefix = "" if pathname == "/" else pathname
    if len(prefix) > MAXPATH - 16:
        err.write(f"Too deep of directories {prefix}\n")
        return
    try:
        entries = get_dir_entries(fs, inumber)
    except FileSystemError as exc:
        err.write(f"{exc}\n")
        return
    for entry in entries:
        name = entry.name()
        if name in (".", ".."):
            continue
        _dump_path_and_children(fs, f"{prefix}/{name}", entry.inumber, out, err)


def dump_pathname_checksums(fs, out: TextIO, err: TextIO) -> None:
    """Write checksums of every file reachable from the root directory."""
    _dump_path_and_children(fs, "/", ROOT_INUMBER, out, err)


def print_directory(fs, pathname: str, out: TextIO, err: TextIO) -> None:
    """Write every entry of the directory at ``pathname``."""
    try:
        inumber = fs.lookup(pathname)
    except FileSystemError:
        err.write(f"Can't find {pathname}\n")
        return
    try:
        entries = get_dir_entries(fs, inumber)
    except FileSystemError:
        err.write(f"Can't read entries from {pathname}\n")
        return
    for entry in entries:
        out.write(f"Direntry {pathname} Name {entry.name()} Inumber {entry.inumber}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Inspect a disk image; returns the process exit status."""
    out, err = sys.stdout, sys.stderr
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, rest = getopt.gnu_getopt(args, "iqp")
    except getopt.GetoptError:
        return _usage(err)
    flags = {opt for opt, _ in opts}
    if len(rest) != 1:
        return _usage(err)
    diskpath = rest[0]

    try:
        disk = DiskImage(diskpath, read_only=True)
    except DiskImageError:
        err.write(f"Can't open diskimagePath {diskpath}\n")
        return 1

    try:
        try:
            fs = UnixFileSystem(disk)
        except FileSystemError as exc:
            err.write(f"{exc}\n")
            err.write("Failed to initialize unix filesystem\n")
            return 1

        if "-q" not in flags:
            try:
                disksize = disk.size()
            except DiskImageError:
                err.write(f"Error getting the size of {diskpath}\n")
                return 1
            sb = fs.superblock
            out.write(f"Disk {diskpath} is {disksize} bytes ({disksize // 1024} KB)\n")
            out.write(f"Superblock s_isize {sb.isize}\n")
            out.write(f"Superblock s_fsize {sb.fsize}\n")
            out.write(f"Superblock s_nfree {sb.nfree}\n")
            out.write(f"Superblock s_ninode {sb.ninode}\n")

        if "-i" in flags:
            dump_inode_checksums(fs, out, err)
        if "-p" in flags:
            dump_pathname_checksums(fs, out, err)
    finally:
        try:
            disk.close()
        except DiskImageError:
            err.write(f"Error closing {diskpath}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())