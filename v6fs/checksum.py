"""SHA-1 checksums of files stored on a V6 file system."""

from __future__ import annotations

import hashlib

from .diskimg import SECTOR_SIZE
from .layout import FileSystemError

CHECKSUM_SIZE = 20
CHECKSUM_STRING_SIZE = 2 * CHECKSUM_SIZE


def checksum_by_inumber(fs, inumber: int) -> bytes:
    """Return the SHA-1 digest of the contents of inode ``inumber``."""
    inode = fs.iget(inumber)
    if not inode.is_allocated():
        raise FileSystemError(f"inode {inumber} is not allocated")
    digest = hashlib.sha1()
    for offset in range(0, inode.size(), SECTOR_SIZE):
        digest.update(fs.get_block(inumber, offset // SECTOR_SIZE))
    return digest.digest()


def checksum_by_pathname(fs, pathname: str) -> bytes:
    """Return the SHA-1 digest of the file at an absolute path."""
    return checksum_by_inumber(fs, fs.lookup(pathname))


def checksum_to_string(chksum) -> str:
    """Render a checksum as lower-case hexadecimal."""
    return bytes(chksum)[:CHECKSUM_SIZE].hex()


def checksums_equal(chksum1, chksum2) -> bool:
    """True when the two checksums match."""
    return bytes(chksum1)[:CHECKSUM_SIZE] == bytes(chksum2)[:CHECKSUM_SIZE]