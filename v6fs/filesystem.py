"""Reading inodes, file blocks, directories and path names from a V6 disk."""

from __future__ import annotations

from .diskimg import SECTOR_SIZE, DiskImageError
from .layout import (
    BOOTBLOCK_MAGIC_NUM,
    BOOTBLOCK_SECTOR,
    INODE_SIZE,
    INODE_START_SECTOR,
    ROOT_INUMBER,
    SUPERBLOCK_SECTOR,
    DIRENT_NAME_LEN,
    DirEntry,
    FileSystemError,
    Inode,
    Superblock,
    parse_dir_entries,
)

INODES_PER_SECTOR = SECTOR_SIZE // INODE_SIZE
ADDRS_PER_BLOCK = SECTOR_SIZE // 2
SINGLY_INDIRECT_BLOCKS = 7 * ADDRS_PER_BLOCK
DIRECT_ADDRS = 8


class UnixFileSystem:
    """A V6 file system read from an open disk image."""

    def __init__(self, disk):
        self.disk = disk
        boot = self._read(BOOTBLOCK_SECTOR)
        if len(boot) != SECTOR_SIZE:
            raise FileSystemError("Error reading bootblock")
        magic = int.from_bytes(boot[:2], "little")
        if magic != BOOTBLOCK_MAGIC_NUM:
            raise FileSystemError(f"Bad magic number on disk(0x{magic:x})")
        sb = self._read(SUPERBLOCK_SECTOR)
        if len(sb) != SECTOR_SIZE:
            raise FileSystemError("Error reading superblock")
        self.superblock = Superblock.from_bytes(sb)

    def _read(self, sector: int) -> bytes:
        try:
            return self.disk.read_sector(sector)
        except DiskImageError as exc:
            raise FileSystemError(f"can't read sector {sector}: {exc}") from exc

    def _read_address(self, sector: int, index: int) -> int:
        data = self._read(sector)
        start = index * 2
        if len(data) < start + 2:
            raise FileSystemError(f"short read of block address sector {sector}")
        return int.from_bytes(data[start : start + 2], "little")

    def iget(self, inumber: int) -> Inode:
        """Fetch inode number ``inumber`` (numbered from 1)."""
        if inumber < 1:
            raise FileSystemError(f"invalid inode number {inumber}")
        sector = INODE_START_SECTOR + (inumber - 1) // INODES_PER_SECTOR
        offset = ((inumber - 1) % INODES_PER_SECTOR) * INODE_SIZE
        chunk = self._read(sector)[offset : offset + INODE_SIZE]
        if len(chunk) < INODE_SIZE:
            raise FileSystemError(f"can't read inode {inumber}")
        return Inode.from_bytes(chunk)

    def index_lookup(self, inode: Inode, block_num: int) -> int:
        """Map a file block index to a disk sector; 0 means the block is unallocated."""
        if block_num < 0:
            raise FileSystemError(f"invalid block number {block_num}")
        if not inode.is_allocated():
            raise FileSystemError("inode is not allocated")
        if not inode.is_large():
            if block_num >= DIRECT_ADDRS:
                raise FileSystemError(f"block {block_num} beyond small file addressing")
            return inode.addr[block_num]
        if block_num < SINGLY_INDIRECT_BLOCKS:
            indirect = inode.addr[block_num // ADDRS_PER_BLOCK]
            if indirect == 0:
                return 0
            return self._read_address(indirect, block_num % ADDRS_PER_BLOCK)
        first, second = divmod(block_num - SINGLY_INDIRECT_BLOCKS, ADDRS_PER_BLOCK)
        if first >= ADDRS_PER_BLOCK:
            raise FileSystemError(f"block {block_num} beyond large file addressing")
        double = inode.addr[7]
        if double == 0:
            return 0
        level2 = self._read_address(double, first)
        if level2 == 0:
            return 0
        return self._read_address(level2, second)

    def get_block(self, inumber: int, block_num: int) -> bytes:
        """Return the valid bytes of a file block; empty past the end or for holes."""
        if inumber < 1 or block_num < 0:
            raise FileSystemError(f"invalid inode {inumber} or block {block_num}")
        inode = self.iget(inumber)
        size = inode.size()
        total = (size + SECTOR_SIZE - 1) // SECTOR_SIZE
        if block_num >= total:
            return b""
        try:
            sector = self.index_lookup(inode, block_num)
        except FileSystemError:
            # A block that cannot be mapped is treated as unallocated.
            return b""
        if sector <= 0:
            return b""
        data = self._read(sector)
        if block_num == total - 1:
            valid = size % SECTOR_SIZE or SECTOR_SIZE
        else:
            valid = SECTOR_SIZE
        return data[:valid]

    def find_name(self, name: str, dir_inumber: int) -> DirEntry:
        """Find ``name`` in a directory; names compare on their first 14 characters."""
        wanted = name[:DIRENT_NAME_LEN]
        size = self.iget(dir_inumber).size()
        for block_num in range((size + SECTOR_SIZE - 1) // SECTOR_SIZE):
            for entry in parse_dir_entries(self.get_block(dir_inumber, block_num)):
                if entry.name() == wanted:
                    return entry
        raise FileSystemError(f"{name!r} not found in directory {dir_inumber}")

    def lookup(self, pathname: str) -> int:
        """Return the inode number of an absolute path."""
        if not pathname or not pathname.startswith("/"):
            raise FileSystemError(f"not an absolute path: {pathname!r}")
        inumber = ROOT_INUMBER
        for component in filter(None, pathname.split("/")):
            inumber = self.find_name(component, inumber).inumber
        return inumber