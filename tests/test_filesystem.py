import struct

import pytest

from v6fs.diskimg import SECTOR_SIZE, DiskImage
from v6fs.filesystem import UnixFileSystem
from v6fs.layout import IALLOC, IFDIR, ILARG, FileSystemError

HELLO = b"hello world\n" * 50
BIG = bytes((i * 7) % 251 for i in range(3 * SECTOR_SIZE + 100))


def _inode(mode, size=0, addr=()):
    addr = list(addr) + [0] * (8 - len(addr))
    return struct.pack(
        "<HBBBBH8H2H2H", mode, 1, 0, 0, size >> 16, size & 0xFFFF, *addr, 0, 0, 0, 0
    )


def _dirents(entries):
    return b"".join(struct.pack("<H14s", ino, name.encode()) for name, ino in entries)


def _addresses(values):
    values = list(values) + [0] * (256 - len(values))
    return struct.pack("<256H", *values)


ROOT_ENTRIES = [
    (".", 1), ("..", 1), ("hello.txt", 2), ("sub", 3), ("abcdefghijklmn", 4), ("big", 5),
]
SUB_ENTRIES = [(".", 3), ("..", 1), ("inner", 5)]


def _build_image():
    sectors = {}
    sectors[0] = struct.pack("<H", 0o407)
    sectors[1] = struct.pack("<HHH", 1, 20, 0)
    inodes = [
        _inode(IALLOC | IFDIR | 0o755, 16 * len(ROOT_ENTRIES), [3]),
        _inode(IALLOC | 0o644, len(HELLO), [4, 5]),
        _inode(IALLOC | IFDIR | 0o755, 16 * len(SUB_ENTRIES), [6]),
        _inode(IALLOC | 0o644, 0),
        _inode(IALLOC | ILARG | 0o644, len(BIG), [7]),
        bytes(32),
        _inode(IALLOC | ILARG, 0, [0] * 7 + [12]),
        _inode(IALLOC | ILARG, 2 * SECTOR_SIZE, [0]),
    ]
    sectors[2] = b"".join(inodes)
    sectors[3] = _dirents(ROOT_ENTRIES)
    sectors[4] = HELLO[:SECTOR_SIZE]
    sectors[5] = HELLO[SECTOR_SIZE:]
    sectors[6] = _dirents(SUB_ENTRIES)
    sectors[7] = _addresses([8, 9, 10, 11])
    for i in range(4):
        sectors[8 + i] = BIG[i * SECTOR_SIZE : (i + 1) * SECTOR_SIZE]
    sectors[12] = _addresses([13])
    sectors[13] = _addresses([0, 0, 0, 14])
    return b"".join(sectors.get(n, b"").ljust(SECTOR_SIZE, b"\0") for n in range(20))


@pytest.fixture
def fs(tmp_path):
    path = tmp_path / "v6.img"
    path.write_bytes(_build_image())
    with DiskImage(path) as disk:
        yield UnixFileSystem(disk)


def test_superblock_is_read(fs):
    assert fs.superblock.isize == 1
    assert fs.superblock.fsize == 20


def test_bad_magic_raises(tmp_path):
    path = tmp_path / "bad.img"
    path.write_bytes(bytes(4 * SECTOR_SIZE))
    with DiskImage(path) as disk:
        with pytest.raises(FileSystemError, match="Bad magic number"):
            UnixFileSystem(disk)


def test_short_image_raises(tmp_path):
    path = tmp_path / "short.img"
    path.write_bytes(struct.pack("<H", 0o407))
    with DiskImage(path) as disk:
        with pytest.raises(FileSystemError, match="bootblock"):
            UnixFileSystem(disk)


def test_iget(fs):
    assert fs.iget(1).is_directory()
    assert fs.iget(2).size() == len(HELLO)
    assert fs.iget(6).is_allocated() is False


def test_iget_invalid_number(fs):
    with pytest.raises(FileSystemError):
        fs.iget(0)


def test_index_lookup_small_file(fs):
    inode = fs.iget(2)
    assert [fs.index_lookup(inode, b) for b in range(2)] == [4, 5]
    with pytest.raises(FileSystemError):
        fs.index_lookup(inode, 8)
    with pytest.raises(FileSystemError):
        fs.index_lookup(inode, -1)


def test_index_lookup_unallocated_inode_raises(fs):
    with pytest.raises(FileSystemError):
        fs.index_lookup(fs.iget(6), 0)


def test_index_lookup_single_indirect(fs):
    inode = fs.iget(5)
    assert [fs.index_lookup(inode, b) for b in range(4)] == [8, 9, 10, 11]
    assert fs.index_lookup(inode, 256) == 0


def test_index_lookup_double_indirect(fs):
    inode = fs.iget(7)
    assert fs.index_lookup(inode, 7 * 256 + 3) == 14
    assert fs.index_lookup(inode, 7 * 256) == 0
    assert fs.index_lookup(inode, 8 * 256) == 0


def test_get_block_reassembles_small_file(fs):
    blocks = [fs.get_block(2, b) for b in range(2)]
    assert b"".join(blocks) == HELLO
    assert len(blocks[1]) == len(HELLO) - SECTOR_SIZE


def test_get_block_reassembles_large_file(fs):
    assert b"".join(fs.get_block(5, b) for b in range(4)) == BIG


def test_get_block_past_end_and_holes(fs):
    assert fs.get_block(2, 2) == b""
    assert fs.get_block(4, 0) == b""
    assert fs.get_block(8, 0) == b""


def test_get_block_invalid_arguments(fs):
    with pytest.raises(FileSystemError):
        fs.get_block(0, 0)
    with pytest.raises(FileSystemError):
        fs.get_block(2, -1)


def test_find_name(fs):
    assert fs.find_name("hello.txt", 1).inumber == 2
    assert fs.find_name("inner", 3).inumber == 5


def test_find_name_compares_fourteen_characters(fs):
    assert fs.find_name("abcdefghijklmn", 1).inumber == 4
    assert fs.find_name("abcdefghijklmnopq", 1).inumber == 4
    with pytest.raises(FileSystemError):
        fs.find_name("abcdefghijklm", 1)


def test_find_name_missing_raises(fs):
    with pytest.raises(FileSystemError):
        fs.find_name("nope", 1)


def test_lookup(fs):
    assert fs.lookup("/") == 1
    assert fs.lookup("/hello.txt") == 2
    assert fs.lookup("/sub/inner") == 5
    assert fs.lookup("//sub//inner/") == 5
    assert fs.lookup("/sub/..") == 1


def test_lookup_errors(fs):
    with pytest.raises(FileSystemError):
        fs.lookup("sub")
    with pytest.raises(FileSystemError):
        fs.lookup("")
    with pytest.raises(FileSystemError):
        fs.lookup("/missing")