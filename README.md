# v6fs

Read files, directories and inodes from Unix Version 6 file system disk
images, and compute SHA-1 checksums of their contents.

A V6 disk is laid out in 512-byte sectors: a boot block (sector 0, whose
first 16-bit word is the magic number `0407`), the superblock (sector 1),
the inode table (starting at sector 2, sixteen 32-byte inodes per sector),
and then data blocks. Small files address up to eight data blocks
directly; large files (mode bit `ILARG`) go through seven singly indirect
blocks and one doubly indirect block.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command line

```
diskimageaccess [-q] [-i] [-p] diskimagePath
```

- `-q` don't print the disk size and superblock summary
- `-i` print the checksum of every allocated inode
- `-p` walk the directory tree from `/` and print the checksum of every path

Without `-q` the command first prints the image size and the superblock's
`s_isize`, `s_fsize`, `s_nfree` and `s_ninode` values. The checksum lines
look like:

```
Inode 1 mode 0x<mode in hex> size <bytes> checksum <40 hex digits>
Path /bin 2 mode 0x<mode in hex> size <bytes> checksum <40 hex digits>
```

Problems with individual inodes or paths are reported on standard error
and the walk carries on. The command exits with status 1 on a usage error
or when the image cannot be opened or is not a V6 file system, and 0
otherwise. `v6fs.cli.main` takes an optional argument list and returns the
exit status.

## Library use

```python
from v6fs.diskimg import DiskImage
from v6fs.filesystem import UnixFileSystem
from v6fs.checksum import checksum_by_pathname, checksum_to_string

with DiskImage("disk.img", read_only=True) as disk:
    fs = UnixFileSystem(disk)
    print(fs.superblock.isize, fs.superblock.fsize)

    inumber = fs.lookup("/usr/bin")
    inode = fs.iget(inumber)
    print(inode.size(), inode.is_directory())

    data = fs.get_block(inumber, 0)   # valid bytes of block 0
    print(len(data))

    entry = fs.find_name("bin", 1)    # look a name up in the root directory
    print(entry.name(), entry.inumber)

    print(checksum_to_string(checksum_by_pathname(fs, "/usr/bin")))
```

The modules:

- `v6fs.diskimg` – `DiskImage`, a context manager over an image file with
  `size()`, `read_sector()`, `write_sector()` and `close()`.
- `v6fs.layout` – the on-disk structures `Superblock`, `Inode` and
  `DirEntry` (each with `from_bytes`), `parse_dir_entries`, and the mode
  bit constants such as `IALLOC`, `IFDIR` and `ILARG`.
- `v6fs.filesystem` – `UnixFileSystem` with `iget`, `index_lookup`,
  `get_block`, `find_name` and `lookup`. `get_block` returns empty bytes
  past the end of a file and for unallocated blocks. Names are compared on
  their first 14 characters; `lookup` takes absolute paths only.
- `v6fs.checksum` – `checksum_by_inumber`, `checksum_by_pathname`,
  `checksum_to_string` and `checksums_equal`.
- `v6fs.cli` – `get_dir_entries`, `print_directory`,
  `dump_inode_checksums`, `dump_pathname_checksums` and `main`.

Errors surface as exceptions: `DiskImageError` from `v6fs.diskimg` for
I/O problems, and `FileSystemError` from `v6fs.layout` for bad images,
missing paths or unallocated inodes.

## What it does not do

The package only reads file systems. Apart from writing raw sectors with
`DiskImage.write_sector`, it cannot create images, allocate inodes or
blocks, or create, change or delete files and directories.