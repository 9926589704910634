"""Read Unix Version 6 file system disk images and checksum their files."""

__version__ = "0.1.0"