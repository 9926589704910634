"""Sector-level access to a disk image file."""

from __future__ import annotations

import os
from typing import BinaryIO, Optional

SECTOR_SIZE = 512


class DiskImageError(Exception):
    """Raised when a disk image cannot be opened, read or written."""


class DiskImage:
    """A disk image file read and written in whole sectors."""

    def __init__(self, path, read_only=True):
        self.path = os.fspath(path)
        self.read_only = read_only
        mode = "rb" if read_only else "r+b"
        try:
            self._file: Optional[BinaryIO] = open(self.path, mode)
        except OSError as exc:
            raise DiskImageError(f"can't open disk image {self.path}: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self._file is None

    def _handle(self) -> BinaryIO:
        if self._file is None:
            raise DiskImageError(f"disk image {self.path} is closed")
        return self._file

    def _seek_sector(self, sector_num: int) -> BinaryIO:
        if sector_num < 0:
            raise DiskImageError(f"invalid sector number {sector_num}")
        handle = self._handle()
        try:
            handle.seek(sector_num * SECTOR_SIZE)
        except OSError as exc:
            raise DiskImageError(f"can't seek to sector {sector_num}: {exc}") from exc
        return handle

    def size(self) -> int:
        """Return the size of the image in bytes."""
        handle = self._handle()
        try:
            return handle.seek(0, os.SEEK_END)
        except OSError as exc:
            raise DiskImageError(f"can't get size of {self.path}: {exc}") from exc

    def read_sector(self, sector_num: int) -> bytes:
        """Read one sector; the result is shorter near the end of the image."""
        handle = self._seek_sector(sector_num)
        try:
            return handle.read(SECTOR_SIZE)
        except OSError as exc:
            raise DiskImageError(f"can't read sector {sector_num}: {exc}") from exc

    def write_sector(self, sector_num: int, data) -> int:
        """Write one full sector and return the number of bytes written."""
        if self.read_only:
            raise DiskImageError(f"disk image {self.path} is open read-only")
        payload = bytes(data)
        if len(payload) != SECTOR_SIZE:
            raise ValueError(
                f"sector data must be {SECTOR_SIZE} bytes, got {len(payload)}"
            )
        handle = self._seek_sector(sector_num)
        try:
            written = handle.write(payload)
            handle.flush()
        except OSError as exc:
            raise DiskImageError(f"can't write sector {sector_num}: {exc}") from exc
        return written

    def close(self) -> None:
        """Close the image; closing twice is harmless."""
        if self._file is not None:
            handle, self._file = self._file, None
            try:
                handle.close()
            except OSError as exc:
                raise DiskImageError(f"error closing {self.path}: {exc}") from exc

    def __enter__(self) -> "DiskImage":
        return self

    def __exit__(self, *args) -> None:
        self.close()