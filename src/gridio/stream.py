"""
Positioned binary stream.

This module provides SeekableStream, a typed reader over a binary file that
tracks its own byte position and decodes primitive values in a fixed byte
order. It is the transport underneath the GridIO decoder.
"""

from pathlib import Path

import numpy as np

from gridio.config import BYTE_ORDERS
from gridio.errors import StateError


class SeekableStream:
    """
    Endianness-aware reader over a file with an authoritative position counter.

    Every typed read advances `position` by the exact width read. `skip` only
    moves forward and reports how many bytes were actually skipped, which is
    less than requested at end-of-file. `seek` jumps to an absolute offset.

    Two streams are equal when they read the same path in the same byte order,
    regardless of where they are positioned.

    Parameters
    ----------
    path : Path or str
        File to read.
    byte_order : str
        "big" (default) or "little".

    Raises
    ------
    OSError
        If the file cannot be opened.
    """

    def __init__(self, path: Path | str, byte_order: str = "big"):
        if byte_order not in BYTE_ORDERS:
            raise ValueError(f"Invalid byte order: {byte_order!r}")
        self._path = Path(path)
        self._prefix = BYTE_ORDERS[byte_order]
        self._file = self._path.open("rb")
        self._length = self._path.stat().st_size
        self._position = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def byte_order(self) -> str:
        return "big" if self._prefix == ">" else "little"

    @property
    def length(self) -> int:
        """Size of the underlying file in bytes."""
        return self._length

    @property
    def position(self) -> int:
        """Current byte offset from the start of the file."""
        self._check_open()
        return self._position

    @property
    def closed(self) -> bool:
        return self._file is None

    def _check_open(self):
        if self._file is None:
            raise StateError(f"Stream is closed: {self._path}")

    def _dtype(self, code: str) -> np.dtype:
        return np.dtype(code).newbyteorder(self._prefix)

    def read_bytes(self, n: int) -> bytes:
        """
        Read exactly `n` raw bytes.

        Raises
        ------
        EOFError
            If fewer than `n` bytes remain.
        """
        self._check_open()
        if n < 0:
            raise ValueError(f"Invalid count: {n}")
        data = self._file.read(n)
        self._position += len(data)
        if len(data) < n:
            raise EOFError(
                f"Expected {n} bytes at offset {self._position - len(data)}, got {len(data)}"
            )
        return data

    def _read_scalar(self, code: str):
        dtype = self._dtype(code)
        data = self.read_bytes(dtype.itemsize)
        return np.frombuffer(data, dtype=dtype)[0].item()

    def read_int8(self) -> int:
        return self._read_scalar("i1")

    def read_uint8(self) -> int:
        return self._read_scalar("u1")

    def read_int16(self) -> int:
        return self._read_scalar("i2")

    def read_uint16(self) -> int:
        return self._read_scalar("u2")

    def read_int32(self) -> int:
        return self._read_scalar("i4")

    def read_uint32(self) -> int:
        return self._read_scalar("u4")

    def read_int64(self) -> int:
        return self._read_scalar("i8")

    def read_uint64(self) -> int:
        return self._read_scalar("u8")

    def read_float32(self) -> float:
        return self._read_scalar("f4")

    def read_float64(self) -> float:
        return self._read_scalar("f8")

    def read_bool(self) -> bool:
        return self.read_uint8() != 0

    def read_ascii_chars(self, n: int) -> str:
        """
        Read `n` single-byte characters.

        Each byte maps to one character; no multi-byte decoding is attempted.
        """
        return self.read_bytes(n).decode("latin-1")

    def read_array(self, dtype: str, count: int) -> np.ndarray:
        """
        Read `count` consecutive values of a numpy dtype in the stream's byte order.

        Parameters
        ----------
        dtype : str
            Numpy type code without byte order, e.g. "f4" or "i4".
        count : int
            Number of values to read.

        Returns
        -------
        np.ndarray
            1D array of length `count` in native byte order.
        """
        dt = self._dtype(dtype)
        data = self.read_bytes(dt.itemsize * count)
        return np.frombuffer(data, dtype=dt).astype(dt.newbyteorder("="))

    def skip(self, n: int) -> int:
        """
        Skip forward up to `n` bytes.

        Returns
        -------
        int
            Number of bytes actually skipped; less than `n` at end-of-file.
        """
        self._check_open()
        if n <= 0:
            return 0
        skipped = min(n, max(0, self._length - self._position))
        self._file.seek(skipped, 1)
        self._position += skipped
        return skipped

    def seek(self, position: int) -> int:
        """
        Move to an absolute byte offset.

        Returns
        -------
        int
            Number of bytes skipped from the start of the file to reach the
            target; less than `position` if the file is shorter.
        """
        self._check_open()
        self._file.seek(0)
        self._position = 0
        return self.skip(position)

    def close(self):
        """Release the file handle. Closing twice is harmless."""
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    def __enter__(self) -> "SeekableStream":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __eq__(self, other) -> bool:
        if not isinstance(other, SeekableStream):
            return False
        return self._path == other._path and self._prefix == other._prefix

    def __hash__(self) -> int:
        return hash((self._path, self._prefix))

    def __repr__(self) -> str:
        return f"SeekableStream(path={str(self._path)!r}, byte_order={self.byte_order!r})"
