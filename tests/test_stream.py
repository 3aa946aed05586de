"""Tests for gridio.stream module."""

import numpy as np
import pytest

from gridio.errors import StateError
from gridio.stream import SeekableStream


def _pack(byte_order):
    parts = [
        np.array([-5], dtype="i1"),
        np.array([250], dtype="u1"),
        np.array([-300], dtype=np.dtype("i2").newbyteorder(byte_order)),
        np.array([60000], dtype=np.dtype("u2").newbyteorder(byte_order)),
        np.array([-70000], dtype=np.dtype("i4").newbyteorder(byte_order)),
        np.array([4000000000], dtype=np.dtype("u4").newbyteorder(byte_order)),
        np.array([-(2**40)], dtype=np.dtype("i8").newbyteorder(byte_order)),
        np.array([2**63 + 1], dtype=np.dtype("u8").newbyteorder(byte_order)),
        np.array([1.5], dtype=np.dtype("f4").newbyteorder(byte_order)),
        np.array([-2.25], dtype=np.dtype("f8").newbyteorder(byte_order)),
        np.array([1], dtype="u1"),
    ]
    return b"".join(p.tobytes() for p in parts) + b"ABC"


@pytest.fixture
def typed_file(tmp_path):
    path = tmp_path / "typed.dat"
    path.write_bytes(_pack(">"))
    return path


class TestTypedReads:
    """Tests for typed reads and position tracking."""

    def test_big_endian_values(self, typed_file):
        """Test every typed read in big-endian order."""
        with SeekableStream(typed_file) as stream:
            assert stream.read_int8() == -5
            assert stream.read_uint8() == 250
            assert stream.read_int16() == -300
            assert stream.read_uint16() == 60000
            assert stream.read_int32() == -70000
            assert stream.read_uint32() == 4000000000
            assert stream.read_int64() == -(2**40)
            assert stream.read_uint64() == 2**63 + 1
            assert stream.read_float32() == 1.5
            assert stream.read_float64() == -2.25
            assert stream.read_bool() is True
            assert stream.read_ascii_chars(3) == "ABC"

    def test_position_advances_by_width(self, typed_file):
        """Test that each read advances the position by its width."""
        with SeekableStream(typed_file) as stream:
            widths = []
            for read in (
                stream.read_int8,
                stream.read_uint8,
                stream.read_int16,
                stream.read_uint16,
                stream.read_int32,
                stream.read_uint32,
                stream.read_int64,
                stream.read_uint64,
                stream.read_float32,
                stream.read_float64,
                stream.read_bool,
            ):
                before = stream.position
                read()
                widths.append(stream.position - before)
            assert widths == [1, 1, 2, 2, 4, 4, 8, 8, 4, 8, 1]
            stream.read_ascii_chars(3)
            assert stream.position == stream.length

    def test_little_endian_values(self, tmp_path):
        """Test reads in little-endian order."""
        path = tmp_path / "le.dat"
        path.write_bytes(_pack("<"))
        with SeekableStream(path, byte_order="little") as stream:
            stream.skip(2)
            assert stream.read_int16() == -300
            assert stream.read_uint16() == 60000
            assert stream.read_int32() == -70000

    def test_read_array(self, tmp_path):
        """Test bulk reads of big-endian floats."""
        path = tmp_path / "floats.dat"
        values = np.array([1.0, 2.5, -3.0], dtype=">f4")
        path.write_bytes(values.tobytes())
        with SeekableStream(path) as stream:
            result = stream.read_array("f4", 3)
            np.testing.assert_array_equal(result, [1.0, 2.5, -3.0])
            assert result.dtype == np.float32
            assert stream.position == 12

    def test_read_past_end_raises(self, typed_file):
        """Test that a short read raises EOFError."""
        with SeekableStream(typed_file) as stream:
            stream.seek(stream.length - 2)
            with pytest.raises(EOFError):
                stream.read_int32()


class TestSkipAndSeek:
    """Tests for skip and seek."""

    def test_skip_returns_bytes_skipped(self, typed_file):
        """Test that skip reports a short count at end-of-file."""
        with SeekableStream(typed_file) as stream:
            assert stream.skip(10) == 10
            remaining = stream.length - 10
            assert stream.skip(1000) == remaining
            assert stream.position == stream.length
            assert stream.skip(1) == 0

    def test_skip_negative_is_noop(self, typed_file):
        """Test that skip never moves backwards."""
        with SeekableStream(typed_file) as stream:
            stream.skip(4)
            assert stream.skip(-2) == 0
            assert stream.position == 4

    def test_seek_backwards(self, typed_file):
        """Test seeking back to an earlier offset."""
        with SeekableStream(typed_file) as stream:
            stream.seek(6)
            assert stream.read_int32() == -70000
            assert stream.seek(2) == 2
            assert stream.position == 2
            assert stream.read_int16() == -300

    def test_seek_past_end(self, typed_file):
        """Test that seeking past the end stops at the end."""
        with SeekableStream(typed_file) as stream:
            assert stream.seek(stream.length + 50) == stream.length
            assert stream.position == stream.length


class TestLifecycle:
    """Tests for opening, closing and identity."""

    def test_missing_file_raises(self, tmp_path):
        """Test that a missing file raises an OSError."""
        with pytest.raises(OSError):
            SeekableStream(tmp_path / "missing.dat")

    def test_invalid_byte_order(self, typed_file):
        """Test that an unknown byte order is rejected."""
        with pytest.raises(ValueError):
            SeekableStream(typed_file, byte_order="middle")

    def test_double_close(self, typed_file):
        """Test that closing twice is harmless."""
        stream = SeekableStream(typed_file)
        stream.close()
        stream.close()
        assert stream.closed

    def test_use_after_close(self, typed_file):
        """Test that reads after close raise StateError."""
        stream = SeekableStream(typed_file)
        stream.close()
        with pytest.raises(StateError):
            stream.read_int8()
        with pytest.raises(StateError):
            stream.position

    def test_equality_ignores_position(self, typed_file):
        """Test that equality depends on path and byte order only."""
        with SeekableStream(typed_file) as a, SeekableStream(typed_file) as b:
            a.skip(5)
            assert a == b
            assert hash(a) == hash(b)

    def test_byte_order_distinguishes(self, typed_file):
        """Test that streams with different byte orders are not equal."""
        with SeekableStream(typed_file) as a, SeekableStream(typed_file, "little") as b:
            assert a != b
