"""Shared test fixtures for gridio."""

import numpy as np
import pytest

TAG_LENGTH = 80

SPANS = [(1, 3), (0, 4), (2, 2)]
TAGS = ["January 1, 1965", "January 2, 1965", "January 2, 1965"]


def cell_value(step: int, row: int, col: int) -> float:
    """Value stored for a cell in synthetic files."""
    return step * 100 + row * 10 + col


def tag_bytes(text: str) -> bytes:
    return text.encode("ascii").ljust(TAG_LENGTH, b" ")


def build_grid_bytes(
    spans=SPANS,
    tags=TAGS,
    title="Synthetic stage",
    cell_size=(10560.0, 10560.0),
    layout_junk=(),
    tag_padding=b"",
    truncate=0,
    byte_order=">",
) -> bytes:
    """
    Build a GridIO file in memory.

    `layout_junk` is a sequence of (position, word) pairs inserted into the
    flat start/end/cumulative table; `tag_padding` is written between the
    table and the first tag; `truncate` drops bytes from the end.
    """
    i4 = np.dtype("i4").newbyteorder(byte_order)
    f4 = np.dtype("f4").newbyteorder(byte_order)

    starts = [s for s, _ in spans]
    ends = [e for _, e in spans]
    sizes = [e - s + 1 for s, e in spans]
    sums = [0] + list(np.cumsum(sizes)[:-1])
    words = starts + ends + [int(s) for s in sums]
    for pos, word in sorted(layout_junk, reverse=True):
        words.insert(pos, word)

    out = bytearray(title.encode("ascii").ljust(80, b" "))
    out += np.array([len(spans), sum(sizes)], dtype=i4).tobytes()
    out += np.array(cell_size, dtype=f4).tobytes()
    out += np.array(words, dtype=i4).tobytes()
    out += tag_padding

    for step, tag in enumerate(tags):
        out += tag_bytes(tag)
        values = [
            cell_value(step, row, col)
            for row, (start, end) in enumerate(spans)
            for col in range(start, end + 1)
        ]
        out += np.array(values, dtype=f4).tobytes()

    if truncate:
        out = out[:-truncate]
    return bytes(out)


@pytest.fixture
def write_grid(tmp_path):
    """Factory writing a synthetic GridIO file and returning its path."""

    def _write(name="stage.bin", **kwargs):
        path = tmp_path / name
        path.write_bytes(build_grid_bytes(**kwargs))
        return path

    return _write


@pytest.fixture
def grid_file(write_grid):
    """3 rows x 5 columns x 3 steps, with a repeated last tag."""
    return write_grid()


@pytest.fixture
def reader(grid_file):
    from gridio import GridReader

    r = GridReader.open(grid_file)
    yield r
    r.close()
