"""
GridIO decoder.

This module provides the GridReader class for random-access reads of GridIO
files: time series of 2-D grids in which each row stores only a contiguous
run of populated columns. Each stored time step is an 80-byte ASCII date tag
followed by the packed big-endian float32 values of every populated cell.

File layout::

    offset  field
    0       title, 80 ASCII bytes
    80      row count (int32)
    84      node count (int32)
    88      cell size x (float32)
    92      cell size y (float32)
    96      row start columns, row end columns, cumulative node counts
            (int32 x row count each, possibly interleaved with stray words)
    ...     repeating: 80-byte date tag + node count float32 values
"""

import calendar
import enum
import logging
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np
import pandas as pd

from gridio.config import ReaderConfig
from gridio.errors import FormatError, GridFileError, StateError, ValidationError
from gridio.header import GridHeader
from gridio.ranges import normalize_range
from gridio.stream import SeekableStream

logger = logging.getLogger(__name__)

TAG_LENGTH = 80
FLOAT_BYTES = 4
DAY_MS = 24 * 60 * 60 * 1000

# Tags have been observed to look like "January 1, 1965"
_TAG_PATTERN = re.compile(r"([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})")

_MONTHS = {
    name.lower(): i for i, name in enumerate(calendar.month_name) if name
} | {name.lower(): i for i, name in enumerate(calendar.month_abbr) if name}


def trim(text: str) -> str:
    """Strip leading and trailing control characters and spaces."""
    return text.strip("".join(chr(c) for c in range(33)))


def parse_tag(tag: str) -> pd.Timestamp | None:
    """
    Parse a grid tag as a calendar date.

    Parameters
    ----------
    tag : str
        Raw tag text, e.g. "January 1, 1965" padded with blanks.

    Returns
    -------
    pd.Timestamp or None
        Midnight (UTC, tz-naive) of the tagged day, or None if the tag does
        not start with a "Month day, year" date.
    """
    match = _TAG_PATTERN.match(trim(tag))
    if match is None:
        return None
    month = _MONTHS.get(match.group(1).lower())
    if month is None:
        return None
    # Days past the end of the month roll into the next one ("February 29,
    # 1965" is March 1)
    try:
        first = pd.Timestamp(year=int(match.group(3)), month=month, day=1)
        return first + pd.Timedelta(days=int(match.group(2)) - 1)
    except (ValueError, OverflowError):
        return None


class TimeStep(enum.Enum):
    """Native time step granularity of a dataset."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"


_TIMEDELTA_UNITS = {
    TimeStep.SECONDS: "s",
    TimeStep.MINUTES: "min",
    TimeStep.HOURS: "h",
    TimeStep.DAYS: "D",
}


def infer_time_step(dates: Sequence[pd.Timestamp]) -> TimeStep:
    """
    Infer the time step from the smallest gap between consecutive distinct dates.

    Parameters
    ----------
    dates : Sequence[pd.Timestamp]
        Dates in any order.

    Returns
    -------
    TimeStep
        The unit matching the smallest gap. A single date yields YEARS.

    Raises
    ------
    ValueError
        If `dates` is empty.
    """
    if len(dates) == 0:
        raise ValueError("At least one date is required")

    index = pd.DatetimeIndex(dates).unique().sort_values()
    if len(index) < 2:
        return TimeStep.YEARS
    seconds = index.to_series().diff().dropna().min().total_seconds()

    minute = 60
    hour = 60 * minute
    day = 24 * hour
    month = 28 * day
    year = 12 * month
    if seconds < minute:
        return TimeStep.SECONDS
    if seconds < hour:
        return TimeStep.MINUTES
    if seconds < day - hour:
        return TimeStep.HOURS
    if seconds < month:
        return TimeStep.DAYS
    if seconds < year:
        return TimeStep.MONTHS
    return TimeStep.YEARS


def date_offsets(dates: Sequence[pd.Timestamp], unit: TimeStep) -> np.ndarray:
    """
    Whole `unit`s elapsed between the first date and each date.

    Months and years are counted on the calendar, other units by duration.
    """
    index = pd.DatetimeIndex(dates)
    if len(index) == 0:
        return np.array([], dtype=np.int64)
    ref = index[0]
    if unit is TimeStep.MONTHS:
        months = index.year * 12 + index.month
        return np.asarray(months - (ref.year * 12 + ref.month), dtype=np.int64)
    if unit is TimeStep.YEARS:
        return np.asarray(index.year - ref.year, dtype=np.int64)
    step = pd.Timedelta(1, unit=_TIMEDELTA_UNITS[unit])
    return np.asarray((index - ref) // step, dtype=np.int64)


def is_valid_file(filename: Path | str, config: ReaderConfig | None = None) -> bool:
    """
    Cheap check that a file looks like GridIO data.

    The extension must be accepted by `config`. Row and node counts outside
    1-1000 and 1-100000 are logged but do not reject the file; opening it
    performs the full structural validation.
    """
    config = config or ReaderConfig()
    path = Path(filename)
    if not path.is_file():
        logger.error("File does not exist: %s", path)
        return False
    if not config.accepts(path.name):
        logger.error("Unexpected extension: %s", path.name)
        return False

    with SeekableStream(path, config.byte_order) as stream:
        if stream.seek(TAG_LENGTH) < TAG_LENGTH:
            logger.error("File too short to hold a header: %s", path)
            return False
        try:
            rows = stream.read_int32()
            nodes = stream.read_int32()
        except EOFError:
            logger.error("File too short to hold a header: %s", path)
            return False

    if not 0 < rows <= 1000:
        logger.warning("Does not look like GridIO data, row count read is %s", rows)
    if not 0 < nodes <= 100000:
        logger.warning("Does not look like GridIO data, node count read is %s", nodes)
    return True


@dataclass(frozen=True)
class ColumnSpan:
    """Closed interval of the columns stored for one row."""

    start: int
    end: int

    @property
    def size(self) -> int:
        """Number of stored columns."""
        return self.end - self.start + 1

    def __contains__(self, column: int) -> bool:
        return self.start <= column <= self.end


def _find_inconsistency(
    words: list[int], row: int, n_rows: int, n_nodes: int
) -> int | None:
    """
    Check one row of the layout table.

    `words` holds the start columns, end columns and cumulative node counts
    back to back. The cumulative count of a row is the number of nodes stored
    before it, so row `row` is consistent when the next row's count grows by
    exactly the row's width.

    Returns
    -------
    int or None
        Position in `words` of the word to discard, or None if the row is
        consistent.
    """
    start = words[row]
    end = words[row + n_rows]
    before = words[row + 2 * n_rows]
    after = words[row + 2 * n_rows + 1]
    if start > end or end > n_nodes:
        return row + n_rows
    if after != before + end - start + 1:
        return row + 2 * n_rows
    return None


class GridReader:
    """
    Random-access decoder for a GridIO file.

    Use `GridReader.open` to create a reader. The reader owns its stream;
    close it (or use it as a context manager) when done. A reader is not
    safe to share between threads.

    Attributes
    ----------
    header : GridHeader
        Parsed file header.
    availability : Mapping[int, ColumnSpan]
        Stored column interval of every row.
    first_grid_offset : int
        Byte offset of the first date tag.
    grid_byte_size : int
        Bytes used by one time step (tag plus values).
    """

    def __init__(self, path: Path | str, config: ReaderConfig | None = None):
        self._path = Path(path)
        self.config = config or ReaderConfig()
        self._level = logging.INFO if self.config.verbose else logging.DEBUG

        self._stream: SeekableStream | None = None
        self._header: GridHeader | None = None
        self._availability: Mapping[int, ColumnSpan] | None = None
        self._dates: tuple[pd.Timestamp, ...] | None = None
        self._time_step: TimeStep | None = None
        self._grid_byte_size = 0
        self._first_grid_offset = 0

    @classmethod
    def open(
        cls, filename: Path | str, config: ReaderConfig | None = None
    ) -> "GridReader":
        """
        Open a GridIO file and read its header and row layout.

        Parameters
        ----------
        filename : Path or str
            Path to the GridIO file.
        config : ReaderConfig, optional
            Reader options.

        Returns
        -------
        GridReader
            An open reader.

        Raises
        ------
        ValueError
            If the file extension is not accepted.
        GridFileError
            If the file cannot be opened or its header cannot be decoded.
            The underlying error is attached as ``__cause__``.
        """
        config = config or ReaderConfig()
        if not config.accepts(str(filename)):
            raise ValueError(f"GridIO file required, but got {filename} instead")

        reader = cls(filename, config)
        reader._read_header()
        return reader

    def _log(self, msg: str, *args):
        logger.log(self._level, msg, *args)

    def _check_open(self):
        if self._stream is None:
            raise StateError(f"File is not open: {self._path}")

    @property
    def path(self) -> Path:
        self._check_open()
        return self._path

    @property
    def header(self) -> GridHeader:
        self._check_open()
        return self._header

    @property
    def availability(self) -> Mapping[int, ColumnSpan]:
        self._check_open()
        return self._availability

    @property
    def first_grid_offset(self) -> int:
        self._check_open()
        return self._first_grid_offset

    @property
    def grid_byte_size(self) -> int:
        self._check_open()
        return self._grid_byte_size

    @property
    def no_data_value(self) -> float:
        return float("nan")

    @property
    def closed(self) -> bool:
        return self._stream is None

    def close(self):
        """Close the file and drop cached state. Closing twice is harmless."""
        stream, self._stream = self._stream, None
        self._header = None
        self._availability = None
        self._dates = None
        self._time_step = None
        if stream is not None:
            stream.close()

    def __enter__(self) -> "GridReader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else repr(self._header)
        return f"GridReader(path={str(self._path)!r}, {state})"

    def _read_header(self):
        self._log("Open %s", self._path)
        try:
            self._stream = SeekableStream(self._path, self.config.byte_order)
            self._parse_layout()
        except Exception as e:
            logger.error("Error reading file %s: %s", self._path, e)
            self.close()
            raise GridFileError(f"Unable to read header from file: {self._path}") from e

    def _parse_layout(self):
        stream = self._stream

        # Field order is fixed by the format
        title = trim(stream.read_ascii_chars(GridHeader.TITLE_LENGTH))
        n_rows = stream.read_int32()
        n_nodes = stream.read_int32()
        size_x = stream.read_float32()
        size_y = stream.read_float32()

        if n_rows <= 0:
            raise ValidationError("row_count", f"must be greater than 0, but is {n_rows}")
        words = stream.read_array("i4", 3 * n_rows).tolist()

        # Stray padding words show up in the layout table. Drop the offending
        # word, pull the next one from the stream and check the same row again.
        budget = self.config.repair_budget(n_rows)
        repairs = 0
        row = 0
        while row < n_rows - 1:
            bad = _find_inconsistency(words, row, n_rows, n_nodes)
            if bad is None:
                row += 1
                continue
            if repairs >= budget:
                raise FormatError(
                    f"Row layout still inconsistent at row {row} after {repairs} repairs"
                )
            self._log("Discarding layout word %d at row %d", words[bad], row)
            del words[bad]
            words.append(stream.read_int32())
            repairs += 1

        starts = words[:n_rows]
        ends = words[n_rows : 2 * n_rows]
        sums = words[2 * n_rows :]

        self._availability = MappingProxyType(
            {row: ColumnSpan(starts[row], ends[row]) for row in range(n_rows)}
        )
        n_cols = max(end + 1 for end in ends)

        self._header = (
            GridHeader.builder()
            .with_title(title)
            .with_row_count(n_rows)
            .with_column_count(n_cols)
            .with_node_count(n_nodes)
            .with_cell_size(size_x, size_y)
            .build()
        )
        self._log("%s", self._header)
        self._log("xStarts: %s", " ".join(f"{x:4d}" for x in starts))
        self._log("xEnds:   %s", " ".join(f"{x:4d}" for x in ends))
        self._log("nSums:   %s", " ".join(f"{x:4d}" for x in sums))

        self._grid_byte_size = TAG_LENGTH + n_nodes * FLOAT_BYTES
        self._first_grid_offset = self._align_first_tag(stream.position)

    def _align_first_tag(self, offset: int) -> int:
        """Find the first date tag within a few bytes of `offset`."""
        for shift in range(self.config.tag_search_attempts):
            candidate = offset + shift
            if self._stream.seek(candidate) < candidate:
                break
            try:
                tag = self._stream.read_ascii_chars(TAG_LENGTH)
            except EOFError:
                break
            if parse_tag(tag) is not None:
                if shift:
                    self._log("First tag found %d byte(s) past layout end", shift)
                return candidate
        raise FormatError(
            f"No date tag found within {self.config.tag_search_attempts} bytes of offset {offset}"
        )

    def _scan_tags(self) -> Counter:
        stream = self._stream
        length = stream.length
        counts = Counter()

        stream.seek(self._first_grid_offset)
        skip = self._grid_byte_size - TAG_LENGTH
        while stream.position + TAG_LENGTH < length:
            tag = stream.read_ascii_chars(TAG_LENGTH)
            date = parse_tag(tag)
            if date is None:
                raise FormatError(
                    f"Unparseable tag {trim(tag)!r} at offset {stream.position - TAG_LENGTH}"
                )
            counts[date] += 1
            if stream.skip(skip) < skip:
                break
        return counts

    def dates(self) -> tuple[pd.Timestamp, ...]:
        """
        Dates of the stored time steps.

        Tags are scanned on the first call and cached. A tag that occurs `k`
        times is spread evenly over its day: the occurrences fall at
        ``midnight + i * (24h / k)``.

        Returns
        -------
        tuple[pd.Timestamp, ...]
            One date per stored grid, ascending.

        Raises
        ------
        FormatError
            If a tag cannot be parsed. The reader is closed.
        """
        self._check_open()
        if self._dates is None:
            try:
                counts = self._scan_tags()
            except (FormatError, EOFError, OSError) as e:
                logger.error("Unable to read dates from %s: %s", self._path, e)
                self.close()
                if isinstance(e, FormatError):
                    raise
                raise FormatError(f"Unable to read dates from {self._path}") from e

            dates = []
            for date in sorted(counts):
                count = counts[date]
                step = DAY_MS // count
                dates.extend(
                    date + pd.Timedelta(milliseconds=i * step) for i in range(count)
                )
            self._dates = tuple(dates)
            self._log("Read %d dates from %s", len(self._dates), self._path)
        return self._dates

    @property
    def time_step(self) -> TimeStep:
        """Native time step inferred from the dates."""
        if self._time_step is None:
            self._time_step = infer_time_step(self.dates())
        return self._time_step

    def resolve_ranges(self, times, rows, cols) -> tuple[range, range, range]:
        """
        Clamp requested (time, row, column) ranges onto the dataset.

        Each argument may be an IndexRange, a slice or an int; see
        `gridio.ranges.normalize_range` for the clamping rules.

        Raises
        ------
        TypeError
            If any range is None.
        FormatError
            If the file holds no time steps or a tag cannot be parsed. The
            reader is closed.
        """
        for name, value in (("time", times), ("row", rows), ("column", cols)):
            if value is None:
                raise TypeError(f"{name.capitalize()} index range required.")

        n_steps = len(self.dates())
        if n_steps == 0:
            logger.error("No grids stored in %s", self._path)
            self.close()
            raise FormatError(f"No grids stored in {self._path}")
        header = self._header
        return (
            normalize_range(times, 0, n_steps - 1),
            normalize_range(rows, 0, header.row_count - 1),
            normalize_range(cols, 0, header.column_count - 1),
        )

    def read(self, times, rows, cols) -> np.ndarray:
        """
        Read a (time, row, column) block.

        Out-of-bounds and open-ended ranges are clamped to the dataset, so
        ``IndexRange.all()`` (or ``slice(None)``) reads an entire axis.

        Parameters
        ----------
        times, rows, cols : IndexRange, slice or int
            Requested time step, row and column indices.

        Returns
        -------
        np.ndarray
            float32 array of shape (steps, rows, columns). Cells that are not
            stored for their row are NaN. ``result.ravel()`` is the flat
            time-major, row-major buffer.

        Raises
        ------
        TypeError
            If any range is None.
        FormatError
            If the dates cannot be read.
        GridFileError
            If the file cannot be read. The reader is closed.
        """
        self._check_open()
        t_range, r_range, c_range = self.resolve_ranges(times, rows, cols)

        try:
            return self._read_block(t_range, r_range, c_range)
        except (EOFError, OSError) as e:
            logger.error("%s: times=%s rows=%s cols=%s", self._path, t_range, r_range, c_range)
            self.close()
            raise GridFileError(
                f"Unable to read times {t_range}, rows {r_range}, columns {c_range} "
                f"from {self._path}"
            ) from e

    def _read_block(self, t_range: range, r_range: range, c_range: range) -> np.ndarray:
        stream = self._stream
        data = np.full(
            (len(t_range), len(r_range), len(c_range)), np.nan, dtype=np.float32
        )
        c_first, c_last = c_range[0], c_range[-1]

        stream.seek(self._first_grid_offset + TAG_LENGTH + self._grid_byte_size * t_range[0])
        for t in range(len(t_range)):
            for row, span in self._availability.items():
                if row not in r_range:
                    stream.skip(span.size * FLOAT_BYTES)
                    continue

                # stored columns before, inside and after the requested window
                lead = min(max(c_first - span.start, 0), span.size)
                first = max(c_first, span.start)
                count = max(min(c_last, span.end) - first + 1, 0)
                trail = span.size - lead - count

                stream.skip(lead * FLOAT_BYTES)
                if count:
                    i = first - c_first
                    data[t, row - r_range[0], i : i + count] = stream.read_array("f4", count)
                stream.skip(trail * FLOAT_BYTES)

            stream.skip(TAG_LENGTH)
        return data
