"""
Index ranges for bounded reads.

A read request names one range per axis (time step, row, column). Ranges may
be open-ended or fall partly outside the dataset; `normalize_range` turns
them into a concrete closed interval inside the axis.
"""

import numbers
import operator
from dataclasses import dataclass


@dataclass(frozen=True)
class IndexRange:
    """
    Interval of integer indices with optional, independently open or closed bounds.

    A missing endpoint (None) means the range is unbounded on that side.
    """

    lower: int | None = None
    upper: int | None = None
    lower_closed: bool = True
    upper_closed: bool = True

    def __post_init__(self):
        if self.lower is not None and self.upper is not None and self.lower > self.upper:
            raise ValueError(f"Invalid range: lower {self.lower} > upper {self.upper}")

    @classmethod
    def all(cls) -> "IndexRange":
        return cls()

    @classmethod
    def closed(cls, lower: int, upper: int) -> "IndexRange":
        return cls(lower, upper)

    @classmethod
    def open(cls, lower: int, upper: int) -> "IndexRange":
        return cls(lower, upper, lower_closed=False, upper_closed=False)

    @classmethod
    def closed_open(cls, lower: int, upper: int) -> "IndexRange":
        return cls(lower, upper, upper_closed=False)

    @classmethod
    def open_closed(cls, lower: int, upper: int) -> "IndexRange":
        return cls(lower, upper, lower_closed=False)

    @classmethod
    def at_least(cls, lower: int) -> "IndexRange":
        return cls(lower=lower)

    @classmethod
    def greater_than(cls, lower: int) -> "IndexRange":
        return cls(lower=lower, lower_closed=False)

    @classmethod
    def at_most(cls, upper: int) -> "IndexRange":
        return cls(upper=upper)

    @classmethod
    def less_than(cls, upper: int) -> "IndexRange":
        return cls(upper=upper, upper_closed=False)

    @classmethod
    def singleton(cls, index: int) -> "IndexRange":
        return cls(index, index)

    @property
    def has_lower(self) -> bool:
        return self.lower is not None

    @property
    def has_upper(self) -> bool:
        return self.upper is not None

    def __repr__(self) -> str:
        left = ("[" if self.lower_closed else "(") if self.has_lower else "(-inf"
        right = ("]" if self.upper_closed else ")") if self.has_upper else "+inf)"
        lo = "" if self.lower is None else self.lower
        hi = "" if self.upper is None else self.upper
        return f"IndexRange{left}{lo}..{hi}{right}"


def as_index_range(value) -> IndexRange:
    """
    Coerce an IndexRange, slice or int into an IndexRange.

    Slices follow Python conventions (start inclusive, stop exclusive) and
    are converted to closed bounds. Negative values are not counted from the
    end of the axis; they are clamped like any other out-of-bounds index.

    Raises
    ------
    TypeError
        If `value` is None or of an unsupported type.
    ValueError
        If a slice has a step other than 1.
    """
    if value is None:
        raise TypeError("Index range required.")
    if isinstance(value, IndexRange):
        return value
    if isinstance(value, slice):
        if value.step not in (None, 1):
            raise ValueError(f"Stepped slices are not supported: {value}")
        upper = None if value.stop is None else operator.index(value.stop) - 1
        lower = None if value.start is None else operator.index(value.start)
        if lower is not None and upper is not None and upper < lower:
            # empty slice, keep the start so it clamps like a singleton
            upper = lower
        return IndexRange(lower, upper)
    # numpy integers are Integral but not int
    if isinstance(value, numbers.Integral) and not isinstance(value, bool):
        return IndexRange.singleton(operator.index(value))
    raise TypeError(f"Unsupported index range: {value!r}")


def normalize_range(value, lo: int, hi: int) -> range:
    """
    Clamp a requested range onto the axis `[lo, hi]`.

    Open bounds are tightened to the nearest closed index. An open upper bound
    is resolved with ``max(hi, upper - 1)``, so it always extends to the end of
    the axis; callers that need an exclusive stop should pass a slice, which
    is converted to a closed bound first. Ranges lying wholly outside the axis
    collapse onto the nearest end, so a request past the last index yields
    the last index.

    Returns
    -------
    range
        The concrete indices to read, never empty.
    """
    rng = as_index_range(value)

    start = lo
    if rng.has_lower:
        if rng.lower_closed:
            start = max(lo, rng.lower)
        else:
            start = max(lo, rng.lower + 1)

    stop = hi
    if rng.has_upper:
        if rng.upper_closed:
            stop = min(hi, rng.upper)
        else:
            stop = max(hi, rng.upper - 1)

    start = min(max(start, lo), hi)
    stop = min(max(stop, start), hi)
    return range(start, stop + 1)
