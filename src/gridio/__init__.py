"""
gridio: Python package for reading SFWMM GridIO binary grid files.

This package provides a random-access decoder for GridIO files, time series
of sparse 2-D grids written by the South Florida Water Management Model, and
an xarray interface on top of it.
"""

__version__ = "2025.10.0"
__author__ = "James Mineau"
__email__ = "jameskmineau@gmail.com"

from .config import ReaderConfig
from .dataset import open_dataset
from .errors import FormatError, GridFileError, GridIOError, StateError, ValidationError
from .header import GridHeader
from .ranges import IndexRange
from .reader import GridReader, TimeStep, is_valid_file
from .stream import SeekableStream

__all__ = [
    "GridHeader",
    "GridReader",
    "IndexRange",
    "ReaderConfig",
    "SeekableStream",
    "TimeStep",
    "is_valid_file",
    "open_dataset",
    "GridIOError",
    "ValidationError",
    "FormatError",
    "GridFileError",
    "StateError",
]
