"""
xarray interface to GridIO files.
"""

from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import xarray as xr

from gridio.config import ReaderConfig
from gridio.grid import Grid
from gridio.ranges import IndexRange
from gridio.reader import GridReader, TimeStep, date_offsets


def variable_name(path: Path | str) -> str:
    """Data variable name for a file: its stem with dots removed."""
    return Path(path).stem.replace(".", "")


def open_dataset(
    filename: Path | str,
    *,
    time=None,
    y=None,
    x=None,
    verbose: bool = False,
    config: ReaderConfig | None = None,
) -> xr.Dataset:
    """
    Open a GridIO file as an xarray Dataset.

    Parameters
    ----------
    filename : Path or str
        Path to the GridIO file.
    time, y, x : IndexRange, slice or int, optional
        isel-like index ranges along each dimension. Omitted dimensions are
        read in full.
    verbose : bool
        Log layout diagnostics at INFO level. Ignored when `config` is given.
    config : ReaderConfig, optional
        Reader options.

    Returns
    -------
    xr.Dataset
        One float32 variable on (time, y, x) named after the file, with
        absent cells set to NaN.
    """
    config = config or ReaderConfig(verbose=verbose)
    with GridReader.open(filename, config) as reader:
        ranges = [IndexRange.all() if r is None else r for r in (time, y, x)]
        t_range, r_range, c_range = reader.resolve_ranges(*ranges)
        data = reader.read(_closed(t_range), _closed(r_range), _closed(c_range))

        dates = pd.DatetimeIndex(reader.dates())
        time_step = reader.time_step
        header = reader.header
        path = reader.path
        fill_value = reader.no_data_value

    # Calendar units cannot be encoded as CF time offsets
    if time_step in (TimeStep.MONTHS, TimeStep.YEARS):
        time_step = TimeStep.DAYS

    grid = Grid.from_header(header)
    coords = grid.coords
    attrs = grid.get_coord_attrs()
    steps = slice(t_range.start, t_range.stop)
    rows = slice(r_range.start, r_range.stop)
    cols = slice(c_range.start, c_range.stop)

    ds_coords = {
        "time": ("time", dates[steps]),
        "step": ("time", date_offsets(dates, time_step)[steps]),
        "y": ("y", coords["y"][rows], attrs["y"]),
        "x": ("x", coords["x"][cols], attrs["x"]),
        "lon": (("y", "x"), coords["lon"][1][rows, cols], attrs["lon"]),
        "lat": (("y", "x"), coords["lat"][1][rows, cols], attrs["lat"]),
    }

    name = variable_name(path)
    da = xr.DataArray(
        data=data,
        dims=("time", "y", "x"),
        coords=ds_coords,
        name=name,
        attrs={
            "long_name": name,
            "units": "",
            "grid_mapping": "crs",
        },
    )
    da.encoding["_FillValue"] = fill_value

    crs = xr.DataArray(0, attrs=grid.crs.to_cf())

    ds = xr.Dataset({name: da, "crs": crs})
    ds["time"].attrs = {"long_name": "time", "standard_name": "time", "axis": "T"}
    ds["time"].encoding["units"] = f"{time_step.value} since {dates[0]:%Y-%m-%dT%H:%M:%S}"
    ds["step"].attrs = {
        "long_name": "time step",
        "units": f"{time_step.value} since {dates[0]:%Y-%m-%dT%H:%M:%S}",
    }

    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    ds.attrs = {
        "title": header.title,
        "Conventions": "CF-1.6",
        "source": "gridio",
        "history": (
            f"Created {datetime.now(timezone.utc):%Y-%m-%dT%H:%M:%SZ}; "
            f"{path.name} {modified:%Y-%m-%dT%H:%M:%SZ}"
        ),
        "cell_size_x": header.cell_size_x,
        "cell_size_y": header.cell_size_y,
        "node_count": header.node_count,
    }
    return ds


def _closed(rng: range) -> IndexRange:
    """Closed IndexRange covering a resolved range."""
    return IndexRange.closed(rng[0], rng[-1])
