"""
Horizontal grid geometry for GridIO data.

GridIO files carry only row/column counts and a cell size (in feet). The
georeferencing of the South Florida model domain is fixed: NAD83 / UTM zone
17N, with the lower-left cell anchored at a known easting/northing.
"""

from typing import Any

import numpy as np
import pyproj

from gridio.header import GridHeader

FEET_TO_METERS = 0.3048

# NAD83 / UTM zone 17N
DEFAULT_CRS = "EPSG:26917"

# Easting of the first column and southern edge of the first row, in metres
DEFAULT_ORIGIN = (466641.10, 2779814.25)


class Grid:
    """
    Regular projected grid of a GridIO dataset.

    Row 0 of the file is the southernmost row, so `y` increases with the row
    index.

    Parameters
    ----------
    nx : int
        Number of columns.
    ny : int
        Number of rows.
    dx : float
        Column spacing in metres.
    dy : float
        Row spacing in metres.
    origin : tuple[float, float]
        Easting of column 0 and southern edge of row 0, in metres.
    crs : str
        Anything accepted by `pyproj.CRS.from_user_input`.

    Attributes
    ----------
    crs : pyproj.CRS
        Coordinate reference system of the grid.
    coords : dict[str, Any]
        Projected 1D `x`/`y` and geographic 2D `lon`/`lat` coordinates.
    """

    def __init__(
        self,
        nx: int,
        ny: int,
        dx: float,
        dy: float,
        origin: tuple[float, float] = DEFAULT_ORIGIN,
        crs: str = DEFAULT_CRS,
    ):
        self.nx = nx
        self.ny = ny
        self.dx = dx
        self.dy = dy
        self.origin = origin
        self._crs_input = crs

        self._crs = None
        self._coords = None

    @classmethod
    def from_header(cls, header: GridHeader, **kwargs) -> "Grid":
        """Build the grid described by a header; cell sizes are converted from feet."""
        return cls(
            nx=header.column_count,
            ny=header.row_count,
            dx=header.cell_size_x * FEET_TO_METERS,
            dy=header.cell_size_y * FEET_TO_METERS,
            **kwargs,
        )

    @property
    def dims(self) -> tuple:
        return ("y", "x")

    @property
    def crs(self) -> pyproj.CRS:
        if self._crs is None:
            self._crs = pyproj.CRS.from_user_input(self._crs_input)
        return self._crs

    @property
    def x(self) -> np.ndarray:
        return self.origin[0] + np.arange(self.nx) * self.dx

    @property
    def y(self) -> np.ndarray:
        # cell centres
        return self.origin[1] + (np.arange(self.ny) + 0.5) * self.dy

    @property
    def coords(self) -> dict[str, Any]:
        """
        Grid coordinates in both projected and geographic systems.

        Returns
        -------
        dict[str, Any]
            "x" and "y" 1D arrays, "lon" and "lat" 2D arrays on ("y", "x").
        """
        if self._coords is None:
            x_coords = self.x
            y_coords = self.y

            transformer = pyproj.Transformer.from_crs(
                self.crs, "EPSG:4326", always_xy=True
            )
            xx, yy = np.meshgrid(x_coords, y_coords)
            lons, lats = transformer.transform(xx, yy)

            self._coords = {
                "x": x_coords,
                "y": y_coords,
                "lon": (("y", "x"), lons),
                "lat": (("y", "x"), lats),
            }

        return self._coords

    def get_coord_attrs(self) -> dict[str, dict[str, Any]]:
        """
        Get CF-compliant attributes for coordinates.

        Returns
        -------
        dict[str, dict[str, Any]]
            Dictionary mapping coordinate names to their attributes.
        """
        return {
            "x": {
                "units": "m",
                "long_name": "x coordinate of projection",
                "standard_name": "projection_x_coordinate",
                "axis": "X",
            },
            "y": {
                "units": "m",
                "long_name": "y coordinate of projection",
                "standard_name": "projection_y_coordinate",
                "axis": "Y",
            },
            "lon": {
                "units": "degrees_east",
                "long_name": "longitude",
                "standard_name": "longitude",
            },
            "lat": {
                "units": "degrees_north",
                "long_name": "latitude",
                "standard_name": "latitude",
            },
        }

    def __repr__(self) -> str:
        return (
            f"Grid(nx={self.nx}, ny={self.ny}, dx={self.dx}, dy={self.dy}, "
            f"origin={self.origin}, crs={self._crs_input!r})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return False
        return (
            self.nx == other.nx
            and self.ny == other.ny
            and self.dx == other.dx
            and self.dy == other.dy
            and tuple(self.origin) == tuple(other.origin)
            and self.crs == other.crs
        )

    def __hash__(self) -> int:
        return hash((self.nx, self.ny, self.dx, self.dy, tuple(self.origin)))
