"""
GridIO file header.

The header describes a dataset's title, its row/column/node counts and the
size of one grid cell. It is built once while a file is opened and is
immutable afterwards.
"""

from dataclasses import dataclass
from typing import ClassVar

from gridio.errors import ValidationError


@dataclass(frozen=True)
class GridHeader:
    """
    Validated description of a GridIO dataset.

    Parameters
    ----------
    title : str
        Dataset title, at most 80 characters.
    row_count : int
        Number of grid rows.
    column_count : int
        Number of addressable columns, one past the largest stored column.
    node_count : int
        Number of populated cells across all rows.
    cell_size_x : float
        Cell width.
    cell_size_y : float
        Cell height.

    Raises
    ------
    ValidationError
        If any field is outside its valid domain.
    """

    title: str
    row_count: int
    column_count: int
    node_count: int
    cell_size_x: float
    cell_size_y: float

    TITLE_LENGTH: ClassVar[int] = 80

    def __post_init__(self):
        if self.title is None:
            raise ValidationError("title", "cannot be None")
        if len(self.title) > self.TITLE_LENGTH:
            raise ValidationError(
                "title",
                f"must be less than or equal to {self.TITLE_LENGTH} characters",
            )
        for name in ("row_count", "column_count", "node_count"):
            value = getattr(self, name)
            if value is None or value <= 0:
                raise ValidationError(name, f"must be greater than 0, but is {value}")
        for name in ("cell_size_x", "cell_size_y"):
            value = getattr(self, name)
            # NaN fails the comparison too
            if value is None or not value > 0:
                raise ValidationError(name, f"must be greater than 0, but is {value}")

    @classmethod
    def builder(cls) -> "GridHeaderBuilder":
        return GridHeaderBuilder()

    @property
    def cell_size(self) -> tuple[float, float]:
        return self.cell_size_x, self.cell_size_y

    @property
    def shape(self) -> tuple[int, int]:
        """(row_count, column_count)"""
        return self.row_count, self.column_count


class GridHeaderBuilder:
    """
    Step-wise constructor for GridHeader.

    Fields may be supplied in any order; nothing is validated until `build`.
    """

    def __init__(self):
        self._fields = {
            "title": None,
            "row_count": None,
            "column_count": None,
            "node_count": None,
            "cell_size_x": None,
            "cell_size_y": None,
        }

    def with_title(self, title: str) -> "GridHeaderBuilder":
        self._fields["title"] = title
        return self

    def with_row_count(self, row_count: int) -> "GridHeaderBuilder":
        self._fields["row_count"] = row_count
        return self

    def with_column_count(self, column_count: int) -> "GridHeaderBuilder":
        self._fields["column_count"] = column_count
        return self

    def with_node_count(self, node_count: int) -> "GridHeaderBuilder":
        self._fields["node_count"] = node_count
        return self

    def with_cell_size(self, x: float, y: float) -> "GridHeaderBuilder":
        self._fields["cell_size_x"] = x
        self._fields["cell_size_y"] = y
        return self

    def build(self) -> GridHeader:
        return GridHeader(**self._fields)
