"""
Reader configuration.
"""

from dataclasses import dataclass


BYTE_ORDERS = {
    "big": ">",
    ">": ">",
    "little": "<",
    "<": "<",
}


@dataclass(frozen=True)
class ReaderConfig:
    """
    Options controlling how a GridIO file is opened.

    Parameters
    ----------
    verbose : bool
        Log layout diagnostics at INFO instead of DEBUG.
    byte_order : str
        Byte order of the file, "big" or "little".
    extensions : tuple[str, ...]
        Accepted file extensions (case-insensitive). Empty disables the check.
    tag_search_attempts : int
        Number of one-byte shifts tried when aligning on the first date tag.
    max_layout_repairs : int, optional
        Maximum number of stray words discarded while repairing the row layout.
        None allows up to three times the row count.
    """

    verbose: bool = False
    byte_order: str = "big"
    extensions: tuple[str, ...] = (".bin",)
    tag_search_attempts: int = 4
    max_layout_repairs: int | None = None

    def __post_init__(self):
        if self.byte_order not in BYTE_ORDERS:
            raise ValueError(f"Invalid byte order: {self.byte_order!r}")
        if self.tag_search_attempts < 1:
            raise ValueError("tag_search_attempts must be at least 1")
        if self.max_layout_repairs is not None and self.max_layout_repairs < 0:
            raise ValueError("max_layout_repairs cannot be negative")

    def repair_budget(self, row_count: int) -> int:
        """Number of layout repairs allowed for a file with `row_count` rows."""
        if self.max_layout_repairs is None:
            return 3 * row_count
        return self.max_layout_repairs

    def accepts(self, filename: str) -> bool:
        """Check whether `filename` has an accepted extension."""
        if not self.extensions:
            return True
        name = str(filename).lower()
        return any(name.endswith(ext.lower()) for ext in self.extensions)
