import re
from dataclasses import dataclass

LAYOUT_PATTERN = re.compile(r"^\d+x\d+$")


@dataclass(frozen=True, slots=True)
class GridLayout:
    """
    A binder page grid.

    Attributes:
        columns: Cards per row
        rows: Rows per page
    """

    columns: int
    rows: int

    @property
    def cards_per_page(self) -> int:
        return self.columns * self.rows

    @property
    def token(self) -> str:
        return f"{self.columns}x{self.rows}"

    def __str__(self) -> str:
        return self.token

