from dataclasses import dataclass

from tumble.config import BoardShape, FillMode


@dataclass(slots=True)
class Board:
    """Singleton board settings used by the next submit or clear."""
    rows: int
    cols: int
    fill_mode: FillMode = FillMode.REPLACE

    @property
    def shape(self) -> BoardShape:
        return BoardShape(self.rows, self.cols)
