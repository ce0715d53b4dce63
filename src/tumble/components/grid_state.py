from dataclasses import dataclass, field
from typing import Dict, List, Tuple

Position = Tuple[int, int]


@dataclass(slots=True)
class GridState:
    """Current symbols on the board and the visual handle drawn for each cell.

    ``handles`` keys always match the board coordinates once a phase settles.
    """
    symbols: List[List[str]] = field(default_factory=list)
    handles: Dict[Position, int] = field(default_factory=dict)

    @property
    def rows(self) -> int:
        return len(self.symbols)

    @property
    def cols(self) -> int:
        return len(self.symbols[0]) if self.symbols else 0
