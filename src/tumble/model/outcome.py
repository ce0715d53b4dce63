"""Typed play results as received from the game server.

An :class:`Outcome` is fully precomputed: the client replays it and never
decides anything about it. Instances are immutable so the same outcome can
be replayed any number of times with identical results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

Coord = Tuple[int, int]
Grid = Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True, slots=True)
class MatchStep:
    """Cluster removal followed by a refill of the freed cells.

    ``drop_in`` maps a column index to the incoming symbols for that column,
    listed top to bottom; the last symbol lands lowest.
    """
    remove_cells: frozenset[Coord]
    drop_in: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)
    win_for_step: float = 0.0
    grid_after: Optional[Grid] = None


@dataclass(frozen=True, slots=True)
class BonusStep:
    """Bonus trigger: highlights trigger symbols, never mutates the grid."""
    trigger_count: int
    trigger_cells: Optional[Tuple[Coord, ...]] = None
    bonus_payload: Any = None


CascadeStep = Union[MatchStep, BonusStep]


@dataclass(frozen=True, slots=True)
class Outcome:
    id: str
    mode: str
    bet: float
    initial_grid: Grid
    steps: Tuple[CascadeStep, ...] = ()
    total_win: float = 0.0
    ticket_index: Optional[int] = None

    @property
    def step_count(self) -> int:
        return len(self.steps)


@dataclass(frozen=True, slots=True)
class PackOutcome:
    """A batch of plays bought together; each play can be replayed as a ticket."""
    id: str
    level: str
    plays: Tuple[Outcome, ...]
    total_bet: float = 0.0
    total_win: float = 0.0
    best_index: Optional[int] = None

    def ticket(self, index: int) -> Outcome | None:
        if 0 <= index < len(self.plays):
            return self.plays[index]
        return None
