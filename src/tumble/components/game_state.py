"""Game state resource describing the active high-level play state."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional


class PlayState(Enum):
    """High-level states of the play flow."""
    MENU = auto()
    LOADING = auto()
    READY = auto()
    REVEAL = auto()
    CASCADE_LOOP = auto()
    END_TICKET = auto()
    PACK_LIST = auto()
    REPLAY = auto()
    SUMMARY = auto()


@dataclass(slots=True)
class PlayContext:
    mode: Optional[str] = None
    pack_id: Optional[str] = None
    ticket_index: Optional[int] = None


@dataclass
class GameState:
    """Singleton component storing the current play state and its context."""
    state: PlayState = PlayState.MENU
    context: PlayContext = field(default_factory=PlayContext)
