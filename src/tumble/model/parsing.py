"""Wire schema for transport payloads (decoded JSON) and conversion to outcome models.

The server speaks camelCase (``playId``, ``grid0``, ``cascades``); snake_case
keys are accepted as well through alias choices. Bad entries inside an
otherwise usable payload are dropped with a warning by the ``before``
validators rather than rejected, because a half-replayed play is better than
a frozen board. Only a payload that is not a mapping at all is refused.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from tumble.constants import BONUS_HIGHLIGHT_LIMIT
from tumble.errors import OutcomeFormatError
from tumble.model.outcome import BonusStep, CascadeStep, Coord, Grid, MatchStep, Outcome, PackOutcome

logger = logging.getLogger("tumble.model")


def clean_symbol(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().upper()


def _number(value: Any, *, field_name: str, default: float = 0.0) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        logger.warning("Ignoring boolean %s=%r", field_name, value)
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s=%r", field_name, value)
        return default


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _grid(raw: Any, *, field_name: str) -> Grid:
    """Tuple-of-tuples grid; rows may be ragged, the shape is fixed later."""
    if not isinstance(raw, (list, tuple)):
        if raw is not None:
            logger.warning("%s is not a list of rows; treating as empty", field_name)
        return ()
    rows: List[Tuple[str, ...]] = []
    for row in raw:
        if not isinstance(row, (list, tuple)):
            logger.warning("%s contains a non-list row %r; treating as empty", field_name, row)
            rows.append(())
            continue
        rows.append(tuple(clean_symbol(symbol) for symbol in row))
    return tuple(rows)


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class CellPayload(WireModel):
    """A board cell, sent either as ``{"row": r, "col": c}`` or ``[r, c]``."""
    row: int
    col: int

    @model_validator(mode="before")
    @classmethod
    def from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"row": data[0], "col": data[1]}
        return data

    @field_validator("row", "col", mode="before")
    @classmethod
    def reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("cell index cannot be a boolean")
        return value

    @property
    def coord(self) -> Coord:
        return self.row, self.col


class DropInPayload(WireModel):
    col: int
    symbols: Tuple[str, ...] = ()

    @field_validator("col", mode="before")
    @classmethod
    def reject_boolean_column(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("column cannot be a boolean")
        return value

    @field_validator("symbols", mode="before")
    @classmethod
    def clean_symbols(cls, value: Any) -> Tuple[str, ...]:
        if not isinstance(value, (list, tuple)):
            return ()
        return tuple(clean_symbol(symbol) for symbol in value)


def parse_cells(raw: Any, *, field_name: str) -> List[Coord]:
    if not isinstance(raw, (list, tuple)):
        return []
    cells: List[Coord] = []
    for entry in raw:
        try:
            cells.append(CellPayload.model_validate(entry).coord)
        except ValidationError:
            logger.warning("Dropping malformed %s entry %r", field_name, entry)
    return cells


def parse_drop_in(raw: Any) -> dict[int, Tuple[str, ...]]:
    """Accept ``[{"col": c, "symbols": [...]}, ...]`` or ``{c: [...]}``."""
    if isinstance(raw, Mapping):
        entries: List[Any] = [{"col": col, "symbols": symbols} for col, symbols in raw.items()]
    elif isinstance(raw, (list, tuple)):
        entries = list(raw)
    else:
        return {}
    drop_in: dict[int, Tuple[str, ...]] = {}
    for entry in entries:
        try:
            parsed = DropInPayload.model_validate(entry)
        except ValidationError:
            logger.warning("Dropping malformed dropIn entry %r", entry)
            continue
        drop_in[parsed.col] = drop_in.get(parsed.col, ()) + parsed.symbols
    return drop_in


class StepPayload(WireModel):
    """One entry of ``cascades``: a cluster removal or a bonus trigger."""
    bonus: Any = False
    kind: Any = Field(default=None, validation_alias=AliasChoices("type", "kind"))
    remove_cells: Tuple[Coord, ...] = Field(default=(), validation_alias=AliasChoices("removeCells", "remove_cells"))
    drop_in: dict[int, Tuple[str, ...]] = Field(default_factory=dict, validation_alias=AliasChoices("dropIn", "drop_in"))
    win_for_step: float = Field(default=0.0, validation_alias=AliasChoices("winStep", "win_for_step"))
    grid_after: Optional[Grid] = Field(default=None, validation_alias=AliasChoices("gridAfter", "grid_after"))
    bonus_data: Any = Field(
        default=None, validation_alias=AliasChoices("bonusData", "bonus_payload", "bonus_data")
    )
    trigger_count: Optional[int] = Field(default=None, validation_alias=AliasChoices("trigger_count", "triggerCount"))
    trigger_cells: Optional[Tuple[Coord, ...]] = Field(
        default=None, validation_alias=AliasChoices("trigger_cells", "triggerCells")
    )

    @model_validator(mode="before")
    @classmethod
    def lift_bonus_details(cls, data: Any) -> Any:
        """Trigger details may sit inside ``bonusData`` instead of on the step."""
        if not isinstance(data, Mapping):
            return data
        details = next(
            (data[key] for key in ("bonusData", "bonus_payload", "bonus_data") if data.get(key) is not None),
            None,
        )
        if not isinstance(details, Mapping):
            return data
        lifted = dict(data)
        for snake, camel in (("trigger_count", "triggerCount"), ("trigger_cells", "triggerCells")):
            if lifted.get(snake) is None and lifted.get(camel) is None:
                nested = details.get(camel, details.get(snake))
                if nested is not None:
                    lifted[snake] = nested
        return lifted

    @field_validator("remove_cells", mode="before")
    @classmethod
    def lenient_remove_cells(cls, value: Any) -> Tuple[Coord, ...]:
        return tuple(parse_cells(value, field_name="removeCells"))

    @field_validator("trigger_cells", mode="before")
    @classmethod
    def lenient_trigger_cells(cls, value: Any) -> Optional[Tuple[Coord, ...]]:
        if value is None:
            return None
        return tuple(parse_cells(value, field_name="triggerCells"))

    @field_validator("drop_in", mode="before")
    @classmethod
    def lenient_drop_in(cls, value: Any) -> dict[int, Tuple[str, ...]]:
        return parse_drop_in(value)

    @field_validator("win_for_step", mode="before")
    @classmethod
    def lenient_win(cls, value: Any) -> float:
        return _number(value, field_name="winStep")

    @field_validator("win_for_step")
    @classmethod
    def clamp_negative_win(cls, value: float) -> float:
        if value < 0:
            logger.warning("Negative step win %r clamped to 0", value)
            return 0.0
        return value

    @field_validator("grid_after", mode="before")
    @classmethod
    def lenient_grid_after(cls, value: Any) -> Optional[Grid]:
        if value is None:
            return None
        return _grid(value, field_name="gridAfter")

    @field_validator("trigger_count", mode="before")
    @classmethod
    def lenient_trigger_count(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-integer triggerCount=%r", value)
            return None

    @property
    def is_bonus(self) -> bool:
        return bool(self.bonus) or self.kind == "bonus"

    def to_step(self) -> CascadeStep:
        if self.is_bonus:
            count = BONUS_HIGHLIGHT_LIMIT if self.trigger_count is None else self.trigger_count
            return BonusStep(
                trigger_count=max(1, min(BONUS_HIGHLIGHT_LIMIT, count)),
                trigger_cells=self.trigger_cells,
                bonus_payload=self.bonus_data,
            )
        return MatchStep(
            remove_cells=frozenset(self.remove_cells),
            drop_in=dict(self.drop_in),
            win_for_step=self.win_for_step,
            grid_after=self.grid_after,
        )


class OutcomePayload(WireModel):
    """A ``play.single`` response."""
    id: str = Field(default="", validation_alias=AliasChoices("playId", "id"))
    mode: str = ""
    bet: float = 0.0
    initial_grid: Grid = Field(default=(), validation_alias=AliasChoices("grid0", "initial_grid"))
    steps: Tuple[StepPayload, ...] = Field(default=(), validation_alias=AliasChoices("cascades", "steps"))
    total_win: float = Field(default=0.0, validation_alias=AliasChoices("totalWin", "total_win"))
    ticket_index: Optional[int] = Field(default=None, validation_alias=AliasChoices("ticketIndex", "ticket_index"))

    @field_validator("id", "mode", mode="before")
    @classmethod
    def as_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("bet", mode="before")
    @classmethod
    def lenient_bet(cls, value: Any) -> float:
        return _number(value, field_name="bet")

    @field_validator("total_win", mode="before")
    @classmethod
    def lenient_total_win(cls, value: Any) -> float:
        return _number(value, field_name="totalWin")

    @field_validator("initial_grid", mode="before")
    @classmethod
    def lenient_grid(cls, value: Any) -> Grid:
        return _grid(value, field_name="grid0")

    @field_validator("ticket_index", mode="before")
    @classmethod
    def lenient_ticket_index(cls, value: Any) -> Optional[int]:
        return _optional_int(value)

    @field_validator("steps", mode="before")
    @classmethod
    def object_steps(cls, value: Any) -> List[Any]:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            logger.warning("cascades is not a list; replaying without steps")
            return []
        kept = []
        for index, entry in enumerate(value):
            if not isinstance(entry, Mapping):
                logger.warning("Dropping non-object cascade step #%d", index)
                continue
            kept.append(entry)
        return kept

    def to_outcome(self) -> Outcome:
        return Outcome(
            id=self.id,
            mode=self.mode,
            bet=self.bet,
            initial_grid=self.initial_grid,
            steps=tuple(step.to_step() for step in self.steps),
            total_win=self.total_win,
            ticket_index=self.ticket_index,
        )


class PackPayload(WireModel):
    """A ``play.pack`` response; ``plays`` keeps each play's position in the pack."""
    id: str = Field(default="", validation_alias=AliasChoices("packId", "id"))
    level: str = Field(default="", validation_alias=AliasChoices("packLevel", "level"))
    plays: Tuple[Tuple[int, OutcomePayload], ...] = ()
    total_bet: float = Field(default=0.0, validation_alias=AliasChoices("totalBet", "total_bet"))
    total_win: float = Field(default=0.0, validation_alias=AliasChoices("totalWin", "total_win"))
    best_index: Optional[int] = Field(default=None, validation_alias=AliasChoices("bestIndex", "best_index"))

    @field_validator("id", "level", mode="before")
    @classmethod
    def as_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("total_bet", mode="before")
    @classmethod
    def lenient_total_bet(cls, value: Any) -> float:
        return _number(value, field_name="totalBet")

    @field_validator("total_win", mode="before")
    @classmethod
    def lenient_total_win(cls, value: Any) -> float:
        return _number(value, field_name="totalWin")

    @field_validator("best_index", mode="before")
    @classmethod
    def lenient_best_index(cls, value: Any) -> Optional[int]:
        return _optional_int(value)

    @field_validator("plays", mode="before")
    @classmethod
    def indexed_plays(cls, value: Any) -> List[Tuple[int, Any]]:
        if not isinstance(value, (list, tuple)):
            return []
        kept = []
        for index, entry in enumerate(value):
            if not isinstance(entry, Mapping):
                logger.warning("Dropping non-object pack play #%d", index)
                continue
            kept.append((index, entry))
        return kept

    def to_pack(self) -> PackOutcome:
        plays: List[Outcome] = []
        for index, payload in self.plays:
            play = payload.to_outcome()
            if play.ticket_index is None:
                play = replace(play, ticket_index=index)
            plays.append(play)
        return PackOutcome(
            id=self.id,
            level=self.level,
            plays=tuple(plays),
            total_bet=self.total_bet,
            total_win=self.total_win,
            best_index=self.best_index,
        )


def outcome_from_payload(payload: Any) -> Outcome:
    """Build an :class:`Outcome` from a decoded ``play.single`` response."""
    if not isinstance(payload, Mapping):
        raise OutcomeFormatError(f"Outcome payload must be a mapping, got {type(payload).__name__}")
    try:
        return OutcomePayload.model_validate(dict(payload)).to_outcome()
    except ValidationError as exc:
        raise OutcomeFormatError(f"Outcome payload rejected: {exc}") from exc


def pack_from_payload(payload: Any) -> PackOutcome:
    """Build a :class:`PackOutcome` from a decoded ``play.pack`` response."""
    if not isinstance(payload, Mapping):
        raise OutcomeFormatError(f"Pack payload must be a mapping, got {type(payload).__name__}")
    try:
        return PackPayload.model_validate(dict(payload)).to_pack()
    except ValidationError as exc:
        raise OutcomeFormatError(f"Pack payload rejected: {exc}") from exc
