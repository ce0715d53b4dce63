import logging

import pytest

from tumble.errors import OutcomeFormatError
from tumble.model.outcome import BonusStep, MatchStep
from tumble.model.parsing import StepPayload, outcome_from_payload, pack_from_payload, parse_drop_in


def _payload(**overrides):
    payload = {
        "playId": "p-77",
        "mode": "nivel1",
        "bet": 2,
        "grid0": [["a", "B", "C"], ["D", "E", "F"]],
        "cascades": [
            {
                "removeCells": [{"row": 0, "col": 0}, [1, 2]],
                "dropIn": [{"col": 0, "symbols": ["x"]}],
                "winStep": 4.5,
                "gridAfter": [["X", "B", "C"], ["D", "E", "G"]],
            },
            {"bonus": True, "bonusData": {"triggerCount": 5, "triggerCells": [[0, 1]], "feature": "free"}},
        ],
        "totalWin": 4.5,
    }
    payload.update(overrides)
    return payload


def test_camel_case_payload_is_parsed():
    outcome = outcome_from_payload(_payload())
    assert outcome.id == "p-77"
    assert outcome.mode == "nivel1"
    assert outcome.bet == 2.0
    assert outcome.initial_grid == (("A", "B", "C"), ("D", "E", "F"))
    assert outcome.total_win == 4.5
    assert outcome.step_count == 2

    match = outcome.steps[0]
    assert isinstance(match, MatchStep)
    assert match.remove_cells == frozenset({(0, 0), (1, 2)})
    assert match.drop_in == {0: ("X",)}
    assert match.win_for_step == 4.5
    assert match.grid_after == (("X", "B", "C"), ("D", "E", "G"))

    bonus = outcome.steps[1]
    assert isinstance(bonus, BonusStep)
    assert bonus.trigger_count == 3
    assert bonus.trigger_cells == ((0, 1),)
    assert bonus.bonus_payload["feature"] == "free"


def test_snake_case_keys_are_accepted():
    outcome = outcome_from_payload(
        {
            "id": "s-1",
            "initial_grid": [["A"]],
            "steps": [{"remove_cells": [[0, 0]], "win_for_step": 1, "drop_in": {"0": ["B"]}}],
            "total_win": 1,
        }
    )
    assert outcome.id == "s-1"
    assert outcome.steps[0].remove_cells == frozenset({(0, 0)})
    assert outcome.steps[0].drop_in == {0: ("B",)}
    assert outcome.steps[0].grid_after is None


def test_non_mapping_payload_is_rejected():
    with pytest.raises(OutcomeFormatError):
        outcome_from_payload(["not", "an", "outcome"])
    with pytest.raises(OutcomeFormatError):
        pack_from_payload(None)


def test_malformed_entries_are_dropped_with_warnings(caplog):
    payload = _payload(
        cascades=[
            "garbage",
            {"removeCells": [{"row": "x"}, [0, 0], True], "winStep": "lots"},
            {"removeCells": [[0, 1]], "winStep": -3},
        ]
    )
    with caplog.at_level(logging.WARNING, logger="tumble.model"):
        outcome = outcome_from_payload(payload)
    assert outcome.step_count == 2
    assert outcome.steps[0].remove_cells == frozenset({(0, 0)})
    assert outcome.steps[0].win_for_step == 0.0
    assert outcome.steps[1].win_for_step == 0.0
    assert "non-object cascade step" in caplog.text
    assert "non-numeric winStep" in caplog.text


def test_bonus_step_defaults():
    outcome = outcome_from_payload(_payload(cascades=[{"type": "bonus"}]))
    step = outcome.steps[0]
    assert isinstance(step, BonusStep)
    assert step.trigger_count == 3
    assert step.trigger_cells is None
    assert step.bonus_payload is None


def test_drop_in_entries_for_the_same_column_are_joined():
    assert parse_drop_in([{"col": 1, "symbols": ["a"]}, {"col": 1, "symbols": ["b"]}, "junk"]) == {1: ("A", "B")}


def test_pack_assigns_ticket_indexes():
    pack = pack_from_payload(
        {
            "packId": "pk-1",
            "packLevel": "nivel2",
            "plays": [_payload(playId="a"), "junk", _payload(playId="b", ticketIndex=7)],
            "totalBet": 10,
            "totalWin": 9,
            "bestIndex": 1,
        }
    )
    assert pack.id == "pk-1"
    assert pack.level == "nivel2"
    assert [play.id for play in pack.plays] == ["a", "b"]
    assert [play.ticket_index for play in pack.plays] == [0, 7]
    assert pack.total_bet == 10.0
    assert pack.best_index == 1
    assert pack.ticket(1).id == "b"
    assert pack.ticket(2) is None
    assert pack.ticket(-1) is None


def test_step_schema_reads_aliases_and_nested_bonus_details():
    step = StepPayload.model_validate({"dropIn": {"2": ["q", None]}, "removeCells": [[0, 2]], "winStep": "1.5"})
    assert not step.is_bonus
    assert step.to_step() == MatchStep(
        remove_cells=frozenset({(0, 2)}),
        drop_in={2: ("Q", "")},
        win_for_step=1.5,
        grid_after=None,
    )

    nested = StepPayload.model_validate({"bonus": 1, "bonusData": {"trigger_count": 2, "triggerCells": [{"row": 1, "col": 1}]}})
    assert nested.is_bonus
    assert nested.trigger_count == 2
    assert nested.trigger_cells == ((1, 1),)

    top_level = StepPayload.model_validate({"type": "bonus", "triggerCount": 1, "bonusData": {"triggerCount": 3}})
    assert top_level.to_step().trigger_count == 1


def test_null_and_numeric_fields_fall_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING, logger="tumble.model"):
        outcome = outcome_from_payload(
            {"playId": 42, "mode": None, "bet": True, "grid0": "ABC", "cascades": None, "ticketIndex": "x"}
        )
    assert outcome.id == "42"
    assert outcome.mode == ""
    assert outcome.bet == 0.0
    assert outcome.initial_grid == ()
    assert outcome.steps == ()
    assert outcome.ticket_index is None
    assert "boolean bet" in caplog.text
    assert "grid0 is not a list of rows" in caplog.text


def test_boolean_cell_indexes_are_dropped(caplog):
    with caplog.at_level(logging.WARNING, logger="tumble.model"):
        outcome = outcome_from_payload(_payload(cascades=[{"removeCells": [[True, 0], {"row": 1, "col": "2"}]}]))
    assert outcome.steps[0].remove_cells == frozenset({(1, 2)})
    assert "malformed removeCells entry" in caplog.text
