"""Tests for puzzle loading and input validation."""

import json

import pytest

from TangoSolver.puzzle import (
    TangoPuzzle,
    CellState,
    Axis,
    Relation,
    Constraint,
    PuzzleFormatError,
    parse_cell,
)

S, M, E = CellState.SUN, CellState.MOON, CellState.EMPTY

PUZZLE_DATA = {
    "size": 4,
    "grid": ["S...", "..M.", "....", "...."],
    "constraints": [
        {"type": "h", "row": 0, "col": 1, "constraint": "="},
        {"type": "v", "row": 2, "col": 3, "constraint": "x"},
    ],
}


def test_cell_tokens():
    assert parse_cell("S") is S
    assert parse_cell("m") is M
    assert parse_cell(".") is E
    assert parse_cell(2) is M
    assert parse_cell("☀") is S
    with pytest.raises(PuzzleFormatError):
        parse_cell("X")
    with pytest.raises(PuzzleFormatError):
        parse_cell(7)


def test_string_rows_and_integer_rows_agree():
    from_text = TangoPuzzle(["S...", "..M.", "....", "...."])
    from_ints = TangoPuzzle([[1, 0, 0, 0], [0, 0, 2, 0], [0, 0, 0, 0], [0, 0, 0, 0]])
    assert from_text.grid == from_ints.grid
    assert from_text.size == 4


def test_fixed_mask_defaults_to_filled_cells():
    puzzle = TangoPuzzle(["S...", "..M.", "....", "...."])
    assert puzzle.fixed[0][0] is True
    assert puzzle.fixed[1][2] is True
    assert puzzle.num_fixed() == 2


def test_given_grid_drops_unfixed_values():
    fixed = [[True, False, False, False]] + [[False] * 4 for _ in range(3)]
    puzzle = TangoPuzzle(["SM..", "....", "....", "...."], fixed=fixed)
    givens = puzzle.given_grid()
    assert givens[0][0] is S
    assert givens[0][1] is E
    # observed state is kept on the puzzle itself
    assert puzzle.grid[0][1] is M


def test_from_dict_and_from_json_agree(tmp_path):
    path = tmp_path / "puzzle.json"
    path.write_text(json.dumps(PUZZLE_DATA), encoding="utf-8")

    loaded = TangoPuzzle.from_json(str(path))
    built = TangoPuzzle.from_dict(PUZZLE_DATA)

    assert loaded.grid == built.grid
    assert loaded.fixed == built.fixed
    assert loaded.constraints == built.constraints
    assert loaded.constraints[0] == Constraint(Axis.HORIZONTAL, 0, 1, Relation.EQUAL)
    assert loaded.constraints[1] == Constraint(Axis.VERTICAL, 2, 3, Relation.OPPOSITE)


def test_to_dict_round_trips_through_from_dict():
    puzzle = TangoPuzzle.from_dict(PUZZLE_DATA)
    again = TangoPuzzle.from_dict(puzzle.to_dict())
    assert again.grid == puzzle.grid
    assert again.constraints == puzzle.constraints


def test_constraint_neighbours_and_relation():
    across = Constraint(Axis.HORIZONTAL, 1, 2, Relation.EQUAL)
    down = Constraint(Axis.VERTICAL, 1, 2, Relation.OPPOSITE)
    assert across.cell2 == (1, 3)
    assert down.cell2 == (2, 2)
    assert across.involves(1, 3)
    assert not across.involves(2, 2)

    assert across.holds(S, S)
    assert not across.holds(S, M)
    assert down.holds(S, M)
    assert not down.holds(M, M)
    # undecided pairs never fail
    assert across.holds(S, E)
    assert down.holds(E, E)


def test_constraint_aliases():
    c = Constraint.from_dict({"type": "vertical", "row": 0, "col": 0, "constraint": "opposite"})
    assert c.axis is Axis.VERTICAL
    assert c.relation is Relation.OPPOSITE


@pytest.mark.parametrize(
    "kwargs",
    [
        {"grid": ["S..", "...", "..."]},                            # odd size
        {"grid": ["S...", "....", "...."]},                         # not square
        {"grid": ["S...", "....", "....", "..."]},                  # short row
        {"grid": ["....", "....", "....", "...."], "size": 6},      # size mismatch
        {"grid": ["....", "....", "....", "...."],
         "fixed": [[True, False, False, False]] + [[False] * 4] * 3},  # fixed but empty
        {"grid": ["....", "....", "....", "...."],
         "fixed": [[False] * 4] * 3},                               # mask shape
        {"grid": ["....", "....", "....", "...."],
         "constraints": [Constraint(Axis.HORIZONTAL, 0, 3, Relation.EQUAL)]},
        {"grid": ["....", "....", "....", "...."],
         "constraints": [Constraint(Axis.VERTICAL, 3, 0, Relation.EQUAL)]},
        {"grid": 5},                                                # not a list
        {"grid": ["S...", 5, "....", "...."]},                      # row not a list
        {"grid": ["....", "....", "....", "...."], "fixed": 5},     # mask not a list
        {"grid": ["....", "....", "....", "...."], "fixed": [5, 5, 5, 5]},
    ],
)
def test_malformed_input_is_rejected(kwargs):
    with pytest.raises(PuzzleFormatError):
        TangoPuzzle(**kwargs)


def test_malformed_constraint_entries():
    with pytest.raises(PuzzleFormatError):
        Constraint.from_dict({"type": "d", "row": 0, "col": 0, "constraint": "="})
    with pytest.raises(PuzzleFormatError):
        Constraint.from_dict({"type": "h", "row": 0, "col": 0, "constraint": "<"})
    with pytest.raises(PuzzleFormatError):
        Constraint.from_dict({"type": "h", "row": 0})


def test_invalid_json_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(PuzzleFormatError):
        TangoPuzzle.from_json(str(path))


@pytest.mark.parametrize(
    "data",
    [
        5,
        ["....", "....", "....", "...."],
        {"grid": ["....", "....", "....", "...."], "constraints": 5},
        {"grid": ["....", "....", "....", "...."], "constraints": [5]},
    ],
)
def test_from_dict_rejects_wrong_shapes(data):
    with pytest.raises(PuzzleFormatError):
        TangoPuzzle.from_dict(data)


def test_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'\xff\xfe{"grid": []}')
    with pytest.raises(PuzzleFormatError):
        TangoPuzzle.from_json(str(path))
