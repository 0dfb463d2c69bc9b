"""Tests for the backtracking solver."""

from pathlib import Path

from TangoSolver.puzzle import TangoPuzzle, CellState, Axis, Relation, Constraint, parse_grid
from TangoSolver.solver import (
    BacktrackingSolver,
    Solved,
    NoSolution,
    TimedOut,
    solve,
    REASON_EXHAUSTED,
    REASON_CONFLICTING_GIVENS,
)

S, M, E = CellState.SUN, CellState.MOON, CellState.EMPTY

SAMPLE_PUZZLE = Path(__file__).resolve().parent.parent / "data" / "json" / "sample_6x6.json"

ROW_A = "SSMSMM"
ROW_B = "MMSMSS"


def _assert_valid_solution(grid, constraints, size):
    half = size // 2
    for i in range(size):
        row = [grid[i][c] for c in range(size)]
        col = [grid[r][i] for r in range(size)]
        for line in (row, col):
            assert E not in line
            assert line.count(S) == half
            assert line.count(M) == half
            for k in range(size - 2):
                assert not (line[k] == line[k + 1] == line[k + 2])
    for c in constraints:
        (r1, c1), (r2, c2) = c.cell1, c.cell2
        if c.relation is Relation.EQUAL:
            assert grid[r1][c1] == grid[r2][c2]
        else:
            assert grid[r1][c1] != grid[r2][c2]


def test_empty_4x4_follows_scan_and_sun_first_order():
    result = solve(["....", "....", "....", "...."])
    assert isinstance(result, Solved)
    _assert_valid_solution(result.grid, [], 4)
    assert result.grid == parse_grid(["SSMM", "SSMM", "MMSS", "MMSS"])
    assert result.stats['backtracks'] == 0


def test_fixed_sun_and_equal_pair():
    equal = Constraint(Axis.HORIZONTAL, 0, 1, Relation.EQUAL)
    result = solve(["S...", "....", "....", "...."], [equal])
    assert isinstance(result, Solved)
    _assert_valid_solution(result.grid, [equal], 4)
    assert result.grid[0][0] is S
    assert result.grid[0][1] == result.grid[0][2]
    # Sun at (0,1) would force a third sun into row 0, so the search backtracks
    assert result.grid[0][1] is M
    assert result.stats['backtracks'] >= 1


def test_single_gap_is_forced_by_balance():
    rows = [ROW_A, ROW_B, "SS.SMM", ROW_B, ROW_A, ROW_B]
    result = solve(rows)
    assert isinstance(result, Solved)
    assert result.grid[2][2] is M
    assert result.grid == parse_grid([ROW_A, ROW_B, ROW_A, ROW_B, ROW_A, ROW_B])
    assert result.stats['decisions'] == 1


def test_forced_triple_has_no_solution():
    # (0,0) must be a moon for row 0, which would stack three moons in column 0
    result = solve([".SS.", "M...", "M...", "...."])
    assert isinstance(result, NoSolution)
    assert result.reason == REASON_EXHAUSTED


def test_contradicting_constraint_has_no_solution():
    opposite = Constraint(Axis.HORIZONTAL, 0, 1, Relation.OPPOSITE)
    result = solve(["S..S", "....", "....", "...."], [opposite])
    assert isinstance(result, NoSolution)
    assert result.reason == REASON_EXHAUSTED


def test_conflicting_givens_are_reported_without_search():
    result = solve(["SSS.", "....", "....", "...."])
    assert isinstance(result, NoSolution)
    assert result.reason == REASON_CONFLICTING_GIVENS
    assert result.details
    assert result.stats['decisions'] == 0

    equal = Constraint(Axis.VERTICAL, 0, 0, Relation.EQUAL)
    result = solve(["S...", "M...", "....", "...."], [equal])
    assert isinstance(result, NoSolution)
    assert result.reason == REASON_CONFLICTING_GIVENS


def test_fixed_cells_are_preserved():
    puzzle = TangoPuzzle.from_json(str(SAMPLE_PUZZLE))
    result = BacktrackingSolver(puzzle).solve()
    assert isinstance(result, Solved)
    _assert_valid_solution(result.grid, puzzle.constraints, puzzle.size)
    for r in range(puzzle.size):
        for c in range(puzzle.size):
            if puzzle.fixed[r][c]:
                assert result.grid[r][c] == puzzle.grid[r][c]


def test_unfixed_cells_are_free():
    grid = parse_grid(["M...", "....", "....", "...."])
    fixed = [[False] * 4 for _ in range(4)]
    result = solve(grid, fixed=fixed)
    assert isinstance(result, Solved)
    # the stale moon is ignored, so the search starts from a blank board
    assert result.grid[0][0] is S


def test_caller_grid_is_not_modified():
    grid = parse_grid(["S...", "....", "..M.", "...."])
    fixed = [[cell != E for cell in row] for row in grid]
    before = [list(row) for row in grid]
    fixed_before = [list(row) for row in fixed]

    result = solve(grid, fixed=fixed)

    assert isinstance(result, Solved)
    assert grid == before
    assert fixed == fixed_before
    assert result.grid is not grid


def test_repeated_solves_are_identical():
    puzzle = TangoPuzzle.from_json(str(SAMPLE_PUZZLE))
    first = BacktrackingSolver(puzzle).solve()
    second = BacktrackingSolver(puzzle).solve()
    third = solve(puzzle.grid, puzzle.constraints, fixed=puzzle.fixed)
    assert first.grid == second.grid == third.grid


def test_solver_instance_can_be_reused():
    puzzle = TangoPuzzle.from_json(str(SAMPLE_PUZZLE))
    solver = BacktrackingSolver(puzzle)
    assert solver.solve().grid == solver.solve().grid


def test_zero_budget_times_out():
    result = solve(["......"] * 6, timeout_seconds=0)
    assert isinstance(result, TimedOut)


def test_complete_grid_needs_no_decisions():
    rows = [ROW_A, ROW_B, ROW_A, ROW_B, ROW_A, ROW_B]
    result = solve(rows, timeout_seconds=0)
    assert isinstance(result, Solved)
    assert result.stats['decisions'] == 0


def test_verbose_output(capsys):
    solve(["....", "....", "....", "...."], verbose=True)
    out = capsys.readouterr().out
    assert "Puzzle solved" in out
    assert "Solving Statistics" in out
