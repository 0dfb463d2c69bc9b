"""
Backtracking solver for Tango puzzles

Search order is fixed so results are reproducible:
 1. Decision cell = first empty, non-fixed cell in row-major order
 2. Values are tried SUN first, then MOON
 3. A value is only written if it passes ConstraintChecker.is_valid_placement
 4. The first complete assignment wins

Givens are vetted once before search; the finished grid is verified once
after it.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from .puzzle import TangoPuzzle, CellState, Constraint, Grid, copy_grid
from .constraints import ConstraintChecker


@dataclass(frozen=True)
class Solved:
    """Every cell holds SUN or MOON and all rules hold"""
    grid: Grid
    stats: Dict = field(default_factory=dict)


@dataclass(frozen=True)
class NoSolution:
    """No assignment satisfies the rules (a normal outcome, not an error)"""
    reason: str
    stats: Dict = field(default_factory=dict)
    details: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TimedOut:
    """The time budget ran out before the search finished"""
    stats: Dict = field(default_factory=dict)


SolveResult = Union[Solved, NoSolution, TimedOut]

REASON_EXHAUSTED = "search exhausted"
REASON_CONFLICTING_GIVENS = "conflicting givens"


class BacktrackingSolver:
    VALUE_ORDER = (CellState.SUN, CellState.MOON)

    def __init__(self, puzzle: TangoPuzzle, verbose: bool = False):
        self.puzzle = puzzle
        self.verbose = verbose
        self.size = puzzle.size
        self.fixed = puzzle.fixed
        self.constraints_by_cell = ConstraintChecker.index_by_cell(puzzle.constraints, puzzle.size)
        self.grid: Grid = puzzle.given_grid()  # scratch buffer owned by this solver
        self.timed_out = False
        self.deadline: Optional[float] = None
        self.stats = {
            'decisions': 0,
            'placements': 0,
            'backtracks': 0,
            'rejections': 0,
            'elapsed': 0.0,
        }

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self, timeout_seconds: Optional[float] = None) -> SolveResult:
        start_time = time.monotonic()
        self.deadline = start_time + timeout_seconds if timeout_seconds is not None else None
        self.timed_out = False
        self.grid = self.puzzle.given_grid()

        if self.verbose:
            print(f"Starting backtracking solver: {self.puzzle}")
            empties = sum(1 for row in self.grid for cell in row if cell == CellState.EMPTY)
            print(f"Cells to fill: {empties}\n")

        conflicts = ConstraintChecker.find_violations(self.grid, self.puzzle.constraints)
        if conflicts:
            if self.verbose:
                print("✗ Given cells break the rules:")
                for problem in conflicts:
                    print(f"  - {problem}")
            return NoSolution(REASON_CONFLICTING_GIVENS, dict(self.stats), conflicts)

        found = self._backtrack(0)
        self.stats['elapsed'] = time.monotonic() - start_time

        if self.verbose:
            if found:
                print("\n✓ Puzzle solved!")
            elif self.timed_out:
                print("\n⚠ Time budget exhausted")
            else:
                print("\n✗ No solution found")
            self._print_stats()

        if found:
            problems = ConstraintChecker.find_violations(self.grid, self.puzzle.constraints, complete=True)
            if problems:
                raise RuntimeError(f"Solver produced an invalid grid: {problems}")
            return Solved(copy_grid(self.grid), dict(self.stats))
        if self.timed_out:
            return TimedOut(dict(self.stats))
        return NoSolution(REASON_EXHAUSTED, dict(self.stats))

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    def _next_decision_cell(self, start: int) -> int:
        """Row-major index of the first empty, non-fixed cell at or after `start` (-1 if none)."""
        size = self.size
        for index in range(start, size * size):
            row, col = divmod(index, size)
            if self.grid[row][col] == CellState.EMPTY and not self.fixed[row][col]:
                return index
        return -1

    def _backtrack(self, start: int) -> bool:
        index = self._next_decision_cell(start)
        if index < 0:
            return True

        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.timed_out = True
            return False

        self.stats['decisions'] += 1
        if self.verbose and self.stats['decisions'] % 1000 == 0:
            print(f"  Progress: decisions {self.stats['decisions']} | "
                  f"backtracks {self.stats['backtracks']} | cell {divmod(index, self.size)}")

        row, col = divmod(index, self.size)
        constraints = self.constraints_by_cell[(row, col)]

        for value in self.VALUE_ORDER:
            if not ConstraintChecker.is_valid_placement(self.grid, row, col, value, constraints, self.size):
                self.stats['rejections'] += 1
                continue

            self.grid[row][col] = value
            self.stats['placements'] += 1

            if self._backtrack(index + 1):
                return True

            self.grid[row][col] = CellState.EMPTY
            self.stats['backtracks'] += 1

            if self.timed_out:
                return False

        return False

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------
    def _print_stats(self) -> None:
        """Print solving statistics."""
        print("\nSolving Statistics:")
        print(f"  Decisions: {self.stats['decisions']}")
        print(f"  Placements: {self.stats['placements']}")
        print(f"  Backtracks: {self.stats['backtracks']}")
        print(f"  Rejected values: {self.stats['rejections']}")
        print(f"  Elapsed: {self.stats['elapsed']:.3f}s")


def solve(grid: Sequence[Sequence], constraints: Optional[Sequence[Constraint]] = None,
          size: Optional[int] = None, fixed: Optional[Sequence[Sequence[bool]]] = None,
          timeout_seconds: Optional[float] = None, verbose: bool = False) -> SolveResult:
    """
    Solve a Tango board.

    Args:
        grid: size x size rows of cell tokens ('S', 'M', '.', CellState, 0/1/2)
        constraints: '='/'x' markers between adjacent cells
        size: board size (defaults to the number of rows)
        fixed: cells that must keep their value (defaults to every non-empty cell)
        timeout_seconds: optional time budget, polled once per decision cell
        verbose: print progress and statistics

    Returns:
        Solved, NoSolution or TimedOut. The caller's grid is never modified.

    Raises:
        PuzzleFormatError: the board, mask or constraints are malformed
    """
    puzzle = TangoPuzzle(grid, constraints, size=size, fixed=fixed)
    return BacktrackingSolver(puzzle, verbose=verbose).solve(timeout_seconds=timeout_seconds)
