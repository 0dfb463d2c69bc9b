"""
Rule checking for the Tango solver

Two levels of checking:
 - Placement-time pruning (`is_valid_placement`): cheap checks run before a
   tentative value is written into a cell. Only the candidate cell's row,
   column and constraints are inspected.
 - Whole-grid verification (`find_violations`): every rule over the whole
   board, used to vet the given clues before search and the final grid after.
"""

from typing import Dict, Iterable, List, Sequence

import numpy as np

from .puzzle import CellState, Constraint, Grid, CellCoord


class ConstraintChecker:
    """Validates cell placements and complete grids against the Tango rules."""

    # ---------- placement-time rules ----------

    @staticmethod
    def line_balance_ok(grid: Grid, row: int, col: int, value: CellState, size: int) -> bool:
        """
        Row and column may each hold at most size/2 of a value, so the count
        already placed must stay strictly below that before adding another.
        """
        max_per_line = size // 2

        row_count = sum(1 for c in range(size) if grid[row][c] == value)
        if row_count >= max_per_line:
            return False

        col_count = sum(1 for r in range(size) if grid[r][col] == value)
        return col_count < max_per_line

    @staticmethod
    def no_triple_ok(grid: Grid, row: int, col: int, value: CellState, size: int) -> bool:
        """
        Placing `value` at (row, col) must not complete three in a line.
        Checks the pair two to the left, the straddling pair and the pair two
        to the right, then the same vertically.
        """
        # Row
        if col >= 2 and grid[row][col - 1] == value and grid[row][col - 2] == value:
            return False
        if 1 <= col <= size - 2 and grid[row][col - 1] == value and grid[row][col + 1] == value:
            return False
        if col <= size - 3 and grid[row][col + 1] == value and grid[row][col + 2] == value:
            return False

        # Column
        if row >= 2 and grid[row - 1][col] == value and grid[row - 2][col] == value:
            return False
        if 1 <= row <= size - 2 and grid[row - 1][col] == value and grid[row + 1][col] == value:
            return False
        if row <= size - 3 and grid[row + 1][col] == value and grid[row + 2][col] == value:
            return False

        return True

    @staticmethod
    def constraints_ok(grid: Grid, row: int, col: int, value: CellState,
                       constraints: Iterable[Constraint]) -> bool:
        """
        Check the constraints touching (row, col) with `value` substituted for
        the candidate cell. A constraint whose other cell is still empty is
        skipped; it is checked again when that cell gets its value.
        """
        for constraint in constraints:
            r1, c1 = constraint.cell1
            r2, c2 = constraint.cell2
            value1 = value if (r1, c1) == (row, col) else grid[r1][c1]
            value2 = value if (r2, c2) == (row, col) else grid[r2][c2]
            if not constraint.holds(value1, value2):
                return False
        return True

    @staticmethod
    def is_valid_placement(grid: Grid, row: int, col: int, value: CellState,
                           constraints: Iterable[Constraint], size: int) -> bool:
        """
        Full pruning rule set for a tentative value.

        `constraints` only needs to contain the constraints touching
        (row, col); extra entries are harmless but slow the check down.
        """
        if not ConstraintChecker.line_balance_ok(grid, row, col, value, size):
            return False
        if not ConstraintChecker.no_triple_ok(grid, row, col, value, size):
            return False
        return ConstraintChecker.constraints_ok(grid, row, col, value, constraints)

    @staticmethod
    def index_by_cell(constraints: Iterable[Constraint], size: int) -> Dict[CellCoord, List[Constraint]]:
        """Map every cell to the constraints touching it."""
        index: Dict[CellCoord, List[Constraint]] = {
            (r, c): [] for r in range(size) for c in range(size)
        }
        for constraint in constraints:
            index[constraint.cell1].append(constraint)
            index[constraint.cell2].append(constraint)
        return index

    # ---------- whole-grid verification ----------

    @staticmethod
    def find_violations(grid: Grid, constraints: Sequence[Constraint], complete: bool = False) -> List[str]:
        """
        List every rule broken by the filled cells of `grid`.

        With complete=False empty cells are allowed and lines only fail when
        they hold more than size/2 of a value. With complete=True the grid
        must be fully filled with exactly size/2 of each value per line.
        """
        board = np.asarray(grid, dtype=np.int8)
        size = board.shape[0]
        half = size // 2
        problems: List[str] = []

        if complete:
            for r, c in np.argwhere(board == CellState.EMPTY):
                problems.append(f"Cell ({r},{c}) is empty")

        for value in (CellState.SUN, CellState.MOON):
            mask = board == value
            name = value.name.lower()

            for axis, line_name in ((1, 'Row'), (0, 'Column')):
                counts = mask.sum(axis=axis)
                bad = counts != half if complete else counts > half
                for idx in np.flatnonzero(bad):
                    problems.append(f"{line_name} {idx} has {counts[idx]} {name} cells (expected {half})")

            across = mask[:, :-2] & mask[:, 1:-1] & mask[:, 2:]
            for r, c in np.argwhere(across):
                problems.append(f"Row {r} has three {name} cells from column {c}")

            down = mask[:-2, :] & mask[1:-1, :] & mask[2:, :]
            for r, c in np.argwhere(down):
                problems.append(f"Column {c} has three {name} cells from row {r}")

        for constraint in constraints:
            r1, c1 = constraint.cell1
            r2, c2 = constraint.cell2
            if not constraint.holds(grid[r1][c1], grid[r2][c2]):
                problems.append(f"{constraint} violated")

        return problems

    @staticmethod
    def is_solution(grid: Grid, constraints: Sequence[Constraint]) -> bool:
        """Check if `grid` is a complete, rule-abiding Tango board."""
        return not ConstraintChecker.find_violations(grid, constraints, complete=True)
