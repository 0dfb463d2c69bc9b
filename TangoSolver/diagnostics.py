"""
Diagnostics: explain what a puzzle looks like and why a solve failed
"""
import json
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from .puzzle import TangoPuzzle, CellState, Relation
from .constraints import ConstraintChecker
from .solver import BacktrackingSolver, SolveResult, NoSolution, TimedOut, REASON_CONFLICTING_GIVENS


class SolverDiagnostics:

    @staticmethod
    def structure_report(puzzle: TangoPuzzle) -> Dict:
        """Counts of givens per line, constraint mix and rule conflicts among the givens."""
        givens = np.asarray(puzzle.given_grid(), dtype=np.int8)
        half = puzzle.size // 2

        def line_counts(axis: int) -> Dict[str, list]:
            return {
                'sun': (givens == CellState.SUN).sum(axis=axis).tolist(),
                'moon': (givens == CellState.MOON).sum(axis=axis).tolist(),
            }

        rows = line_counts(1)
        cols = line_counts(0)
        # Lines whose givens already use up one value: the rest of the line is forced
        saturated = (
            [f"row {i}" for i in range(puzzle.size) if half in (rows['sun'][i], rows['moon'][i])]
            + [f"column {i}" for i in range(puzzle.size) if half in (cols['sun'][i], cols['moon'][i])]
        )

        return {
            'size': puzzle.size,
            'given_cells': puzzle.num_fixed(),
            'empty_cells': int((givens == CellState.EMPTY).sum()),
            'equal_constraints': sum(1 for c in puzzle.constraints if c.relation is Relation.EQUAL),
            'opposite_constraints': sum(1 for c in puzzle.constraints if c.relation is Relation.OPPOSITE),
            'row_givens': rows,
            'column_givens': cols,
            'saturated_lines': saturated,
            'given_conflicts': ConstraintChecker.find_violations(puzzle.given_grid(), puzzle.constraints),
        }

    @staticmethod
    def analyze_puzzle_structure(puzzle: TangoPuzzle) -> Dict:
        """Print the structure report and return it"""
        report = SolverDiagnostics.structure_report(puzzle)

        print("\n" + "=" * 60)
        print("PUZZLE STRUCTURE ANALYSIS")
        print("=" * 60)
        print(f"\nSize: {report['size']}x{report['size']}")
        print(f"Given cells: {report['given_cells']}, empty cells: {report['empty_cells']}")
        print(f"Constraints: {report['equal_constraints']} equal, {report['opposite_constraints']} opposite")

        print("\n--- GIVENS PER LINE (sun/moon) ---")
        for i in range(puzzle.size):
            print(f"Row {i}: {report['row_givens']['sun'][i]}/{report['row_givens']['moon'][i]}    "
                  f"Column {i}: {report['column_givens']['sun'][i]}/{report['column_givens']['moon'][i]}")

        if report['saturated_lines']:
            print(f"\nForced lines: {', '.join(report['saturated_lines'])}")

        if report['given_conflicts']:
            print(f"\n⚠ WARNING: {len(report['given_conflicts'])} rule conflicts among the givens!")
            for problem in report['given_conflicts']:
                print(f"  {problem}")

        return report

    @staticmethod
    def analyze_failure(puzzle: TangoPuzzle, result: SolveResult) -> Optional[str]:
        """Classify a failed solve; returns None for a solved puzzle."""
        if isinstance(result, TimedOut):
            kind = "TIMEOUT"
            hint = "Search did not finish; raise the time budget"
        elif isinstance(result, NoSolution) and result.reason == REASON_CONFLICTING_GIVENS:
            kind = "CONFLICTING GIVENS"
            hint = "The given cells already break a rule; check the board reader output"
        elif isinstance(result, NoSolution):
            kind = "EXHAUSTED"
            hint = "Every assignment was tried; the givens and constraints contradict each other"
        else:
            return None

        print(f"\n✗ Failure type: {kind}")
        print(f"  {hint}")
        print(f"  Decisions: {result.stats.get('decisions', 0)}, "
              f"backtracks: {result.stats.get('backtracks', 0)}")
        if isinstance(result, NoSolution):
            for problem in result.details:
                print(f"  - {problem}")
        return kind

    @staticmethod
    def print_summary(solver: BacktrackingSolver, puzzle: TangoPuzzle, output_dir) -> Path:
        """Print a short summary and save diagnostics.json next to the solution files."""
        report = SolverDiagnostics.structure_report(puzzle)
        report['solving_stats'] = dict(solver.stats)

        print("\nDiagnostics:")
        print(f"  Empty cells at start: {report['empty_cells']}")
        print(f"  Decisions per empty cell: "
              f"{solver.stats['decisions'] / max(report['empty_cells'], 1):.2f}")
        print(f"  Backtracks: {solver.stats['backtracks']}")

        out_path = Path(output_dir) / "diagnostics.json"
        with open(out_path, 'w', encoding='utf-8') as f:
            json.dump(report, f, indent=2)
        print(f"✓ Diagnostics saved to: {out_path}")
        return out_path
