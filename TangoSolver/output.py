import json
from typing import Dict, List, Optional, Sequence
from datetime import datetime

from .puzzle import TangoPuzzle, CellState, Constraint, Axis, Relation
from .solver import SolveResult, Solved, NoSolution, TimedOut
from .constraints import ConstraintChecker
from .moves import plan_clicks

_MARKERS = {Relation.EQUAL: '=', Relation.OPPOSITE: '×'}


def _status(result: SolveResult) -> str:
    if isinstance(result, Solved):
        return 'solved'
    if isinstance(result, TimedOut):
        return 'timed_out'
    return 'no_solution'


class SolutionFormatter:
    """Formats puzzle solutions for output"""

    @staticmethod
    def format_solution_json(puzzle: TangoPuzzle, result: SolveResult) -> Dict:
        """
        Format solution as JSON
        """
        solution = {
            'puzzle_info': {
                'size': puzzle.size,
                'fixed_cells': puzzle.num_fixed(),
                'total_constraints': len(puzzle.constraints),
                'status': _status(result),
                'timestamp': datetime.now().isoformat()
            },
            'puzzle': puzzle.to_dict(),
            'solving_stats': dict(result.stats),
            'solution': None,
            'moves': [],
            'validation': {}
        }

        if isinstance(result, NoSolution):
            solution['reason'] = result.reason
            solution['validation']['problems'] = list(result.details)

        if isinstance(result, Solved):
            solution['solution'] = [''.join('.SM'[cell] for cell in row) for row in result.grid]

            for action in plan_clicks(puzzle.grid, result.grid, puzzle.fixed):
                solution['moves'].append({
                    'row': action.row,
                    'col': action.col,
                    'clicks': action.clicks,
                    'target': result.grid[action.row][action.col].name.lower()
                })

            problems = ConstraintChecker.find_violations(result.grid, puzzle.constraints, complete=True)
            solution['validation'] = {
                'valid': not problems,
                'problems': problems
            }

        return solution

    @staticmethod
    def format_grid_visualization(grid: Sequence[Sequence[CellState]],
                                  constraints: Optional[Sequence[Constraint]] = None) -> str:
        """
        Text grid with '=' / '×' markers between constrained cells.
        Horizontal markers sit between two cells, vertical markers on the
        line between two rows.
        """
        size = len(grid)
        across = {}
        down = {}
        for c in constraints or []:
            target = across if c.axis is Axis.HORIZONTAL else down
            target[c.cell1] = _MARKERS[c.relation]

        lines = ["-" * (size * 2 + 3)]
        for r in range(size):
            row_text = ""
            for c in range(size):
                row_text += CellState(grid[r][c]).symbol
                if c < size - 1:
                    row_text += across.get((r, c), " ")
            lines.append("  " + row_text)

            if r < size - 1 and any((r, c) in down for c in range(size)):
                lines.append("  " + " ".join(down.get((r, c), " ") for c in range(size)).rstrip())
        lines.append("-" * (size * 2 + 3))

        return "\n".join(lines)

    @staticmethod
    def format_solution_human_readable(puzzle: TangoPuzzle, result: SolveResult) -> str:
        """
        Format solution as human-readable text
        """
        lines: List[str] = []
        lines.append("=" * 60)
        lines.append("TANGO PUZZLE SOLUTION")
        lines.append("=" * 60)
        lines.append(f"\nPuzzle is {puzzle.size}x{puzzle.size} with {puzzle.num_fixed()} given cells "
                     f"and {len(puzzle.constraints)} constraints")

        lines.append("\nGIVEN BOARD:")
        lines.append(SolutionFormatter.format_grid_visualization(puzzle.given_grid(), puzzle.constraints))

        if isinstance(result, Solved):
            lines.append("\nSOLUTION:")
            lines.append(SolutionFormatter.format_grid_visualization(result.grid, puzzle.constraints))

            actions = plan_clicks(puzzle.grid, result.grid, puzzle.fixed)
            lines.append(f"\nMOVES ({sum(a.clicks for a in actions)} clicks):")
            lines.append("-" * 60)
            for i, action in enumerate(actions, 1):
                target = result.grid[action.row][action.col]
                lines.append(
                    f"{i:2d}. ({action.row},{action.col}) → {target.name.lower():4s} "
                    f"[{action.clicks} click{'s' if action.clicks > 1 else ''}]"
                )
        elif isinstance(result, TimedOut):
            lines.append("\nTIMED OUT before a solution was found")
        else:
            lines.append(f"\nNO SOLUTION: {result.reason}")
            for problem in result.details:
                lines.append(f"  - {problem}")

        lines.append("\n" + "=" * 60)
        lines.append("SOLVING STATISTICS:")
        lines.append("-" * 60)
        for key, value in result.stats.items():
            if isinstance(value, float):
                lines.append(f"{key:15s} {value:.3f}")
            else:
                lines.append(f"{key:15s} {value}")
        lines.append("=" * 60)

        return "\n".join(lines)

    @staticmethod
    def save_solution(puzzle: TangoPuzzle, result: SolveResult, output_path: str):
        """
        Save solution to JSON file
        """
        solution = SolutionFormatter.format_solution_json(puzzle, result)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(solution, f, indent=2, ensure_ascii=False)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(puzzle: TangoPuzzle, result: SolveResult, output_path: str):
        """
        Save human-readable solution to text file
        """
        text = SolutionFormatter.format_solution_human_readable(puzzle, result)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)

        print(f"✓ Human-readable solution saved to: {output_path}")
