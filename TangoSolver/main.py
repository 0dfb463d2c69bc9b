#!/usr/bin/env python3
"""
Tango Solver - Main Entry Point

Usage:
    python -m TangoSolver.main data/json/puzzle.json
    python -m TangoSolver.main data/json/          # Solves every puzzle in the folder
    python -m TangoSolver.main                     # Uses the configuration below
"""

import sys
import os
import traceback
from pathlib import Path

from .puzzle import TangoPuzzle, PuzzleFormatError
from .solver import BacktrackingSolver, Solved
from .output import SolutionFormatter
from .diagnostics import SolverDiagnostics
from .moves import plan_clicks

# ============================================================================
# CONFIGURATION
# ============================================================================
PUZZLE_PATH = "data/json/sample_6x6.json"   # Puzzle to solve by default
DATA_DIR = "data/json"                      # Folder scanned when SOLVE_ALL is set
OUTPUT_DIR = "data/debug"                   # Base output directory
SOLVE_ALL = False                           # Set True to solve all JSON puzzles

TIMEOUT_SECONDS = 30
# Maximum time to spend solving a single puzzle (None = no limit)

SHOW_MOVES = True
# Print the click plan (cells to advance Empty -> Sun -> Moon) after solving
# ============================================================================


def solve_puzzle(input_path: str, output_dir: str = None, verbose: bool = True,
                 timeout_seconds: float = TIMEOUT_SECONDS, show_moves: bool = SHOW_MOVES,
                 reraise_interrupt: bool = False):
    """
    Solve a single puzzle and save results.

    Args:
        input_path: Path to input JSON file
        output_dir: Directory for output files (default: data/debug/<puzzle_name>/)
        verbose: Print detailed solving progress
        timeout_seconds: Maximum solving time in seconds
        show_moves: Print the click plan for the solution
        reraise_interrupt: Propagate Ctrl+C so a batch run stops too

    Returns:
        (result, puzzle, solver); result is None when the puzzle could not be loaded or solving failed
    """
    puzzle_name = Path(input_path).stem

    if output_dir is None:
        output_dir = Path(OUTPUT_DIR) / puzzle_name

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Loading puzzle: {input_path}")
    print(f"Output directory: {output_dir}")
    print(f"{'='*60}")

    puzzle = None
    solver = None
    try:
        puzzle = TangoPuzzle.from_json(str(input_path))
        solver = BacktrackingSolver(puzzle, verbose=verbose)

        if verbose:
            SolverDiagnostics.analyze_puzzle_structure(puzzle)
            print(f"\nTimeout: {timeout_seconds}s\n")

        result = solver.solve(timeout_seconds=timeout_seconds)

        SolutionFormatter.save_solution(puzzle, result, str(output_dir / "solution.json"))
        SolutionFormatter.save_human_readable(puzzle, result, str(output_dir / "solution.txt"))

        if isinstance(result, Solved):
            print(f"\n{'='*60}")
            print("SUCCESS! Puzzle solved ✓")
            print(f"{'='*60}")
            print(SolutionFormatter.format_grid_visualization(result.grid, puzzle.constraints))

            if show_moves:
                actions = plan_clicks(puzzle.grid, result.grid, puzzle.fixed)
                print(f"\nClick plan ({sum(a.clicks for a in actions)} clicks):")
                for action in actions:
                    print(f"  ({action.row},{action.col}) x{action.clicks}")

            if verbose:
                SolverDiagnostics.print_summary(solver, puzzle, output_dir)
        else:
            print(f"\n{'='*60}")
            print("FAILED: Could not solve puzzle ✗")
            print(f"{'='*60}")
            SolverDiagnostics.analyze_failure(puzzle, result)

        return result, puzzle, solver

    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        if solver is not None:
            solver._print_stats()
        if reraise_interrupt:
            raise
        return None, puzzle, solver

    except PuzzleFormatError as e:
        print(f"\nInvalid puzzle {input_path}: {e}")
        return None, None, None

    except Exception as e:
        print(f"\nError while solving {input_path}: {e}")
        traceback.print_exc()
        return None, puzzle, solver


def solve_all_puzzles(data_dir: str = DATA_DIR, output_dir: str = None,
                      timeout_seconds: float = TIMEOUT_SECONDS):
    """
    Solve all puzzles in data/json/ (or a specified directory)
    """
    data_path = Path(data_dir)
    if not data_path.exists():
        print(f"Error: Directory not found: {data_dir}")
        return []

    json_files = sorted(data_path.glob("*.json"))
    if not json_files:
        print(f"No JSON puzzles found in {data_dir}")
        return []

    print(f"\nFound {len(json_files)} puzzle(s) to solve")
    print(f"  Timeout per puzzle: {timeout_seconds}s\n")

    results = []

    for i, json_file in enumerate(json_files, 1):
        print(f"\n[{i}/{len(json_files)}] Solving {json_file.name}...")

        puzzle_output = Path(output_dir) / json_file.stem if output_dir else None
        try:
            result, puzzle, solver = solve_puzzle(
                str(json_file),
                output_dir=puzzle_output,
                verbose=False,
                timeout_seconds=timeout_seconds,
                show_moves=False,
                reraise_interrupt=True
            )
        except KeyboardInterrupt:
            print(f"\n⚠ Batch stopped before {json_file.name}; {len(json_files) - i} puzzle(s) skipped")
            break

        solved = isinstance(result, Solved)
        results.append({
            'file': json_file.name,
            'solved': solved,
            'size': puzzle.size if puzzle else None,
            'decisions': solver.stats['decisions'] if solver else None,
            'backtracks': solver.stats['backtracks'] if solver else None,
        })

        status = "✓ SOLVED" if solved else "✗ FAILED"
        print(f"  {status}")

    # ---------------------------
    # Print summary
    # ---------------------------
    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    solved_count = sum(1 for r in results if r['solved'])
    total_count = len(results)
    solve_rate = (solved_count / total_count * 100) if total_count > 0 else 0

    for r in results:
        status = "✓" if r['solved'] else "✗"
        if r['solved']:
            print(f"{status} {r['file']:30s} - {r['size']}x{r['size']}, "
                  f"{r['decisions']} decisions, {r['backtracks']} backtracks")
        else:
            print(f"{status} {r['file']:30s} - Failed")

    print(f"\nFinal Solve Rate: {solve_rate:.1f}% ({solved_count}/{total_count})")
    print(f"{'='*60}")

    return results


def main():
    """Main entry point"""
    if len(sys.argv) > 1:
        target = sys.argv[1]

        if not os.path.exists(target):
            print(f"Error: File not found: {target}")
            sys.exit(1)

        if os.path.isdir(target):
            results = solve_all_puzzles(target)
            sys.exit(0 if results and all(r['solved'] for r in results) else 1)

        result, _, _ = solve_puzzle(target, verbose=True)
        sys.exit(0 if isinstance(result, Solved) else 1)

    elif SOLVE_ALL:
        print(f"SOLVE_ALL mode enabled - solving all puzzles in {DATA_DIR}/")
        solve_all_puzzles()

    else:
        print(f"Using configured PUZZLE_PATH: {PUZZLE_PATH}")
        if not os.path.exists(PUZZLE_PATH):
            print(f"Error: File not found: {PUZZLE_PATH}")
            sys.exit(1)

        solve_puzzle(PUZZLE_PATH, verbose=True)


if __name__ == "__main__":
    main()
