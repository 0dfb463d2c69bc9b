"""
Tango Puzzle Solver Package

Backtracking solver for Tango (sun/moon) puzzles.
"""

from .puzzle import TangoPuzzle, CellState, Axis, Relation, Constraint, PuzzleFormatError
from .constraints import ConstraintChecker
from .solver import BacktrackingSolver, Solved, NoSolution, TimedOut, solve
from .moves import ClickAction, clicks_needed, plan_clicks, click_sequence
from .output import SolutionFormatter

__version__ = "1.0.0"
__all__ = [
    'TangoPuzzle',
    'CellState',
    'Axis',
    'Relation',
    'Constraint',
    'PuzzleFormatError',
    'ConstraintChecker',
    'BacktrackingSolver',
    'Solved',
    'NoSolution',
    'TimedOut',
    'solve',
    'ClickAction',
    'clicks_needed',
    'plan_clicks',
    'click_sequence',
    'SolutionFormatter'
]
