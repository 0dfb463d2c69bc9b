"""
Turn a solved grid into the clicks needed to enter it on the board.

Each click advances a cell one step around Empty -> Sun -> Moon -> Empty.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .puzzle import CellState, CellCoord

CYCLE_LENGTH = len(CellState)


@dataclass(frozen=True)
class ClickAction:
    row: int
    col: int
    clicks: int
    element: Any = None  # board reader's handle for the cell, if any


def clicks_needed(current: CellState, target: CellState) -> int:
    """Number of clicks (0, 1 or 2) to cycle a cell from `current` to `target`."""
    return (int(target) - int(current)) % CYCLE_LENGTH


def plan_clicks(observed: Sequence[Sequence[CellState]], solution: Sequence[Sequence[CellState]],
                fixed: Sequence[Sequence[bool]],
                cell_map: Optional[Dict[CellCoord, Any]] = None) -> List[ClickAction]:
    """
    Row-major click plan for every non-fixed cell that differs from the solution.

    When `cell_map` is given, cells missing from it are skipped (the board
    reader could not locate them) and each action carries the mapped element.
    """
    actions: List[ClickAction] = []
    for row, solution_row in enumerate(solution):
        for col, target in enumerate(solution_row):
            if fixed[row][col]:
                continue
            if cell_map is not None and (row, col) not in cell_map:
                continue
            clicks = clicks_needed(observed[row][col], target)
            if clicks == 0:
                continue
            element = cell_map[(row, col)] if cell_map is not None else None
            actions.append(ClickAction(row, col, clicks, element))
    return actions


def click_sequence(actions: Sequence[ClickAction]) -> List[Any]:
    """Flatten a plan into one entry per click (the element, or (row, col) without a cell map)."""
    sequence = []
    for action in actions:
        target = action.element if action.element is not None else (action.row, action.col)
        sequence.extend([target] * action.clicks)
    return sequence
