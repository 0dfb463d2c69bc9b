"""
Core data structures for Tango puzzle representation
"""
import json
from enum import Enum, IntEnum
from typing import List, Dict, Tuple, Optional, Sequence, Union
from dataclasses import dataclass


class PuzzleFormatError(ValueError):
    """Raised when a puzzle description cannot describe a valid Tango board"""


class CellState(IntEnum):
    """Fill state of a single cell (values match the page encoding)"""
    EMPTY = 0
    SUN = 1
    MOON = 2

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {CellState.EMPTY: '·', CellState.SUN: '☀', CellState.MOON: '☾'}


class Axis(Enum):
    """Direction from a constraint's anchor cell to its neighbour"""
    HORIZONTAL = 'h'  # (row, col) -> (row, col + 1)
    VERTICAL = 'v'    # (row, col) -> (row + 1, col)


class Relation(Enum):
    """Relation between the two cells of a constraint"""
    EQUAL = '='
    OPPOSITE = 'x'


Grid = List[List[CellState]]
FixedMask = List[List[bool]]
CellCoord = Tuple[int, int]

_CELL_TOKENS = {
    '': CellState.EMPTY, '.': CellState.EMPTY, '-': CellState.EMPTY,
    '_': CellState.EMPTY, ' ': CellState.EMPTY, '0': CellState.EMPTY,
    'S': CellState.SUN, 's': CellState.SUN, '1': CellState.SUN, '☀': CellState.SUN,
    'M': CellState.MOON, 'm': CellState.MOON, '2': CellState.MOON, '☾': CellState.MOON,
}

_AXIS_TOKENS = {
    'h': Axis.HORIZONTAL, 'horizontal': Axis.HORIZONTAL,
    'v': Axis.VERTICAL, 'vertical': Axis.VERTICAL,
}

_RELATION_TOKENS = {
    '=': Relation.EQUAL, 'equal': Relation.EQUAL, 'equals': Relation.EQUAL,
    'x': Relation.OPPOSITE, '×': Relation.OPPOSITE, '!=': Relation.OPPOSITE,
    'opposite': Relation.OPPOSITE,
}


@dataclass(frozen=True)
class Constraint:
    """An '=' or 'x' marker between a cell and its right/lower neighbour"""
    axis: Axis
    row: int
    col: int
    relation: Relation

    @property
    def cell1(self) -> CellCoord:
        return (self.row, self.col)

    @property
    def cell2(self) -> CellCoord:
        if self.axis is Axis.HORIZONTAL:
            return (self.row, self.col + 1)
        return (self.row + 1, self.col)

    def involves(self, row: int, col: int) -> bool:
        """Check if (row, col) is one of the two constrained cells"""
        return (row, col) == self.cell1 or (row, col) == self.cell2

    def holds(self, value1: CellState, value2: CellState) -> bool:
        """
        Check the relation for two cell values.
        Pairs with an EMPTY side are not decided yet and always hold.
        """
        if value1 == CellState.EMPTY or value2 == CellState.EMPTY:
            return True
        if self.relation is Relation.EQUAL:
            return value1 == value2
        return value1 != value2

    def to_dict(self) -> Dict:
        return {
            'type': self.axis.value,
            'row': self.row,
            'col': self.col,
            'constraint': self.relation.value,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Constraint':
        """Parse a constraint entry as written by the board reader"""
        try:
            axis_token = str(data['type']).strip().lower()
            relation_token = str(data['constraint']).strip().lower()
            row, col = int(data['row']), int(data['col'])
        except (KeyError, TypeError, ValueError) as e:
            raise PuzzleFormatError(f"Malformed constraint entry {data!r}: {e}") from e

        if axis_token not in _AXIS_TOKENS:
            raise PuzzleFormatError(f"Unknown constraint type {data['type']!r}")
        if relation_token not in _RELATION_TOKENS:
            raise PuzzleFormatError(f"Unknown constraint relation {data['constraint']!r}")
        return cls(_AXIS_TOKENS[axis_token], row, col, _RELATION_TOKENS[relation_token])

    def __repr__(self):
        return f"Constraint({self.cell1}{self.relation.value}{self.cell2})"


def parse_cell(token: Union[str, int, CellState]) -> CellState:
    """Convert a cell token ('S', 'M', '.', 1, 2, ...) to a CellState"""
    if isinstance(token, CellState):
        return token
    if isinstance(token, bool):
        raise PuzzleFormatError(f"Unknown cell token {token!r}")
    if isinstance(token, int):
        try:
            return CellState(token)
        except ValueError:
            raise PuzzleFormatError(f"Unknown cell value {token!r}") from None
    if isinstance(token, str) and token in _CELL_TOKENS:
        return _CELL_TOKENS[token]
    raise PuzzleFormatError(f"Unknown cell token {token!r}")


def parse_grid(rows: Sequence[Union[str, Sequence]]) -> Grid:
    """Parse grid rows given as strings ('S..M') or lists of cell tokens"""
    return [[parse_cell(token) for token in row] for row in rows]


def copy_grid(grid: Sequence[Sequence[CellState]]) -> Grid:
    return [list(row) for row in grid]


def _check_rows(value, name: str, allow_text_rows: bool = False) -> None:
    """Require a list of rows; text rows ('S..M') only where cells are tokens"""
    if not isinstance(value, (list, tuple)):
        raise PuzzleFormatError(f"{name} must be a list of rows, got {type(value).__name__}")
    row_types = (list, tuple, str) if allow_text_rows else (list, tuple)
    for i, row in enumerate(value):
        if not isinstance(row, row_types):
            raise PuzzleFormatError(f"{name} row {i} must be a list, got {type(row).__name__}")


class TangoPuzzle:
    """
    A Tango board: size x size grid, fixed-cell mask and constraint list.

    The grid holds the observed board state. Cells that are not fixed may
    hold values (e.g. a player's partial progress); the solver treats them
    as free.
    """

    def __init__(self, grid: Sequence[Sequence], constraints: Optional[Sequence[Constraint]] = None,
                 size: Optional[int] = None, fixed: Optional[Sequence[Sequence[bool]]] = None):
        _check_rows(grid, "Grid", allow_text_rows=True)
        self.grid: Grid = parse_grid(grid)
        self.size: int = size if size is not None else len(self.grid)
        self.constraints: List[Constraint] = list(constraints or [])

        if fixed is None:
            self.fixed: FixedMask = [[cell != CellState.EMPTY for cell in row] for row in self.grid]
        else:
            _check_rows(fixed, "Fixed mask")
            self.fixed = [[bool(flag) for flag in row] for row in fixed]

        self.validate()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Dict) -> 'TangoPuzzle':
        """Build a puzzle from the board reader's JSON structure"""
        if not isinstance(data, dict):
            raise PuzzleFormatError(f"Puzzle data must be a JSON object, got {type(data).__name__}")
        if 'grid' not in data:
            raise PuzzleFormatError("Puzzle data has no 'grid'")

        entries = data.get('constraints') or []
        if not isinstance(entries, (list, tuple)):
            raise PuzzleFormatError(f"'constraints' must be a list, got {type(entries).__name__}")
        constraints = [Constraint.from_dict(c) for c in entries]
        return cls(
            grid=data['grid'],
            constraints=constraints,
            size=data.get('size'),
            fixed=data.get('fixed'),
        )

    @classmethod
    def from_json(cls, json_path: str) -> 'TangoPuzzle':
        """Load puzzle from JSON file"""
        with open(json_path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise PuzzleFormatError(f"{json_path}: invalid JSON ({e})") from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict:
        return {
            'size': self.size,
            'grid': [''.join('.SM'[cell] for cell in row) for row in self.grid],
            'fixed': [list(row) for row in self.fixed],
            'constraints': [c.to_dict() for c in self.constraints],
        }

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------
    def validate(self) -> None:
        """Reject boards the solver cannot safely index"""
        size = self.size
        if not isinstance(size, int) or size <= 0 or size % 2 != 0:
            raise PuzzleFormatError(f"Grid size must be a positive even integer, got {size!r}")

        if len(self.grid) != size or any(len(row) != size for row in self.grid):
            shape = [len(row) for row in self.grid]
            raise PuzzleFormatError(f"Grid must be {size}x{size}, got row lengths {shape}")

        if len(self.fixed) != size or any(len(row) != size for row in self.fixed):
            raise PuzzleFormatError(f"Fixed mask must be {size}x{size}")

        for r in range(size):
            for c in range(size):
                if self.fixed[r][c] and self.grid[r][c] == CellState.EMPTY:
                    raise PuzzleFormatError(f"Fixed cell ({r},{c}) has no value")

        for constraint in self.constraints:
            r1, c1 = constraint.cell1
            r2, c2 = constraint.cell2
            if not (0 <= r1 < size and 0 <= c1 < size and 0 <= r2 < size and 0 <= c2 < size):
                raise PuzzleFormatError(f"{constraint} references a cell outside the {size}x{size} grid")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def given_grid(self) -> Grid:
        """Grid with only the fixed cells filled in"""
        return [
            [cell if self.fixed[r][c] else CellState.EMPTY for c, cell in enumerate(row)]
            for r, row in enumerate(self.grid)
        ]

    def constraints_at(self, row: int, col: int) -> List[Constraint]:
        """Constraints touching (row, col)"""
        return [c for c in self.constraints if c.involves(row, col)]

    def num_fixed(self) -> int:
        return sum(flag for row in self.fixed for flag in row)

    def is_complete(self) -> bool:
        """Check if every cell is filled"""
        return all(cell != CellState.EMPTY for row in self.grid for cell in row)

    def __repr__(self):
        return (f"TangoPuzzle(size={self.size}, fixed={self.num_fixed()}, "
                f"constraints={len(self.constraints)})")
