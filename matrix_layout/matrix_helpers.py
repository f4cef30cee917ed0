"""
Matrix Helpers Module
Pure utilities over the rows and columns of a square matrix.
"""

from typing import Iterator, List, Tuple

from matrix_layout.cells import Cell, Slot


def empty_matrix(n: int) -> List[List[Cell]]:
    return [[None] * n for _ in range(n)]


def get_tuple_children_count(row: List[Cell]) -> int:
    """Number of occupied slots in a row."""
    return sum(1 for cell in row if cell is not None)


def get_column_nodes(matrix: List[List[Cell]], j: int) -> List[Cell]:
    """Occupied cells of column j in row order."""
    return [row[j] for row in matrix if row[j] is not None]


def get_column_entries(matrix: List[List[Cell]], j: int) -> List[Tuple[int, Cell]]:
    """(row index, cell) pairs of the occupied cells of column j."""
    return [(i, row[j]) for i, row in enumerate(matrix) if row[j] is not None]


def iter_occupied(matrix: List[List[Cell]]) -> Iterator[Tuple[Slot, Cell]]:
    for i, row in enumerate(matrix):
        for j, cell in enumerate(row):
            if cell is not None:
                yield Slot(i, j), cell
