"""
Flex Tree Module
Converts a laid-out ChildrenMatrix into the nested row/column tree consumed
by flexbox code generators.
"""

from typing import Any, Dict, Iterator, List, Sequence
import logging

from matrix_layout.cells import Group, Leaf
from matrix_layout.children_matrix import ChildrenMatrix
from matrix_layout.nodes import Bounds

logger = logging.getLogger(__name__)


def layout_children(children: Sequence) -> ChildrenMatrix:
    """Build a ChildrenMatrix for one container and run the whole pipeline."""
    children_matrix = ChildrenMatrix(children)
    children_matrix.lay_children_inside_matrix()
    return children_matrix


def iter_leaf_guids(children_matrix: ChildrenMatrix) -> Iterator[str]:
    """Every leaf guid of the matrix, descending into nested groups."""
    for row in children_matrix.matrix:
        for cell in row:
            if isinstance(cell, Leaf):
                yield cell.guid
            elif isinstance(cell, Group):
                yield from iter_leaf_guids(cell.matrix)


def _cell_to_tree(cell) -> Dict[str, Any]:
    if isinstance(cell, Group):
        return to_flex_tree(cell.matrix)
    return {
        'type': 'node',
        'guid': cell.guid,
        'bounds': cell.bounds_in_parent.to_dict(),
    }


def to_flex_tree(children_matrix: ChildrenMatrix) -> Dict[str, Any]:
    """
    Column of rows for the given matrix.

    Empty rows are skipped and a row holding a single cell is replaced by
    that cell, so the tree only carries containers that group something.
    """
    rows: List[Dict[str, Any]] = []

    for row in children_matrix.matrix:
        cells = [cell for cell in row if cell is not None]
        if not cells:
            continue
        if len(cells) == 1:
            rows.append(_cell_to_tree(cells[0]))
            continue
        rows.append({
            'direction': 'row',
            'bounds': Bounds.union(cell.bounds_in_parent for cell in cells).to_dict(),
            'children': [_cell_to_tree(cell) for cell in cells],
        })

    logger.debug(f"Built flex column with {len(rows)} rows")
    return {
        'direction': 'column',
        'bounds': children_matrix.bounds_in_parent.to_dict(),
        'children': rows,
    }
