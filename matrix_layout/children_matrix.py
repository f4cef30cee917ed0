"""
Children Matrix Module
Lays the children of a container node inside a square matrix whose rows and
columns translate directly into flexbox rows and columns.

The placement relies on three assumptions:
- nodes with close x values are more likely to share a column
- nodes with close y values are more likely to share a row
- nodes near the top left corner are laid first

Terms:
- slot: an address (i, j) inside the matrix, i being the row index
- child: a Leaf wrapping a node, or a Group wrapping a nested ChildrenMatrix
- matrix: for n children, a list of n rows of n slots each
"""

from collections.abc import Sequence
from typing import List, Optional, Tuple, Union, Any
import logging
import math

from matrix_layout.cells import Cell, Group, Leaf, Slot, same_entry
from matrix_layout.errors import InvalidInputError, MatrixConsistencyError
from matrix_layout.matrix_helpers import (
    empty_matrix,
    get_column_entries,
    get_tuple_children_count,
    iter_occupied,
)
from matrix_layout.nodes import Bounds

logger = logging.getLogger(__name__)


def to_cell(item: Any) -> Union[Leaf, Group]:
    """Wrap a node-like item or a composite into a matrix cell."""
    if isinstance(item, (Leaf, Group)):
        return item
    if isinstance(item, ChildrenMatrix):
        return Group(item)
    if hasattr(item, 'guid') and isinstance(getattr(item, 'bounds_in_parent', None), Bounds):
        return Leaf(item)
    raise InvalidInputError(
        f"Child {item!r} is neither a node with bounds_in_parent nor a ChildrenMatrix"
    )


class ChildrenMatrix:
    def __init__(self, children: Sequence):
        if (
            isinstance(children, (str, bytes))
            or not isinstance(children, Sequence)
            or len(children) == 0
        ):
            raise InvalidInputError(
                "invalid children passed to ChildrenMatrix. "
                "Should be a sequence of at least one child"
            )

        self.children: List[Union[Leaf, Group]] = [to_cell(child) for child in children]
        self.n = len(self.children)
        self.matrix: List[List[Cell]] = empty_matrix(self.n)
        self.duplication_passes = 0
        self.merge_passes = 0

    @classmethod
    def from_placements(cls, placements: List[Tuple[Slot, Union[Leaf, Group]]]) -> 'ChildrenMatrix':
        """Build an instance whose cells are already laid at the given slots."""
        instance = cls([cell for _, cell in placements])

        size = max(
            instance.n,
            max(slot.i for slot, _ in placements) + 1,
            max(slot.j for slot, _ in placements) + 1,
        )
        if size > instance.n:
            logger.debug(f"Growing matrix from {instance.n} to {size} to fit placements")
            instance.n = size
            instance.matrix = empty_matrix(size)

        for slot, cell in placements:
            instance.set_child(slot, cell)
        return instance

    @property
    def bounds_in_parent(self) -> Bounds:
        cells = [cell for _, cell in iter_occupied(self.matrix)] or self.children
        return Bounds.union(cell.bounds_in_parent for cell in cells)

    def set_child(self, slot: Slot, child: Union[Leaf, Group]) -> None:
        self.matrix[slot.i][slot.j] = child

    def get_slot_row_neighbors(self, slot: Slot) -> List[Union[Leaf, Group]]:
        """Occupied slots in the same row as the given slot."""
        return [
            cell for index, cell in enumerate(self.matrix[slot.i])
            if index != slot.j and cell is not None
        ]

    def get_slot_column_neighbors(self, slot: Slot) -> List[Union[Leaf, Group]]:
        """Occupied slots in the same column as the given slot."""
        return [
            row[slot.j] for index, row in enumerate(self.matrix)
            if index != slot.i and row[slot.j] is not None
        ]

    def sort_children(self) -> None:
        """Sort children so that those nearest the top left corner come first."""
        self.children = sorted(
            self.children,
            key=lambda child: math.hypot(child.bounds_in_parent.x, child.bounds_in_parent.y),
        )

    def calculate_slot_child_metric(self, slot: Slot, new_child: Any) -> float:
        """
        Likelihood that new_child belongs in slot; lower is better.

        Sums the vertical distance to every row neighbor and the horizontal
        distance to every column neighbor of the slot.
        """
        bounds = new_child.bounds_in_parent
        metric = 0.0

        for row_neighbor in self.get_slot_row_neighbors(slot):
            metric += abs(bounds.y - row_neighbor.bounds_in_parent.y)

        for column_neighbor in self.get_slot_column_neighbors(slot):
            metric += abs(bounds.x - column_neighbor.bounds_in_parent.x)

        return metric

    def get_possible_slots(self) -> List[Slot]:
        """Empty slots right of or below an occupied slot, in discovery order."""
        contains_at_least_one_child = False
        possible_slots = []

        for slot, _ in iter_occupied(self.matrix):
            contains_at_least_one_child = True

            if slot.i + 1 < self.n and self.matrix[slot.i + 1][slot.j] is None:
                possible_slots.append(Slot(slot.i + 1, slot.j))

            if slot.j + 1 < self.n and self.matrix[slot.i][slot.j + 1] is None:
                possible_slots.append(Slot(slot.i, slot.j + 1))

        if not contains_at_least_one_child:
            return [Slot(0, 0)]

        unique_slots = []
        for slot in possible_slots:
            if slot not in unique_slots:
                unique_slots.append(slot)
        return unique_slots

    def get_most_suitable_slot(self, new_child: Any) -> Slot:
        """The possible slot with the least metric; ties go to the first one found."""
        possible_slots = self.get_possible_slots()
        if not possible_slots:
            raise MatrixConsistencyError(f"No free slot left in a {self.n}x{self.n} matrix")

        least_metric_slot = possible_slots[0]
        least_metric = self.calculate_slot_child_metric(least_metric_slot, new_child)

        for slot in possible_slots[1:]:
            metric = self.calculate_slot_child_metric(slot, new_child)
            if metric < least_metric:
                least_metric_slot, least_metric = slot, metric

        logger.debug(f"Most suitable slot {least_metric_slot} with metric {least_metric}")
        return least_metric_slot

    def place_children(self) -> None:
        """Greedily lay every child, top left first, in its most suitable slot."""
        self.sort_children()

        for child in self.children:
            suitable_slot = self.get_most_suitable_slot(child)
            self.set_child(suitable_slot, child)

    def get_nodes_to_be_duplicated(self) -> List[Tuple[Slot, Union[Leaf, Group]]]:
        """
        Children that span into the next row without occupying it.

        A child qualifies when the next row has children, the slot right below
        it is empty, and a child of the next row starts within its height.
        """
        to_be_duplicated = []

        for slot, child in iter_occupied(self.matrix):
            below = slot.i + 1
            if below >= self.n:
                continue

            next_row = self.matrix[below]
            if not get_tuple_children_count(next_row) or next_row[slot.j] is not None:
                continue

            bounds = child.bounds_in_parent
            if any(
                bounds.y <= neighbor.bounds_in_parent.y <= bounds.bottom
                for neighbor in self.get_slot_row_neighbors(Slot(below, slot.j))
            ):
                to_be_duplicated.append((slot, child))

        return to_be_duplicated

    def duplicate_spanning_children(self) -> None:
        """Copy spanning children into the rows below until nothing changes."""
        # every pass fills at least one empty slot
        max_passes = self.n * self.n
        to_be_duplicated = self.get_nodes_to_be_duplicated()

        while to_be_duplicated:
            self.duplication_passes += 1
            if self.duplication_passes > max_passes:
                raise MatrixConsistencyError(
                    f"Duplication did not settle after {max_passes} passes"
                )

            logger.debug(f"Duplication pass {self.duplication_passes}: {len(to_be_duplicated)} children")
            for slot, child in to_be_duplicated:
                self.set_child(Slot(slot.i + 1, slot.j), child)

            to_be_duplicated = self.get_nodes_to_be_duplicated()

    def find_merge_slot(self) -> Optional[Slot]:
        """
        First slot, column by column, whose child also occupies the next row.
        Returns None when no such duplication is left.
        """
        for j in range(self.n):
            entries = get_column_entries(self.matrix, j)
            for (i, child), (next_i, next_child) in zip(entries, entries[1:]):
                if next_i == i + 1 and same_entry(child, next_child):
                    return Slot(i, j)
        return None

    def get_to_be_merged_rows_count(self, target_slot: Slot) -> int:
        child = self.matrix[target_slot.i][target_slot.j]
        count = 1
        while (
            target_slot.i + count < self.n
            and same_entry(child, self.matrix[target_slot.i + count][target_slot.j])
        ):
            count += 1
        return count

    def _widen_merge_block(self, top: int, bottom: int) -> Tuple[int, int]:
        """Extend [top, bottom] until no column run crosses its edges."""
        changed = True
        while changed:
            changed = False
            for j in range(self.n):
                if top > 0 and same_entry(self.matrix[top][j], self.matrix[top - 1][j]):
                    top -= 1
                    changed = True
                if bottom < self.n - 1 and same_entry(self.matrix[bottom][j], self.matrix[bottom + 1][j]):
                    bottom += 1
                    changed = True
        return top, bottom

    def _nested(self, placements: List[Tuple[Slot, Union[Leaf, Group]]]) -> Group:
        composite = ChildrenMatrix.from_placements(placements)
        composite.resolve_merges()
        return Group(composite)

    def rearrange_matrix(self, target_slot: Slot, to_be_merged_rows_count: int) -> None:
        """
        Collapse the rows in which one child spans next to other children
        into a single row holding [left group], the spanning child and
        [right group], then adopt the resulting smaller matrix.
        """
        top, bottom = self._widen_merge_block(
            target_slot.i, target_slot.i + to_be_merged_rows_count - 1
        )
        shift = bottom - top
        target = self.matrix[target_slot.i][target_slot.j]
        logger.debug(f"Merging rows {top}..{bottom} around {target_slot}")

        left_nodes, center_nodes, right_nodes = [], [], []
        for i in range(top, bottom + 1):
            for j, child in enumerate(self.matrix[i]):
                if child is None:
                    continue
                if j < target_slot.j:
                    left_nodes.append((Slot(i - top, j), child))
                elif j > target_slot.j:
                    right_nodes.append((Slot(i - top, j - target_slot.j - 1), child))
                else:
                    center_nodes.append((Slot(i - top, 0), child))

        # rows not affected by the merge; the ones below move up
        placements = []
        for i, row in enumerate(self.matrix):
            if top <= i <= bottom:
                continue
            new_i = i - shift if i > bottom else i
            for j, child in enumerate(row):
                if child is not None:
                    placements.append((Slot(new_i, j), child))

        column = 0
        if left_nodes:
            placements.append((Slot(top, column), self._nested(left_nodes)))
            column += 1

        if all(same_entry(target, child) for _, child in center_nodes):
            placements.append((Slot(top, column), target))
        else:
            placements.append((Slot(top, column), self._nested(center_nodes)))
        column += 1

        if right_nodes:
            placements.append((Slot(top, column), self._nested(right_nodes)))

        rearranged = ChildrenMatrix.from_placements(placements)

        self.n = rearranged.n
        self.children = rearranged.children
        self.matrix = rearranged.matrix

    def resolve_merges(self) -> None:
        """Rearrange the matrix until no child occupies two consecutive rows."""
        # every merge removes at least one row
        max_passes = self.n
        target_slot = self.find_merge_slot()

        while target_slot is not None:
            self.merge_passes += 1
            if self.merge_passes > max_passes:
                raise MatrixConsistencyError(f"Merging did not settle after {max_passes} passes")

            rows_count = self.get_to_be_merged_rows_count(target_slot)
            self.rearrange_matrix(target_slot, rows_count)
            target_slot = self.find_merge_slot()

    def lay_children_inside_matrix(self) -> List[List[Cell]]:
        """Lay the children inside the matrix and return it."""
        try:
            logger.info(f"Laying {self.n} children inside the matrix")
            self.place_children()
            self.duplicate_spanning_children()
            self.resolve_merges()

            logger.info(
                f"Matrix laid out: size {self.n}, "
                f"{self.duplication_passes} duplication passes, {self.merge_passes} merges"
            )
            return self.matrix

        except Exception as e:
            logger.error(f"Error laying children inside the matrix: {str(e)}", exc_info=True)
            raise
