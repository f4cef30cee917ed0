"""
Cells Module
Slot addresses and the values a matrix slot can hold.

A slot holds either nothing (None), a Leaf wrapping one node, or a Group
wrapping a nested ChildrenMatrix.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from matrix_layout.nodes import Bounds, Node


@dataclass(frozen=True)
class Slot:
    i: int
    j: int


@dataclass(frozen=True)
class Leaf:
    node: Node

    @property
    def guid(self) -> str:
        return self.node.guid

    @property
    def bounds_in_parent(self) -> Bounds:
        return self.node.bounds_in_parent


@dataclass(frozen=True, eq=False)
class Group:
    """A composite sub-layout occupying a single slot."""
    matrix: Any  # ChildrenMatrix

    @property
    def bounds_in_parent(self) -> Bounds:
        return self.matrix.bounds_in_parent


Cell = Optional[Union[Leaf, Group]]


def same_entry(a: Cell, b: Cell) -> bool:
    """True when both cells denote the same physical item."""
    if a is None or b is None:
        return False
    if isinstance(a, Leaf) and isinstance(b, Leaf):
        return a.guid == b.guid
    return a is b
