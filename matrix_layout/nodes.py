"""
Nodes Module
Leaf elements and their container-relative geometry.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Dict, Iterable, List, Any
import logging

from matrix_layout.errors import InvalidInputError

logger = logging.getLogger(__name__)

BOUNDS_KEYS = ('x', 'y', 'width', 'height')


@dataclass(frozen=True)
class Bounds:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def union(cls, rects: Iterable['Bounds']) -> 'Bounds':
        """Smallest rectangle containing every rect."""
        rects = list(rects)
        if not rects:
            raise InvalidInputError("Cannot compute the union of no rectangles")
        min_x = min(r.x for r in rects)
        min_y = min(r.y for r in rects)
        max_x = max(r.right for r in rects)
        max_y = max(r.bottom for r in rects)
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class Node:
    """A positioned leaf element inside a container."""
    guid: str
    bounds_in_parent: Bounds


def bounds_from_dict(data: Dict[str, Any]) -> Bounds:
    """Build Bounds from a {x, y, width, height} mapping."""
    if not isinstance(data, dict):
        raise InvalidInputError(f"Bounds must be an object, got {type(data).__name__}")

    values = []
    for key in BOUNDS_KEYS:
        value = data.get(key)
        # bool is a Real subclass
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidInputError(f"Bounds field '{key}' must be a number, got {value!r}")
        values.append(float(value))

    if values[2] < 0 or values[3] < 0:
        raise InvalidInputError(f"Bounds width/height must be non-negative, got {data}")

    return Bounds(*values)


def node_from_dict(data: Dict[str, Any]) -> Node:
    """
    Build a Node from the shape handed over by the document reader.

    Accepts either camelCase ("boundsInParent") or snake_case
    ("bounds_in_parent") geometry, and "guid" or "id" for identity.
    """
    if not isinstance(data, dict):
        raise InvalidInputError(f"Node must be an object, got {type(data).__name__}")

    guid = data.get('guid', data.get('id'))
    if guid is None or guid == '':
        raise InvalidInputError(f"Node is missing its guid: {data}")

    raw_bounds = data.get('boundsInParent', data.get('bounds_in_parent'))
    if raw_bounds is None:
        raise InvalidInputError(f"Node {guid} is missing boundsInParent")

    return Node(guid=str(guid), bounds_in_parent=bounds_from_dict(raw_bounds))


def nodes_from_dicts(items: List[Dict[str, Any]]) -> List[Node]:
    if not isinstance(items, list):
        raise InvalidInputError(f"Expected a list of nodes, got {type(items).__name__}")

    nodes = [node_from_dict(item) for item in items]
    logger.debug(f"Parsed {len(nodes)} nodes")
    return nodes
