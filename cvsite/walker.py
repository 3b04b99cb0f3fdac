"""
Structure-preserving rewrite of CV document trees.

• A document is any nesting of mappings, lists/tuples and scalar leaves.
• `rewrite` owns the recursion; callers plug in what happens at object nodes.
• The input tree is never mutated – every object and sequence is copied.
"""
from __future__ import annotations
import enum
from collections.abc import Mapping
from typing import Any, Callable, Dict, Tuple, Union

PathKey = Union[str, int]
Path = Tuple[PathKey, ...]

Descend = Callable[[Any, PathKey], Any]
ObjectVisitor = Callable[[Dict[str, Any], Path, Descend], Dict[str, Any]]


class NodeKind(enum.Enum):
    OBJECT = "object"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


def node_kind(value: Any) -> NodeKind:
    if isinstance(value, Mapping):
        return NodeKind.OBJECT
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def rewrite(value: Any, visit_object: ObjectVisitor, path: Path = ()) -> Any:
    """
    Rebuild `value`, letting `visit_object` decide what each object becomes.

    The visitor receives a shallow copy of the object, its path from the
    root and a `descend(child, key)` callback that continues the rewrite
    below that key. Sequences are mapped element-wise into new lists,
    scalars are returned as-is.
    """
    kind = node_kind(value)
    if kind is NodeKind.SEQUENCE:
        return [rewrite(item, visit_object, path + (i,)) for i, item in enumerate(value)]
    if kind is NodeKind.OBJECT:
        def descend(child: Any, key: PathKey) -> Any:
            return rewrite(child, visit_object, path + (key,))
        return visit_object(dict(value), path, descend)
    return value


def format_path(path: Path) -> str:
    """('work', 0, 'image') → 'work[0].image'"""
    out = ""
    for key in path:
        if isinstance(key, int):
            out += f"[{key}]"
        else:
            out += f".{key}" if out else str(key)
    return out
