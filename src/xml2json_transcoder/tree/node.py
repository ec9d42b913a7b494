"""In-memory node tree produced by the decoder.

A ``Node`` stands for an element, an attribute or the document frame. Its
children are grouped by name: every key maps to the list of same-named
children in document order, so repeated elements never overwrite each other.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple


@dataclass(eq=False)
class Node:
    """One element, attribute or document frame of a decoded XML document."""

    label: str = ""
    text: str = ""
    children: Dict[str, List["Node"]] = field(default_factory=dict)

    @property
    def is_complex(self) -> bool:
        """Check if the node has children and therefore encodes as an object."""
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        """Check if the node holds text and no children."""
        return not self.children and bool(self.text)

    def add_child(self, name: str, child: "Node") -> None:
        """Append ``child`` to the group of children called ``name``."""
        if not isinstance(child, Node):
            raise TypeError("Child must be a Node instance")
        self.children.setdefault(name, []).append(child)

    def get(self, name: str) -> List["Node"]:
        """Children called ``name``, empty if there are none."""
        return self.children.get(name, [])

    def walk(self) -> Iterator[Tuple[str, "Node"]]:
        """Iterate depth first over ``(key, node)`` pairs below this node."""
        stack = [iter(self._pairs())]
        while stack:
            pair = next(stack[-1], None)
            if pair is None:
                stack.pop()
                continue
            yield pair
            stack.append(iter(pair[1]._pairs()))

    def _pairs(self) -> Iterator[Tuple[str, "Node"]]:
        for name, group in self.children.items():
            for child in group:
                yield name, child

    def count(self) -> int:
        """Number of nodes below this node."""
        return sum(1 for _ in self.walk())

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result: Dict[str, Any] = {"label": self.label}
        if self.text:
            result["text"] = self.text
        if self.children:
            result["children"] = {
                name: [child.to_dict() for child in group]
                for name, group in self.children.items()
            }
        return result
