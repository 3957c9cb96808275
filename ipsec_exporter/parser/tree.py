"""Tagged node model for the nested field trees returned by VICI."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, List, Mapping, Optional, Tuple

from ..util import DecodeError


# A VICI message is a nested mapping. Values are one of:
#   b"ESTABLISHED"                     -> scalar
#   [b"10.0.0.0/24", b"10.1.0.0/24"]   -> list of strings
#   {"child-sas": {...}}               -> nested section
# The python binding hands them over as bytes, lists and OrderedDicts.


class NodeKind(Enum):
    SCALAR = auto()
    LIST = auto()
    TREE = auto()


@dataclass(frozen=True)
class Node:
    kind: NodeKind
    value: Any      # bytes/str/int for SCALAR, Tuple[str, ...] for LIST, Tuple[(key, Node), ...] for TREE

    @property
    def entries(self) -> Tuple[Tuple[str, "Node"], ...]:
        if self.kind != NodeKind.TREE:
            raise DecodeError(f"expected section, got {self.kind.name.lower()}")
        return self.value

    def get(self, key: str) -> Optional["Node"]:
        """Look up a direct child of a TREE node; None when absent."""
        for k, node in self.entries:
            if k == key:
                return node
        return None

    def keys(self) -> List[str]:
        return [k for k, _ in self.entries]


def to_text(value: Any) -> str:
    """Render a raw scalar as text."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def build_node(raw: Any) -> Node:
    """Build a tagged node tree from a raw VICI value.

    Raises DecodeError for values the protocol cannot produce.
    """
    if isinstance(raw, Mapping):
        entries = []
        for key, value in raw.items():
            entries.append((to_text(key), build_node(value)))
        return Node(NodeKind.TREE, tuple(entries))

    if isinstance(raw, (list, tuple)):
        items = []
        for item in raw:
            if not isinstance(item, (bytes, str, int)) or isinstance(item, bool):
                raise DecodeError(f"unsupported list item type {type(item).__name__}")
            items.append(to_text(item))
        return Node(NodeKind.LIST, tuple(items))

    if isinstance(raw, (bytes, str, int)) and not isinstance(raw, bool):
        return Node(NodeKind.SCALAR, raw)

    raise DecodeError(f"unsupported value type {type(raw).__name__}")


def get_text(node: Node, key: str, default: str = "") -> str:
    """Get a scalar child of a TREE node as text, or default when absent or not a scalar."""
    child = node.get(key)
    if child is None or child.kind != NodeKind.SCALAR:
        return default
    return to_text(child.value)
