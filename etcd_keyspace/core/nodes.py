"""Node types returned by the etcd keys API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Node:
    """Common metadata shared by leaf keys and directories."""

    key: str
    ttl: Optional[int] = None
    expiration: Optional[str] = None
    created_index: Optional[int] = None
    modified_index: Optional[int] = None

    @property
    def dir(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Render the node with the field names etcd uses on the wire."""
        data: Dict[str, Any] = {"key": self.key}
        if self.dir:
            data["dir"] = True
        optional = {
            "ttl": self.ttl,
            "expiration": self.expiration,
            "createdIndex": self.created_index,
            "modifiedIndex": self.modified_index,
        }
        data.update({name: value for name, value in optional.items() if value is not None})
        return data


@dataclass
class Leaf(Node):
    """A key holding a value; ``None`` when etcd sent no ``value`` field."""

    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass
class Directory(Node):
    """A directory; ``nodes`` is empty unless the listing expanded it."""

    nodes: List[Node] = field(default_factory=list)

    @property
    def dir(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.nodes:
            data["nodes"] = [child.to_dict() for child in self.nodes]
        return data


__all__ = ["Directory", "Leaf", "Node"]
