from enum import IntEnum
from typing import Optional
import weakref

from .castio import read_values, write_value
from .castprop import Property, PropertyKind
from .errors import CastError, NotFound

NODE_HEADER = '<IIQII'
NODE_HEADER_SIZE = 24

HASH_SEED = 0x534E495752545250

_MISSING = object()


class NodeKind(IntEnum):
    ROOT = 0x746F6F72
    MODEL = 0x6C646F6D
    MESH = 0x6873656D
    BLEND_SHAPE = 0x68736C62
    SKELETON = 0x6C656B73
    BONE = 0x656E6F62
    IK_HANDLE = 0x64686B69
    CONSTRAINT = 0x74736E63
    ANIMATION = 0x6D696E61
    CURVE = 0x76727563
    NOTIFICATION_TRACK = 0x6669746E
    MATERIAL = 0x6C74616D
    FILE = 0x656C6966
    INSTANCE = 0x74736E69


def node_kind(value: int):
    """Known kinds come back as NodeKind, anything else stays a plain int."""
    try:
        return NodeKind(value)
    except ValueError:
        return value


class HashAllocator:
    def __init__(self, seed: int = HASH_SEED):
        self.current = seed & 0xFFFFFFFFFFFFFFFF

    def next(self) -> int:
        value = self.current
        self.current = (self.current + 1) & 0xFFFFFFFFFFFFFFFF
        return value

    def __repr__(self):
        return f"HashAllocator(current={self.current:#x})"


class CastNode:
    def __init__(self, kind, hash: int, allocator: Optional[HashAllocator] = None):
        self.kind = node_kind(kind)
        self.hash = hash
        self.properties: dict[str, Property] = {}
        self.children: list["CastNode"] = []
        self.allocator = allocator
        self.stored_size: Optional[int] = None
        self._parent = None

    @classmethod
    def new(cls, kind, allocator: HashAllocator) -> "CastNode":
        return cls(kind, allocator.next(), allocator)

    @classmethod
    def decode(cls, f, allocator: Optional[HashAllocator] = None) -> "CastNode":
        kind, size, hash, property_count, child_count = read_values(NODE_HEADER, f)
        node = cls(kind, hash, allocator)
        node.stored_size = size

        for _ in range(property_count):
            prop = Property.decode(f)
            node.properties[prop.name] = prop

        for _ in range(child_count):
            node.attach_child(cls.decode(f, allocator))

        return node

    @property
    def parent(self) -> Optional["CastNode"]:
        return self._parent() if self._parent is not None else None

    def size(self) -> int:
        return self.subtree_sizes()[id(self)]

    def subtree_sizes(self) -> dict[int, int]:
        """Encoded size of this node and every descendant, keyed by id(node),
        computed in one bottom-up pass."""
        sizes = {}

        def visit(node):
            total = NODE_HEADER_SIZE
            total += sum(p.encoded_length() for p in node.properties.values())
            total += sum(visit(c) for c in node.children)
            sizes[id(node)] = total
            return total

        visit(self)
        return sizes

    def encode(self, f, sizes: Optional[dict[int, int]] = None):
        if sizes is None:
            sizes = self.subtree_sizes()
        f.write(write_value(NODE_HEADER,
                            self.kind,
                            sizes[id(self)],
                            self.hash,
                            len(self.properties),
                            len(self.children)))

        for prop in self.properties.values():
            prop.encode(f)

        for child in self.children:
            child.encode(f, sizes)

    def attach_child(self, child: "CastNode") -> "CastNode":
        child._parent = weakref.ref(self)
        if child.allocator is None:
            child.allocator = self.allocator
        self.children.append(child)
        return child

    def hash_allocator(self) -> HashAllocator:
        node = self
        while node is not None:
            if node.allocator is not None:
                return node.allocator
            node = node.parent
        raise CastError("Node has no hash allocator; pass one explicitly")

    def create_child(self, kind, allocator: Optional[HashAllocator] = None) -> "CastNode":
        allocator = allocator or self.hash_allocator()
        return self.attach_child(CastNode.new(kind, allocator))

    def children_of_kind(self, kind) -> list["CastNode"]:
        return [c for c in self.children if c.kind == kind]

    def child_by_hash(self, hash: int) -> Optional["CastNode"]:
        for c in self.children:
            if c.hash == hash:
                return c
        return None

    # properties

    def get_property(self, name: str) -> Optional[Property]:
        return self.properties.get(name)

    def require_property(self, name: str) -> Property:
        prop = self.properties.get(name)
        if prop is None:
            raise NotFound(f"Property {name!r} not found on {self.describe()}")
        return prop

    def create_property(self, kind, name: str, *values) -> Property:
        prop = Property.create(kind, name).set_values(*values)
        self.properties[name] = prop
        return prop

    def values(self, name: str, kind) -> list:
        return self.require_property(name).values_as(kind)

    def value(self, name: str, kind, default=_MISSING):
        prop = self.properties.get(name)
        if prop is None:
            if default is _MISSING:
                raise NotFound(f"Property {name!r} not found on {self.describe()}")
            return default
        return prop.first(kind)

    # references

    def reference_hash(self, name: str) -> Optional[int]:
        prop = self.properties.get(name)
        if prop is None:
            return None
        values = prop.values_as(PropertyKind.INTEGER64)
        return values[0] if values else None

    def resolve_child_reference(self, name: str) -> Optional["CastNode"]:
        """Referenced node among this node's own children."""
        hash = self.reference_hash(name)
        if hash is None:
            return None
        return self.child_by_hash(hash)

    def resolve_child_references(self, name: str) -> list["CastNode"]:
        prop = self.properties.get(name)
        if prop is None:
            return []
        found = (self.child_by_hash(h) for h in prop.values_as(PropertyKind.INTEGER64))
        return [c for c in found if c is not None]

    def resolve_sibling_reference(self, name: str) -> Optional["CastNode"]:
        """Referenced node among the children of this node's parent."""
        parent = self.parent
        if parent is None:
            return None
        hash = self.reference_hash(name)
        if hash is None:
            return None
        return parent.child_by_hash(hash)

    def set_reference(self, name: str, target: "CastNode") -> Property:
        return self.create_property(PropertyKind.INTEGER64, name, target.hash)

    def describe(self) -> str:
        kind = self.kind.name.lower() if isinstance(self.kind, NodeKind) else f"{self.kind:#x}"
        return f"{kind} node {self.hash:#x}"

    def __repr__(self):
        return (f"CastNode({self.describe()}, properties={list(self.properties)}, "
                f"children={len(self.children)})")
