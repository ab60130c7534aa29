from typing import Optional
import io
import logging

from .castio import read_values, write_value
from .castnode import CastNode, HashAllocator, NodeKind
from .errors import FormatError

log = logging.getLogger(__name__)

CAST_MAGIC = 0x74736163
CAST_VERSION = 0x1
FILE_HEADER = '<IIII'
FILE_HEADER_SIZE = 16


class CastFile:
    def __init__(self, version: int = CAST_VERSION, flags: int = 0,
                 allocator: Optional[HashAllocator] = None):
        self.version = version
        self.flags = flags
        self.allocator = allocator or HashAllocator()
        self.roots: list[CastNode] = []

    @classmethod
    def decode(cls, f, allocator: Optional[HashAllocator] = None) -> "CastFile":
        magic, version, root_count, flags = read_values(FILE_HEADER, f)
        if magic != CAST_MAGIC:
            raise FormatError(f"Invalid cast file magic: {magic:#x}")

        log.debug("cast header: version=%d roots=%d flags=%#x", version, root_count, flags)
        cast = cls(version, flags, allocator)
        for _ in range(root_count):
            cast.roots.append(CastNode.decode(f, cast.allocator))
        return cast

    @classmethod
    def from_bytes(cls, data: bytes) -> "CastFile":
        return cls.decode(io.BytesIO(data))

    @classmethod
    def load(cls, path) -> "CastFile":
        with open(path, "rb") as f:
            return cls.decode(f)

    def encode(self, f):
        f.write(write_value(FILE_HEADER, CAST_MAGIC, self.version, len(self.roots), self.flags))
        for root in self.roots:
            root.encode(f)
        log.debug("wrote %d root nodes", len(self.roots))

    def to_bytes(self) -> bytes:
        stream = io.BytesIO()
        self.encode(stream)
        return stream.getvalue()

    def save(self, path):
        with open(path, "wb") as f:
            self.encode(f)

    def size(self) -> int:
        return FILE_HEADER_SIZE + sum(r.size() for r in self.roots)

    def create_root(self) -> CastNode:
        root = CastNode.new(NodeKind.ROOT, self.allocator)
        self.roots.append(root)
        return root

    def walk(self):
        """Yield (depth, node) for every node, depth first in storage order."""
        stack = [(0, r) for r in reversed(self.roots)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, c) for c in reversed(node.children))

    def __repr__(self):
        return f"CastFile(version={self.version}, flags={self.flags:#x}, roots={len(self.roots)})"
