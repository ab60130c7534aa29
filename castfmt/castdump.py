import argparse
import logging
import sys

import numpy as np

from .castfile import CastFile
from .castnode import CastNode, NodeKind
from .castprop import Property, PropertyKind

MAX_VALUES = 8


def format_value(v):
    if isinstance(v, (float, np.floating)):
        return f"{v:.4g}"
    elif isinstance(v, tuple):
        return '(' + ' '.join(format_value(x) for x in v) + ')'
    elif isinstance(v, str):
        return f"\"{v}\""
    return str(v)

def format_property(p: Property, limit=MAX_VALUES):
    shown = ' '.join(format_value(v) for v in p.values[:limit])
    if p.kind != PropertyKind.STRING:
        if len(p.values) > limit:
            shown += f" ... ({len(p.values)} values)"
        shown = f"[{shown}]"
    return f"{p.name} {p.kind.name.lower()} {shown}"

def format_kind(node: CastNode):
    if isinstance(node.kind, NodeKind):
        return node.kind.name.lower()
    return f"{node.kind:#010x}"

def dump_node(node: CastNode, out, depth=0, limit=MAX_VALUES, sizes=None):
    if sizes is None:
        sizes = node.subtree_sizes()
    indent = '  ' * depth
    out.write(f"{indent}{format_kind(node)} {node.hash:#018x} {sizes[id(node)]} {{\n")
    for p in node.properties.values():
        out.write(f"{indent}  {format_property(p, limit)}\n")
    for c in node.children:
        dump_node(c, out, depth + 1, limit, sizes)
    out.write(f"{indent}}}\n")

def dump(cast: CastFile, out, limit=MAX_VALUES):
    out.write(f"cast version={cast.version} flags={cast.flags:#x} roots={len(cast.roots)}\n")
    for root in cast.roots:
        dump_node(root, out, 0, limit)

def main(argv=None):
    parser = argparse.ArgumentParser(description="Print the node tree of a cast file")
    parser.add_argument("file", help="cast file to read")
    parser.add_argument("-n", "--max-values", type=int, default=MAX_VALUES,
                        help="values shown per property (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    cast = CastFile.load(args.file)
    dump(cast, sys.stdout, args.max_values)
    return 0

if __name__ == "__main__":
    sys.exit(main())
