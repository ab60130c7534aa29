from .castfile import CAST_MAGIC, CastFile
from .castnode import CastNode, HashAllocator, NodeKind
from .castprop import Property, PropertyKind, PropertyName, Vec2, Vec3, Vec4
from .errors import (
    CastError,
    EmptyValues,
    FormatError,
    NotFound,
    TypeMismatch,
    UnsupportedPropertyKind,
)
