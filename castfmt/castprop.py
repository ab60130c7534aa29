from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, NamedTuple, Optional

from .castio import (
    encode_string,
    read_array,
    read_bytes,
    read_string,
    read_values,
    write_array,
    write_string,
    write_value,
)
from .errors import EmptyValues, TypeMismatch, UnsupportedPropertyKind


PROPERTY_HEADER = '<HHI'
PROPERTY_HEADER_SIZE = 8


class PropertyKind(IntEnum):
    BYTE = ord('b')
    SHORT = ord('h')
    INTEGER32 = ord('i')
    INTEGER64 = ord('l')
    FLOAT = ord('f')
    DOUBLE = ord('d')
    STRING = ord('s')
    VECTOR2 = 0x7632
    VECTOR3 = 0x7633
    VECTOR4 = 0x7634


class Vec2(NamedTuple):
    x: float = 0.0
    y: float = 0.0


class Vec3(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Vec4(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0


# kind -> (element dtype, vector type or None)
LAYOUTS = {
    PropertyKind.BYTE: ('<u1', None),
    PropertyKind.SHORT: ('<u2', None),
    PropertyKind.INTEGER32: ('<u4', None),
    PropertyKind.INTEGER64: ('<u8', None),
    PropertyKind.FLOAT: ('<f4', None),
    PropertyKind.DOUBLE: ('<f8', None),
    PropertyKind.VECTOR2: ('<f4', Vec2),
    PropertyKind.VECTOR3: ('<f4', Vec3),
    PropertyKind.VECTOR4: ('<f4', Vec4),
}

ITEM_SIZES = {'<u1': 1, '<u2': 2, '<u4': 4, '<u8': 8, '<f4': 4, '<f8': 8}


class PropertyName:
    NAME = "n"
    VERTEX_POSITION_BUFFER = "vp"
    VERTEX_NORMAL_BUFFER = "vn"
    VERTEX_TANGENT_BUFFER = "vt"
    VERTEX_COLOR_BUFFER = "vc"
    VERTEX_UV_BUFFER = "u%d"
    VERTEX_WEIGHT_BONE_BUFFER = "wb"
    VERTEX_WEIGHT_VALUE_BUFFER = "wv"
    FACE_BUFFER = "f"
    UV_LAYER_COUNT = "ul"
    MAXIMUM_WEIGHT_INFLUENCE = "mi"
    SKINNING_METHOD = "sm"
    MATERIAL = "m"
    BASE_SHAPE = "b"
    TARGET_SHAPE = "t"
    TARGET_WEIGHT_SCALE = "ts"
    PARENT_INDEX = "p"
    SEGMENT_SCALE_COMPENSATE = "ssc"
    LOCAL_POSITION = "lp"
    LOCAL_ROTATION = "lr"
    WORLD_POSITION = "wp"
    WORLD_ROTATION = "wr"
    SCALE = "s"
    START_BONE = "sb"
    END_BONE = "eb"
    TARGET_BONE = "tb"
    POLE_VECTOR_BONE = "pv"
    POLE_BONE = "pb"
    TARGET_ROTATION = "tr"
    CONSTRAINT_TYPE = "ct"
    CONSTRAINT_BONE = "cb"
    MAINTAIN_OFFSET = "mo"
    SKIP_X = "sx"
    SKIP_Y = "sy"
    SKIP_Z = "sz"
    TYPE = "t"
    PATH = "p"
    FRAMERATE = "fr"
    LOOP = "lo"
    NODE_NAME = "nn"
    KEY_PROPERTY = "kp"
    KEY_FRAME_BUFFER = "kb"
    KEY_VALUE_BUFFER = "kv"
    MODE = "m"
    ADDITIVE_BLEND_WEIGHT = "ab"
    REFERENCE_FILE = "rf"
    POSITION = "p"
    ROTATION = "r"


def property_kind(tag) -> PropertyKind:
    try:
        return PropertyKind(tag)
    except ValueError:
        raise UnsupportedPropertyKind(tag) from None


def zero_value(kind: PropertyKind):
    if kind == PropertyKind.STRING:
        return ""
    dtype, vec = LAYOUTS[kind]
    if vec is not None:
        return vec()
    return 0.0 if dtype.startswith('<f') else 0


@dataclass
class Property:
    kind: PropertyKind
    name: str
    values: list = field(default_factory=list)

    @classmethod
    def create(cls, kind, name: str, count: Optional[int] = None) -> "Property":
        """String properties always hold one value, so their count defaults
        to 1 and nothing else is accepted."""
        kind = property_kind(kind)
        if count is None:
            count = 1 if kind == PropertyKind.STRING else 0
        return cls(kind, name).set_values(*[zero_value(kind)] * count)

    @classmethod
    def decode(cls, f) -> "Property":
        tag, name_len, array_len = read_values(PROPERTY_HEADER, f)
        kind = property_kind(tag)
        name = read_bytes(f, name_len).decode('utf-8', 'surrogateescape')
        prop = cls(kind, name)

        if kind == PropertyKind.STRING:
            prop.values = [read_string(f)]
            return prop

        # float32 elements stay numpy scalars; widening to a Python float
        # would quiet signaling NaNs and change the bytes on re-encode
        dtype, vec = LAYOUTS[kind]
        if vec is None:
            data = read_array(f, dtype, array_len)
            prop.values = list(data) if dtype == '<f4' else data.tolist()
        else:
            width = len(vec._fields)
            rows = read_array(f, dtype, array_len * width).reshape(-1, width)
            prop.values = [vec(*row) for row in rows]
        return prop

    @property
    def count(self) -> int:
        return len(self.values)

    def _string_value(self) -> str:
        if len(self.values) != 1:
            raise ValueError(f"String property {self.name!r} must hold exactly one value, has {len(self.values)}")
        return self.values[0]

    def array_length(self) -> int:
        if self.kind == PropertyKind.STRING:
            return len(write_string(self._string_value()))
        return len(self.values)

    def payload_length(self) -> int:
        if self.kind == PropertyKind.STRING:
            return len(write_string(self._string_value()))
        dtype, vec = LAYOUTS[self.kind]
        width = 1 if vec is None else len(vec._fields)
        return ITEM_SIZES[dtype] * width * len(self.values)

    def encoded_length(self) -> int:
        return PROPERTY_HEADER_SIZE + len(encode_string(self.name)) + self.payload_length()

    def encode(self, f):
        name = encode_string(self.name)
        f.write(write_value(PROPERTY_HEADER, self.kind, len(name), self.array_length()))
        f.write(name)

        if self.kind == PropertyKind.STRING:
            f.write(write_string(self._string_value()))
            return

        dtype, vec = LAYOUTS[self.kind]
        if vec is None:
            f.write(write_array(self.values, dtype))
        else:
            f.write(write_array([tuple(v) for v in self.values], dtype))

    def _check_count(self, count: int):
        if self.kind == PropertyKind.STRING and count != 1:
            raise ValueError(f"String property {self.name!r} must hold exactly one value, got {count}")

    def set_values(self, *values):
        self._check_count(len(values))
        self.values = list(values)
        return self

    def add_values(self, *values):
        self._check_count(len(self.values) + len(values))
        self.values.extend(values)
        return self

    def values_as(self, kind) -> list:
        kind = property_kind(kind)
        if self.kind != kind:
            raise TypeMismatch(f"Property {self.name!r} is {self.kind.name}, not {kind.name}")
        return self.values

    def first(self, kind=None) -> Any:
        values = self.values if kind is None else self.values_as(kind)
        if not values:
            raise EmptyValues(f"Property {self.name!r} has no values")
        return values[0]

    def __repr__(self):
        return f"Property({self.kind.name}, {self.name!r}, {self.values!r})"
