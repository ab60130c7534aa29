from dataclasses import dataclass
from typing import ClassVar, Optional

from .castnode import CastNode, NodeKind
from .castprop import PropertyKind, PropertyName, Vec2, Vec3, Vec4

vec3 = tuple[float, float, float]
vec4 = tuple[float, float, float, float]

NO_PARENT = -1


def to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


@dataclass
class Wrapper:
    node: CastNode

    KIND: ClassVar[Optional[NodeKind]] = None

    @property
    def hash(self) -> int:
        return self.node.hash

    def name(self) -> Optional[str]:
        return self.node.value(PropertyName.NAME, PropertyKind.STRING, None)

    def set_name(self, name: str):
        self.node.create_property(PropertyKind.STRING, PropertyName.NAME, name)
        return self

    def _values(self, name: str, kind=None) -> list:
        prop = self.node.get_property(name)
        if prop is None:
            return []
        return prop.values if kind is None else prop.values_as(kind)

    def _first(self, name: str, kind=None, default=None):
        values = self._values(name, kind)
        return values[0] if values else default

    def _flag(self, name: str, default=False) -> bool:
        return bool(self._first(name, PropertyKind.BYTE, int(default)))

    def _set(self, kind, name: str, *values):
        self.node.create_property(kind, name, *values)
        return self

    def _wrap(self, wrapper) -> list:
        return [wrapper(c) for c in self.node.children_of_kind(wrapper.KIND)]

    def _create(self, wrapper):
        return wrapper(self.node.create_child(wrapper.KIND))


class File(Wrapper):
    KIND = NodeKind.FILE

    def path(self) -> Optional[str]:
        return self._first(PropertyName.PATH, PropertyKind.STRING)

    def set_path(self, path: str):
        return self._set(PropertyKind.STRING, PropertyName.PATH, path)


class Material(Wrapper):
    KIND = NodeKind.MATERIAL

    def type(self) -> Optional[str]:
        return self._first(PropertyName.TYPE, PropertyKind.STRING)

    def set_type(self, type: str):
        return self._set(PropertyKind.STRING, PropertyName.TYPE, type)

    def files(self) -> list[File]:
        return self._wrap(File)

    def create_file(self) -> File:
        return self._create(File)

    def slots(self) -> dict[str, File]:
        """Texture slots: every int64 property names a file among this
        material's children."""
        slots = {}
        for name, prop in self.node.properties.items():
            if prop.kind != PropertyKind.INTEGER64:
                continue
            target = self.node.resolve_child_reference(name)
            if target is not None:
                slots[name] = File(target)
        return slots

    def set_slot(self, slot: str, file: File):
        self.node.set_reference(slot, file.node)
        return self


class Mesh(Wrapper):
    KIND = NodeKind.MESH

    def vertex_positions(self) -> list[Vec3]:
        return self._values(PropertyName.VERTEX_POSITION_BUFFER, PropertyKind.VECTOR3)

    def set_vertex_positions(self, positions: list[vec3]):
        return self._set(PropertyKind.VECTOR3, PropertyName.VERTEX_POSITION_BUFFER,
                         *(Vec3(*p) for p in positions))

    def vertex_normals(self) -> list[Vec3]:
        return self._values(PropertyName.VERTEX_NORMAL_BUFFER, PropertyKind.VECTOR3)

    def set_vertex_normals(self, normals: list[vec3]):
        return self._set(PropertyKind.VECTOR3, PropertyName.VERTEX_NORMAL_BUFFER,
                         *(Vec3(*n) for n in normals))

    def vertex_tangents(self) -> list[Vec3]:
        return self._values(PropertyName.VERTEX_TANGENT_BUFFER, PropertyKind.VECTOR3)

    def vertex_colors(self) -> list[int]:
        return self._values(PropertyName.VERTEX_COLOR_BUFFER, PropertyKind.INTEGER32)

    def uv_layer_count(self) -> int:
        return self._first(PropertyName.UV_LAYER_COUNT, default=0)

    def uv_layer(self, index: int) -> list:
        return self._values(PropertyName.VERTEX_UV_BUFFER % index, PropertyKind.VECTOR2)

    def set_uv_layers(self, *layers):
        for i, layer in enumerate(layers):
            self._set(PropertyKind.VECTOR2, PropertyName.VERTEX_UV_BUFFER % i, *(Vec2(*uv) for uv in layer))
        return self._set(PropertyKind.BYTE, PropertyName.UV_LAYER_COUNT, len(layers))

    def faces(self) -> list[int]:
        # index width varies with vertex count, so no fixed kind
        return self._values(PropertyName.FACE_BUFFER)

    def set_faces(self, indices: list[int]):
        kind = PropertyKind.INTEGER32
        if max(indices, default=0) <= 0xFF:
            kind = PropertyKind.BYTE
        elif max(indices) <= 0xFFFF:
            kind = PropertyKind.SHORT
        return self._set(kind, PropertyName.FACE_BUFFER, *indices)

    def maximum_weight_influence(self) -> int:
        return self._first(PropertyName.MAXIMUM_WEIGHT_INFLUENCE, default=0)

    def skinning_method(self) -> str:
        return self._first(PropertyName.SKINNING_METHOD, PropertyKind.STRING, "linear")

    def weight_bones(self) -> list[int]:
        return self._values(PropertyName.VERTEX_WEIGHT_BONE_BUFFER)

    def weight_values(self) -> list[float]:
        return self._values(PropertyName.VERTEX_WEIGHT_VALUE_BUFFER, PropertyKind.FLOAT)

    def material(self) -> Optional[Material]:
        node = self.node.resolve_child_reference(PropertyName.MATERIAL)
        return Material(node) if node is not None else None

    def set_material(self, material: Material):
        self.node.set_reference(PropertyName.MATERIAL, material.node)
        return self


class BlendShape(Wrapper):
    KIND = NodeKind.BLEND_SHAPE

    def base_shape(self) -> Optional[Mesh]:
        node = self.node.resolve_child_reference(PropertyName.BASE_SHAPE)
        return Mesh(node) if node is not None else None

    def target_shapes(self) -> list[Mesh]:
        return [Mesh(n) for n in self.node.resolve_child_references(PropertyName.TARGET_SHAPE)]

    def target_weight_scales(self) -> list[float]:
        return self._values(PropertyName.TARGET_WEIGHT_SCALE, PropertyKind.FLOAT)


class Bone(Wrapper):
    KIND = NodeKind.BONE

    def parent_index(self) -> int:
        value = self._first(PropertyName.PARENT_INDEX, PropertyKind.INTEGER32)
        if value is None:
            return NO_PARENT
        return to_int32(value)

    def set_parent_index(self, index: int):
        return self._set(PropertyKind.INTEGER32, PropertyName.PARENT_INDEX, index & 0xFFFFFFFF)

    def segment_scale_compensate(self) -> bool:
        return self._flag(PropertyName.SEGMENT_SCALE_COMPENSATE, True)

    def local_position(self) -> Optional[Vec3]:
        return self._first(PropertyName.LOCAL_POSITION, PropertyKind.VECTOR3)

    def set_local_position(self, position: vec3):
        return self._set(PropertyKind.VECTOR3, PropertyName.LOCAL_POSITION, Vec3(*position))

    def local_rotation(self) -> Optional[Vec4]:
        return self._first(PropertyName.LOCAL_ROTATION, PropertyKind.VECTOR4)

    def set_local_rotation(self, rotation: vec4):
        return self._set(PropertyKind.VECTOR4, PropertyName.LOCAL_ROTATION, Vec4(*rotation))

    def world_position(self) -> Optional[Vec3]:
        return self._first(PropertyName.WORLD_POSITION, PropertyKind.VECTOR3)

    def world_rotation(self) -> Optional[Vec4]:
        return self._first(PropertyName.WORLD_ROTATION, PropertyKind.VECTOR4)

    def scale(self) -> Optional[Vec3]:
        return self._first(PropertyName.SCALE, PropertyKind.VECTOR3)


class IKHandle(Wrapper):
    KIND = NodeKind.IK_HANDLE

    def _bone(self, name) -> Optional[Bone]:
        node = self.node.resolve_sibling_reference(name)
        return Bone(node) if node is not None else None

    def start_bone(self) -> Optional[Bone]:
        return self._bone(PropertyName.START_BONE)

    def end_bone(self) -> Optional[Bone]:
        return self._bone(PropertyName.END_BONE)

    def target_bone(self) -> Optional[Bone]:
        return self._bone(PropertyName.TARGET_BONE)

    def pole_vector_bone(self) -> Optional[Bone]:
        return self._bone(PropertyName.POLE_VECTOR_BONE)

    def pole_bone(self) -> Optional[Bone]:
        return self._bone(PropertyName.POLE_BONE)

    def use_target_rotation(self) -> bool:
        return self._flag(PropertyName.TARGET_ROTATION)

    def set_bones(self, start: Bone, end: Bone, target: Optional[Bone] = None):
        self.node.set_reference(PropertyName.START_BONE, start.node)
        self.node.set_reference(PropertyName.END_BONE, end.node)
        if target is not None:
            self.node.set_reference(PropertyName.TARGET_BONE, target.node)
        return self


class Constraint(Wrapper):
    KIND = NodeKind.CONSTRAINT

    def constraint_type(self) -> Optional[str]:
        return self._first(PropertyName.CONSTRAINT_TYPE, PropertyKind.STRING)

    def constraint_bone(self) -> Optional[Bone]:
        node = self.node.resolve_sibling_reference(PropertyName.CONSTRAINT_BONE)
        return Bone(node) if node is not None else None

    def target_bone(self) -> Optional[Bone]:
        node = self.node.resolve_sibling_reference(PropertyName.TARGET_BONE)
        return Bone(node) if node is not None else None

    def maintain_offset(self) -> bool:
        return self._flag(PropertyName.MAINTAIN_OFFSET)

    def skip_x(self) -> bool:
        return self._flag(PropertyName.SKIP_X)

    def skip_y(self) -> bool:
        return self._flag(PropertyName.SKIP_Y)

    def skip_z(self) -> bool:
        return self._flag(PropertyName.SKIP_Z)


class Skeleton(Wrapper):
    KIND = NodeKind.SKELETON

    def bones(self) -> list[Bone]:
        return self._wrap(Bone)

    def ik_handles(self) -> list[IKHandle]:
        return self._wrap(IKHandle)

    def constraints(self) -> list[Constraint]:
        return self._wrap(Constraint)

    def create_bone(self) -> Bone:
        return self._create(Bone)

    def create_ik_handle(self) -> IKHandle:
        return self._create(IKHandle)

    def create_constraint(self) -> Constraint:
        return self._create(Constraint)


class Model(Wrapper):
    KIND = NodeKind.MODEL

    def skeleton(self) -> Optional[Skeleton]:
        skeletons = self._wrap(Skeleton)
        return skeletons[0] if skeletons else None

    def meshes(self) -> list[Mesh]:
        return self._wrap(Mesh)

    def materials(self) -> list[Material]:
        return self._wrap(Material)

    def blend_shapes(self) -> list[BlendShape]:
        return self._wrap(BlendShape)

    def create_skeleton(self) -> Skeleton:
        return self._create(Skeleton)

    def create_mesh(self) -> Mesh:
        return self._create(Mesh)

    def create_material(self) -> Material:
        return self._create(Material)


class Curve(Wrapper):
    KIND = NodeKind.CURVE

    def node_name(self) -> Optional[str]:
        return self._first(PropertyName.NODE_NAME, PropertyKind.STRING)

    def key_property(self) -> Optional[str]:
        return self._first(PropertyName.KEY_PROPERTY, PropertyKind.STRING)

    def key_frames(self) -> list[int]:
        return self._values(PropertyName.KEY_FRAME_BUFFER)

    def key_values(self) -> list:
        return self._values(PropertyName.KEY_VALUE_BUFFER)

    def mode(self) -> Optional[str]:
        return self._first(PropertyName.MODE, PropertyKind.STRING)

    def additive_blend_weight(self) -> float:
        return self._first(PropertyName.ADDITIVE_BLEND_WEIGHT, PropertyKind.FLOAT, 1.0)


class NotificationTrack(Wrapper):
    KIND = NodeKind.NOTIFICATION_TRACK

    def key_frames(self) -> list[int]:
        return self._values(PropertyName.KEY_FRAME_BUFFER)


class Animation(Wrapper):
    KIND = NodeKind.ANIMATION

    def framerate(self) -> float:
        return self._first(PropertyName.FRAMERATE, PropertyKind.FLOAT, 30.0)

    def looping(self) -> bool:
        return self._flag(PropertyName.LOOP)

    def curves(self) -> list[Curve]:
        return self._wrap(Curve)

    def notification_tracks(self) -> list[NotificationTrack]:
        return self._wrap(NotificationTrack)

    def create_curve(self) -> Curve:
        return self._create(Curve)


class Instance(Wrapper):
    KIND = NodeKind.INSTANCE

    def reference_file(self) -> Optional[File]:
        node = self.node.resolve_sibling_reference(PropertyName.REFERENCE_FILE)
        return File(node) if node is not None else None

    def position(self) -> Optional[Vec3]:
        return self._first(PropertyName.POSITION, PropertyKind.VECTOR3)

    def rotation(self) -> Optional[Vec4]:
        return self._first(PropertyName.ROTATION, PropertyKind.VECTOR4)

    def scale(self) -> Optional[Vec3]:
        return self._first(PropertyName.SCALE, PropertyKind.VECTOR3)


class Root(Wrapper):
    KIND = NodeKind.ROOT

    def models(self) -> list[Model]:
        return self._wrap(Model)

    def animations(self) -> list[Animation]:
        return self._wrap(Animation)

    def instances(self) -> list[Instance]:
        return self._wrap(Instance)

    def create_model(self) -> Model:
        return self._create(Model)

    def create_animation(self) -> Animation:
        return self._create(Animation)
