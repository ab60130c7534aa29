import struct

from castfmt.castfile import CastFile
from castfmt.castmodels import NO_PARENT, BlendShape, Bone, IKHandle, Material, Mesh, Root, to_int32
from castfmt.castnode import CastNode, NodeKind
from castfmt.castprop import PropertyKind, Vec3

from castbytes import BONE, file_bytes, node_bytes, prop_bytes, string_prop

import gensphere


def build_rig():
    cast = CastFile()
    model = Root(cast.create_root()).create_model().set_name("rig")
    skeleton = model.create_skeleton()
    hip = skeleton.create_bone().set_name("hip")
    knee = skeleton.create_bone().set_name("knee").set_parent_index(0)
    foot = skeleton.create_bone().set_name("foot").set_parent_index(1)
    handle = skeleton.create_ik_handle().set_name("leg_ik").set_bones(hip, foot)
    return cast, model, skeleton, (hip, knee, foot), handle


def test_to_int32():
    assert to_int32(5) == 5
    assert to_int32(0xFFFFFFFF) == -1
    assert to_int32(0x80000000) == -0x80000000

def test_bone_without_parent_index():
    data = file_bytes([node_bytes(BONE, 1, props=[string_prop("n", "root_bone")])])
    bone = Bone(CastFile.from_bytes(data).roots[0])
    assert bone.name() == "root_bone"
    assert bone.parent_index() == NO_PARENT == -1

def test_bone_parent_index_is_signed():
    data = file_bytes([node_bytes(BONE, 1, props=[prop_bytes(ord('i'), "p", 1, struct.pack('<i', -1))])])
    assert Bone(CastFile.from_bytes(data).roots[0]).parent_index() == -1

def test_bone_accessors():
    _, _, skeleton, (hip, knee, foot), _ = build_rig()
    assert [b.name() for b in skeleton.bones()] == ["hip", "knee", "foot"]
    assert hip.parent_index() == -1
    assert foot.parent_index() == 1
    knee.set_parent_index(-1)
    assert knee.node.values("p", PropertyKind.INTEGER32) == [0xFFFFFFFF]
    assert knee.parent_index() == -1
    assert hip.segment_scale_compensate() is True
    assert hip.local_position() is None
    hip.set_local_position((0.0, 1.0, 0.0)).set_local_rotation((0.0, 0.0, 0.0, 1.0))
    assert hip.local_position() == Vec3(0.0, 1.0, 0.0)
    assert hip.local_rotation().w == 1.0

def test_ik_handle_resolves_sibling_bones():
    _, _, skeleton, (hip, knee, foot), handle = build_rig()
    assert skeleton.ik_handles() == [handle]
    assert handle.start_bone() == hip
    assert handle.end_bone() == foot
    assert handle.target_bone() is None
    assert handle.pole_vector_bone() is None
    assert handle.use_target_rotation() is False

def test_ik_handle_without_parent():
    node = CastNode(NodeKind.IK_HANDLE, 1)
    node.create_property(PropertyKind.INTEGER64, "eb", 2)
    assert IKHandle(node).end_bone() is None

def test_rig_survives_round_trip():
    cast, *_ = build_rig()
    again = CastFile.from_bytes(cast.to_bytes())
    model = Root(again.roots[0]).models()[0]
    assert model.name() == "rig"
    handle = model.skeleton().ik_handles()[0]
    assert handle.start_bone().name() == "hip"
    assert handle.end_bone().name() == "foot"
    assert again.to_bytes() == cast.to_bytes()

def test_constraint_bones():
    _, _, skeleton, (hip, knee, _), _ = build_rig()
    constraint = skeleton.create_constraint()
    constraint.node.create_property(PropertyKind.STRING, "ct", "orient")
    constraint.node.set_reference("cb", knee.node)
    constraint.node.set_reference("tb", hip.node)
    assert constraint.constraint_type() == "orient"
    assert constraint.constraint_bone() == knee
    assert constraint.target_bone() == hip
    assert constraint.maintain_offset() is False
    assert constraint.skip_x() is False

def test_mesh_material_is_resolved_among_mesh_children():
    cast = CastFile()
    mesh = Mesh(cast.create_root().create_child(NodeKind.MESH))
    assert mesh.material() is None
    material = Material(mesh.node.create_child(NodeKind.MATERIAL)).set_name("steel")
    mesh.set_material(material)
    assert mesh.material() == material
    assert mesh.material().name() == "steel"

def test_mesh_buffers():
    cast = CastFile()
    mesh = Root(cast.create_root()).create_model().create_mesh()
    mesh.set_vertex_positions([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
    mesh.set_uv_layers([(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)])
    mesh.set_faces([0, 1, 2])
    assert mesh.vertex_positions()[1] == (1, 0, 0)
    assert mesh.uv_layer_count() == 1
    assert mesh.uv_layer(0)[2] == (0.0, 1.0)
    assert mesh.node.get_property("f").kind == PropertyKind.BYTE
    assert mesh.faces() == [0, 1, 2]
    assert mesh.skinning_method() == "linear"
    mesh.set_faces([0, 300, 70000])
    assert mesh.node.get_property("f").kind == PropertyKind.INTEGER32

def test_blend_shape_targets():
    cast = CastFile()
    model = Root(cast.create_root()).create_model()
    shape = BlendShape(model.node.create_child(NodeKind.BLEND_SHAPE))
    base = shape.node.create_child(NodeKind.MESH)
    smile = shape.node.create_child(NodeKind.MESH)
    frown = shape.node.create_child(NodeKind.MESH)
    shape.node.set_reference("b", base)
    shape.node.create_property(PropertyKind.INTEGER64, "t", smile.hash, frown.hash)
    shape.node.create_property(PropertyKind.FLOAT, "ts", 1.0, 0.5)
    assert shape.base_shape().node is base
    assert [m.node for m in shape.target_shapes()] == [smile, frown]
    assert shape.target_weight_scales() == [1.0, 0.5]

def test_material_slots():
    cast = CastFile()
    material = Root(cast.create_root()).create_model().create_material().set_type("pbr")
    albedo = material.create_file().set_path("albedo.png")
    material.set_slot("albedo", albedo)
    material.node.create_property(PropertyKind.INTEGER64, "normal", 12345)
    assert material.type() == "pbr"
    assert material.slots() == {"albedo": albedo}
    assert material.files()[0].path() == "albedo.png"

def test_animation_defaults():
    cast = CastFile()
    anim = Root(cast.create_root()).create_animation()
    assert anim.framerate() == 30.0
    assert anim.looping() is False
    curve = anim.create_curve()
    curve.node.create_property(PropertyKind.STRING, "nn", "hip")
    curve.node.create_property(PropertyKind.SHORT, "kb", 0, 10)
    assert anim.curves() == [curve]
    assert curve.node_name() == "hip"
    assert curve.key_frames() == [0, 10]
    assert curve.additive_blend_weight() == 1.0

def test_sphere_generator_round_trips():
    cast = gensphere.build_sphere_cast(stacks=4, sectors=8)
    data = cast.to_bytes()
    again = CastFile.from_bytes(data)
    model = Root(again.roots[0]).models()[0]
    mesh = model.meshes()[0]
    assert model.name() == "Sphere"
    assert len(mesh.vertex_positions()) == 5 * 9
    assert len(mesh.faces()) == 4 * 8 * 6
    assert model.materials()[0].slots()["albedo"].path() == "sphere_diffuse.png"
    assert again.to_bytes() == data
