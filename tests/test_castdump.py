import io

from castfmt.castdump import dump, format_property, main
from castfmt.castfile import CastFile
from castfmt.castprop import Property, PropertyKind, Vec3


def test_format_property():
    assert format_property(Property(PropertyKind.STRING, "n", ["Cube"])) == 'n string "Cube"'
    prop = Property(PropertyKind.VECTOR3, "vp", [Vec3(0, 0, 0), Vec3(1.5, 1, 1)])
    assert format_property(prop) == "vp vector3 [(0 0 0) (1.5 1 1)]"

def test_format_property_truncates():
    prop = Property(PropertyKind.SHORT, "f", list(range(20)))
    assert format_property(prop, limit=3) == "f short [0 1 2 ... (20 values)]"

def test_dump_tree():
    cast = CastFile()
    root = cast.create_root()
    mesh = root.create_child(0x6873656D)
    mesh.create_property(PropertyKind.STRING, "n", "Cube")
    root.create_child(0x11223344)

    out = io.StringIO()
    dump(cast, out)
    lines = out.getvalue().splitlines()
    assert lines[0] == "cast version=1 flags=0x0 roots=1"
    assert lines[1].startswith("root 0x534e495752545250 ")
    assert lines[2].startswith("  mesh 0x534e495752545251 ")
    assert lines[3] == '    n string "Cube"'
    assert lines[4] == "  }"
    assert lines[5].startswith("  0x11223344 ")
    assert lines[-1] == "}"

def test_main(tmp_path, capsys):
    cast = CastFile()
    cast.create_root()
    path = tmp_path / "empty.cast"
    cast.save(path)
    assert main([str(path)]) == 0
    assert "roots=1" in capsys.readouterr().out
