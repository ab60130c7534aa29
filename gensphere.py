import math
import sys

import numpy as np

from castfmt.castfile import CastFile
from castfmt.castmodels import Root


def generate_uv_sphere(radius=1.0, stacks=16, sectors=32):
    positions = []
    normals = []
    uvs = []
    indices = []

    for i in range(stacks + 1):
        stack_angle = math.pi / 2 - i * math.pi / stacks  # from pi/2 to -pi/2
        xy = radius * math.cos(stack_angle)
        z = radius * math.sin(stack_angle)

        for j in range(sectors + 1):
            sector_angle = j * 2 * math.pi / sectors  # from 0 to 2pi

            x = xy * math.cos(sector_angle)
            y = xy * math.sin(sector_angle)

            positions.append((x, y, z))
            normals.append((x / radius, y / radius, z / radius))
            uvs.append((j / sectors, i / stacks))

    for i in range(stacks):
        for j in range(sectors):
            first = i * (sectors + 1) + j
            second = first + sectors + 1

            indices.extend((first, second, first + 1))
            indices.extend((second, second + 1, first + 1))

    return positions, normals, uvs, indices

def build_sphere_cast(name="Sphere", radius=1.0, stacks=16, sectors=32) -> CastFile:
    positions, normals, uvs, indices = generate_uv_sphere(radius, stacks, sectors)

    # round through float32 so the in-memory values match what gets written
    positions = np.asarray(positions, dtype=np.float32).tolist()
    normals = np.asarray(normals, dtype=np.float32).tolist()
    uvs = np.asarray(uvs, dtype=np.float32).tolist()

    cast = CastFile()
    model = Root(cast.create_root()).create_model().set_name(name)

    material = model.create_material().set_name(f"{name}_mat").set_type("pbr")
    diffuse = material.create_file().set_path(f"{name.lower()}_diffuse.png")
    material.set_slot("albedo", diffuse)

    mesh = model.create_mesh().set_name(f"{name}_mesh")
    mesh.set_vertex_positions(positions)
    mesh.set_vertex_normals(normals)
    mesh.set_uv_layers(uvs)
    mesh.set_faces(indices)

    return cast

def main():
    cast = build_sphere_cast()
    cast.save(sys.argv[1])

if __name__ == "__main__":
    main()
