"""Triangle-soup primitives (icosphere, cylinder, cone, box) and their glTF meshes."""

from __future__ import annotations

import math
import struct
from typing import Sequence

from .gltf import ComponentType, Document, GltfError

Vec3 = tuple
Triangle = tuple

ARRAY_BUFFER = 34962
ELEMENT_ARRAY_BUFFER = 34963
MODE_TRIANGLES = 4

_SPHERE_VOLUME = 4.0 * math.pi / 3.0

# Volume of an icosphere of unit circumradius at each subdivision level.
_ICOSPHERE_VOLUMES = (
    2.53615,
    3.65871,
    4.04704,
    4.15274,
    4.17974,
    4.18652,
    4.18822,
    4.18865,
)

_ICOSAHEDRON_FACES = (
    (0, 11, 5), (7, 0, 5), (7, 5, 1), (0, 7, 10), (0, 2, 11),
    (1, 5, 9), (9, 5, 11), (0, 10, 2), (10, 8, 6), (7, 1, 8),
    (3, 9, 4), (4, 6, 3), (4, 2, 6), (3, 6, 8), (3, 1, 9),
    (9, 11, 4), (2, 4, 11), (6, 2, 10), (10, 7, 8), (3, 8, 1),
)

_BOX_FACES = (
    (0, 1, 2), (0, 2, 3),  # front
    (4, 6, 5), (4, 7, 6),  # back
    (0, 3, 7), (0, 7, 4),  # left
    (1, 5, 6), (1, 6, 2),  # right
    (3, 2, 6), (3, 6, 7),  # top
    (0, 4, 5), (0, 5, 1),  # bottom
)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of two 3-vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    """Cross product of two 3-vectors."""
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def normalize(v: Sequence[float]) -> Vec3:
    """Unit vector along v; the zero vector stays zero."""
    length = math.sqrt(dot(v, v))
    inverse = 0.0 if length == 0 else 1.0 / length
    return (v[0] * inverse, v[1] * inverse, v[2] * inverse)


def _scale(v: Sequence[float], factor: float) -> Vec3:
    return (v[0] * factor, v[1] * factor, v[2] * factor)


def _midpoint_on_sphere(a: Sequence[float], b: Sequence[float], radius: float) -> Vec3:
    mid = ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5, (a[2] + b[2]) * 0.5)
    return _scale(normalize(mid), radius)


def subdivide_icosphere(tri: Sequence[Sequence[float]], radius: float, subdivisions: int) -> list:
    """Split a triangle into 4**subdivisions triangles with new points on the sphere."""
    v0, v1, v2 = (tuple(v) for v in tri)
    if subdivisions <= 0:
        return [(v0, v1, v2)]
    m01 = _midpoint_on_sphere(v0, v1, radius)
    m12 = _midpoint_on_sphere(v1, v2, radius)
    m20 = _midpoint_on_sphere(v2, v0, radius)
    result = []
    for child in ((v0, m01, m20), (m01, v1, m12), (m20, m12, v2), (m01, m12, m20)):
        result.extend(subdivide_icosphere(child, radius, subdivisions - 1))
    return result


def generate_icosphere(sphere_radius: float, subdivisions: int = 2) -> list:
    """Icosphere scaled so its volume matches a sphere of sphere_radius."""
    level = min(max(subdivisions, 0), len(_ICOSPHERE_VOLUMES) - 1)
    efficiency = _ICOSPHERE_VOLUMES[level] / _SPHERE_VOLUME
    radius = sphere_radius / efficiency ** (1.0 / 3.0)

    phi = (1.0 + math.sqrt(5.0)) * 0.5
    inv = 1.0 / phi
    corners = (
        (-1, inv, 0), (1, inv, 0), (-1, -inv, 0), (1, -inv, 0),
        (0, -1, inv), (0, 1, inv), (0, -1, -inv), (0, 1, -inv),
        (inv, 0, -1), (inv, 0, 1), (-inv, 0, -1), (-inv, 0, 1),
    )
    vertices = [_scale(normalize(c), radius) for c in corners]

    triangles = []
    for a, b, c in _ICOSAHEDRON_FACES:
        triangles.extend(
            subdivide_icosphere((vertices[a], vertices[b], vertices[c]), radius, subdivisions)
        )
    return triangles


def _polygon_radius(radius: float, radial_segments: int) -> float:
    if radial_segments < 2:
        raise ValueError("radial_segments must be at least 2")
    polygon_area = (radial_segments // 2) * math.sin(2.0 * math.pi / radial_segments)
    return radius / math.sqrt(polygon_area / math.pi)


def _ring(radial_segments: int):
    """Yield (cos, sin) pairs of consecutive ring edges, closing exactly at angle 0."""
    step = 2.0 * math.pi / radial_segments
    c1, s1 = 1.0, 0.0
    for i in range(radial_segments):
        angle = 0.0 if i == radial_segments - 1 else (i + 1) * step
        c2, s2 = math.cos(angle), math.sin(angle)
        yield c1, s1, c2, s2
        c1, s1 = c2, s2


def generate_cylinder(radius: float, height: float, radial_segments: int = 16) -> list:
    """Capped cylinder along z, widened so its cross-section area is pi * radius**2."""
    radius = _polygon_radius(radius, radial_segments)
    half = height / 2.0
    top_center = (0.0, 0.0, half)
    bottom_center = (0.0, 0.0, -half)
    triangles = []
    for c1, s1, c2, s2 in _ring(radial_segments):
        top1 = (radius * c1, radius * s1, half)
        top2 = (radius * c2, radius * s2, half)
        bottom1 = (radius * c1, radius * s1, -half)
        bottom2 = (radius * c2, radius * s2, -half)
        triangles.append((top_center, top1, top2))
        triangles.append((bottom_center, bottom2, bottom1))
        triangles.append((bottom1, top2, top1))
        triangles.append((top2, bottom1, bottom2))
    return triangles


def generate_cone(radius: float, height: float, radial_segments: int = 16) -> list:
    """Cone along z with its tip at 0.75 * height."""
    radius = _polygon_radius(radius, radial_segments)
    tip = (0.0, 0.0, height * 0.75)
    bottom_center = (0.0, 0.0, -height * 0.25)
    base = -height / 2.0
    triangles = []
    for c1, s1, c2, s2 in _ring(radial_segments):
        bottom1 = (radius * c1, radius * s1, base)
        bottom2 = (radius * c2, radius * s2, base)
        triangles.append((bottom_center, bottom2, bottom1))
        triangles.append((bottom1, bottom2, tip))
    return triangles


def generate_box(width: float, height: float, depth: float) -> list:
    """Axis-aligned box centred on the origin, twelve outward-facing triangles."""
    w, h, d = width / 2.0, height / 2.0, depth / 2.0
    vertices = (
        (-w, -h, -d), (w, -h, -d), (w, h, -d), (-w, h, -d),
        (-w, -h, d), (w, -h, d), (w, h, d), (-w, h, d),
    )
    return [(vertices[a], vertices[c], vertices[b]) for a, b, c in _BOX_FACES]


def add_primitive(doc: Document, name: str, triangles: Sequence, limit: Sequence[float]) -> int:
    """Append triangles to the first buffer as a new mesh; return the mesh index."""
    vertex_count = len(triangles) * 3
    if vertex_count > 0x10000:
        raise GltfError("too many vertices for 16-bit indices")
    vertex_bytes = b"".join(
        struct.pack("<3f", *vertex) for triangle in triangles for vertex in triangle
    )
    index_bytes = struct.pack(f"<{vertex_count}H", *range(vertex_count))

    if not doc.buffers:
        doc.buffers.append({"uri": "primitives.bin"})
        doc.buffer_data.append(bytearray())

    data = doc.buffer_data[0]
    vertex_offset = len(data)
    index_offset = vertex_offset + len(vertex_bytes)
    data.extend(vertex_bytes)
    data.extend(index_bytes)
    doc.buffers[0]["byteLength"] = len(data)

    views = doc.buffer_views
    vertex_view = len(views)
    views.append({
        "buffer": 0,
        "byteOffset": vertex_offset,
        "byteLength": len(vertex_bytes),
        "target": ARRAY_BUFFER,
    })
    views.append({
        "buffer": 0,
        "byteOffset": index_offset,
        "byteLength": len(index_bytes),
        "target": ELEMENT_ARRAY_BUFFER,
    })

    accessors = doc.accessors
    vertex_accessor = len(accessors)
    lx, ly, lz = (float(v) for v in limit)
    accessors.append({
        "bufferView": vertex_view,
        "byteOffset": 0,
        "componentType": int(ComponentType.FLOAT),
        "count": vertex_count,
        "type": "VEC3",
        "min": [-lx, -ly, -lz],
        "max": [lx, ly, lz],
    })
    accessors.append({
        "bufferView": vertex_view + 1,
        "byteOffset": 0,
        "componentType": int(ComponentType.UNSIGNED_SHORT),
        "count": vertex_count,
        "type": "SCALAR",
    })

    meshes = doc.meshes
    meshes.append({
        "name": name,
        "primitives": [{
            "attributes": {"POSITION": vertex_accessor},
            "indices": vertex_accessor + 1,
            "mode": MODE_TRIANGLES,
        }],
    })
    return len(meshes) - 1