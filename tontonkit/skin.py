"""Mesh and skin descriptions of skinned glTF meshes, ready for volumetric analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .gltf import (
    IDENTITY_MATRIX,
    IDENTITY_ROTATION,
    NULL_VEC3,
    ComponentType,
    Document,
    GltfError,
    component_count,
    component_size,
    decompose_matrix,
    invert_matrix,
)

# Surfaces are treated as roughly as thick as a sheet of paper.
PAPER_THICKNESS = 0.04 / 1000


class GeometryType(Enum):
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


class SurfaceMode(Enum):
    NORMAL = "normal"
    THIN_SHELL = "thin_shell"


def geometry_type(mode: int) -> GeometryType:
    """Map a glTF primitive mode to a triangle geometry type."""
    try:
        return GeometryType(mode)
    except ValueError:
        raise GltfError("Unsupported primitive mode for rintintin") from None


def _analysis_component_type(component_type: int) -> ComponentType:
    try:
        kind = ComponentType(component_type)
    except ValueError:
        kind = None
    if kind is None or kind is ComponentType.INT:
        raise GltfError("Unsupported glTF component type")
    return kind


@dataclass(frozen=True)
class Attribute:
    """A vertex attribute: its bytes from the first element on, and their layout."""

    data: bytes
    byte_length: int
    component_type: ComponentType
    size: int
    normalized: bool
    stride: int
    offset: int = 0


def make_attribute(doc: Document, accessor_index: int) -> Attribute:
    """Describe an accessor as an attribute; a stride of 0 means tightly packed."""
    view = doc.accessor_data(accessor_index)
    if view is None:
        raise GltfError("Invalid glTF attribute data")
    kind = _analysis_component_type(view.component_type)
    size = component_count(view.accessor_type)
    stride = view.byte_stride or component_size(kind) * size
    return Attribute(
        data=view.data,
        byte_length=view.byte_length,
        component_type=kind,
        size=size,
        normalized=view.normalized,
        stride=stride,
    )


@dataclass(frozen=True)
class MeshData:
    position: Attribute
    joints: Attribute
    weights: Attribute
    vertex_count: int
    geometry_type: GeometryType
    indices: Optional[bytes]
    index_type: Optional[ComponentType]
    index_count: int
    surface_mode: SurfaceMode
    thickness: float
    is_alpha_card: bool


_REQUIRED_ATTRIBUTES = ("POSITION", "JOINTS_0", "WEIGHTS_0")


def mesh_from_primitive(doc: Document, primitive: dict) -> MeshData:
    """Describe a skinned triangle primitive."""
    attributes = primitive.get("attributes", {})
    try:
        indices = [attributes[key] for key in _REQUIRED_ATTRIBUTES]
    except KeyError:
        raise GltfError(
            "Required vertex attributes (POSITION, JOINTS_0, WEIGHTS_0) not found"
        ) from None
    if any(doc.accessor_data(index) is None for index in indices):
        raise GltfError("Invalid vertex attribute data")

    position, joints, weights = (make_attribute(doc, index) for index in indices)
    vertex_count = doc.accessor_data(indices[0]).count
    geometry = geometry_type(primitive.get("mode", GeometryType.TRIANGLES.value))

    index_data = None
    index_type = None
    index_count = 0
    index_accessor = primitive.get("indices", -1)
    if index_accessor is not None and index_accessor >= 0:
        view = doc.accessor_data(index_accessor)
        if view is not None:
            index_data = view.data
            index_type = _analysis_component_type(view.component_type)
            index_count = view.count

    alpha_card = False
    materials = doc.json.get("materials", [])
    material = primitive.get("material", -1)
    if material is not None and 0 <= material < len(materials):
        entry = materials[material]
        alpha_card = entry.get("alphaMode", "OPAQUE") != "OPAQUE" and bool(
            entry.get("doubleSided", False)
        )

    return MeshData(
        position=position,
        joints=joints,
        weights=weights,
        vertex_count=vertex_count,
        geometry_type=geometry,
        indices=index_data,
        index_type=index_type,
        index_count=index_count,
        surface_mode=SurfaceMode.THIN_SHELL if alpha_card else SurfaceMode.NORMAL,
        thickness=PAPER_THICKNESS,
        is_alpha_card=alpha_card,
    )


@dataclass(frozen=True)
class SkinData:
    """Joint names, mesh-space origins, parent joints and bind rotations (x, y, z, w)."""

    names: list
    origins: list
    parents: list
    rotations: list


def _is_identity(matrix) -> bool:
    return tuple(float(v) for v in matrix) == IDENTITY_MATRIX


def skin_from_skin(doc: Document, skin_index: int) -> SkinData:
    """Read a skin's joints, preferring inverse bind matrices for joint placement."""
    skins = doc.json.get("skins", [])
    if skin_index is None or not 0 <= skin_index < len(skins):
        raise GltfError("No valid skin found for the specified mesh")
    skin = skins[skin_index]
    joints = list(skin.get("joints", []))
    if not joints:
        raise GltfError("Skin has no joints")

    nodes = doc.json.get("nodes", [])
    if any(not 0 <= node < len(nodes) for node in joints):
        raise GltfError("Invalid joint node index in skin")

    names = [nodes[node].get("name") or f"Joint_{i}" for i, node in enumerate(joints)]
    node_to_joint = {node: i for i, node in enumerate(joints)}
    parents = [-1] * len(joints)
    origins = []
    for i, node_index in enumerate(joints):
        node = nodes[node_index]
        matrix = node.get("matrix")
        if matrix is not None and not _is_identity(matrix):
            origins.append((float(matrix[12]), float(matrix[13]), float(matrix[14])))
        else:
            origins.append(tuple(float(v) for v in node.get("translation", NULL_VEC3)))
        for child in node.get("children", []):
            # Children outside the skin fall back to joint 0.
            parents[node_to_joint.get(child, 0)] = i

    rotations = [IDENTITY_ROTATION] * len(joints)
    ibm_index = skin.get("inverseBindMatrices", -1)
    view = doc.accessor_data(ibm_index)
    if (
        view is not None
        and view.accessor_type == "MAT4"
        and view.component_type == ComponentType.FLOAT
        and view.count == len(joints)
    ):
        floats = doc.read_floats(ibm_index, 16 * len(joints))
        for i in range(len(joints)):
            try:
                parts = decompose_matrix(invert_matrix(floats[i * 16:(i + 1) * 16]))
            except GltfError as exc:
                raise GltfError("Inverse bind pose invalid (cannot be decomposed).") from exc
            rotations[i] = parts.rotation
            origins[i] = parts.translation

    return SkinData(names=names, origins=origins, parents=parents, rotations=rotations)