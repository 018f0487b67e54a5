"""Animation channels and skeletons read from glTF for joint articulation analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .gltf import IDENTITY_MATRIX, IDENTITY_ROTATION, NULL_VEC3, Document, GltfError, decompose_matrix


class Property(Enum):
    ROTATION = "rotation"
    TRANSLATION = "translation"
    SCALE = "scale"


_VALUES_PER_KEY = {Property.ROTATION: 4, Property.TRANSLATION: 3, Property.SCALE: 3}


class InterpolationType(Enum):
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBIC_SPLINE = "CUBICSPLINE"


class StageType(Enum):
    X_TRANSLATE = "xTranslate"
    Y_TRANSLATE = "yTranslate"
    Z_TRANSLATE = "zTranslate"
    X_ROTATE = "xRotate"
    Y_ROTATE = "yRotate"
    Z_ROTATE = "zRotate"
    X_SCALE = "xScale"
    Y_SCALE = "yScale"
    Z_SCALE = "zScale"


@dataclass
class Stage:
    """One degree of freedom of a joint; rotations in radians, translations in metres."""

    type: StageType
    min_value: float
    max_value: float
    initial_value: float = 0.0
    max_velocity: float = 0.0
    max_effort: float = 0.0


@dataclass
class Articulation:
    node: int
    name: str = ""
    stages: list = field(default_factory=list)


@dataclass(frozen=True)
class AnimationChannel:
    """Key times and flat values of one animated property of one node."""

    node: int
    property: Property
    interp: InterpolationType
    times: tuple
    values: tuple


@dataclass(frozen=True)
class Skeleton:
    """Joint parents and local rest poses; rotations are (x, y, z, w)."""

    parents: tuple
    rest_rotations: tuple
    rest_translations: tuple


@dataclass
class ExtractedAnimations:
    """Channels addressed by glTF node index, and the indices of AGI_ animations."""

    channels: list = field(default_factory=list)
    agi_animation_indices: set = field(default_factory=set)


@dataclass
class ExtractedSkeleton:
    parents: list
    rest_rotations: list
    rest_translations: list
    joint_nodes: list  # joint index -> glTF node index

    def as_skeleton(self) -> Skeleton:
        return Skeleton(
            tuple(self.parents),
            tuple(self.rest_rotations),
            tuple(self.rest_translations),
        )


def _is_agi_name(name: str) -> bool:
    return (name or "")[:4].lower() == "agi_"


def _read_channel(doc: Document, channel: dict, samplers: list) -> Optional[AnimationChannel]:
    target = channel.get("target", {})
    node = target.get("node", -1)
    if node is None or node < 0:
        return None
    sampler_index = channel.get("sampler", -1)
    if not 0 <= sampler_index < len(samplers):
        return None
    try:
        prop = Property(target.get("path"))
    except ValueError:
        return None

    sampler = samplers[sampler_index]
    interp = {
        "STEP": InterpolationType.STEP,
        "CUBICSPLINE": InterpolationType.CUBIC_SPLINE,
    }.get(sampler.get("interpolation", "LINEAR"), InterpolationType.LINEAR)

    time_view = doc.accessor_data(sampler.get("input", -1))
    value_view = doc.accessor_data(sampler.get("output", -1))
    if time_view is None or value_view is None:
        return None
    key_count = time_view.count
    if key_count == 0:
        return None

    # Cubic splines hold an in-tangent, value and out-tangent per key.
    per_key = _VALUES_PER_KEY[prop] * (3 if interp is InterpolationType.CUBIC_SPLINE else 1)
    times = doc.read_floats(time_view.index, key_count)
    values = doc.read_floats(value_view.index, key_count * per_key)
    return AnimationChannel(node, prop, interp, tuple(times), tuple(values))


def extract_animation_channels(doc: Document) -> ExtractedAnimations:
    """Collect rotation, translation and scale channels from every animation."""
    result = ExtractedAnimations()
    for anim_index, animation in enumerate(doc.json.get("animations", [])):
        if _is_agi_name(animation.get("name", "")):
            result.agi_animation_indices.add(anim_index)
        samplers = animation.get("samplers", [])
        for channel in animation.get("channels", []):
            extracted = _read_channel(doc, channel, samplers)
            if extracted is not None:
                result.channels.append(extracted)
    return result


def extract_skeleton(doc: Document, skin_index: int) -> ExtractedSkeleton:
    """Read a skin's joint hierarchy and node-local rest poses."""
    skins = doc.json.get("skins", [])
    if skin_index is None or not 0 <= skin_index < len(skins):
        raise GltfError("Invalid skin index")
    joints = list(skins[skin_index].get("joints", []))
    if not joints:
        raise GltfError("Skin has no joints")
    nodes = doc.json.get("nodes", [])
    if any(not 0 <= node < len(nodes) for node in joints):
        raise GltfError("Invalid joint node index in skin")

    node_to_joint = {node: i for i, node in enumerate(joints)}
    parents = [-1] * len(joints)
    rotations = []
    translations = []
    for i, node_index in enumerate(joints):
        node = nodes[node_index]
        for child in node.get("children", []):
            joint = node_to_joint.get(child)
            if joint is not None:
                parents[joint] = i

        rotation = tuple(float(v) for v in node.get("rotation", IDENTITY_ROTATION))
        translation = tuple(float(v) for v in node.get("translation", NULL_VEC3))
        matrix = node.get("matrix")
        if matrix is not None and tuple(float(v) for v in matrix) != IDENTITY_MATRIX:
            try:
                parts = decompose_matrix(matrix)
                rotation, translation = parts.rotation, parts.translation
            except GltfError:
                rotation, translation = IDENTITY_ROTATION, NULL_VEC3
        rotations.append(rotation)
        translations.append(translation)

    return ExtractedSkeleton(parents, rotations, translations, joints)