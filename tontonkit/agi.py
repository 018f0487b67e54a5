"""AGI_articulations output and AGI_ animation clean-up for glTF documents."""

from __future__ import annotations

import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO

from .chacha import AnimationChannel, Articulation, StageType, _is_agi_name
from .gltf import Document

EXTENSION_NAME = "AGI_articulations"
_RAD_TO_DEG = 180.0 / math.pi
_ROTATION_STAGES = frozenset({StageType.X_ROTATE, StageType.Y_ROTATE, StageType.Z_ROTATE})


def _resolved_node(articulation: Articulation, joint_nodes: Sequence[int]) -> int:
    if 0 <= articulation.node < len(joint_nodes):
        return joint_nodes[articulation.node]
    return articulation.node


def _articulation_name(doc: Document, articulation: Articulation, joint_nodes: Sequence[int]) -> str:
    """Prefer the glTF node's name, then the articulation's own, then a generated one."""
    nodes = doc.json.get("nodes", [])
    node_index = _resolved_node(articulation, joint_nodes)
    if 0 <= node_index < len(nodes) and nodes[node_index].get("name"):
        return nodes[node_index]["name"]
    if articulation.name:
        return articulation.name
    return f"joint_{articulation.node}"


def _degrees_factor(stage_type: StageType) -> float:
    return _RAD_TO_DEG if stage_type in _ROTATION_STAGES else 1.0


def write_agi_articulations(
    doc: Document, articulations: Iterable[Articulation], joint_nodes: Sequence[int]
) -> None:
    """Store articulations as the AGI_articulations extension, in degrees for rotations."""
    nodes = doc.json.get("nodes", [])
    entries = []
    for articulation in articulations:
        name = _articulation_name(doc, articulation, joint_nodes)
        stages = []
        for stage in articulation.stages:
            factor = _degrees_factor(stage.type)
            stage_json = {
                "type": stage.type.value,
                "minimumValue": stage.min_value * factor,
                "maximumValue": stage.max_value * factor,
                "initialValue": stage.initial_value * factor,
            }
            if stage.max_velocity > 0:
                stage_json["maximumSpeed"] = stage.max_velocity * factor
            if stage.max_effort > 0:
                stage_json["maximumEffort"] = stage.max_effort
            stages.append(stage_json)

        entry = {"name": name, "stages": stages}
        if 0 <= articulation.node < len(joint_nodes):
            entry["pointingVector"] = [0, 0, 1]
        entries.append(entry)

        node_index = _resolved_node(articulation, joint_nodes)
        if 0 <= node_index < len(nodes):
            node_ext = nodes[node_index].setdefault("extensions", {})
            node_ext.setdefault(EXTENSION_NAME, {})["articulationName"] = name

    doc_ext = doc.json.setdefault("extensions", {})
    doc_ext.setdefault(EXTENSION_NAME, {})["articulations"] = entries
    used = doc.extensions_used
    if EXTENSION_NAME not in used:
        used.append(EXTENSION_NAME)


def _primitive_accessors(doc: Document):
    for mesh in doc.json.get("meshes", []):
        for primitive in mesh.get("primitives", []):
            yield primitive


def remove_agi_animations(doc: Document) -> None:
    """Drop animations named AGI_* and the accessors and buffer views only they used."""
    animations = doc.json.get("animations", [])
    agi = {i for i, anim in enumerate(animations) if _is_agi_name(anim.get("name", ""))}
    if not agi:
        return

    refcount: dict = {}

    def ref(index, delta=1, always=False):
        if index is not None and (always or index >= 0):
            refcount[index] = refcount.get(index, 0) + delta

    for anim in animations:
        for sampler in anim.get("samplers", []):
            ref(sampler.get("input", -1))
            ref(sampler.get("output", -1))
    for primitive in _primitive_accessors(doc):
        ref(primitive.get("indices", -1))
        for value in primitive.get("attributes", {}).values():
            ref(value, always=True)
        for target in primitive.get("targets", []):
            for value in target.values():
                ref(value, always=True)
    for skin in doc.json.get("skins", []):
        ref(skin.get("inverseBindMatrices", -1))

    for index in agi:
        for sampler in animations[index].get("samplers", []):
            ref(sampler.get("input", -1), -1)
            ref(sampler.get("output", -1), -1)

    removable_accessors = {idx for idx, count in refcount.items() if count <= 0}

    accessors = doc.json.get("accessors", [])
    views = doc.json.get("bufferViews", [])
    view_refcount: dict = {}
    for accessor in accessors:
        view = accessor.get("bufferView", -1)
        if view >= 0:
            view_refcount[view] = view_refcount.get(view, 0) + 1
    for idx in removable_accessors:
        if 0 <= idx < len(accessors):
            view = accessors[idx].get("bufferView", -1)
            if view >= 0:
                view_refcount[view] -= 1
    removable_views = {idx for idx, count in view_refcount.items() if count <= 0}

    def remap_table(size, removed):
        table = []
        next_index = 0
        for i in range(size):
            if i in removed:
                table.append(-1)
            else:
                table.append(next_index)
                next_index += 1
        return table

    accessor_remap = remap_table(len(accessors), removable_accessors)
    view_remap = remap_table(len(views), removable_views)

    kept_accessors = [a for i, a in enumerate(accessors) if i not in removable_accessors]
    kept_views = [v for i, v in enumerate(views) if i not in removable_views]
    if "accessors" in doc.json:
        doc.json["accessors"] = kept_accessors
    if "bufferViews" in doc.json:
        doc.json["bufferViews"] = kept_views

    def remap_field(obj: dict, key: str, table: list) -> None:
        index = obj.get(key)
        if index is not None and 0 <= index < len(table):
            obj[key] = table[index]

    def remap_values(mapping: dict) -> None:
        for key, index in mapping.items():
            if 0 <= index < len(accessor_remap) and accessor_remap[index] >= 0:
                mapping[key] = accessor_remap[index]

    for accessor in kept_accessors:
        remap_field(accessor, "bufferView", view_remap)
    for i, anim in enumerate(animations):
        if i in agi:
            continue
        for sampler in anim.get("samplers", []):
            remap_field(sampler, "input", accessor_remap)
            remap_field(sampler, "output", accessor_remap)
    for primitive in _primitive_accessors(doc):
        remap_field(primitive, "indices", accessor_remap)
        remap_values(primitive.get("attributes", {}))
        for target in primitive.get("targets", []):
            remap_values(target)
    for skin in doc.json.get("skins", []):
        remap_field(skin, "inverseBindMatrices", accessor_remap)

    doc.json["animations"] = [a for i, a in enumerate(animations) if i not in agi]


def has_agi_articulations(doc: Document) -> bool:
    """True if the document already carries the AGI_articulations extension."""
    extensions = doc.json.get("extensions")
    return isinstance(extensions, dict) and EXTENSION_NAME in extensions


def articulations_json(
    doc: Document, articulations: Iterable[Articulation], joint_nodes: Sequence[int]
) -> list:
    """Articulations as plain JSON data, with joint names resolved from the document."""
    root = []
    for articulation in articulations:
        entry = {
            "name": _articulation_name(doc, articulation, joint_nodes),
            "node": articulation.node,
        }
        if 0 <= articulation.node < len(joint_nodes):
            entry["glTF_node"] = joint_nodes[articulation.node]
        stages = []
        for stage in articulation.stages:
            factor = _degrees_factor(stage.type)
            stage_json = {
                "type": stage.type.value,
                "min": stage.min_value * factor,
                "max": stage.max_value * factor,
                "initial": stage.initial_value * factor,
            }
            if stage.max_velocity > 0:
                stage_json["maxSpeed"] = stage.max_velocity * factor
            stages.append(stage_json)
        entry["stages"] = stages
        root.append(entry)
    return root


def print_articulations_json(
    stream: TextIO, doc: Document, articulations: Iterable[Articulation], joint_nodes: Sequence[int]
) -> None:
    """Write articulations as indented JSON followed by a newline."""
    data = articulations_json(doc, articulations, joint_nodes)
    stream.write(json.dumps(data, indent=2, sort_keys=True) + "\n")


def find_skin_index(doc: Document) -> Optional[int]:
    """The skin of the first skinned node, else skin 0 if any, else None."""
    skins = doc.json.get("skins", [])
    for node in doc.json.get("nodes", []):
        skin = node.get("skin", -1)
        if skin is not None and 0 <= skin < len(skins):
            return skin
    return 0 if skins else None


def remap_channels_to_joints(
    channels: Iterable[AnimationChannel], joint_nodes: Sequence[int]
) -> list:
    """Readdress channels by joint index, dropping those that target non-joint nodes."""
    node_to_joint = {node: i for i, node in enumerate(joint_nodes)}
    return [
        replace(channel, node=node_to_joint[channel.node])
        for channel in channels
        if channel.node in node_to_joint
    ]


def default_output_path(input_path) -> Path:
    """<input stem>-chacha<ext> next to the input file."""
    path = Path(input_path)
    return path.parent / f"{path.stem}-chacha{path.suffix}"