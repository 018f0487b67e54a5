"""Per-joint volumetric analysis results and their glTF JSON form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .gltf import IDENTITY_ROTATION, IDENTITY_VEC3, NULL_VEC3, GltfError


def _floats(value: Any, size: int, key: str) -> tuple:
    if not isinstance(value, (list, tuple)) or len(value) != size:
        raise GltfError(f"field {key} must be an array of {size} numbers")
    try:
        return tuple(float(v) for v in value)
    except (TypeError, ValueError) as exc:
        raise GltfError(f"field {key} must hold numbers") from exc


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GltfError(f"field {key} must be a number")
    return float(value)


def _object(data: Any) -> dict:
    if not isinstance(data, dict):
        raise GltfError("expected a JSON object")
    return data


def _required(data: dict, key: str) -> Any:
    if key not in data:
        raise GltfError(f"Required field not found: {key}")
    return data[key]


@dataclass
class Transform:
    rotation: tuple = IDENTITY_ROTATION
    translation: tuple = NULL_VEC3
    scaling: tuple = IDENTITY_VEC3

    def is_empty(self) -> bool:
        return (
            tuple(self.scaling) == (1.0, 1.0, 1.0)
            and tuple(self.translation) == (0.0, 0.0, 0.0)
            and tuple(self.rotation) == (1.0, 0.0, 0.0, 0.0)
        )

    def to_json(self) -> dict:
        out = {}
        if tuple(self.rotation) != IDENTITY_ROTATION:
            out["rotation"] = list(self.rotation)
        if tuple(self.translation) != NULL_VEC3:
            out["translation"] = list(self.translation)
        if tuple(self.scaling) != IDENTITY_VEC3:
            out["scaling"] = list(self.scaling)
        return out

    @classmethod
    def from_json(cls, data: Any) -> "Transform":
        data = _object(data)
        result = cls()
        if "rotation" in data:
            result.rotation = _floats(data["rotation"], 4, "rotation")
        if "translation" in data:
            result.translation = _floats(data["translation"], 3, "translation")
        if "scaling" in data:
            result.scaling = _floats(data["scaling"], 3, "scaling")
        return result


@dataclass
class Eigen:
    rotation: tuple
    lambda_: tuple  # min, mid, max ordering

    def to_json(self) -> dict:
        return {"rotation": list(self.rotation), "lambda": list(self.lambda_)}

    @classmethod
    def from_json(cls, data: Any) -> "Eigen":
        data = _object(data)
        return cls(
            _floats(_required(data, "rotation"), 4, "rotation"),
            _floats(_required(data, "lambda"), 3, "lambda"),
        )


@dataclass
class Metrics:
    volume: float = 0.0
    surface_area: float = 0.0
    centroid: tuple = NULL_VEC3
    inertia: tuple = (0.0,) * 6  # xx yy zz xy xz yz, unit density
    min: tuple = NULL_VEC3
    max: tuple = NULL_VEC3
    covariance: tuple = NULL_VEC3

    def to_json(self) -> dict:
        out = {
            "volume": self.volume,
            "centroid": list(self.centroid),
            "inertia": list(self.inertia),
        }
        if self.surface_area != 0.0:
            out["surfaceArea"] = self.surface_area
        for key, value in (("min", self.min), ("max", self.max), ("covariance", self.covariance)):
            if tuple(value) != NULL_VEC3:
                out[key] = list(value)
        return out

    @classmethod
    def from_json(cls, data: Any) -> "Metrics":
        data = _object(data)
        result = cls(
            volume=_number(_required(data, "volume"), "volume"),
            centroid=_floats(_required(data, "centroid"), 3, "centroid"),
            inertia=_floats(_required(data, "inertia"), 6, "inertia"),
        )
        if "surfaceArea" in data:
            result.surface_area = _number(data["surfaceArea"], "surfaceArea")
        if "min" in data:
            result.min = _floats(data["min"], 3, "min")
        if "max" in data:
            result.max = _floats(data["max"], 3, "max")
        if "covariance" in data:
            result.covariance = _floats(data["covariance"], 3, "covariance")
        return result


def _items(data: dict, key: str, kind) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise GltfError(f"field {key} must be an array")
    return [kind.from_json(item) for item in value]


@dataclass
class RinTinTin:
    """Per-skin results; each list, when present, has one entry per joint."""

    metrics: list = field(default_factory=list)
    eigen_decompositions: list = field(default_factory=list)
    oriented_bounded_boxes: list = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.metrics or self.eigen_decompositions or self.oriented_bounded_boxes)

    def to_json(self) -> dict:
        out = {}
        if self.metrics:
            out["metrics"] = [m.to_json() for m in self.metrics]
        if self.eigen_decompositions:
            out["eigenDecompositions"] = [e.to_json() for e in self.eigen_decompositions]
        if self.oriented_bounded_boxes:
            out["orientedBoundedBoxes"] = [t.to_json() for t in self.oriented_bounded_boxes]
        return out

    @classmethod
    def from_json(cls, data: Any) -> "RinTinTin":
        data = _object(data)
        return cls(
            _items(data, "metrics", Metrics),
            _items(data, "eigenDecompositions", Eigen),
            _items(data, "orientedBoundedBoxes", Transform),
        )