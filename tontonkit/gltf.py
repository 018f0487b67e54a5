"""A small glTF 2.0 document model with .gltf and .glb reading and writing."""

from __future__ import annotations

import base64
import copy
import json as jsonlib
import math
import struct
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Iterable, NamedTuple, Optional, Sequence
from urllib.parse import unquote

GLB_MAGIC = b"glTF"
GLB_VERSION = 2
CHUNK_JSON = 0x4E4F534A
CHUNK_BIN = 0x004E4942

IDENTITY_MATRIX = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)
IDENTITY_ROTATION = (0.0, 0.0, 0.0, 1.0)
NULL_VEC3 = (0.0, 0.0, 0.0)
IDENTITY_VEC3 = (1.0, 1.0, 1.0)

_FLOAT_EPSILON = 1.1920929e-07


class GltfError(ValueError):
    """Raised when a glTF document cannot be read, written or interpreted."""


class ComponentType(IntEnum):
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    INT = 5124
    UNSIGNED_INT = 5125
    FLOAT = 5126


# Signed 32-bit integers are deliberately not supported.
_COMPONENT_SIZES = {
    ComponentType.BYTE: 1,
    ComponentType.UNSIGNED_BYTE: 1,
    ComponentType.SHORT: 2,
    ComponentType.UNSIGNED_SHORT: 2,
    ComponentType.UNSIGNED_INT: 4,
    ComponentType.FLOAT: 4,
}

_COMPONENT_COUNTS = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}


def component_size(component_type: int) -> int:
    """Size in bytes of one component, or 0 for an unsupported type."""
    try:
        return _COMPONENT_SIZES.get(ComponentType(component_type), 0)
    except ValueError:
        return 0


def component_count(accessor_type: str) -> int:
    """Number of components of an accessor type, or 0 if unknown."""
    return _COMPONENT_COUNTS.get(accessor_type, 0)


@dataclass(frozen=True)
class AccessorView:
    """An accessor resolved to its buffer view and the bytes it starts at."""

    index: int
    accessor: dict
    buffer_view: dict
    data: bytes

    @property
    def count(self) -> int:
        return int(self.accessor.get("count", 0))

    @property
    def component_type(self) -> int:
        return int(self.accessor.get("componentType", 0))

    @property
    def accessor_type(self) -> str:
        return self.accessor.get("type", "SCALAR")

    @property
    def normalized(self) -> bool:
        return bool(self.accessor.get("normalized", False))

    @property
    def byte_stride(self) -> int:
        return int(self.buffer_view.get("byteStride", 0))

    @property
    def byte_length(self) -> int:
        return int(self.buffer_view.get("byteLength", 0))


def _empty_json() -> dict:
    return {"asset": {"version": "2.0"}}


@dataclass
class Document:
    """A glTF JSON tree together with the bytes of each of its buffers."""

    json: dict = field(default_factory=_empty_json)
    buffer_data: list = field(default_factory=list)

    def _section(self, key: str) -> list:
        return self.json.setdefault(key, [])

    @property
    def nodes(self) -> list:
        return self._section("nodes")

    @property
    def meshes(self) -> list:
        return self._section("meshes")

    @property
    def skins(self) -> list:
        return self._section("skins")

    @property
    def accessors(self) -> list:
        return self._section("accessors")

    @property
    def buffer_views(self) -> list:
        return self._section("bufferViews")

    @property
    def buffers(self) -> list:
        return self._section("buffers")

    @property
    def animations(self) -> list:
        return self._section("animations")

    @property
    def materials(self) -> list:
        return self._section("materials")

    @property
    def scenes(self) -> list:
        return self._section("scenes")

    @property
    def extensions_used(self) -> list:
        return self._section("extensionsUsed")

    def accessor_data(self, index: int) -> Optional[AccessorView]:
        """Resolve an accessor to its data, or None if any link is broken."""
        accessors = self.json.get("accessors", [])
        if index is None or not 0 <= index < len(accessors):
            return None
        accessor = accessors[index]
        views = self.json.get("bufferViews", [])
        view_index = accessor.get("bufferView", -1)
        if not 0 <= view_index < len(views):
            return None
        view = views[view_index]
        buffer_index = view.get("buffer", -1)
        if not 0 <= buffer_index < len(self.buffer_data):
            return None
        offset = int(view.get("byteOffset", 0)) + int(accessor.get("byteOffset", 0))
        return AccessorView(index, accessor, view, bytes(self.buffer_data[buffer_index][offset:]))

    def read_floats(self, accessor_index: int, count: int) -> list:
        """Read `count` tightly packed little-endian floats from an accessor."""
        view = self.accessor_data(accessor_index)
        if view is None:
            raise GltfError(f"invalid accessor {accessor_index}")
        if count < 0 or len(view.data) < count * 4:
            raise GltfError(f"accessor {accessor_index} holds fewer than {count} floats")
        return list(struct.unpack_from(f"<{count}f", view.data))


# ---------------------------------------------------------------------------
# Matrices (16 floats, column-major as in glTF)
# ---------------------------------------------------------------------------

class Decomposition(NamedTuple):
    scale: tuple
    rotation: tuple  # (x, y, z, w)
    translation: tuple
    skew: tuple


def _columns(matrix: Sequence[float]) -> list:
    values = [float(v) for v in matrix]
    if len(values) != 16:
        raise GltfError("a matrix needs 16 values")
    return [values[c * 4:c * 4 + 4] for c in range(4)]


def invert_matrix(matrix: Sequence[float]) -> tuple:
    """Invert a column-major 4x4 matrix."""
    cols = _columns(matrix)
    rows = [
        [cols[c][r] for c in range(4)] + [1.0 if r == k else 0.0 for k in range(4)]
        for r in range(4)
    ]
    for col in range(4):
        pivot = max(range(col, 4), key=lambda r: abs(rows[r][col]))
        if abs(rows[pivot][col]) < 1e-12:
            raise GltfError("matrix is singular")
        rows[col], rows[pivot] = rows[pivot], rows[col]
        p = rows[col][col]
        rows[col] = [v / p for v in rows[col]]
        for r in range(4):
            if r != col and rows[r][col]:
                f = rows[r][col]
                rows[r] = [x - f * y for x, y in zip(rows[r], rows[col])]
    inverse = [row[4:] for row in rows]
    return tuple(inverse[r][c] for c in range(4) for r in range(4))


def _dot(a, b) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _cross(a, b) -> list:
    return [
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ]


def _scaled(v, length: float) -> list:
    norm = math.sqrt(_dot(v, v))
    return [x * length / norm for x in v]


def _combine(a, b, sa: float, sb: float) -> list:
    return [x * sa + y * sb for x, y in zip(a, b)]


def decompose_matrix(matrix: Sequence[float]) -> Decomposition:
    """Split a column-major affine matrix into scale, rotation, translation, skew."""
    cols = _columns(matrix)
    w = cols[3][3]
    if w == 0.0:
        raise GltfError("matrix cannot be decomposed")
    local = [[v / w for v in col] for col in cols]
    rows = [local[i][:3] for i in range(3)]
    if abs(_dot(rows[0], _cross(rows[1], rows[2]))) <= _FLOAT_EPSILON:
        raise GltfError("matrix cannot be decomposed")
    translation = tuple(local[3][:3])

    scale = [0.0, 0.0, 0.0]
    skew = [0.0, 0.0, 0.0]
    scale[0] = math.sqrt(_dot(rows[0], rows[0]))
    rows[0] = _scaled(rows[0], 1.0)
    skew[2] = _dot(rows[0], rows[1])
    rows[1] = _combine(rows[1], rows[0], 1.0, -skew[2])
    scale[1] = math.sqrt(_dot(rows[1], rows[1]))
    rows[1] = _scaled(rows[1], 1.0)
    skew[2] /= scale[1]
    skew[1] = _dot(rows[0], rows[2])
    rows[2] = _combine(rows[2], rows[0], 1.0, -skew[1])
    skew[0] = _dot(rows[1], rows[2])
    rows[2] = _combine(rows[2], rows[1], 1.0, -skew[0])
    scale[2] = math.sqrt(_dot(rows[2], rows[2]))
    rows[2] = _scaled(rows[2], 1.0)
    skew[1] /= scale[2]
    skew[0] /= scale[2]

    if _dot(rows[0], _cross(rows[1], rows[2])) < 0:
        scale = [-s for s in scale]
        rows = [[-v for v in row] for row in rows]

    quat = [0.0, 0.0, 0.0, 0.0]  # x, y, z, w
    trace = rows[0][0] + rows[1][1] + rows[2][2]
    if trace > 0:
        root = math.sqrt(trace + 1.0)
        quat[3] = 0.5 * root
        root = 0.5 / root
        quat[0] = root * (rows[1][2] - rows[2][1])
        quat[1] = root * (rows[2][0] - rows[0][2])
        quat[2] = root * (rows[0][1] - rows[1][0])
    else:
        following = (1, 2, 0)
        i = 0
        if rows[1][1] > rows[0][0]:
            i = 1
        if rows[2][2] > rows[i][i]:
            i = 2
        j = following[i]
        k = following[j]
        root = math.sqrt(rows[i][i] - rows[j][j] - rows[k][k] + 1.0)
        quat[i] = 0.5 * root
        root = 0.5 / root
        quat[j] = root * (rows[i][j] + rows[j][i])
        quat[k] = root * (rows[i][k] + rows[k][i])
        quat[3] = root * (rows[j][k] - rows[k][j])

    return Decomposition(tuple(scale), tuple(quat), translation, tuple(skew))


# ---------------------------------------------------------------------------
# Reading and writing
# ---------------------------------------------------------------------------

def _decode_json(raw: bytes) -> dict:
    try:
        root = jsonlib.loads(raw.decode("utf-8"))
    except ValueError as exc:
        raise GltfError(f"invalid glTF JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise GltfError("glTF JSON must be an object")
    return root


def _buffer_bytes(index: int, entry: dict, bin_chunk: Optional[bytes], base_dir: Optional[Path]) -> bytes:
    uri = entry.get("uri")
    if not uri:
        if index == 0 and bin_chunk is not None:
            return bin_chunk
        raise GltfError(f"buffer {index} has no data")
    if uri.startswith("data:"):
        header, _, payload = uri.partition(",")
        if not header.endswith(";base64"):
            raise GltfError(f"buffer {index} has an unsupported data URI")
        try:
            return base64.b64decode(payload, validate=True)
        except ValueError as exc:
            raise GltfError(f"buffer {index} has invalid base64 data") from exc
    if base_dir is None:
        raise GltfError(f"buffer {index} refers to an external file")
    try:
        return (base_dir / unquote(uri)).read_bytes()
    except OSError as exc:
        raise GltfError(f"buffer {index}: {exc}") from exc


def _assemble(root: dict, bin_chunk: Optional[bytes], base_dir: Optional[Path]) -> Document:
    data = []
    for index, entry in enumerate(root.get("buffers", [])):
        raw = _buffer_bytes(index, entry, bin_chunk, base_dir)
        length = int(entry.get("byteLength", len(raw)))
        if len(raw) < length:
            raise GltfError(f"buffer {index} is shorter than its byteLength")
        data.append(bytearray(raw[:length]))
    return Document(root, data)


def _parse_glb(data: bytes, base_dir: Optional[Path]) -> Document:
    if len(data) < 12:
        raise GltfError("GLB data is too short")
    magic, version, length = struct.unpack_from("<4sII", data)
    if magic != GLB_MAGIC:
        raise GltfError("not a GLB file")
    if version != GLB_VERSION:
        raise GltfError(f"unsupported GLB version {version}")
    if length > len(data):
        raise GltfError("GLB data is truncated")
    chunks = []
    offset = 12
    while offset + 8 <= length:
        chunk_length, chunk_type = struct.unpack_from("<II", data, offset)
        offset += 8
        if offset + chunk_length > length:
            raise GltfError("GLB chunk is truncated")
        chunks.append((chunk_type, data[offset:offset + chunk_length]))
        offset += chunk_length
    if not chunks or chunks[0][0] != CHUNK_JSON:
        raise GltfError("GLB does not start with a JSON chunk")
    root = _decode_json(chunks[0][1])
    bin_chunk = next((chunk for kind, chunk in chunks[1:] if kind == CHUNK_BIN), None)
    return _assemble(root, bin_chunk, base_dir)


def parse_glb(data: bytes) -> Document:
    """Parse a self-contained binary glTF."""
    return _parse_glb(bytes(data), None)


def _check_buffers(doc: Document) -> None:
    if len(doc.json.get("buffers", [])) != len(doc.buffer_data):
        raise GltfError("buffer entries and buffer data do not match")


def _serialisable_json(doc: Document) -> dict:
    root = copy.deepcopy(doc.json)
    return {key: value for key, value in root.items() if value != []}


def _padded(raw: bytes, fill: bytes) -> bytes:
    return raw + fill * (-len(raw) % 4)


def build_glb(doc: Document) -> bytes:
    """Encode a document as GLB; the first buffer becomes the binary chunk."""
    _check_buffers(doc)
    root = _serialisable_json(doc)
    bin_chunk = None
    for index, (entry, data) in enumerate(zip(root.get("buffers", []), doc.buffer_data)):
        entry["byteLength"] = len(data)
        if index == 0:
            entry.pop("uri", None)
            bin_chunk = bytes(data)
        else:
            encoded = base64.b64encode(bytes(data)).decode("ascii")
            entry["uri"] = "data:application/octet-stream;base64," + encoded
    json_chunk = _padded(jsonlib.dumps(root, separators=(",", ":")).encode("utf-8"), b" ")
    body = struct.pack("<II", len(json_chunk), CHUNK_JSON) + json_chunk
    if bin_chunk is not None:
        padded = _padded(bin_chunk, b"\0")
        body += struct.pack("<II", len(padded), CHUNK_BIN) + padded
    return struct.pack("<4sII", GLB_MAGIC, GLB_VERSION, 12 + len(body)) + body


def load_document(path) -> Document:
    """Load a .gltf or .glb file."""
    path = Path(path)
    if not path.exists():
        raise GltfError("no such file or directory")
    extension = path.suffix.lower()
    if extension == ".gltf":
        return _assemble(_decode_json(path.read_bytes()), None, path.parent)
    if extension == ".glb":
        return _parse_glb(path.read_bytes(), path.parent)
    raise GltfError("file is not a gltf file")


def save_document(doc: Document, path) -> None:
    """Save as .glb or as .gltf with .bin files next to it, by extension."""
    path = Path(path)
    extension = path.suffix.lower()
    if extension not in (".glb", ".gltf"):
        raise GltfError(f"Unknown output extension: {extension}")
    _check_buffers(doc)
    entries = doc.json.get("buffers", [])
    if extension == ".glb":
        for entry, data in zip(entries, doc.buffer_data):
            entry["byteLength"] = len(data)
            entry.pop("uri", None)
        path.write_bytes(build_glb(doc))
        return
    for index, (entry, data) in enumerate(zip(entries, doc.buffer_data)):
        name = path.with_suffix(".bin").name if index == 0 else f"{path.stem}{index}.bin"
        entry["uri"] = name
        entry["byteLength"] = len(data)
        (path.parent / name).write_bytes(bytes(data))
    path.write_text(jsonlib.dumps(_serialisable_json(doc), indent=2), encoding="utf-8")


@dataclass(frozen=True)
class LoadedFile:
    index: int
    path: str
    filename: str
    document: Document


def load_documents(paths: Iterable[Any]) -> list:
    """Load each path that is not an option; report failures on stderr.

    A file that loads but holds no buffers abandons the whole batch.
    """
    result = []
    for index, item in enumerate(paths):
        path = str(item)
        if path.startswith("-"):
            continue
        try:
            doc = load_document(path)
        except (GltfError, OSError) as exc:
            print(f"{path}: {exc}.", file=sys.stderr)
            continue
        if not doc.buffer_data:
            return []
        result.append(LoadedFile(index, path, Path(path).stem, doc))
    return result