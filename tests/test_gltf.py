import math
import struct

import pytest

from tontonkit.gltf import (
    IDENTITY_MATRIX,
    Document,
    GltfError,
    build_glb,
    component_count,
    component_size,
    decompose_matrix,
    invert_matrix,
    load_document,
    load_documents,
    parse_glb,
    save_document,
)

VALUES = [0.5, 1.25, -2.0, 8.0]


def _float_doc(values=VALUES):
    data = bytearray(struct.pack(f"<{len(values)}f", *values))
    doc = Document()
    doc.buffers.append({"byteLength": len(data)})
    doc.buffer_data.append(data)
    doc.buffer_views.append({"buffer": 0, "byteOffset": 0, "byteLength": len(data)})
    doc.accessors.append(
        {"bufferView": 0, "componentType": 5126, "count": len(values), "type": "SCALAR"}
    )
    doc.nodes.append({"name": "root"})
    return doc


def _multiply(a, b):
    return [
        sum(a[k * 4 + r] * b[c * 4 + k] for k in range(4))
        for c in range(4)
        for r in range(4)
    ]


def test_component_sizes_and_counts():
    assert component_size(5126) == 4
    assert component_size(5123) == 2
    assert component_size(5121) == 1
    assert component_size(5124) == 0
    assert component_count("MAT4") == 16
    assert component_count("VEC3") == 3
    assert component_count("BOGUS") == 0


def test_accessor_data_resolves_view():
    doc = _float_doc()
    view = doc.accessor_data(0)
    assert view.count == len(VALUES)
    assert view.component_type == 5126
    assert view.accessor_type == "SCALAR"
    assert view.byte_stride == 0
    assert view.byte_length == len(VALUES) * 4


def test_accessor_data_invalid_links():
    doc = _float_doc()
    assert doc.accessor_data(5) is None
    assert doc.accessor_data(-1) is None
    doc.accessors.append({"count": 1, "componentType": 5126, "type": "SCALAR"})
    assert doc.accessor_data(1) is None


def test_read_floats_round_trip():
    assert _float_doc().read_floats(0, len(VALUES)) == VALUES


def test_read_floats_respects_offsets():
    doc = _float_doc()
    doc.accessors[0]["byteOffset"] = 4
    assert doc.read_floats(0, 3) == VALUES[1:]


def test_read_floats_errors():
    doc = _float_doc()
    with pytest.raises(GltfError):
        doc.read_floats(0, len(VALUES) + 1)
    with pytest.raises(GltfError):
        doc.read_floats(3, 1)


def test_invert_matrix_gives_identity():
    matrix = [2, 0, 0, 0, 0, 4, 0, 0, 1, 0, 0.5, 0, 1, 2, 3, 1]
    product = _multiply(matrix, invert_matrix(matrix))
    assert product == pytest.approx(list(IDENTITY_MATRIX), abs=1e-9)


def test_invert_singular_raises():
    with pytest.raises(GltfError):
        invert_matrix([0.0] * 16)


def test_matrix_needs_sixteen_values():
    with pytest.raises(GltfError):
        invert_matrix([1.0] * 9)


def test_decompose_identity():
    result = decompose_matrix(IDENTITY_MATRIX)
    assert result.scale == pytest.approx((1.0, 1.0, 1.0))
    assert result.rotation == pytest.approx((0.0, 0.0, 0.0, 1.0))
    assert result.translation == pytest.approx((0.0, 0.0, 0.0))


def test_decompose_rotation_scale_translation():
    matrix = [0, 2, 0, 0, -2, 0, 0, 0, 0, 0, 2, 0, 1, 2, 3, 1]
    result = decompose_matrix(matrix)
    s = math.sqrt(0.5)
    assert result.translation == pytest.approx((1, 2, 3))
    assert result.scale == pytest.approx((2, 2, 2))
    assert result.rotation == pytest.approx((0, 0, s, s))
    assert sum(v * v for v in result.rotation) == pytest.approx(1.0)


def test_decompose_rejects_degenerate():
    with pytest.raises(GltfError):
        decompose_matrix([1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0])
    with pytest.raises(GltfError):
        decompose_matrix([1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1])


def test_glb_round_trip():
    doc = _float_doc()
    glb = build_glb(doc)
    magic, version, length = struct.unpack_from("<4sII", glb)
    assert magic == b"glTF"
    assert version == 2
    assert length == len(glb)
    assert len(glb) % 4 == 0
    loaded = parse_glb(glb)
    assert loaded.read_floats(0, len(VALUES)) == VALUES
    assert loaded.nodes == [{"name": "root"}]


def test_glb_extra_buffer_round_trip():
    doc = _float_doc()
    doc.buffers.append({"byteLength": 3})
    doc.buffer_data.append(bytearray(b"abc"))
    loaded = parse_glb(build_glb(doc))
    assert loaded.buffer_data[1] == bytearray(b"abc")


def test_parse_glb_rejects_bad_data():
    glb = bytearray(build_glb(_float_doc()))
    with pytest.raises(GltfError):
        parse_glb(b"XXXX" + bytes(glb[4:]))
    glb[4:8] = struct.pack("<I", 1)
    with pytest.raises(GltfError):
        parse_glb(bytes(glb))
    with pytest.raises(GltfError):
        parse_glb(b"glTF")


def test_save_and_load_gltf(tmp_path):
    doc = _float_doc()
    target = tmp_path / "out.gltf"
    save_document(doc, target)
    assert doc.buffers[0]["uri"] == "out.bin"
    assert (tmp_path / "out.bin").exists()
    loaded = load_document(target)
    assert loaded.read_floats(0, len(VALUES)) == VALUES


def test_save_and_load_glb(tmp_path):
    target = tmp_path / "out.GLB"
    save_document(_float_doc(), target)
    loaded = load_document(target)
    assert loaded.read_floats(0, len(VALUES)) == VALUES
    assert "uri" not in loaded.buffers[0]


def test_save_unknown_extension(tmp_path):
    with pytest.raises(GltfError):
        save_document(_float_doc(), tmp_path / "out.obj")


def test_load_errors(tmp_path):
    with pytest.raises(GltfError):
        load_document(tmp_path / "missing.gltf")
    other = tmp_path / "model.txt"
    other.write_text("{}")
    with pytest.raises(GltfError):
        load_document(other)


def test_load_documents(tmp_path, capsys):
    good = tmp_path / "creature.glb"
    save_document(_float_doc(), good)
    files = load_documents(["-v", str(tmp_path / "missing.glb"), str(good)])
    assert [(f.index, f.filename) for f in files] == [(2, "creature")]
    assert files[0].document.read_floats(0, len(VALUES)) == VALUES
    assert "missing.glb: no such file or directory." in capsys.readouterr().err


def test_load_documents_without_buffers_returns_nothing(tmp_path):
    good = tmp_path / "a.glb"
    save_document(_float_doc(), good)
    empty = tmp_path / "b.gltf"
    save_document(Document(), empty)
    assert load_documents([str(good), str(empty)]) == []