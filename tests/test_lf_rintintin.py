import pytest

from tontonkit.gltf import GltfError
from tontonkit.lf_rintintin import Eigen, Metrics, RinTinTin, Transform


def test_default_transform_writes_nothing():
    assert Transform().to_json() == {}


def test_transform_round_trip():
    original = Transform((0.0, 1.0, 0.0, 0.0), (1.0, 2.0, 3.0), (2.0, 2.0, 2.0))
    data = original.to_json()
    assert data["translation"] == [1.0, 2.0, 3.0]
    assert Transform.from_json(data) == original


def test_transform_is_empty_uses_w_first_identity():
    assert Transform(rotation=(1.0, 0.0, 0.0, 0.0)).is_empty()
    assert not Transform().is_empty()
    assert not Transform(rotation=(1.0, 0.0, 0.0, 0.0), scaling=(2.0, 1.0, 1.0)).is_empty()


def test_transform_bad_length_raises():
    with pytest.raises(GltfError):
        Transform.from_json({"rotation": [1.0, 2.0]})


def test_eigen_round_trip():
    eigen = Eigen((0.0, 0.0, 0.0, 1.0), (1.0, 2.0, 3.0))
    data = eigen.to_json()
    assert set(data) == {"rotation", "lambda"}
    assert Eigen.from_json(data) == eigen


def test_eigen_missing_field_raises():
    with pytest.raises(GltfError, match="lambda"):
        Eigen.from_json({"rotation": [0, 0, 0, 1]})


def test_metrics_required_fields_always_written():
    data = Metrics().to_json()
    assert set(data) == {"volume", "centroid", "inertia"}


def test_metrics_round_trip():
    metrics = Metrics(
        volume=2.5,
        surface_area=7.0,
        centroid=(0.5, 0.25, 1.0),
        inertia=(1.0, 2.0, 3.0, 0.5, 0.25, 0.125),
        min=(-1.0, -1.0, -1.0),
        max=(1.0, 1.0, 1.0),
        covariance=(0.5, 0.5, 0.5),
    )
    data = metrics.to_json()
    assert data["surfaceArea"] == 7.0
    assert Metrics.from_json(data) == metrics


def test_metrics_missing_volume_raises():
    with pytest.raises(GltfError):
        Metrics.from_json({"centroid": [0, 0, 0], "inertia": [0] * 6})


def test_metrics_bad_inertia_raises():
    with pytest.raises(GltfError):
        Metrics.from_json({"volume": 1, "centroid": [0, 0, 0], "inertia": [0] * 5})


def test_rintintin_empty():
    empty = RinTinTin()
    assert empty.is_empty()
    assert empty.to_json() == {}
    assert RinTinTin.from_json({}) == empty


def test_rintintin_round_trip():
    ext = RinTinTin(
        metrics=[Metrics(volume=1.0, centroid=(1.0, 0.0, 0.0))],
        eigen_decompositions=[Eigen((0.0, 0.0, 0.0, 1.0), (1.0, 1.0, 1.0))],
        oriented_bounded_boxes=[Transform(translation=(0.0, 1.0, 0.0))],
    )
    data = ext.to_json()
    assert set(data) == {"metrics", "eigenDecompositions", "orientedBoundedBoxes"}
    assert not ext.is_empty()
    assert RinTinTin.from_json(data) == ext


def test_rintintin_rejects_non_object():
    with pytest.raises(GltfError):
        RinTinTin.from_json([1, 2])