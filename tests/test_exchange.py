"""Tests for animation document export and import."""

from __future__ import annotations

import json
import math

import pytest
from conftest import make_pose, store_with

from poseforge.exchange import (
    JOINT_DEFAULTS,
    LEGACY_NECK_ANGLE,
    DocumentLoadError,
    dumps_document,
    ensure_pose_compatibility,
    export_document,
    load_document,
    loads_document,
    read_document,
    save_document,
)
from poseforge.models import DOCUMENT_VERSION, Joint
from poseforge.timeline.keyframes import KeyframeStore


def _raw_pose(hip_x: float = 0.0, **angles: float) -> dict:
    return {"hip": {"x": hip_x, "y": 0.0}, "angles": dict(angles)}


# --- export ---


def test_export_metadata():
    store = store_with([0.0, 0.4, 1.0], duration_ms=4000)
    doc = export_document(store)
    assert doc.version == DOCUMENT_VERSION
    assert len(doc.keyframes) == 3
    assert doc.metadata.total_keyframes == 3
    assert doc.metadata.duration == 1.0
    assert doc.metadata.duration_ms == 4000
    assert doc.metadata.has_ik_support is True


def test_export_is_a_snapshot():
    store = store_with([0.0, 1.0])
    doc = export_document(store)
    store[0].pose.angles[Joint.HEAD] = 42.0
    assert doc.keyframes[0].pose.angles[Joint.HEAD] != 42.0


def test_export_empty_store():
    doc = export_document(KeyframeStore())
    assert doc.keyframes == []
    assert doc.metadata.total_keyframes == 0
    assert doc.metadata.duration == 0.0


def test_dumps_uses_wire_names():
    data = json.loads(dumps_document(store_with([0.0, 1.0])))
    assert set(data) == {"version", "format", "exportedAt", "keyframes", "metadata"}
    assert data["format"] == "stick-figure-animation"
    assert "neckBase" in data["keyframes"][0]["pose"]["angles"]
    assert data["metadata"]["durationMs"] == 5000
    assert data["metadata"]["totalKeyframes"] == 2


def test_round_trip(tmp_path):
    store = store_with([0.0, 0.3, 1.0], duration_ms=7000)
    path = save_document(store, tmp_path / "out" / "clip.json")
    loaded = read_document(path)
    assert [kf.time for kf in loaded.keyframes] == store.times
    assert [kf.pose for kf in loaded.keyframes] == [kf.pose for kf in store]
    assert loaded.duration_ms == 7000
    assert loaded.version == DOCUMENT_VERSION


# --- compatibility ---


def test_compatibility_fills_missing_angles():
    filled = ensure_pose_compatibility(_raw_pose(leftHand=0.1, neckBase=1.0))
    angles = filled["angles"]
    assert angles["leftHand"] == 0.1
    assert angles["neckBase"] == 1.0
    for joint, default in JOINT_DEFAULTS.items():
        if joint not in (Joint.LEFT_HAND, Joint.NECK_BASE):
            assert angles[joint.value] == default


def test_compatibility_migrates_old_neck():
    filled = ensure_pose_compatibility(_raw_pose(neck=-1.2))
    assert filled["angles"]["neckBase"] == -1.2
    assert filled["angles"]["neck"] == LEGACY_NECK_ANGLE


def test_compatibility_does_not_mutate_input():
    raw = _raw_pose(neck=-1.2)
    ensure_pose_compatibility(raw)
    assert raw["angles"] == {"neck": -1.2}


def test_every_non_root_joint_has_a_default():
    assert set(JOINT_DEFAULTS) == set(Joint) - {Joint.HIP}


# --- import shapes ---


def test_load_versioned_sorts_and_reads_duration():
    data = {
        "version": "1.0.0",
        "format": "stick-figure-animation",
        "keyframes": [
            {"pose": _raw_pose(2.0), "time": 1.0},
            {"pose": _raw_pose(1.0), "time": 0.0},
        ],
        "metadata": {"totalKeyframes": 2, "duration": 1.0, "durationMs": 3000},
    }
    loaded = load_document(data)
    assert [kf.pose.hip.x for kf in loaded.keyframes] == [1.0, 2.0]
    assert loaded.duration_ms == 3000
    assert loaded.version == "1.0.0"
    assert loaded.keyframes[0].pose.angles[Joint.LEFT_TOE] == math.pi


def test_load_versioned_without_metadata():
    data = {"version": "1.1.0", "format": "stick-figure-animation", "keyframes": []}
    loaded = load_document(data)
    assert loaded.keyframes == []
    assert loaded.duration_ms is None


def test_load_unversioned_records_keep_times():
    data = [
        {"pose": _raw_pose(1.0), "time": 0.0},
        {"pose": _raw_pose(2.0), "time": 0.25},
        {"pose": _raw_pose(3.0), "time": 1.0},
    ]
    loaded = load_document(data)
    assert [kf.time for kf in loaded.keyframes] == [0.0, 0.25, 1.0]
    assert loaded.duration_ms is None
    assert loaded.version is None


def test_load_legacy_poses_spaced_evenly():
    loaded = load_document([_raw_pose(1.0), _raw_pose(2.0), _raw_pose(3.0)])
    assert [kf.time for kf in loaded.keyframes] == [0.0, 0.5, 1.0]
    assert all(len(kf.pose.angles) == 13 for kf in loaded.keyframes)


def test_load_single_legacy_pose():
    loaded = load_document([_raw_pose(neck=0.3)])
    assert [kf.time for kf in loaded.keyframes] == [0.0]
    assert loaded.keyframes[0].pose.angles[Joint.NECK_BASE] == 0.3


def test_load_empty_list():
    assert load_document([]).keyframes == []


# --- errors ---


@pytest.mark.parametrize(
    "data",
    [
        {"keyframes": []},
        {"version": "1.1.0", "format": "something-else", "keyframes": []},
        {"version": "1.1.0", "format": "stick-figure-animation", "keyframes": {}},
        {
            "version": "1.1.0",
            "format": "stick-figure-animation",
            "keyframes": [{"pose": _raw_pose(), "time": 1.5}],
        },
        {
            "version": "1.1.0",
            "format": "stick-figure-animation",
            "keyframes": [{"pose": {"hip": {"x": 0, "y": 0}, "angles": {"head": "up"}}, "time": 0}],
        },
        [{"frame": 1}],
        [{"pose": _raw_pose(), "time": 0.0}, {"time": 1.0}],
        [{"pose": {"hip": {"x": 0, "y": 0}, "angles": {"tail": 1.0}}, "time": 0.0}],
        [{"hip": {"x": "left"}, "angles": {}}],
        42,
        "keyframes",
        None,
    ],
)
def test_load_rejects_malformed(data) -> None:
    with pytest.raises(DocumentLoadError):
        load_document(data)


def test_load_error_is_value_error():
    assert issubclass(DocumentLoadError, ValueError)


def test_loads_invalid_json():
    with pytest.raises(DocumentLoadError, match="invalid JSON"):
        loads_document("{not json")


def test_read_missing_file(tmp_path):
    with pytest.raises(DocumentLoadError, match="not found"):
        read_document(tmp_path / "nope.json")


def test_save_empty_store(tmp_path):
    path = save_document(KeyframeStore(), tmp_path / "empty.json")
    assert json.loads(path.read_text())["keyframes"] == []


def test_export_writes_edited_angles():
    store = KeyframeStore()
    store.add(make_pose(hip_x=12, head=0.5), 0)
    data = json.loads(dumps_document(store))
    assert data["keyframes"][0]["pose"]["angles"]["head"] == 0.5
