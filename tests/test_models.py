"""Tests for poseforge data models."""

import math

import pytest
from pydantic import ValidationError

from poseforge.models import (
    DOCUMENT_FORMAT,
    DOCUMENT_VERSION,
    AnimationDocument,
    DocumentMetadata,
    EndEffector,
    Joint,
    Keyframe,
    PlaybackMode,
    Point,
    Pose,
)


def test_enums():
    assert Joint.NECK_BASE == "neckBase"
    assert PlaybackMode.PING_PONG == "ping-pong"
    assert len(Joint) == 14


def test_end_effectors_are_joints():
    for effector in EndEffector:
        assert effector.joint.value == effector.value


def test_point_is_frozen():
    p = Point(x=1, y=2)
    with pytest.raises(ValidationError):
        p.x = 5  # type: ignore[misc]


def test_pose_parses_joint_names():
    pose = Pose.model_validate({"hip": {"x": 1, "y": 2}, "angles": {"leftHand": 0.5}})
    assert pose.angles == {Joint.LEFT_HAND: 0.5}


def test_pose_rejects_unknown_joint():
    with pytest.raises(ValidationError):
        Pose.model_validate({"hip": {"x": 0, "y": 0}, "angles": {"spine": 0.0}})


def test_pose_clone_is_independent():
    pose = Pose(hip=Point(x=0, y=0), angles={Joint.HEAD: 1.0})
    copy = pose.clone()
    copy.angles[Joint.HEAD] = 2.0
    copy.hip = Point(x=9, y=9)
    assert pose.angles[Joint.HEAD] == 1.0
    assert pose.hip == Point(x=0, y=0)


def test_keyframe_clone_is_independent():
    kf = Keyframe(pose=Pose(hip=Point(x=0, y=0), angles={Joint.HEAD: 1.0}), time=0.5)
    copy = kf.clone()
    copy.pose.angles[Joint.HEAD] = -1.0
    assert kf.pose.angles[Joint.HEAD] == 1.0
    assert copy.time == 0.5


@pytest.mark.parametrize("bad", [-0.1, 1.01])
def test_keyframe_time_bounds(bad: float) -> None:
    with pytest.raises(ValidationError):
        Keyframe(pose=Pose(hip=Point(x=0, y=0)), time=bad)


def test_document_serializes_with_aliases():
    doc = AnimationDocument(
        keyframes=[Keyframe(pose=Pose(hip=Point(x=1, y=2), angles={Joint.NECK: math.pi}), time=0)],
        metadata=DocumentMetadata(total_keyframes=1, duration=0.0, duration_ms=5000),
    )
    data = doc.model_dump(mode="json", by_alias=True)
    assert data["version"] == DOCUMENT_VERSION
    assert data["format"] == DOCUMENT_FORMAT
    assert "exportedAt" in data
    assert data["keyframes"][0]["pose"]["angles"] == {"neck": math.pi}
    assert data["metadata"] == {
        "totalKeyframes": 1,
        "duration": 0.0,
        "durationMs": 5000.0,
        "hasIKSupport": True,
    }
