"""Pose blending and keyframe segment lookup."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from poseforge.models.pose import Point, Pose

if TYPE_CHECKING:
    from collections.abc import Sequence

    from poseforge.models.enums import Joint
    from poseforge.models.pose import Keyframe


def lerp(a: float, b: float, t: float) -> float:
    return a * (1 - t) + b * t


def lerp_angle(a: float, b: float, t: float) -> float:
    """Interpolate two angles along the shorter way round the circle."""
    delta = b - a
    if abs(delta) > math.pi:
        if delta > 0:
            a += 2 * math.pi
        else:
            b += 2 * math.pi
    return lerp(a, b, t)


def _lerp_point(a: Point, b: Point, t: float) -> Point:
    return Point(x=lerp(a.x, b.x, t), y=lerp(a.y, b.y, t))


def interpolate_pose(pose_a: Pose, pose_b: Pose, t: float) -> Pose:
    """Blend two poses.

    Every angle of *pose_a* is interpolated against *pose_b*; when *pose_b*
    lacks that joint the value from *pose_a* is kept.
    """
    angles: dict[Joint, float] = {}
    for joint, angle in pose_a.angles.items():
        other = pose_b.angles.get(joint)
        angles[joint] = angle if other is None else lerp_angle(angle, other, t)
    return Pose(hip=_lerp_point(pose_a.hip, pose_b.hip, t), angles=angles)


def find_segment(progress: float, keyframes: Sequence[Keyframe]) -> int | None:
    """Index ``i`` of the first segment with ``time[i] <= progress <= time[i+1]``."""
    for i in range(len(keyframes) - 1):
        if keyframes[i].time <= progress <= keyframes[i + 1].time:
            return i
    return None


def get_pose_at_progress(progress: float, keyframes: Sequence[Keyframe]) -> Pose | None:
    """Pose of the clip at normalized *progress*.

    Returns ``None`` when there are no keyframes.  A single keyframe is
    returned as-is regardless of *progress*; outside the keyed range the
    nearest boundary keyframe is returned with no extrapolation.  The result
    is always a fresh copy.
    """
    if not keyframes:
        return None
    if len(keyframes) == 1:
        return keyframes[0].pose.clone()

    index = find_segment(progress, keyframes)
    if index is None:
        if progress > keyframes[-1].time:
            return keyframes[-1].pose.clone()
        return keyframes[0].pose.clone()

    source = keyframes[index]
    target = keyframes[index + 1]
    span = target.time - source.time
    segment_t = 1.0 if span == 0 else min(1.0, (progress - source.time) / span)
    return interpolate_pose(source.pose, target.pose, segment_t)
