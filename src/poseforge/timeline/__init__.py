"""Keyframe timeline: storage, interpolation, playback and previews."""

from poseforge.timeline.interpolation import (
    get_pose_at_progress,
    interpolate_pose,
    lerp,
    lerp_angle,
)
from poseforge.timeline.keyframes import KeyframeStore
from poseforge.timeline.playback import (
    FrameScheduler,
    ManualScheduler,
    PlaybackController,
    progress_at,
)
from poseforge.timeline.trail import (
    MotionTrail,
    OnionFrame,
    build_motion_trail,
    onion_skin_frames,
)

__all__ = [
    "FrameScheduler",
    "KeyframeStore",
    "ManualScheduler",
    "MotionTrail",
    "OnionFrame",
    "PlaybackController",
    "build_motion_trail",
    "get_pose_at_progress",
    "interpolate_pose",
    "lerp",
    "lerp_angle",
    "onion_skin_frames",
    "progress_at",
]
