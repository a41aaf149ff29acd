"""Onion skin and motion trail previews."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from poseforge.kinematics.skeleton import calculate_points_from_pose
from poseforge.rendering import draw_stick_figure
from poseforge.timeline.interpolation import get_pose_at_progress

if TYPE_CHECKING:
    from collections.abc import Sequence

    from poseforge.kinematics.skeleton import Skeleton
    from poseforge.models.pose import Keyframe, Pose

logger = logging.getLogger(__name__)

TRAIL_COLOUR = (200, 225, 255)
ONION_BEFORE_COLOUR = (255, 87, 34)
ONION_AFTER_COLOUR = (33, 150, 243)
ONION_BASE_OPACITY = 0.4
ONION_MIN_OPACITY = 0.05


@dataclass
class MotionTrail:
    """A prerendered stack of every interpolated frame of the clip."""

    image: Image.Image
    total_frames: int
    frames_drawn: int
    step: int
    opacity: float


@dataclass
class OnionFrame:
    """A neighbouring keyframe to ghost behind the active one."""

    index: int
    pose: Pose
    opacity: float
    colour: tuple[int, int, int]

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        return (*self.colour, round(self.opacity * 255))


def trail_opacity(frames_to_draw: int) -> float:
    """Per-frame opacity so the whole trail reads about equally bright."""
    return max(0.01, min(0.25, 15 / frames_to_draw))


def build_motion_trail(
    keyframes: Sequence[Keyframe],
    duration_ms: float,
    skeleton: Skeleton,
    *,
    size: tuple[int, int],
    resolution: int = 1,
    fps: int = 60,
    colour: tuple[int, int, int] = TRAIL_COLOUR,
) -> MotionTrail | None:
    """Render every *resolution*-th frame of the clip onto one transparent image.

    Returns ``None`` when there is nothing worth drawing: fewer than two
    keyframes, a clip shorter than two frames, or a step larger than the
    clip.
    """
    if len(keyframes) < 2:
        return None

    total_frames = math.floor(duration_ms / 1000 * fps)
    if total_frames < 2:
        return None

    step = max(1, resolution)
    frames_to_draw = total_frames // step
    if frames_to_draw <= 0:
        return None

    opacity = trail_opacity(frames_to_draw)
    fill = (*colour, round(opacity * 255))

    trail = Image.new("RGBA", size, (0, 0, 0, 0))
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    drawn = 0
    for i in range(0, total_frames, step):
        pose = get_pose_at_progress(i / (total_frames - 1), keyframes)
        if pose is None:
            continue
        layer.paste((0, 0, 0, 0), (0, 0, *size))
        draw_stick_figure(draw, calculate_points_from_pose(pose, skeleton), fill)
        trail.alpha_composite(layer)
        drawn += 1

    logger.debug("Built motion trail: %d of %d frames (opacity %.3f)", drawn, total_frames, opacity)
    return MotionTrail(
        image=trail,
        total_frames=total_frames,
        frames_drawn=drawn,
        step=step,
        opacity=opacity,
    )


def onion_skin_frames(
    keyframes: Sequence[Keyframe],
    active_index: int | None,
    before: int,
    after: int,
) -> list[OnionFrame]:
    """Keyframes around the active one, fading with distance.

    Opacity is ``0.4 / distance``; frames at or below 0.05 are skipped.
    Earlier keyframes are tinted orange-red and later ones blue.
    """
    if active_index is None:
        return []

    frames: list[OnionFrame] = []
    for direction, count, colour in (
        (-1, before, ONION_BEFORE_COLOUR),
        (1, after, ONION_AFTER_COLOUR),
    ):
        for distance in range(1, count + 1):
            index = active_index + direction * distance
            if not 0 <= index < len(keyframes):
                break
            opacity = ONION_BASE_OPACITY / distance
            if opacity <= ONION_MIN_OPACITY:
                break
            frames.append(
                OnionFrame(index=index, pose=keyframes[index].pose.clone(), opacity=opacity, colour=colour)
            )
    return frames
