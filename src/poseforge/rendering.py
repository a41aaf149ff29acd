"""Stick figure rasterisation with Pillow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from poseforge.kinematics.skeleton import calculate_points_from_pose
from poseforge.models.enums import Joint

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from poseforge.kinematics.skeleton import Skeleton
    from poseforge.models.pose import Point, Pose

logger = logging.getLogger(__name__)

Colour = tuple[int, int, int] | tuple[int, int, int, int]

HEAD_RADIUS = 20
HAND_RADIUS = 8
LINE_WIDTH = 3

# Polylines drawn for the body, each a run of joints.
BODY_STROKES: list[tuple[Joint, ...]] = [
    (Joint.HEAD, Joint.NECK, Joint.NECK_BASE, Joint.HIP),
    (Joint.NECK_BASE, Joint.LEFT_ELBOW, Joint.LEFT_HAND),
    (Joint.NECK_BASE, Joint.RIGHT_ELBOW, Joint.RIGHT_HAND),
    (Joint.HIP, Joint.LEFT_KNEE, Joint.LEFT_FOOT, Joint.LEFT_TOE),
    (Joint.HIP, Joint.RIGHT_KNEE, Joint.RIGHT_FOOT, Joint.RIGHT_TOE),
]


def draw_stick_figure(
    draw: ImageDraw.ImageDraw,
    points: Mapping[Joint, Point],
    colour: Colour = (255, 255, 255, 255),
    *,
    line_width: int = LINE_WIDTH,
) -> None:
    """Draw one figure from already-solved joint positions.

    Strokes stop at the first joint that is missing from *points*.
    """
    for stroke in BODY_STROKES:
        run: list[tuple[float, float]] = []
        for joint in stroke:
            point = points.get(joint)
            if point is None:
                break
            run.append((point.x, point.y))
        if len(run) >= 2:
            draw.line(run, fill=colour, width=line_width, joint="curve")

    head = points.get(Joint.HEAD)
    if head is not None:
        r = HEAD_RADIUS
        draw.ellipse([head.x - r, head.y - r, head.x + r, head.y + r], outline=colour, width=line_width)

    for hand in (Joint.LEFT_HAND, Joint.RIGHT_HAND):
        point = points.get(hand)
        if point is not None:
            r = HAND_RADIUS
            draw.ellipse([point.x - r, point.y - r, point.x + r, point.y + r], fill=colour)


def render_pose_image(
    pose: Pose,
    skeleton: Skeleton,
    *,
    size: tuple[int, int],
    bg_colour: Colour = (0, 0, 0, 0),
    colour: Colour = (255, 255, 255, 255),
) -> Image.Image:
    """Render a single pose onto a fresh RGBA image."""
    img = Image.new("RGBA", size, bg_colour)
    draw_stick_figure(ImageDraw.Draw(img), calculate_points_from_pose(pose, skeleton), colour)
    return img


def render_sprite_sheet(
    poses: Sequence[Pose],
    skeleton: Skeleton,
    output: Path,
    frame_size: tuple[int, int],
    *,
    direction: str = "horizontal",
    padding: int = 0,
    colour: Colour = (255, 255, 255, 255),
) -> Path:
    """Render *poses* side by side (or stacked) into one sprite sheet.

    Parameters
    ----------
    poses:
        Ordered poses, one per frame.
    skeleton:
        Skeleton used to place the joints.
    output:
        Path where the sheet is saved as PNG.
    frame_size:
        ``(width, height)`` of each frame cell.  Poses are drawn in the
        skeleton's own canvas coordinates, so this is normally the canvas size.
    direction:
        ``"horizontal"`` for a single row (default) or ``"vertical"``.
    padding:
        Transparent pixels between frames.

    Returns
    -------
    Path
        The *output* path, for chaining convenience.
    """
    if not poses:
        msg = "No poses provided for sprite sheet rendering"
        raise ValueError(msg)
    if direction not in ("horizontal", "vertical"):
        msg = f"direction must be 'horizontal' or 'vertical', got {direction!r}"
        raise ValueError(msg)

    fw, fh = frame_size
    n = len(poses)
    if direction == "horizontal":
        sheet_size = (fw * n + padding * (n - 1), fh)
    else:
        sheet_size = (fw, fh * n + padding * (n - 1))

    sheet = Image.new("RGBA", sheet_size, (0, 0, 0, 0))
    for idx, pose in enumerate(poses):
        frame = render_pose_image(pose, skeleton, size=frame_size, colour=colour)
        offset = (idx * (fw + padding), 0) if direction == "horizontal" else (0, idx * (fh + padding))
        sheet.paste(frame, offset, frame)

    output.parent.mkdir(parents=True, exist_ok=True)
    sheet.save(output, "PNG")
    logger.info("Rendered sprite sheet: %s (%d frames, %dx%d)", output, n, *sheet_size)
    return output
