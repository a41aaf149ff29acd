"""Fixed stick-figure skeleton and forward kinematics."""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import TYPE_CHECKING

from poseforge.models.enums import Joint
from poseforge.models.pose import Point, Pose

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

# Child -> parent edges of the stick figure.
STICK_FIGURE_PARENTS: dict[Joint, Joint] = {
    Joint.NECK_BASE: Joint.HIP,
    Joint.NECK: Joint.NECK_BASE,
    Joint.HEAD: Joint.NECK,
    Joint.LEFT_ELBOW: Joint.NECK_BASE,
    Joint.RIGHT_ELBOW: Joint.NECK_BASE,
    Joint.LEFT_HAND: Joint.LEFT_ELBOW,
    Joint.RIGHT_HAND: Joint.RIGHT_ELBOW,
    Joint.LEFT_KNEE: Joint.HIP,
    Joint.RIGHT_KNEE: Joint.HIP,
    Joint.LEFT_FOOT: Joint.LEFT_KNEE,
    Joint.RIGHT_FOOT: Joint.RIGHT_KNEE,
    Joint.LEFT_TOE: Joint.LEFT_FOOT,
    Joint.RIGHT_TOE: Joint.RIGHT_FOOT,
}

# Reference joint offsets from the centre of the posing area.  Bone lengths
# are measured from these once and never change.
REFERENCE_OFFSETS: dict[Joint, tuple[float, float]] = {
    Joint.HEAD: (0, -80),
    Joint.NECK: (0, -60),
    Joint.NECK_BASE: (0, -40),
    Joint.HIP: (0, 20),
    Joint.LEFT_ELBOW: (-30, -20),
    Joint.LEFT_HAND: (-60, 10),
    Joint.RIGHT_ELBOW: (30, -20),
    Joint.RIGHT_HAND: (60, 10),
    Joint.LEFT_KNEE: (-20, 65),
    Joint.LEFT_FOOT: (-30, 110),
    Joint.LEFT_TOE: (-50, 110),
    Joint.RIGHT_KNEE: (20, 65),
    Joint.RIGHT_FOOT: (30, 110),
    Joint.RIGHT_TOE: (50, 110),
}


class SkeletonError(ValueError):
    """Raised when a joint hierarchy is not a single-rooted tree."""


class Skeleton:
    """Joint hierarchy plus bone lengths measured from a reference pose.

    The traversal order (parents before children) is computed once here and
    reused by every forward-kinematics call.
    """

    def __init__(
        self,
        parents: Mapping[Joint, Joint],
        reference_points: Mapping[Joint, Point],
        root: Joint = Joint.HIP,
    ) -> None:
        if root in parents:
            msg = f"root joint '{root}' cannot have a parent"
            raise SkeletonError(msg)

        self.root = root
        self.parents: dict[Joint, Joint] = dict(parents)

        children: dict[Joint, list[Joint]] = {}
        for child, parent in self.parents.items():
            children.setdefault(parent, []).append(child)
        self.children: dict[Joint, tuple[Joint, ...]] = {
            parent: tuple(kids) for parent, kids in children.items()
        }

        missing = [j for j in (root, *self.parents) if j not in reference_points]
        if missing:
            msg = f"reference points missing for joints: {', '.join(missing)}"
            raise SkeletonError(msg)

        self.bone_lengths: dict[tuple[Joint, Joint], float] = {
            (child, parent): _distance(reference_points[child], reference_points[parent])
            for child, parent in self.parents.items()
        }
        self.order: tuple[Joint, ...] = _traversal_order(root, self.children, len(self.parents) + 1)
        self._default_pose = calculate_pose_from_points(reference_points, self.parents, root)

    @property
    def joints(self) -> tuple[Joint, ...]:
        return self.order

    @property
    def default_pose(self) -> Pose:
        """The pose measured from the reference points (a fresh copy)."""
        return self._default_pose.clone()

    def parent_of(self, joint: Joint) -> Joint | None:
        return self.parents.get(joint)

    def bone_length(self, child: Joint, parent: Joint | None = None) -> float | None:
        """Length of the bone from *parent* (default: the real parent) to *child*."""
        if parent is None:
            parent = self.parents.get(child)
            if parent is None:
                return None
        return self.bone_lengths.get((child, parent))


def _distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def _traversal_order(
    root: Joint,
    children: Mapping[Joint, tuple[Joint, ...]],
    expected: int,
) -> tuple[Joint, ...]:
    order: list[Joint] = []
    seen: set[Joint] = set()
    queue = deque([root])
    while queue:
        joint = queue.popleft()
        if joint in seen:
            msg = f"joint hierarchy contains a cycle through '{joint}'"
            raise SkeletonError(msg)
        seen.add(joint)
        order.append(joint)
        queue.extend(children.get(joint, ()))
    if len(order) != expected:
        msg = "joint hierarchy is not connected to the root"
        raise SkeletonError(msg)
    return tuple(order)


def reference_points(canvas_width: float, posing_area_height: float) -> dict[Joint, Point]:
    """Lay out the reference joints around the centre of the posing area."""
    cx = canvas_width / 2
    cy = posing_area_height / 2
    return {
        joint: Point(x=cx + dx, y=cy + dy) for joint, (dx, dy) in REFERENCE_OFFSETS.items()
    }


def create_default_skeleton(canvas_width: float = 800, posing_area_height: float = 600) -> Skeleton:
    """Build the 14-joint stick figure centred in the posing area."""
    skeleton = Skeleton(STICK_FIGURE_PARENTS, reference_points(canvas_width, posing_area_height))
    logger.debug("Built skeleton with %d joints", len(skeleton.order))
    return skeleton


# ---------------------------------------------------------------------------
# Forward kinematics
# ---------------------------------------------------------------------------


def calculate_points_from_pose(pose: Pose, skeleton: Skeleton) -> dict[Joint, Point]:
    """Place every joint of *pose* in canvas coordinates.

    The root lands on ``pose.hip``; each child is its parent's position plus
    the bone length along the child's absolute angle.  Joints whose angle or
    bone length is unknown (or whose parent could not be placed) are left
    out of the result.
    """
    points: dict[Joint, Point] = {skeleton.root: pose.hip}
    for joint in skeleton.order[1:]:
        parent = skeleton.parents[joint]
        parent_pos = points.get(parent)
        angle = pose.angles.get(joint)
        length = skeleton.bone_lengths.get((joint, parent))
        if parent_pos is None or angle is None or length is None:
            continue
        points[joint] = Point(
            x=parent_pos.x + math.cos(angle) * length,
            y=parent_pos.y + math.sin(angle) * length,
        )
    return points


def calculate_pose_from_points(
    points: Mapping[Joint, Point],
    parents: Mapping[Joint, Joint],
    root: Joint = Joint.HIP,
) -> Pose:
    """Derive absolute joint angles from joint positions."""
    angles: dict[Joint, float] = {}
    for child, parent in parents.items():
        child_pos = points[child]
        parent_pos = points[parent]
        angles[child] = math.atan2(child_pos.y - parent_pos.y, child_pos.x - parent_pos.x)
    return Pose(hip=points[root], angles=angles)
