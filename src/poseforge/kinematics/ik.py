"""Analytic inverse kinematics for the stick figure's limbs.

Each end effector owns an independent chain.  Solving one chain never
touches another, even when two chains share a base joint (both arms hang
off ``neckBase``); there is no full-body solve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from poseforge.kinematics.skeleton import calculate_points_from_pose
from poseforge.models.enums import EndEffector, Joint
from poseforge.models.pose import Point, Pose

if TYPE_CHECKING:
    from poseforge.kinematics.skeleton import Skeleton

IK_EPSILON = 1e-6

_END_EFFECTOR_NAMES = frozenset(e.value for e in EndEffector)


@dataclass(frozen=True)
class IKChain:
    """A base joint and the ordered joints solved from it."""

    base: Joint
    joints: tuple[Joint, ...]


IK_CHAINS: dict[EndEffector, IKChain] = {
    EndEffector.LEFT_HAND: IKChain(Joint.NECK_BASE, (Joint.LEFT_ELBOW, Joint.LEFT_HAND)),
    EndEffector.RIGHT_HAND: IKChain(Joint.NECK_BASE, (Joint.RIGHT_ELBOW, Joint.RIGHT_HAND)),
    EndEffector.LEFT_FOOT: IKChain(Joint.HIP, (Joint.LEFT_KNEE, Joint.LEFT_FOOT)),
    EndEffector.RIGHT_FOOT: IKChain(Joint.HIP, (Joint.RIGHT_KNEE, Joint.RIGHT_FOOT)),
    EndEffector.LEFT_TOE: IKChain(Joint.LEFT_FOOT, (Joint.LEFT_TOE,)),
    EndEffector.RIGHT_TOE: IKChain(Joint.RIGHT_FOOT, (Joint.RIGHT_TOE,)),
}


def _clamp_unit(value: float) -> float:
    # acos raises outside [-1, 1]; targets closer than |l1 - l2| land here.
    return max(-1.0, min(1.0, value))


def solve_two_joint_ik(
    target: Point,
    base: Point,
    bone1_length: float,
    bone2_length: float,
) -> tuple[float, float]:
    """Solve a two-bone chain with the law of cosines.

    Returns the absolute angles ``(joint1, joint2)`` of the first and second
    bone.  The base-to-target distance is clamped to
    ``[eps, l1 + l2 - eps]`` so unreachable or coincident targets give a
    fully extended or fully folded limb instead of an error.
    """
    dx = target.x - base.x
    dy = target.y - base.y
    dist = math.hypot(dx, dy)
    clamped = max(IK_EPSILON, min(dist, bone1_length + bone2_length - IK_EPSILON))

    a1 = math.acos(
        _clamp_unit(
            (bone1_length**2 + clamped**2 - bone2_length**2) / (2 * bone1_length * clamped)
        )
    )
    a2 = math.acos(
        _clamp_unit(
            (bone1_length**2 + bone2_length**2 - clamped**2) / (2 * bone1_length * bone2_length)
        )
    )

    base_to_target = math.atan2(dy, dx)
    joint1 = base_to_target - a1
    joint2 = joint1 + (math.pi - a2)
    return joint1, joint2


def is_end_effector(joint: Joint | str) -> bool:
    return str(joint) in _END_EFFECTOR_NAMES


def solve_ik_for_end_effector(
    target: Point,
    effector: EndEffector,
    pose: Pose,
    skeleton: Skeleton,
) -> Pose:
    """Return a copy of *pose* with *effector*'s chain aimed at *target*.

    Only the chain's own angles change.  If the chain's base cannot be placed
    or a bone length is unknown, the copy is returned unchanged.
    """
    new_pose = pose.clone()
    chain = IK_CHAINS[effector]

    base_pos = calculate_points_from_pose(pose, skeleton).get(chain.base)
    if base_pos is None:
        return new_pose

    if len(chain.joints) == 1:
        (joint,) = chain.joints
        if skeleton.bone_length(joint, chain.base) is not None:
            new_pose.angles[joint] = math.atan2(target.y - base_pos.y, target.x - base_pos.x)
    else:
        joint1, joint2 = chain.joints
        bone1 = skeleton.bone_length(joint1, chain.base)
        bone2 = skeleton.bone_length(joint2, joint1)
        if bone1 is not None and bone2 is not None:
            angle1, angle2 = solve_two_joint_ik(target, base_pos, bone1, bone2)
            new_pose.angles[joint1] = angle1
            new_pose.angles[joint2] = angle2

    return new_pose


def drag_joint(pose: Pose, joint: Joint, target: Point, skeleton: Skeleton) -> Pose:
    """Forward-kinematics drag: move the root, or re-aim one bone at *target*."""
    new_pose = pose.clone()
    if joint == skeleton.root:
        new_pose.hip = target
        return new_pose

    parent = skeleton.parent_of(joint)
    if parent is None:
        return new_pose
    parent_pos = calculate_points_from_pose(pose, skeleton).get(parent)
    if parent_pos is None:
        return new_pose
    new_pose.angles[joint] = math.atan2(target.y - parent_pos.y, target.x - parent_pos.x)
    return new_pose
