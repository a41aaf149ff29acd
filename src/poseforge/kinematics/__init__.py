"""Skeleton description plus forward and inverse kinematics."""

from poseforge.kinematics.ik import (
    IK_CHAINS,
    IKChain,
    drag_joint,
    is_end_effector,
    solve_ik_for_end_effector,
    solve_two_joint_ik,
)
from poseforge.kinematics.skeleton import (
    Skeleton,
    SkeletonError,
    calculate_points_from_pose,
    calculate_pose_from_points,
    create_default_skeleton,
)

__all__ = [
    "IK_CHAINS",
    "IKChain",
    "Skeleton",
    "SkeletonError",
    "calculate_points_from_pose",
    "calculate_pose_from_points",
    "create_default_skeleton",
    "drag_joint",
    "is_end_effector",
    "solve_ik_for_end_effector",
    "solve_two_joint_ik",
]
