"""Pose and keyframe models for the stick figure."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from poseforge.models.enums import Joint


class Point(BaseModel):
    """A 2D point in canvas coordinates (y grows downwards)."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Pose(BaseModel):
    """Root position plus the absolute angle of every non-root joint.

    Angles are in radians, measured from the positive x axis.  A joint missing
    from ``angles`` is simply not placed by forward kinematics.
    """

    hip: Point
    angles: dict[Joint, float] = Field(default_factory=dict)

    def clone(self) -> Pose:
        """Return an independent copy sharing no mutable state."""
        return Pose(hip=self.hip, angles=dict(self.angles))


class Keyframe(BaseModel):
    """A pose snapshot anchored to a normalized time in ``[0, 1]``."""

    pose: Pose
    time: float = Field(ge=0.0, le=1.0)

    def clone(self) -> Keyframe:
        return Keyframe(pose=self.pose.clone(), time=self.time)
