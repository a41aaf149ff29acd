"""poseforge data models - pure Pydantic, no I/O."""

from poseforge.models.document import (
    DOCUMENT_FORMAT,
    DOCUMENT_VERSION,
    AnimationDocument,
    DocumentMetadata,
)
from poseforge.models.enums import (
    EndEffector,
    Joint,
    PlaybackMode,
    PlaybackState,
    TimeDisplayMode,
)
from poseforge.models.pose import Keyframe, Point, Pose

__all__ = [
    "DOCUMENT_FORMAT",
    "DOCUMENT_VERSION",
    "AnimationDocument",
    "DocumentMetadata",
    "EndEffector",
    "Joint",
    "Keyframe",
    "PlaybackMode",
    "PlaybackState",
    "Point",
    "Pose",
    "TimeDisplayMode",
]
