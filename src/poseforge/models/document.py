"""Exchange document model for exported animations."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from poseforge.models.pose import Keyframe

DOCUMENT_FORMAT = "stick-figure-animation"
DOCUMENT_VERSION = "1.1.0"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentMetadata(BaseModel):
    """Summary block written alongside the keyframes."""

    model_config = ConfigDict(populate_by_name=True)

    total_keyframes: int = Field(alias="totalKeyframes")
    # Normalized span between the first and last keyframe.
    duration: float
    duration_ms: float | None = Field(default=None, alias="durationMs")
    has_ik_support: bool = Field(default=True, alias="hasIKSupport")


class AnimationDocument(BaseModel):
    """The versioned on-disk representation of a keyframe clip."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = DOCUMENT_VERSION
    format: str = DOCUMENT_FORMAT
    exported_at: datetime = Field(default_factory=_utc_now, alias="exportedAt")
    keyframes: list[Keyframe]
    metadata: DocumentMetadata | None = None
