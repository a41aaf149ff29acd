"""Export and import of keyframe clips.

Three document shapes are accepted on import:

* the current versioned envelope (``{"version", "format", "keyframes", ...}``),
* an un-versioned list of ``{"pose", "time"}`` records,
* a legacy list of bare poses, which are spaced evenly in time.

Poses saved before the skeleton gained a joint are topped up with
:data:`JOINT_DEFAULTS` so older files still animate.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError as PydanticValidationError

from poseforge.models.document import (
    DOCUMENT_FORMAT,
    AnimationDocument,
    DocumentMetadata,
)
from poseforge.models.enums import Joint
from poseforge.models.pose import Keyframe, Pose
from poseforge.validation import validate_document_json

if TYPE_CHECKING:
    from pathlib import Path

    from poseforge.timeline.keyframes import KeyframeStore

logger = logging.getLogger(__name__)

# Angles given to joints an imported pose does not mention.
JOINT_DEFAULTS: dict[Joint, float] = {
    Joint.NECK_BASE: math.pi / 2,
    Joint.NECK: math.pi / 2,
    Joint.HEAD: math.pi / 2,
    Joint.LEFT_ELBOW: -math.pi / 4,
    Joint.RIGHT_ELBOW: math.pi / 4,
    Joint.LEFT_HAND: -math.pi / 6,
    Joint.RIGHT_HAND: math.pi / 6,
    Joint.LEFT_KNEE: math.pi / 6,
    Joint.RIGHT_KNEE: math.pi / 6,
    Joint.LEFT_FOOT: 0.0,
    Joint.RIGHT_FOOT: 0.0,
    Joint.LEFT_TOE: math.pi,
    Joint.RIGHT_TOE: 0.0,
}

# Files written before the neck was split in two carry only "neck".
LEGACY_NECK_ANGLE = -math.pi / 2


class DocumentLoadError(ValueError):
    """Raised when an animation document cannot be imported."""


@dataclass
class LoadedAnimation:
    """Keyframes read from a document, plus its duration when it records one."""

    keyframes: list[Keyframe] = field(default_factory=list)
    duration_ms: float | None = None
    version: str | None = None


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_document(store: KeyframeStore) -> AnimationDocument:
    """Snapshot *store* as a versioned document."""
    keyframes = [kf.clone() for kf in store]
    span = keyframes[-1].time - keyframes[0].time if len(keyframes) > 1 else 0.0
    return AnimationDocument(
        keyframes=keyframes,
        metadata=DocumentMetadata(
            total_keyframes=len(keyframes),
            duration=span,
            duration_ms=store.duration_ms,
        ),
    )


def dumps_document(store: KeyframeStore, *, indent: int | None = 2) -> str:
    return export_document(store).model_dump_json(by_alias=True, indent=indent)


def save_document(store: KeyframeStore, path: Path) -> Path:
    """Write *store* to *path* as JSON and return the path."""
    if not len(store):
        logger.warning("Exporting an empty clip to %s", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_document(store), encoding="utf-8")
    logger.info("Exported %d keyframes to %s", len(store), path)
    return path


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def ensure_pose_compatibility(raw_pose: dict[str, object]) -> dict[str, object]:
    """Return a copy of a decoded pose with every joint angle present.

    A pose that only knows ``neck`` predates ``neckBase``: its neck angle
    moves to ``neckBase`` and ``neck`` points straight up.
    """
    pose = dict(raw_pose)
    angles = pose.get("angles")
    if not isinstance(angles, dict):
        return pose
    angles = dict(angles)

    if "neck" in angles and "neckBase" not in angles:
        angles["neckBase"] = angles["neck"]
        angles["neck"] = LEGACY_NECK_ANGLE

    for joint, default in JOINT_DEFAULTS.items():
        angles.setdefault(joint.value, default)
    pose["angles"] = angles
    return pose


def _parse_pose(raw: object, where: str) -> Pose:
    if not isinstance(raw, dict):
        msg = f"{where}: pose must be an object"
        raise DocumentLoadError(msg)
    try:
        return Pose.model_validate(ensure_pose_compatibility(raw))
    except PydanticValidationError as exc:
        msg = f"{where}: invalid pose: {exc}"
        raise DocumentLoadError(msg) from None


def _parse_keyframe(raw: object, where: str) -> Keyframe:
    if not isinstance(raw, dict):
        msg = f"{where}: keyframe must be an object"
        raise DocumentLoadError(msg)
    pose = _parse_pose(raw.get("pose"), where)
    try:
        return Keyframe(pose=pose, time=raw.get("time"))
    except PydanticValidationError as exc:
        msg = f"{where}: invalid keyframe time: {exc}"
        raise DocumentLoadError(msg) from None


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _load_versioned(data: dict[str, object]) -> LoadedAnimation:
    try:
        validate_document_json(data)
    except SchemaValidationError as exc:
        msg = f"invalid animation document: {exc.message}"
        raise DocumentLoadError(msg) from None

    version = str(data["version"])
    logger.info("Loading animation document version %s", version)
    records = cast("list[object]", data["keyframes"])
    keyframes = [_parse_keyframe(r, f"keyframe {i}") for i, r in enumerate(records)]

    duration_ms: float | None = None
    metadata = data.get("metadata")
    if isinstance(metadata, dict) and _is_number(metadata.get("durationMs")):
        duration_ms = float(metadata["durationMs"])
    return LoadedAnimation(keyframes=keyframes, duration_ms=duration_ms, version=version)


def _load_list(data: list[object]) -> LoadedAnimation:
    if not data:
        return LoadedAnimation()

    first = data[0]
    if isinstance(first, dict) and "pose" in first and _is_number(first.get("time")):
        logger.info("Loading un-versioned keyframe list")
        keyframes = [_parse_keyframe(r, f"keyframe {i}") for i, r in enumerate(data)]
        return LoadedAnimation(keyframes=keyframes)

    if isinstance(first, dict) and "hip" in first and "angles" in first:
        logger.info("Loading legacy pose list")
        count = len(data)
        keyframes = [
            Keyframe(
                pose=_parse_pose(raw, f"pose {i}"),
                time=0.0 if count <= 1 else i / (count - 1),
            )
            for i, raw in enumerate(data)
        ]
        return LoadedAnimation(keyframes=keyframes)

    msg = "unrecognized keyframe file format"
    raise DocumentLoadError(msg)


def load_document(data: object) -> LoadedAnimation:
    """Decode any supported document shape into keyframes.

    Raises
    ------
    DocumentLoadError
        If *data* is not one of the supported shapes or holds invalid poses.
    """
    if isinstance(data, dict):
        if data.get("version") and data.get("format") == DOCUMENT_FORMAT and "keyframes" in data:
            loaded = _load_versioned(data)
        else:
            msg = "invalid keyframe file: not a recognized animation document"
            raise DocumentLoadError(msg)
    elif isinstance(data, list):
        loaded = _load_list(data)
    else:
        msg = "invalid keyframe file: expected a JSON object or array"
        raise DocumentLoadError(msg)

    loaded.keyframes.sort(key=lambda kf: kf.time)
    return loaded


def loads_document(text: str) -> LoadedAnimation:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"animation file contains invalid JSON: {exc}"
        raise DocumentLoadError(msg) from None
    return load_document(data)


def read_document(path: Path) -> LoadedAnimation:
    """Load an animation document from disk."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        msg = f"animation file not found: {path}"
        raise DocumentLoadError(msg) from None
    except PermissionError:
        msg = f"permission denied reading animation file: {path}"
        raise DocumentLoadError(msg) from None
    return loads_document(text)
