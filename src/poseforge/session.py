"""Editor session: one skeleton, one clip, one working pose, one playhead.

A UI layer translates mouse and keyboard input into the plain methods on
:class:`EditorSession`; the session does no input handling of its own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poseforge.config import AppConfig
from poseforge.exchange import export_document, load_document
from poseforge.kinematics.ik import drag_joint, is_end_effector, solve_ik_for_end_effector
from poseforge.kinematics.skeleton import calculate_points_from_pose, create_default_skeleton
from poseforge.models.enums import EndEffector, Joint, PlaybackMode, TimeDisplayMode
from poseforge.timeline.keyframes import KeyframeStore
from poseforge.timeline.playback import ManualScheduler, PlaybackController
from poseforge.timeline.timing import format_duration, format_time, parse_duration
from poseforge.timeline.trail import build_motion_trail, onion_skin_frames

if TYPE_CHECKING:
    from poseforge.models.document import AnimationDocument
    from poseforge.models.pose import Point, Pose
    from poseforge.timeline.playback import Clock, FrameScheduler
    from poseforge.timeline.trail import MotionTrail, OnionFrame

logger = logging.getLogger(__name__)


class EditorSession:
    """All mutable editor state, owned by a single caller.

    Anything that switches the active keyframe or replaces the working pose
    first writes the working pose back into the active keyframe, so edits
    are never lost.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        scheduler: FrameScheduler | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or AppConfig()
        canvas = self.config.canvas
        timeline = self.config.timeline

        self.skeleton = create_default_skeleton(canvas.width, canvas.posing_area_height)
        self.store = KeyframeStore(
            timeline.default_duration_ms,
            extend_step_ms=timeline.extend_step_ms,
        )
        self.pose: Pose = self.skeleton.default_pose
        self.scheduler: FrameScheduler = scheduler or ManualScheduler()
        self.playback = PlaybackController(
            self.store,
            self.scheduler,
            clock,
            on_pose=self._set_pose,
            default_pose=self.skeleton.default_pose,
        )

        self.ik_enabled = False
        self.onion_enabled = False
        self.trail_enabled = False
        self.onion_before = self.config.trail.onion_before
        self.onion_after = self.config.trail.onion_after
        self.trail_resolution = self.config.trail.resolution
        self.time_display_mode = TimeDisplayMode.SECONDS

    def _set_pose(self, pose: Pose) -> None:
        self.pose = pose

    # ------------------------------------------------------------------
    # Read-only views for the UI
    # ------------------------------------------------------------------

    @property
    def active_index(self) -> int | None:
        return self.store.active_index

    @property
    def progress(self) -> float:
        return self.playback.progress

    @property
    def is_playing(self) -> bool:
        return self.playback.is_playing

    @property
    def is_paused(self) -> bool:
        return self.playback.is_paused

    @property
    def mode(self) -> PlaybackMode:
        return self.playback.mode

    @property
    def trail(self) -> MotionTrail | None:
        return self.playback.trail

    @property
    def _editing_locked(self) -> bool:
        return self.playback.is_playing

    def points(self) -> dict[Joint, Point]:
        """Joint positions of the working pose."""
        return calculate_points_from_pose(self.pose, self.skeleton)

    def onion_frames(self) -> list[OnionFrame]:
        if not self.onion_enabled or self.playback.is_playing:
            return []
        return onion_skin_frames(
            self.store.keyframes, self.store.active_index, self.onion_before, self.onion_after
        )

    def time_label(self, time: float | None = None) -> str:
        return format_time(
            self.progress if time is None else time,
            self.time_display_mode,
            self.store.duration_ms,
            self.config.timeline.fps,
        )

    def duration_label(self) -> str:
        """Current clip length as shown in the duration field."""
        return format_duration(self.store.duration_ms, self.time_display_mode, self.config.timeline.fps)

    def can_insert_keyframe(self) -> bool:
        return self.playback.can_insert()

    # ------------------------------------------------------------------
    # Keyframes
    # ------------------------------------------------------------------

    def add_keyframe(self) -> int | None:
        """Save the working pose as a new keyframe at the playhead."""
        if self._editing_locked:
            return None
        index = self.store.add(self.pose, self.playback.progress)
        self.playback.progress = self.store[index].time
        return index

    def delete_keyframe(self, index: int) -> None:
        if self.playback.is_playing:
            return
        if self.store.delete(index, self.pose):
            self.pose = self.skeleton.default_pose
            self.playback.progress = 0.0
            self.onion_enabled = False

    def select_keyframe(self, index: int) -> None:
        """Make *index* the keyframe being edited."""
        if self._editing_locked:
            return
        self.pose = self.store.select(index, self.pose)
        self.playback.progress = self.store[index].time

    def step_keyframe(self, direction: int) -> int | None:
        """Select the previous (``-1``) or next (``+1``) keyframe.

        With nothing selected, stepping left picks the last keyframe and
        stepping right the first.  Stepping past either end does nothing.
        """
        if self.playback.is_playing or not len(self.store):
            return self.store.active_index
        current = self.store.active_index
        if current is None:
            target = len(self.store) - 1 if direction < 0 else 0
        else:
            target = current + (-1 if direction < 0 else 1)
        if 0 <= target < len(self.store):
            self.select_keyframe(target)
        return self.store.active_index

    def move_keyframe(self, index: int, time: float) -> float:
        if self._editing_locked:
            return self.store[index].time
        return self.store.move_keyframe_time(index, time)

    def reorder_keyframe(self, source: int, target: int) -> int | None:
        if self._editing_locked:
            return None
        self.select_keyframe(source)
        index = self.store.reorder(source, target)
        self.playback.progress = self.store[index].time
        return index

    def redistribute_keyframes(self) -> None:
        if not self.playback.is_playing:
            self.store.redistribute_even()

    # ------------------------------------------------------------------
    # Posing
    # ------------------------------------------------------------------

    def drag_joint(self, joint: Joint, target: Point) -> Pose:
        """Drag *joint* towards *target*.

        With IK enabled, end effectors pull their whole chain; everything
        else rotates a single bone (or moves the figure, for the hip).  If
        no keyframe is being edited one is created first.
        """
        if self._editing_locked:
            return self.pose
        if self.store.active_index is None:
            self.add_keyframe()

        if self.ik_enabled and is_end_effector(joint):
            self.pose = solve_ik_for_end_effector(target, EndEffector(joint), self.pose, self.skeleton)
        else:
            self.pose = drag_joint(self.pose, joint, target, self.skeleton)
        return self.pose

    def end_drag(self) -> None:
        self.store.autosave(self.pose)

    def toggle_ik(self) -> bool:
        if not self.playback.is_playing:
            self.ik_enabled = not self.ik_enabled
        return self.ik_enabled

    def toggle_onion(self) -> bool:
        if not self.playback.is_playing and self.store.active_index is not None:
            self.onion_enabled = not self.onion_enabled
        return self.onion_enabled

    def toggle_trail(self) -> bool:
        if not self.playback.is_playing:
            self.trail_enabled = not self.trail_enabled
        return self.trail_enabled

    def set_trail_resolution(self, step: int) -> None:
        if step < 1:
            msg = f"trail resolution must be at least 1, got {step}"
            raise ValueError(msg)
        self.trail_resolution = step

    def set_onion_range(self, before: int, after: int) -> None:
        if before < 0 or after < 0:
            msg = "onion skin ranges cannot be negative"
            raise ValueError(msg)
        self.onion_before = before
        self.onion_after = after

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def set_duration(self, value: str | float, mode: TimeDisplayMode | None = None) -> float:
        """Set the clip length from a value in seconds or frames."""
        if self.playback.is_playing:
            return self.store.duration_ms
        ms = parse_duration(value, mode or self.time_display_mode, self.config.timeline.fps)
        self.store.set_duration(ms)
        return ms

    def toggle_time_display(self) -> TimeDisplayMode:
        if not self.playback.is_playing:
            self.time_display_mode = (
                TimeDisplayMode.FRAMES
                if self.time_display_mode is TimeDisplayMode.SECONDS
                else TimeDisplayMode.SECONDS
            )
        return self.time_display_mode

    def scrub(self, progress: float) -> None:
        """Move the playhead by hand while stopped or paused."""
        if self.playback.is_running:
            return
        self.store.autosave(self.pose)
        self.playback.scrub(progress)

    def end_scrub(self) -> None:
        self.playback.end_scrub()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def _build_trail(self) -> MotionTrail | None:
        return build_motion_trail(
            self.store.keyframes,
            self.store.duration_ms,
            self.skeleton,
            size=self.config.canvas.size,
            resolution=self.trail_resolution,
            fps=self.config.timeline.fps,
            colour=self.config.trail.colour,
        )

    def start(self) -> None:
        if self.playback.is_playing or len(self.store) < 2:
            return
        self.store.autosave(self.pose)
        self.playback.start(self._build_trail if self.trail_enabled else None)

    def stop(self) -> None:
        self.playback.stop()

    def toggle_playback(self) -> None:
        """The play/stop button."""
        if self.playback.is_playing:
            self.stop()
        else:
            self.start()

    def pause(self) -> None:
        self.playback.pause()

    def resume(self) -> None:
        self.playback.resume()

    def toggle_pause(self) -> None:
        self.playback.toggle_pause()

    def toggle_mode(self) -> PlaybackMode:
        return self.playback.toggle_mode()

    def frame(self, timestamp: float) -> None:
        self.playback.frame(timestamp)

    def insert_keyframe_at_progress(self) -> int | None:
        """Turn the interpolated pose under the playhead into a keyframe."""
        return self.playback.insert_at_current_progress(self.pose)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_document(self) -> AnimationDocument:
        self.store.autosave(self.pose)
        return export_document(self.store)

    def import_document(self, data: object) -> int:
        """Replace the clip with a decoded document; return the keyframe count.

        The document is fully parsed before anything changes, so a
        :class:`~poseforge.exchange.DocumentLoadError` leaves the session as
        it was.
        """
        loaded = load_document(data)

        self.stop()
        self.store.autosave(self.pose)
        self.store.replace_all(loaded.keyframes, loaded.duration_ms)
        self.onion_enabled = False
        if len(self.store):
            self.select_keyframe(0)
        else:
            self.pose = self.skeleton.default_pose
            self.playback.progress = 0.0
        logger.info("Imported %d keyframes", len(self.store))
        return len(self.store)
