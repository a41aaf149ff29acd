"""Playback state machine: loop / ping-pong, pause / resume, scrubbing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

from poseforge.models.enums import PlaybackMode, PlaybackState
from poseforge.timeline.interpolation import get_pose_at_progress
from poseforge.timeline.timing import normalize_time

if TYPE_CHECKING:
    from poseforge.models.pose import Pose
    from poseforge.timeline.keyframes import KeyframeStore
    from poseforge.timeline.trail import MotionTrail

logger = logging.getLogger(__name__)

# Two progress values closer than this count as the same keyframe position.
KEYFRAME_TOLERANCE = 1e-4

FrameCallback: TypeAlias = Callable[[float], None]  # (timestamp_ms)
Clock: TypeAlias = Callable[[], float]  # monotonic milliseconds
TrailBuilder: TypeAlias = Callable[[], "MotionTrail | None"]


@runtime_checkable
class FrameScheduler(Protocol):
    """The display layer's "call me on the next frame" primitive."""

    def request_frame(self, callback: FrameCallback) -> object:
        """Arrange for *callback* to run once with the next frame's timestamp."""
        ...

    def cancel_frame(self, handle: object) -> None:
        """Drop a pending request.  Unknown or stale handles are ignored."""
        ...


class ManualScheduler:
    """A frame scheduler driven by explicit :meth:`tick` calls.

    Used by the CLI and the tests; a GUI would wrap its own refresh signal
    instead.
    """

    def __init__(self) -> None:
        self._pending: dict[int, FrameCallback] = {}
        self._next_handle = 1

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: object) -> None:
        if isinstance(handle, int):
            self._pending.pop(handle, None)

    def tick(self, timestamp: float) -> int:
        """Fire every callback requested before this tick; return how many ran."""
        due = list(self._pending.values())
        self._pending.clear()
        for callback in due:
            callback(timestamp)
        return len(due)


def _monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def progress_at(elapsed_ms: float, duration_ms: float, mode: PlaybackMode) -> float:
    """Normalized progress after *elapsed_ms* of playback.

    Loop mode wraps every ``duration_ms``; ping-pong runs a cycle of twice
    the duration and mirrors its second half back from 1 to 0.
    """
    if duration_ms <= 0:
        return 0.0
    cycle = duration_ms * 2 if mode is PlaybackMode.PING_PONG else duration_ms
    # frame timestamps can land just before the start time
    cycle_time = max(0.0, elapsed_ms) % cycle
    if mode is PlaybackMode.PING_PONG and cycle_time > duration_ms:
        return (duration_ms - (cycle_time - duration_ms)) / duration_ms
    return cycle_time / duration_ms


class PlaybackController:
    """Drives clip progress over time.

    States are ``STOPPED -> PLAYING <-> PAUSED -> STOPPED``.  A transition
    requested from the wrong state does nothing; incidental UI events
    trigger these all the time and must never fault the session.

    Poses produced by playback, scrubbing or stopping are handed to
    *on_pose*, which the owning session uses to replace its working pose.
    """

    def __init__(
        self,
        store: KeyframeStore,
        scheduler: FrameScheduler,
        clock: Clock | None = None,
        *,
        on_pose: Callable[[Pose], None] | None = None,
        default_pose: Pose | None = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.clock: Clock = clock or _monotonic_ms
        self.on_pose = on_pose
        self.default_pose = default_pose

        self.state = PlaybackState.STOPPED
        self.mode = PlaybackMode.LOOP
        self.progress = 0.0
        self.start_time: float | None = None
        self.elapsed_before_pause = 0.0
        self.active_before_playback: int | None = None
        self.scrubbing = False
        self.trail: MotionTrail | None = None
        self.pose: Pose | None = None
        self._handle: object | None = None

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        """True while playback is active, paused or not."""
        return self.state is not PlaybackState.STOPPED

    @property
    def is_paused(self) -> bool:
        return self.state is PlaybackState.PAUSED

    @property
    def is_running(self) -> bool:
        """True only while frames are actively advancing."""
        return self.state is PlaybackState.PLAYING

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _emit(self, pose: Pose) -> None:
        self.pose = pose
        if self.on_pose is not None:
            self.on_pose(pose)

    def _schedule(self) -> None:
        self._handle = self.scheduler.request_frame(self.frame)

    def _cancel(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel_frame(self._handle)
            self._handle = None

    def _ignored(self, action: str) -> None:
        logger.debug("Ignoring %s while %s", action, self.state)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self, trail_builder: TrailBuilder | None = None) -> None:
        """Begin playback from the start of the clip.

        Needs at least two keyframes.  The active keyframe is remembered for
        :meth:`stop` and then deselected.  When *trail_builder* is given the
        motion trail is precomputed before the first frame.
        """
        if len(self.store) < 2:
            self._ignored("start with fewer than 2 keyframes")
            return

        if self.state is PlaybackState.STOPPED:
            self.active_before_playback = self.store.active_index
        self._cancel()
        self.store.active_index = None
        self.scrubbing = False
        self.trail = trail_builder() if trail_builder is not None else None
        self.elapsed_before_pause = 0.0
        self.start_time = self.clock()
        self.state = PlaybackState.PLAYING
        logger.debug("Playback started (%s, %.0f ms)", self.mode, self.store.duration_ms)
        self._schedule()

    def frame(self, timestamp: float) -> None:
        """Advance to *timestamp* (ms, same clock as the controller's)."""
        self._cancel()
        if (
            self.state is not PlaybackState.PLAYING
            or self.start_time is None
            or len(self.store) < 2
        ):
            return

        self.progress = progress_at(timestamp - self.start_time, self.store.duration_ms, self.mode)
        pose = get_pose_at_progress(self.progress, self.store.keyframes)
        if pose is not None:
            self._emit(pose)

        if self.state is PlaybackState.PLAYING:
            self._schedule()

    def pause(self) -> None:
        if self.state is not PlaybackState.PLAYING:
            self._ignored("pause")
            return
        self._cancel()
        if self.start_time is not None:
            self.elapsed_before_pause = self.clock() - self.start_time
        self.state = PlaybackState.PAUSED

    def resume(self) -> None:
        if self.state is not PlaybackState.PAUSED:
            self._ignored("resume")
            return
        self.start_time = self.clock() - self.elapsed_before_pause
        self.state = PlaybackState.PLAYING
        self._schedule()

    def toggle_pause(self) -> None:
        if self.state is PlaybackState.PAUSED:
            self.resume()
        else:
            self.pause()

    def stop(self) -> None:
        """Stop playback and return to the keyframe that was active at start.

        Falls back to the first keyframe, or to the default pose when the clip
        is empty.  Calling it while already stopped does nothing.
        """
        self._cancel()
        if self.state is PlaybackState.STOPPED:
            self._ignored("stop")
            return

        self.state = PlaybackState.STOPPED
        self.scrubbing = False
        self.trail = None
        self.start_time = None
        self.elapsed_before_pause = 0.0

        index = self.active_before_playback
        self.active_before_playback = None
        if index is None or not 0 <= index < len(self.store):
            index = 0 if len(self.store) > 0 else None

        self.store.active_index = index
        if index is not None:
            keyframe = self.store[index]
            self.progress = keyframe.time
            self._emit(keyframe.pose.clone())
        else:
            self.progress = 0.0
            if self.default_pose is not None:
                self._emit(self.default_pose.clone())

    def toggle_mode(self) -> PlaybackMode:
        """Switch between loop and ping-pong (needs at least two keyframes)."""
        if len(self.store) < 2:
            self._ignored("mode change with fewer than 2 keyframes")
            return self.mode
        self.mode = PlaybackMode.PING_PONG if self.mode is PlaybackMode.LOOP else PlaybackMode.LOOP
        return self.mode

    # ------------------------------------------------------------------
    # Scrubbing and insertion
    # ------------------------------------------------------------------

    def scrub(self, progress: float) -> None:
        """Move the playhead by hand (only while stopped or paused)."""
        if self.state is PlaybackState.PLAYING:
            self._ignored("scrub")
            return
        self.scrubbing = True
        self.store.active_index = None
        self.progress = normalize_time(progress)
        pose = get_pose_at_progress(self.progress, self.store.keyframes)
        if pose is not None:
            self._emit(pose)

    def end_scrub(self) -> None:
        self.scrubbing = False

    def at_existing_keyframe(self) -> bool:
        return any(abs(kf.time - self.progress) < KEYFRAME_TOLERANCE for kf in self.store)

    def can_insert(self) -> bool:
        """Whether the current interpolated pose may become a new keyframe."""
        viewing_interpolated = (
            self.state is PlaybackState.STOPPED
            and self.store.active_index is None
            and len(self.store) >= 2
        )
        allowed = self.state is PlaybackState.PAUSED or self.scrubbing or viewing_interpolated
        return allowed and not self.at_existing_keyframe()

    def insert_at_current_progress(self, pose: Pose) -> int | None:
        """Store *pose* as a keyframe at the current progress and stop.

        The working pose is left alone and the new keyframe becomes active.
        Returns the new index, or ``None`` when insertion is not allowed.
        """
        if not self.can_insert():
            self._ignored("insert at current progress")
            return None

        index = self.store.insert_at_time(pose, self.progress)
        self._cancel()
        self.state = PlaybackState.STOPPED
        self.scrubbing = False
        self.trail = None
        self.start_time = None
        self.elapsed_before_pause = 0.0
        self.active_before_playback = None
        self.store.active_index = index
        return index
