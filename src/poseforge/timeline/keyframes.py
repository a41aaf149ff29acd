"""Ordered keyframe collection and its time-renormalization policies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poseforge.models.pose import Keyframe
from poseforge.timeline.timing import normalize_time

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from poseforge.models.pose import Pose

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MS = 5000.0
EXTEND_STEP_MS = 1000.0
# Minimum gap kept between a dragged timeline marker and its neighbours.
MARKER_GAP = 0.01


class KeyframeStore:
    """Keyframes sorted by normalized time, plus the clip duration.

    ``time * duration_ms`` is a keyframe's absolute position in the clip.
    Every mutating method returns with the list sorted ascending by time and
    ``active_index`` pointing at the same keyframe as before (or ``None``
    when that keyframe was removed).
    """

    def __init__(
        self,
        duration_ms: float = DEFAULT_DURATION_MS,
        *,
        default_duration_ms: float | None = None,
        extend_step_ms: float = EXTEND_STEP_MS,
    ) -> None:
        self.keyframes: list[Keyframe] = []
        self.duration_ms = float(duration_ms)
        self.default_duration_ms = float(
            duration_ms if default_duration_ms is None else default_duration_ms
        )
        self.extend_step_ms = float(extend_step_ms)
        self.active_index: int | None = None

    def __len__(self) -> int:
        return len(self.keyframes)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(self.keyframes)

    def __getitem__(self, index: int) -> Keyframe:
        return self.keyframes[index]

    @property
    def times(self) -> list[float]:
        return [kf.time for kf in self.keyframes]

    @property
    def active(self) -> Keyframe | None:
        if self.active_index is None or not 0 <= self.active_index < len(self.keyframes):
            return None
        return self.keyframes[self.active_index]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _sort(self) -> None:
        """Sort by time, keeping ``active_index`` on the same keyframe."""
        active = self.active
        self.keyframes.sort(key=lambda kf: kf.time)
        self.active_index = None if active is None else self._index_of(active)

    def _index_of(self, keyframe: Keyframe) -> int:
        return next(i for i, kf in enumerate(self.keyframes) if kf is keyframe)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.keyframes):
            msg = f"keyframe index {index} out of range (have {len(self.keyframes)})"
            raise IndexError(msg)

    def _rescale(self, old_duration: float, new_duration: float) -> None:
        """Change the duration while keeping every keyframe's absolute time."""
        self.duration_ms = new_duration
        for kf in self.keyframes:
            kf.time = kf.time * old_duration / new_duration

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def autosave(self, working_pose: Pose | None) -> None:
        """Write the working pose back into the active keyframe."""
        active = self.active
        if active is not None and working_pose is not None:
            active.pose = working_pose.clone()

    def select(self, index: int, working_pose: Pose | None = None) -> Pose:
        """Make *index* active and return a copy of its pose for editing."""
        self._check_index(index)
        self.autosave(working_pose)
        self.active_index = index
        return self.keyframes[index].pose.clone()

    def add(self, pose: Pose, current_progress: float) -> int:
        """Save *pose* (the working pose) as a new keyframe and make it active.

        The first keyframe goes to 0 and the second to 1.  Later ones go to
        *current_progress*; landing exactly on an existing keyframe splits the
        gap to the next one, and landing on or past the end grows the clip by
        ``extend_step_ms`` with the new keyframe pinned at 1.0.
        """
        self.autosave(pose)

        count = len(self.keyframes)
        if count == 0:
            time = 0.0
        elif count == 1:
            time = 1.0
        else:
            time = current_progress

        self._sort()
        existing = next((i for i, kf in enumerate(self.keyframes) if kf.time == time), None)
        if existing is not None:
            if existing + 1 < count:
                following = self.keyframes[existing + 1].time
                time = time + (following - time) / 2
            else:
                time = 1.0

        if count >= 2 and time >= 1.0:
            old_duration = self.duration_ms
            self._rescale(old_duration, old_duration + self.extend_step_ms)
            logger.info(
                "Extended clip from %.0f ms to %.0f ms", old_duration, self.duration_ms
            )
            time = 1.0

        keyframe = Keyframe(pose=pose.clone(), time=max(0.0, time))
        self.keyframes.append(keyframe)
        self.active_index = None
        self.keyframes.sort(key=lambda kf: kf.time)
        self.active_index = self._index_of(keyframe)
        logger.debug("Added keyframe %d at t=%.4f", self.active_index, keyframe.time)
        return self.active_index

    def delete(self, index: int, working_pose: Pose | None = None) -> bool:
        """Remove the keyframe at *index*.

        Returns ``True`` when the removed keyframe was the active one, in which
        case the caller should reset its working pose.
        """
        self._check_index(index)
        self.autosave(working_pose)

        was_last = index == len(self.keyframes) - 1
        old_duration = self.duration_ms
        deleted_active = self.active_index == index

        del self.keyframes[index]
        if deleted_active:
            self.active_index = None
        elif self.active_index is not None and self.active_index > index:
            self.active_index -= 1

        remaining = len(self.keyframes)
        if remaining == 0:
            self.duration_ms = self.default_duration_ms
        elif remaining == 1:
            self.keyframes[0].time = 0.0
        elif was_last:
            new_duration = self.keyframes[-1].time * old_duration
            if new_duration > 0 and old_duration > 0:
                self._rescale(old_duration, new_duration)
                self.keyframes[-1].time = 1.0
            else:
                for kf in self.keyframes:
                    kf.time = 0.0
            logger.info("Shrunk clip to %.0f ms", self.duration_ms)

        logger.debug("Deleted keyframe %d (%d left)", index, remaining)
        return deleted_active

    def insert_at_time(self, pose: Pose, time: float) -> int:
        """Insert a copy of *pose* at an already-normalized *time*."""
        keyframe = Keyframe(pose=pose.clone(), time=time)
        self.keyframes.append(keyframe)
        self._sort()
        index = self._index_of(keyframe)
        logger.debug("Inserted keyframe %d at t=%.4f", index, time)
        return index

    def replace_all(self, keyframes: Iterable[Keyframe], duration_ms: float | None = None) -> None:
        """Swap in a whole new clip (used by import)."""
        self.keyframes = [kf.clone() for kf in keyframes]
        self.keyframes.sort(key=lambda kf: kf.time)
        self.active_index = None
        if duration_ms is not None:
            self.set_duration(duration_ms)

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    def set_duration(self, duration_ms: float) -> None:
        if duration_ms <= 0:
            msg = f"duration must be positive, got {duration_ms}"
            raise ValueError(msg)
        self.duration_ms = float(duration_ms)

    def redistribute_even(self) -> None:
        """Space the keyframes uniformly: ``time[i] = i / (n - 1)``."""
        count = len(self.keyframes)
        if count == 0:
            return
        if count == 1:
            self.keyframes[0].time = 0.0
            return
        for i, kf in enumerate(self.keyframes):
            kf.time = i / (count - 1)

    def renormalize(self) -> None:
        """Linearly map the current ``[first, last]`` time range onto ``[0, 1]``."""
        count = len(self.keyframes)
        if count < 2:
            if count == 1:
                self.keyframes[0].time = 0.0
            return
        first = self.keyframes[0].time
        last = self.keyframes[-1].time
        span = last - first
        if span == 0:
            self.redistribute_even()
            return
        for kf in self.keyframes[1:-1]:
            kf.time = (kf.time - first) / span
        self.keyframes[0].time = 0.0
        self.keyframes[-1].time = 1.0
        self._sort()

    def move_keyframe_time(self, index: int, time: float) -> float:
        """Drag an interior keyframe's marker along the timeline.

        The first and last keyframes are pinned.  The new time is kept at
        least ``MARKER_GAP`` away from both neighbours so order never changes.
        Returns the keyframe's resulting time.
        """
        self._check_index(index)
        keyframe = self.keyframes[index]
        if index == 0 or index == len(self.keyframes) - 1:
            return keyframe.time

        constrained = normalize_time(time)
        constrained = max(constrained, self.keyframes[index - 1].time + MARKER_GAP)
        constrained = min(constrained, self.keyframes[index + 1].time - MARKER_GAP)
        keyframe.time = constrained
        return constrained

    def reorder(self, source: int, target: int) -> int:
        """Move keyframe *source* to drop position *target*, swapping times.

        The moved keyframe takes over the time of the one it lands on.  If the
        latest keyframe is then no longer at 1.0 the clip is rescaled so it
        is.  The moved keyframe becomes active; its new index is returned.
        """
        self._check_index(source)
        target = max(0, min(target, len(self.keyframes) - 1))
        if target == source:
            return source

        moved = self.keyframes.pop(source)
        landing = target - 1 if target > source else target
        displaced = self.keyframes[landing]
        moved.time, displaced.time = displaced.time, moved.time
        self.keyframes.insert(landing, moved)
        self.active_index = None
        self.keyframes.sort(key=lambda kf: kf.time)

        last = self.keyframes[-1]
        if last.time != 1.0 and last.time > 0:
            scale = last.time
            self.duration_ms = self.duration_ms * scale
            for kf in self.keyframes:
                kf.time = kf.time / scale
            last.time = 1.0

        self.active_index = self._index_of(moved)
        return self.active_index
