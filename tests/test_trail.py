"""Tests for onion skinning and the motion trail."""

from __future__ import annotations

import pytest
from conftest import store_with

from poseforge.timeline.trail import (
    ONION_AFTER_COLOUR,
    ONION_BEFORE_COLOUR,
    build_motion_trail,
    onion_skin_frames,
    trail_opacity,
)

SIZE = (800, 600)


@pytest.mark.parametrize(
    ("frames", "expected"),
    [(10, 0.25), (60, 0.25), (300, 0.05), (1500, 0.01), (10_000, 0.01)],
)
def test_trail_opacity(frames: int, expected: float) -> None:
    assert trail_opacity(frames) == pytest.approx(expected)


class TestBuildMotionTrail:
    def test_needs_two_keyframes(self, skeleton):
        store = store_with([0.0])
        assert build_motion_trail(store.keyframes, 1000, skeleton, size=SIZE) is None

    def test_needs_two_frames(self, skeleton):
        store = store_with([0.0, 1.0])
        assert build_motion_trail(store.keyframes, 20, skeleton, size=SIZE) is None

    def test_step_longer_than_clip(self, skeleton):
        store = store_with([0.0, 1.0])
        assert build_motion_trail(store.keyframes, 1000, skeleton, size=SIZE, resolution=100) is None

    def test_draws_every_frame(self, skeleton):
        store = store_with([0.0, 1.0])
        trail = build_motion_trail(store.keyframes, 1000, skeleton, size=SIZE)
        assert trail is not None
        assert trail.total_frames == 60
        assert trail.frames_drawn == 60
        assert trail.step == 1
        assert trail.opacity == pytest.approx(0.25)
        assert trail.image.size == SIZE
        assert trail.image.mode == "RGBA"
        assert trail.image.getbbox() is not None

    def test_resolution_skips_frames(self, skeleton):
        store = store_with([0.0, 1.0])
        trail = build_motion_trail(store.keyframes, 1000, skeleton, size=SIZE, resolution=7)
        assert trail is not None
        assert trail.step == 7
        assert trail.frames_drawn == len(range(0, 60, 7))
        assert trail.opacity == pytest.approx(0.25)

    def test_long_clip_fades(self, skeleton):
        store = store_with([0.0, 1.0])
        trail = build_motion_trail(store.keyframes, 10_000, skeleton, size=(200, 200))
        assert trail is not None
        assert trail.total_frames == 600
        assert trail.opacity == pytest.approx(15 / 600)

    def test_custom_fps(self, skeleton):
        store = store_with([0.0, 1.0])
        trail = build_motion_trail(store.keyframes, 1000, skeleton, size=(100, 100), fps=24)
        assert trail is not None
        assert trail.total_frames == 24


class TestOnionSkin:
    def test_no_active_keyframe(self):
        store = store_with([0.0, 0.5, 1.0])
        assert onion_skin_frames(store.keyframes, None, 5, 5) == []

    def test_neighbours_fade_with_distance(self):
        store = store_with([0.0, 0.25, 0.5, 0.75, 1.0])
        frames = onion_skin_frames(store.keyframes, 2, 5, 5)
        assert [f.index for f in frames] == [1, 0, 3, 4]
        assert [f.opacity for f in frames] == pytest.approx([0.4, 0.2, 0.4, 0.2])
        assert frames[0].colour == ONION_BEFORE_COLOUR
        assert frames[2].colour == ONION_AFTER_COLOUR
        assert frames[0].pose == store[1].pose
        assert frames[0].pose is not store[1].pose

    def test_range_limits(self):
        store = store_with([0.0, 0.25, 0.5, 0.75, 1.0])
        frames = onion_skin_frames(store.keyframes, 2, 1, 0)
        assert [f.index for f in frames] == [1]

    def test_faint_frames_dropped(self):
        store = store_with([i / 11 for i in range(12)])
        frames = onion_skin_frames(store.keyframes, 0, 0, 10)
        assert [f.index for f in frames] == list(range(1, 8))

    def test_rgba(self):
        store = store_with([0.0, 1.0])
        (frame,) = onion_skin_frames(store.keyframes, 0, 0, 1)
        assert frame.rgba == (*ONION_AFTER_COLOUR, 102)
