"""Shared fixtures for poseforge tests."""

from __future__ import annotations

import pytest

from poseforge.config import AppConfig
from poseforge.kinematics.skeleton import Skeleton, create_default_skeleton
from poseforge.models import Joint, Keyframe, Point, Pose
from poseforge.session import EditorSession
from poseforge.timeline.keyframes import KeyframeStore
from poseforge.timeline.playback import ManualScheduler


class FakeClock:
    """Monotonic millisecond clock the test moves by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_pose(hip_x: float = 400.0, hip_y: float = 320.0, **angles: float) -> Pose:
    """A pose at the given hip with the default skeleton's angles, overridden by *angles*."""
    pose = create_default_skeleton().default_pose
    pose.hip = Point(x=hip_x, y=hip_y)
    for name, value in angles.items():
        pose.angles[Joint(name)] = value
    return pose


def store_with(times: list[float], duration_ms: float = 5000.0) -> KeyframeStore:
    """A store holding one keyframe per time, told apart by hip x (0, 10, 20, ...)."""
    store = KeyframeStore(duration_ms)
    store.replace_all(
        [Keyframe(pose=make_pose(hip_x=i * 10.0), time=t) for i, t in enumerate(times)]
    )
    return store


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config lookups away from the real ~/.poseforge."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in ("POSEFORGE_TIMELINE__FPS", "POSEFORGE_TIMELINE__DEFAULT_DURATION_MS"):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def skeleton() -> Skeleton:
    return create_default_skeleton()


@pytest.fixture
def pose(skeleton: Skeleton) -> Pose:
    return skeleton.default_pose


@pytest.fixture
def store() -> KeyframeStore:
    return KeyframeStore()


@pytest.fixture
def three_keyframes() -> KeyframeStore:
    return store_with([0.0, 0.5, 1.0])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(clock: FakeClock, scheduler: ManualScheduler) -> EditorSession:
    return EditorSession(AppConfig(), scheduler=scheduler, clock=clock)
