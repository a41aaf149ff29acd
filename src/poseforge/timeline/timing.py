"""Time conversions and duration parsing for the timeline display."""

from __future__ import annotations

from poseforge.models.enums import TimeDisplayMode

FRAMES_PER_SECOND = 60


def normalize_time(time: float) -> float:
    """Clamp *time* into ``[0, 1]``."""
    return max(0.0, min(1.0, time))


def seconds_to_ms(seconds: float) -> float:
    return seconds * 1000


def ms_to_seconds(ms: float) -> float:
    return ms / 1000


def frames_to_ms(frames: float, fps: int = FRAMES_PER_SECOND) -> float:
    return frames / fps * 1000


def ms_to_frames(ms: float, fps: int = FRAMES_PER_SECOND) -> int:
    return round(ms / 1000 * fps)


def format_time(
    time: float,
    mode: TimeDisplayMode,
    duration_ms: float,
    fps: int = FRAMES_PER_SECOND,
) -> str:
    """Label a normalized *time* as seconds (``"1.5s"``) or frames (``"90f"``)."""
    if mode is TimeDisplayMode.SECONDS:
        return f"{time * duration_ms / 1000:.1f}s"
    return f"{round(time * duration_ms / 1000 * fps)}f"


def format_duration(duration_ms: float, mode: TimeDisplayMode, fps: int = FRAMES_PER_SECOND) -> str:
    """Value shown in the duration field: seconds to one decimal, or whole frames."""
    if mode is TimeDisplayMode.SECONDS:
        return f"{duration_ms / 1000:.1f}"
    return str(ms_to_frames(duration_ms, fps))


def parse_duration(value: str | float, mode: TimeDisplayMode, fps: int = FRAMES_PER_SECOND) -> float:
    """Parse a user-entered duration into milliseconds.

    Seconds accept any positive number; frames accept a positive integer.

    Raises
    ------
    ValueError
        If the value is not a positive number (or whole frame count).
    """
    if mode is TimeDisplayMode.SECONDS:
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            msg = "Invalid duration. Please enter a positive number."
            raise ValueError(msg) from None
        if not seconds > 0:
            msg = "Invalid duration. Please enter a positive number."
            raise ValueError(msg)
        return seconds_to_ms(seconds)

    try:
        frames = int(value)
    except (TypeError, ValueError):
        msg = "Invalid duration. Please enter a positive integer for frames."
        raise ValueError(msg) from None
    if frames <= 0:
        msg = "Invalid duration. Please enter a positive integer for frames."
        raise ValueError(msg)
    return frames_to_ms(frames, fps)
