"""Enumerations used throughout poseforge."""

from enum import StrEnum


class Joint(StrEnum):
    HIP = "hip"
    NECK_BASE = "neckBase"
    NECK = "neck"
    HEAD = "head"
    LEFT_ELBOW = "leftElbow"
    LEFT_HAND = "leftHand"
    RIGHT_ELBOW = "rightElbow"
    RIGHT_HAND = "rightHand"
    LEFT_KNEE = "leftKnee"
    LEFT_FOOT = "leftFoot"
    LEFT_TOE = "leftToe"
    RIGHT_KNEE = "rightKnee"
    RIGHT_FOOT = "rightFoot"
    RIGHT_TOE = "rightToe"


class EndEffector(StrEnum):
    """Leaf joints that inverse kinematics can solve for directly."""

    LEFT_HAND = "leftHand"
    RIGHT_HAND = "rightHand"
    LEFT_FOOT = "leftFoot"
    RIGHT_FOOT = "rightFoot"
    LEFT_TOE = "leftToe"
    RIGHT_TOE = "rightToe"

    @property
    def joint(self) -> Joint:
        return Joint(self.value)


class PlaybackState(StrEnum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackMode(StrEnum):
    LOOP = "loop"
    PING_PONG = "ping-pong"


class TimeDisplayMode(StrEnum):
    SECONDS = "seconds"
    FRAMES = "frames"
