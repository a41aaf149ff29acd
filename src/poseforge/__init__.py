"""poseforge - keyframe posing and animation core for a 2D stick figure."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("poseforge")
except PackageNotFoundError:
    __version__ = "unknown"
