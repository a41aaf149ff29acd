"""Tests for the CLI entry point."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest
from conftest import make_pose
from PIL import Image
from typer.testing import CliRunner

from poseforge import __version__
from poseforge.cli import app

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture
def legacy_file(tmp_path: Path) -> Path:
    """A bare list of poses, the oldest file shape."""
    path = tmp_path / "legacy.json"
    poses = [make_pose(hip_x=x).model_dump(mode="json") for x in (100, 200, 300)]
    path.write_text(json.dumps(poses))
    return path


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"poseforge {__version__}"


def test_no_command_shows_help():
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "sample" in result.output


def test_info():
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "Joints: 14" in result.output
    assert "hip -> neckBase (60.0 px)" in result.output
    assert "leftHand: neckBase -> leftElbow -> leftHand" in result.output


def test_verbose_configures_logging(monkeypatch):
    calls: list[dict] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
    result = runner.invoke(app, ["--verbose", "info"])
    assert result.exit_code == 0
    assert calls[0]["level"] == logging.DEBUG


def test_sample_angles(legacy_file):
    result = runner.invoke(app, ["sample", str(legacy_file), "--progress", "0.25"])
    assert result.exit_code == 0
    pose = json.loads(result.output)
    assert pose["hip"]["x"] == pytest.approx(150)
    assert "neckBase" in pose["angles"]


def test_sample_points(legacy_file):
    result = runner.invoke(app, ["sample", str(legacy_file), "--points"])
    assert result.exit_code == 0
    points = json.loads(result.output)
    assert points["hip"] == {"x": 100.0, "y": 320.0}
    assert set(points) >= {"head", "leftToe", "rightHand"}


def test_sample_rejects_out_of_range_progress(legacy_file):
    result = runner.invoke(app, ["sample", str(legacy_file), "--progress", "2"])
    assert result.exit_code != 0


def test_sample_empty_file(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]")
    result = runner.invoke(app, ["sample", str(path)])
    assert result.exit_code == 1
    assert "no keyframes" in result.output


def test_bad_file_reports_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{")
    result = runner.invoke(app, ["sample", str(path)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["convert", str(tmp_path / "nope.json"), str(tmp_path / "out.json")])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_convert_legacy(legacy_file, tmp_path):
    output = tmp_path / "converted.json"
    result = runner.invoke(app, ["convert", str(legacy_file), str(output)])
    assert result.exit_code == 0
    assert "Converted 3 keyframes" in result.output
    data = json.loads(output.read_text())
    assert data["version"] == "1.1.0"
    assert data["format"] == "stick-figure-animation"
    assert [kf["time"] for kf in data["keyframes"]] == [0.0, 0.5, 1.0]
    assert data["metadata"]["durationMs"] == 5000


def test_trail(legacy_file, tmp_path):
    output = tmp_path / "trail.png"
    result = runner.invoke(app, ["trail", str(legacy_file), "-o", str(output), "-r", "10"])
    assert result.exit_code == 0, result.output
    assert "Drew 30 of 300 frames" in result.output
    with Image.open(output) as img:
        assert img.size == (800, 600)
        assert img.getbbox() is not None


def test_trail_needs_two_keyframes(tmp_path):
    path = tmp_path / "one.json"
    path.write_text(json.dumps([make_pose().model_dump(mode="json")]))
    result = runner.invoke(app, ["trail", str(path), "-o", str(tmp_path / "t.png")])
    assert result.exit_code == 1
    assert "nothing to draw" in result.output


def test_frames(legacy_file, tmp_path):
    output = tmp_path / "sheet.png"
    result = runner.invoke(app, ["frames", str(legacy_file), "-o", str(output), "-n", "4"])
    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (800 * 4, 600)


def test_frames_bad_direction(legacy_file, tmp_path):
    result = runner.invoke(
        app, ["frames", str(legacy_file), "-o", str(tmp_path / "s.png"), "-d", "diagonal"]
    )
    assert result.exit_code == 1
    assert "direction" in result.output
