"""CLI entry point using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
    from poseforge.config import AppConfig
    from poseforge.timeline.keyframes import KeyframeStore

app = typer.Typer(
    name="poseforge",
    help="Pose and animate a 2D stick figure from keyframe files.",
    no_args_is_help=False,
)


def _load_store(path: Path, config: AppConfig) -> KeyframeStore:
    """Read an animation file into a fresh store, exiting on bad input."""
    from poseforge.exchange import DocumentLoadError, read_document
    from poseforge.timeline.keyframes import KeyframeStore

    try:
        loaded = read_document(path)
    except DocumentLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    store = KeyframeStore(
        config.timeline.default_duration_ms,
        extend_step_ms=config.timeline.extend_step_ms,
    )
    store.replace_all(loaded.keyframes, loaded.duration_ms)
    return store


@app.command()
def info() -> None:
    """Describe the stick-figure skeleton and the active configuration."""
    from poseforge.config import load_config
    from poseforge.kinematics.ik import IK_CHAINS
    from poseforge.kinematics.skeleton import create_default_skeleton

    config = load_config()
    skeleton = create_default_skeleton(config.canvas.width, config.canvas.posing_area_height)

    typer.echo(f"Canvas: {config.canvas.width}x{config.canvas.posing_area_height}")
    typer.echo(f"Default duration: {config.timeline.default_duration_ms:.0f} ms @ {config.timeline.fps} fps")
    typer.echo(f"Joints: {len(skeleton.joints)}")
    for joint in skeleton.order[1:]:
        parent = skeleton.parent_of(joint)
        length = skeleton.bone_length(joint)
        typer.echo(f"  {parent} -> {joint} ({length:.1f} px)")
    typer.echo("IK chains:")
    for effector, chain in IK_CHAINS.items():
        typer.echo(f"  {effector}: {chain.base} -> {' -> '.join(chain.joints)}")


@app.command()
def sample(
    path: Annotated[Path, typer.Argument(help="Animation JSON file")],
    progress: Annotated[
        float,
        typer.Option("--progress", "-p", min=0.0, max=1.0, help="Normalized time to sample"),
    ] = 0.0,
    points: Annotated[
        bool, typer.Option("--points", help="Print joint positions instead of angles")
    ] = False,
) -> None:
    """Print the interpolated pose at a point in the clip as JSON."""
    import json

    from poseforge.config import load_config
    from poseforge.kinematics.skeleton import calculate_points_from_pose, create_default_skeleton
    from poseforge.timeline.interpolation import get_pose_at_progress

    config = load_config()
    store = _load_store(path, config)
    pose = get_pose_at_progress(progress, store.keyframes)
    if pose is None:
        typer.echo("Error: animation has no keyframes", err=True)
        raise typer.Exit(1)

    if points:
        skeleton = create_default_skeleton(config.canvas.width, config.canvas.posing_area_height)
        positions = calculate_points_from_pose(pose, skeleton)
        typer.echo(json.dumps({str(j): p.model_dump() for j, p in positions.items()}, indent=2))
    else:
        typer.echo(pose.model_dump_json(indent=2))


@app.command()
def convert(
    source: Annotated[Path, typer.Argument(help="Animation file in any supported format")],
    output: Annotated[Path, typer.Argument(help="Where to write the current format")],
) -> None:
    """Rewrite an animation file (legacy or current) in the current document format."""
    from poseforge.config import load_config
    from poseforge.exchange import save_document

    store = _load_store(source, load_config())
    save_document(store, output)
    typer.echo(f"Converted {len(store)} keyframes to {output}")


@app.command()
def trail(
    path: Annotated[Path, typer.Argument(help="Animation JSON file")],
    output: Annotated[Path, typer.Option("--output", "-o", help="PNG file to write")] = Path(
        "trail.png"
    ),
    resolution: Annotated[
        int | None,
        typer.Option("--resolution", "-r", min=1, help="Draw every Nth frame"),
    ] = None,
) -> None:
    """Render the clip's motion trail to a PNG."""
    from poseforge.config import load_config
    from poseforge.kinematics.skeleton import create_default_skeleton
    from poseforge.timeline.trail import build_motion_trail

    config = load_config()
    store = _load_store(path, config)
    skeleton = create_default_skeleton(config.canvas.width, config.canvas.posing_area_height)
    motion = build_motion_trail(
        store.keyframes,
        store.duration_ms,
        skeleton,
        size=config.canvas.size,
        resolution=resolution or config.trail.resolution,
        fps=config.timeline.fps,
        colour=config.trail.colour,
    )
    if motion is None:
        typer.echo("Error: nothing to draw (need at least 2 keyframes and 2 frames)", err=True)
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    motion.image.save(output, "PNG")
    typer.echo(f"Drew {motion.frames_drawn} of {motion.total_frames} frames to {output}")


@app.command()
def frames(
    path: Annotated[Path, typer.Argument(help="Animation JSON file")],
    output: Annotated[Path, typer.Option("--output", "-o", help="PNG file to write")] = Path(
        "frames.png"
    ),
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Frames to sample")] = 8,
    direction: Annotated[
        str, typer.Option("--direction", "-d", help="horizontal or vertical")
    ] = "horizontal",
    padding: Annotated[int, typer.Option("--padding", min=0, help="Pixels between frames")] = 0,
) -> None:
    """Sample evenly spaced frames of the clip into a sprite sheet."""
    from poseforge.config import load_config
    from poseforge.kinematics.skeleton import create_default_skeleton
    from poseforge.rendering import render_sprite_sheet
    from poseforge.timeline.interpolation import get_pose_at_progress

    config = load_config()
    store = _load_store(path, config)
    if not len(store):
        typer.echo("Error: animation has no keyframes", err=True)
        raise typer.Exit(1)

    skeleton = create_default_skeleton(config.canvas.width, config.canvas.posing_area_height)
    poses = []
    for i in range(count):
        pose = get_pose_at_progress(0.0 if count == 1 else i / (count - 1), store.keyframes)
        if pose is not None:
            poses.append(pose)

    try:
        render_sprite_sheet(
            poses, skeleton, output, config.canvas.size, direction=direction, padding=padding
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(f"Rendered {len(poses)} frames to {output}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Show version", is_eager=True)
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log to stderr")] = False,
) -> None:
    """poseforge - keyframe posing and animation for a 2D stick figure."""
    if version:
        from poseforge import __version__

        typer.echo(f"poseforge {__version__}")
        raise typer.Exit()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
