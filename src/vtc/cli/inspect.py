"""CLI probe and plan commands."""

import json
from pathlib import Path
from typing import Any

import click

from vtc.cli.exit_codes import ExitCode
from vtc.cli.options import build_prober, load_cli_config
from vtc.cli.output import error_exit
from vtc.domain import RawMeta
from vtc.executor.interface import ToolNotFoundError
from vtc.introspector.interface import ProbeError
from vtc.policy import (
    TranscodePolicy,
    plan_scale,
    resolve_display_size,
    select_encoder_class,
)


def _probe_or_exit(
    ctx: click.Context,
    file_path: Path,
    json_output: bool,
    **overrides: Any,
) -> tuple[RawMeta, TranscodePolicy]:
    if not file_path.is_file():
        error_exit(
            f"File not found: {file_path}", ExitCode.TARGET_NOT_FOUND, json_output
        )
    config = load_cli_config(ctx, json_output, **overrides)
    try:
        meta = build_prober(config).probe(file_path)
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)
    except ProbeError as e:
        error_exit(str(e), ExitCode.INVALID_METADATA, json_output)
    return meta, config.transcode


def describe_plan(meta: RawMeta, policy: TranscodePolicy) -> dict[str, Any]:
    """Run the geometry pipeline and report every intermediate size.

    Raises:
        InvalidMetadataError: If the coded dimensions are degenerate.
    """
    display = resolve_display_size(meta)
    scale = plan_scale(display, max_height=policy.max_height, rounding=policy.rounding)
    aligned = policy.alignment_policy.align(scale)
    encoder_class = select_encoder_class(aligned.is_aligned, policy.hardware)
    return {
        "coded": f"{meta.coded_width}x{meta.coded_height}",
        "rotation": meta.rotation_degrees,
        "display": f"{display.width}x{display.height}",
        "target": f"{scale.target_width}x{scale.target_height}",
        "scale_factor": round(scale.scale_factor, 6),
        "aligned": f"{aligned.width}x{aligned.height}",
        "is_aligned": aligned.is_aligned,
        "encoder_class": encoder_class.value,
        "bitrate": policy.bitrate,
    }


@click.command("probe")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Show the coded size and rotation of FILE's video stream."""
    meta, _ = _probe_or_exit(ctx, file, json_output)

    data = {
        "file": str(file),
        "coded_width": meta.coded_width,
        "coded_height": meta.coded_height,
        "rotation": meta.rotation_degrees,
    }
    if json_output:
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(f"File:     {file}")
    click.echo(f"Coded:    {meta.coded_width}x{meta.coded_height}")
    click.echo(f"Rotation: {meta.rotation_degrees}")


@click.command("plan")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--max-height",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum output display height (default: 720).",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan_command(
    ctx: click.Context, file: Path, max_height: int | None, json_output: bool
) -> None:
    """Show the geometry decisions for FILE without encoding."""
    meta, policy = _probe_or_exit(ctx, file, json_output, max_height=max_height)

    if meta.is_degenerate:
        error_exit(
            f"Invalid coded dimensions {meta.coded_width}x{meta.coded_height}",
            ExitCode.INVALID_METADATA,
            json_output,
        )
    data = describe_plan(meta, policy)

    if json_output:
        click.echo(json.dumps({"file": str(file), **data}, indent=2))
        return
    click.echo(f"File:          {file}")
    click.echo(f"Coded:         {data['coded']} (rotation {data['rotation']})")
    click.echo(f"Display:       {data['display']}")
    click.echo(f"Target:        {data['target']} (x{data['scale_factor']})")
    aligned_note = "" if data["is_aligned"] else " (adjusted)"
    click.echo(f"Aligned:       {data['aligned']}{aligned_note}")
    click.echo(f"Encoder class: {data['encoder_class']}")
