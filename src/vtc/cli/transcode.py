"""CLI transcode command."""

import logging
from pathlib import Path
from typing import Any

import click

from vtc.cli.exit_codes import ExitCode, exit_code_for
from vtc.cli.options import build_engine, build_prober, load_cli_config
from vtc.cli.output import CLIResult, emit, error_exit
from vtc.domain import JobState
from vtc.executor.interface import ToolNotFoundError
from vtc.jobs import TranscodeJob, TranscodeResult
from vtc.tools.ffmpeg_progress import FFmpegProgress

logger = logging.getLogger(__name__)


def result_to_dict(result: TranscodeResult) -> dict[str, Any]:
    """Serialize a TranscodeResult for JSON output."""
    data: dict[str, Any] = {
        "job_id": result.job_id,
        "state": result.state.value,
        "input": str(result.input_path),
        "output": str(result.output_path) if result.output_path else None,
    }
    if result.meta is not None:
        data["coded"] = {
            "width": result.meta.coded_width,
            "height": result.meta.coded_height,
            "rotation": result.meta.rotation_degrees,
        }
    if result.plan is not None:
        data["plan"] = {
            "resolution": result.plan.resolution,
            "is_aligned": result.plan.is_aligned,
            "encoder_class": result.plan.encoder_class.value,
            "bitrate": result.plan.bitrate,
        }
    if result.encoder is not None:
        data["encoder"] = result.encoder
    if result.outcome is not None:
        data["outcome"] = {
            "original_bytes": result.outcome.original_bytes,
            "produced_bytes": result.outcome.produced_bytes,
            "accepted": result.outcome.accepted,
        }
    if result.error_kind is not None:
        data["error_kind"] = result.error_kind.value
    if result.diagnostic:
        data["diagnostic"] = result.diagnostic
    return data


def format_result_human(result: TranscodeResult) -> str:
    """One-line summary of a completed job."""
    outcome = result.outcome
    if outcome is not None and not outcome.accepted:
        return (
            f"Kept original: {result.input_path} -> {result.output_path} "
            f"(transcode was {outcome.produced_bytes} of "
            f"{outcome.original_bytes} bytes)"
        )
    details = []
    if result.plan is not None and result.plan.resolution:
        details.append(result.plan.resolution)
    if result.encoder:
        details.append(result.encoder)
    if outcome is not None and outcome.size_ratio is not None:
        details.append(f"{outcome.size_ratio:.0%} of original")
    suffix = f" ({', '.join(details)})" if details else ""
    return f"Transcoded: {result.input_path} -> {result.output_path}{suffix}"


def _progress_printer(progress: FFmpegProgress) -> None:
    if progress.out_time_seconds is not None:
        click.echo(
            f"\r  {progress.out_time_seconds:8.1f}s  speed={progress.speed or '?'}",
            nl=False,
            err=True,
        )


@click.command("transcode")
@click.argument("input_file", metavar="INPUT", type=click.Path(path_type=Path))
@click.argument("output_file", metavar="OUTPUT", type=click.Path(path_type=Path))
@click.option(
    "--max-height",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum output display height (default: 720).",
)
@click.option(
    "--bitrate",
    default=None,
    help="Target video bitrate, e.g. 1.5M or 1500k (default: 1.5M).",
)
@click.option(
    "--on-invalid-metadata",
    type=click.Choice(["fail", "passthrough"]),
    default=None,
    help="What to do when the video geometry cannot be read.",
)
@click.option(
    "--software-only",
    is_flag=True,
    default=False,
    help="Never use a hardware encoder.",
)
@click.option(
    "--progress/--no-progress",
    default=False,
    help="Show encode progress on stderr.",
)
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON.")
@click.pass_context
def transcode_command(
    ctx: click.Context,
    input_file: Path,
    output_file: Path,
    max_height: int | None,
    bitrate: str | None,
    on_invalid_metadata: str | None,
    software_only: bool,
    progress: bool,
    json_output: bool,
) -> None:
    """Transcode INPUT to a safe H.264/AAC file at OUTPUT.

    The output never upscales and keeps the display aspect ratio. If the
    transcode does not save at least 5% of the size, OUTPUT receives a copy
    of INPUT instead.
    """
    config = load_cli_config(
        ctx,
        json_output,
        max_height=max_height,
        bitrate=bitrate,
        on_invalid_metadata=on_invalid_metadata,
        hardware="none" if software_only else None,
    )

    try:
        job = TranscodeJob(
            input_file,
            output_file,
            policy=config.transcode,
            prober=build_prober(config),
            engine=build_engine(
                config, progress_callback=_progress_printer if progress else None
            ),
            temp_dir=config.temp_directory,
        )
    except ToolNotFoundError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    future = job.start()
    try:
        result = future.result()
    except KeyboardInterrupt:
        # Only an encode can be cancelled.
        if not job.cancel():
            error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)
        result = future.result()
        if result.state == JobState.CANCELLED:
            error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)
    if progress:
        click.echo("", err=True)

    if result.state != JobState.COMPLETED:
        message = result.message
        if result.diagnostic and not json_output:
            message = f"{message}\n{result.diagnostic}"
        emit(
            CLIResult(
                message,
                data=result_to_dict(result),
                exit_code=exit_code_for(result.error_kind),
            ),
            json_output,
        )

    emit(
        CLIResult(format_result_human(result), data=result_to_dict(result)),
        json_output,
    )
