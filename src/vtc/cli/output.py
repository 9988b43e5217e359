"""Rendering of command results for humans and for --json."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from vtc.cli.exit_codes import ExitCode


@dataclass(frozen=True)
class CLIResult:
    """What a command reports once it is done.

    Attributes:
        message: Human-readable summary, or the error text on failure.
        data: Extra fields merged into the JSON document.
        exit_code: Process exit status. Anything but SUCCESS is a failure.
    """

    message: str
    data: dict[str, Any] = field(default_factory=dict)
    exit_code: ExitCode = ExitCode.SUCCESS

    @property
    def success(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"status": "completed", "message": self.message, **self.data}
        return {
            "status": "failed",
            "error": {"code": self.exit_code.name, "message": self.message},
            **self.data,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)


def _report_failure(result: CLIResult, json_output: bool) -> NoReturn:
    if json_output:
        click.echo(result.to_json())
    else:
        click.echo(f"Error: {result.message}", err=True)
    sys.exit(int(result.exit_code))


def emit(result: CLIResult, json_output: bool = False) -> None:
    """Print result, exiting with its code if it is a failure.

    JSON documents go to stdout whatever the outcome. In human mode a
    failure is printed to stderr as "Error: <message>".
    """
    if not result.success:
        _report_failure(result, json_output)
    click.echo(result.to_json() if json_output else result.message)


def error_exit(message: str, code: ExitCode, json_output: bool = False) -> NoReturn:
    """Report a failure that has no result data and exit with code."""
    _report_failure(CLIResult(message, exit_code=code), json_output)
