"""Typer CLI entrypoint for unprintf."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from core.scan.policy_loader import DEFAULT_POLICY, ScanPolicy, load_policy
from core.scan.scanner import Scanner
from core.scan.targets import list_target_types, make_targets
from core.utils.errors import (
    BadArgumentError,
    ConversionError,
    EmptyCaptureError,
    MultipleMatchesError,
    NoMatchError,
    ScanError,
)

app = typer.Typer(help="Reverse-format scanner CLI", rich_markup_mode=None)

_EXIT_CODES: dict[type[ScanError], int] = {
    BadArgumentError: 2,
    NoMatchError: 3,
    MultipleMatchesError: 3,
    EmptyCaptureError: 3,
    ConversionError: 4,
}


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep subcommands explicit."""


@app.command("scan")
def scan_command(
    format: Annotated[str, typer.Option("--format", "-f", help="Format string with verbs.")],
    input: Annotated[str, typer.Option("--input", "-i", help="Text to scan.")],
    target: Annotated[
        list[str],
        typer.Option("--target", "-t", help="Target type per verb, e.g. int, str, bool."),
    ],
    policy: Annotated[
        Path | None,
        typer.Option(exists=True, dir_okay=False, file_okay=True, help="Scan policy YAML."),
    ] = None,
) -> None:
    """Scan INPUT with FORMAT and print the captured values as JSON."""

    try:
        policy_model = _load_policy_option(policy)
        targets = make_targets(target)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=2) from exc

    try:
        Scanner(format, policy_model).scan(input, targets)
    except ScanError as exc:
        typer.echo(f"ERROR({exc.code}): {exc}")
        raise typer.Exit(code=_exit_code_for(exc)) from exc

    typer.echo(_dump_json({"values": [item.value for item in targets]}))


@app.command("explain")
def explain_command(
    format: Annotated[str, typer.Option("--format", "-f", help="Format string with verbs.")],
    input: Annotated[str, typer.Option("--input", "-i", help="Text to scan.")],
) -> None:
    """Print how INPUT aligns with FORMAT: verbs, segments, alignment and captures."""

    try:
        trace = Scanner(format).explain(input)
    except ScanError as exc:
        typer.echo(f"ERROR({exc.code}): {exc}")
        raise typer.Exit(code=_exit_code_for(exc)) from exc

    typer.echo(_dump_json(trace.model_dump(mode="json")))
    if trace.error is not None:
        raise typer.Exit(code=3)


@app.command("targets")
def targets_command() -> None:
    """List supported target type names."""

    for name in list_target_types():
        typer.echo(name)


def _load_policy_option(path: Path | None) -> ScanPolicy:
    if path is None:
        return DEFAULT_POLICY
    return load_policy(path)


def _exit_code_for(exc: ScanError) -> int:
    for error_type, code in _EXIT_CODES.items():
        if isinstance(exc, error_type):
            return code
    return 1


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
