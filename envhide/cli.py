"""Click CLI entrypoint for envhide."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import load_config, validate_config
from .errors import EnvHideError
from .formatters import render_document
from .host import FileDocument
from .orchestrator import EnvHider
from .parser import parse_lines
from .session import COMMAND_DESCRIPTIONS

console = Console(stderr=True)
out = Console()


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_config_option = click.option(
    "--config",
    default=".envhide.toml",
    show_default=True,
    help="Path to .envhide.toml config file.",
    metavar="FILE",
)
_file_argument = click.argument(
    "env_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


def _abort(msg: str, exit_code: int = 1) -> None:
    console.print(f"[bold red]Error:[/] {msg}")
    sys.exit(exit_code)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt="%(levelname)s %(name)s %(message)s"))
        root.addHandler(handler)


def _load_and_validate(config_path: str, **overrides):
    try:
        cfg = load_config(config_path, **overrides)
    except ValueError as exc:
        _abort(str(exc))
    errors = validate_config(cfg)
    if errors:
        for err in errors:
            console.print(f"[bold red]Config error:[/] {err}")
        sys.exit(1)
    return cfg


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="envhide")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose):
    """envhide: view .env files with their values masked."""
    _configure_logging(verbose)


@cli.command()
@_file_argument
@_config_option
@click.option(
    "--format",
    "output_format",
    default="text",
    type=click.Choice(["text", "table", "json"], case_sensitive=False),
    show_default=True,
    help="Output format.",
)
@click.option(
    "--reveal",
    is_flag=True,
    default=False,
    help="Show the real values instead of masking them.",
)
@click.option("--hide-char", default=None, help="Character used to mask values.")
@click.option("--min-length", type=int, default=None, help="Minimum masked value length.")
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Treat the file as an env file even if its name matches no pattern.",
)
def view(env_file, config, output_format, reveal, hide_char, min_length, force):
    """Print an env file with its values masked. The file is never written."""
    cfg = _load_and_validate(config, hide_char=hide_char, min_hide_length=min_length)
    hider = EnvHider(cfg)
    doc = FileDocument(env_file, kind="env" if force else None)

    if reveal:
        console.print(
            "[bold yellow]Warning:[/] --reveal is active. "
            "Secret values will be displayed in plaintext."
        )
        if not hider.is_env_file(doc):
            _abort(f"{env_file} is not an .env file (use --force to view it anyway)")
    else:
        try:
            hider.hide(doc)
        except EnvHideError as exc:
            _abort(f"{exc} (use --force to view it anyway)")

    rendered = render_document(
        doc.get_lines(), fmt=output_format, name=str(env_file), hidden=not reveal
    )
    click.echo(rendered, nl=output_format == "json")


@cli.command()
@_file_argument
@_config_option
def check(env_file, config):
    """Report whether a file is recognized and how many values would be masked."""
    cfg = _load_and_validate(config)
    hider = EnvHider(cfg)
    doc = FileDocument(env_file)

    if not hider.is_env_file(doc):
        console.print(f"[bold yellow]{env_file}[/] does not match any of: {', '.join(cfg.patterns)}")
        sys.exit(1)

    parsed = parse_lines(doc.get_lines())
    assignments = [line for line in parsed if line.is_assignment]
    maskable = [line for line in assignments if line.maskable]
    click.echo(
        f"{env_file}: {len(maskable)} of {len(assignments)} assignment(s) "
        f"would be masked, {len(parsed) - len(assignments)} other line(s) left as-is"
    )


@cli.command()
@_config_option
def keymaps(config):
    """List the key sequences bound to the hide/show/toggle commands."""
    cfg = _load_and_validate(config)
    if not cfg.enable_keymaps:
        console.print("[yellow]Keymaps are disabled.[/]")
        return

    table = Table(show_header=True, header_style="bold cyan", box=None, padding=(0, 1))
    table.add_column("Keys", style="bold", no_wrap=True)
    table.add_column("Command", no_wrap=True)
    table.add_column("Description")
    for keys, command in (
        (cfg.keymaps.toggle, "EnvToggle"),
        (cfg.keymaps.hide, "EnvHide"),
        (cfg.keymaps.show, "EnvShow"),
    ):
        table.add_row(keys, command, COMMAND_DESCRIPTIONS[command])
    out.print(table)
