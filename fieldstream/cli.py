# fieldstream/cli.py
"""
fieldstream CLI -- Click commands with a small rich terminal UI.

Provides the ``fieldstream`` console entry-point declared in pyproject.toml as
``fieldstream.cli:cli``:

- extract:  extract a signature's fields from a response file (or stdin),
            optionally replaying it chunk by chunk to show live deltas
- inspect:  show the fields of a YAML signature
- config:   show the effective configuration
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, TextIO

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape as _esc
from rich.padding import Padding

from . import __version__
from . import cli_theme as theme
from .config import get_config
from .errors import FieldValidationError
from .extract import StreamingExtractor, extract_values
from .schema import Signature
from .utils.logging import setup_logging

console = Console()


def _print_version(
    ctx: click.Context,
    _param: click.Parameter,
    value: bool,
) -> None:
    if not value or ctx.resilient_parsing:
        return
    theme.print_version(__version__, console)
    ctx.exit()


def _resolve_signature_path(value: str) -> Path:
    """A signature file path, or the name of a signature saved in schema_dir."""
    path = Path(value)
    if path.is_file():
        return path
    schema_dir = get_config().schema_dir
    for suffix in (".yaml", ".yml"):
        candidate = schema_dir / f"{value}{suffix}"
        if candidate.is_file():
            return candidate
    raise click.ClickException(f"Signature not found: {value} (also looked in {schema_dir})")


def _load_signature(value: str) -> Signature:
    path = _resolve_signature_path(value)
    try:
        return Signature.from_yaml_file(path)
    except (ValidationError, ValueError) as exc:
        raise click.ClickException(f"Invalid signature {path}: {exc}")


def _json_default(value: Any) -> str:
    # dates and datetimes
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _dump(data: Any) -> str:
    return json.dumps(data, default=_json_default, ensure_ascii=False)


def _format_value(value: Any) -> str:
    if isinstance(value, (list, dict)):
        return _dump(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


# ---------------------------------------------------------------------------
# Main CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
def cli() -> None:
    """fieldstream -- typed field extraction from streamed model output."""


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------


def _replay_stream(
    signature: Signature,
    text: str,
    chunk_size: int,
    strict: Optional[bool],
    as_json: bool,
) -> dict[str, Any]:
    """Feed *text* through a StreamingExtractor in fixed-size chunks."""
    extractor = StreamingExtractor(signature, strict_mode=strict)

    def _emit(updates: list) -> None:
        for update in updates:
            if as_json:
                click.echo(_dump({"index": update.index, "delta": update.delta}))
                continue
            for name, value in update.delta.items():
                shown = value if isinstance(value, str) else _format_value(value)
                console.print(theme.delta_line(name, shown))

    if not as_json:
        theme.section("Stream", console, "01")
    for offset in range(0, len(text), chunk_size):
        _emit(extractor.feed(text[offset:offset + chunk_size]))
    _emit(extractor.finish())
    return extractor.result()


@cli.command()
@click.option(
    "--schema",
    "schema_ref",
    metavar="FILE_OR_NAME",
    required=True,
    help="YAML signature file, or the name of one saved in the schema directory.",
)
@click.argument("input_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--stream", is_flag=True, default=False, help="Replay the input in chunks and print live deltas.")
@click.option("--chunk-size", type=click.IntRange(min=1), default=None, help="Characters per chunk with --stream.")
@click.option("--strict", is_flag=True, default=False, help="Require field prefixes even for single-field signatures.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of a table.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for this session's log file.",
)
def extract(
    schema_ref: str,
    input_file: TextIO,
    stream: bool,
    chunk_size: Optional[int],
    strict: bool,
    as_json: bool,
    log_level: Optional[str],
) -> None:
    """Extract fields from a model response in INPUT_FILE (default: stdin)."""
    cfg = get_config()
    setup_logging(level=log_level)

    signature = _load_signature(schema_ref)
    text = input_file.read()
    strict_mode = True if strict else None

    try:
        if stream:
            values = _replay_stream(
                signature,
                text,
                chunk_size or cfg.stream_chunk_size,
                strict_mode,
                as_json,
            )
        else:
            values = extract_values(signature, text, strict_mode=strict_mode)
    except FieldValidationError as exc:
        if as_json:
            click.echo(_dump({"error": exc.to_dict()}))
        raise click.ClickException(str(exc))

    if as_json:
        click.echo(_dump(values))
        return

    theme.section("Fields", console, "02" if stream else "01")
    t = theme.make_table()
    t.add_column("Field", style=f"bold {theme.CORAL}", no_wrap=True)
    t.add_column("Type", style=theme.MUTED)
    t.add_column("Value")
    for field in signature.get_output_fields():
        if field.is_internal:
            continue
        type_label = field.type.value + ("[]" if field.is_array else "")
        if field.name in values:
            t.add_row(field.title, type_label, _esc(_format_value(values[field.name])))
        else:
            t.add_row(field.title, type_label, f"[{theme.MUTED}]-[/{theme.MUTED}]")
    console.print(Padding(t, (0, 0, 0, 2)))
    console.print(theme.ok(f"{len(values)} of {len(signature.fields)} fields extracted"))


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--schema",
    "schema_ref",
    metavar="FILE_OR_NAME",
    required=True,
    help="YAML signature to inspect.",
)
def inspect(schema_ref: str) -> None:
    """Show the fields of a YAML signature in prefix order."""
    signature = _load_signature(schema_ref)

    theme.section(signature.name, console, "01")
    if signature.description:
        console.print(theme.info(_esc(signature.description)))

    t = theme.make_table()
    t.add_column("#", style=theme.MUTED)
    t.add_column("Name", style=f"bold {theme.CORAL}", no_wrap=True)
    t.add_column("Prefix")
    t.add_column("Type")
    t.add_column("Flags")
    for i, field in enumerate(signature.get_output_fields(), start=1):
        type_label = field.type.value + ("[]" if field.is_array else "")
        if field.options:
            type_label += f" ({', '.join(field.options)})"
        flags = []
        if field.is_optional:
            flags.append(theme.badge("optional", "warn"))
        if field.is_internal:
            flags.append(theme.badge("internal"))
        t.add_row(str(i), field.name, _esc(f"{field.title}:"), _esc(type_label), " ".join(flags))
    console.print(Padding(t, (0, 0, 0, 2)))


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.command("config")
def show_config() -> None:
    """Show the effective configuration (FIELDSTREAM_* environment variables)."""
    cfg = get_config()
    theme.section("Configuration", console, "01")
    t = theme.make_kv_table()
    for key, value in cfg.model_dump().items():
        t.add_row(key, _esc(str(value)))
    t.add_row("log_dir", _esc(str(cfg.log_dir)))
    t.add_row("schema_dir", _esc(str(cfg.schema_dir)))
    console.print(Padding(t, (0, 0, 0, 2)))


if __name__ == "__main__":
    cli()
