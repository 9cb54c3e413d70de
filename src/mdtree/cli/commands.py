"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdtree.config import Settings, load_config
from mdtree.core.errors import ParseError
from mdtree.core.export import build_sidecar, render_outline, write_sidecar
from mdtree.core.frontmatter import format_document
from mdtree.core.parse import discover_files, parse_file
from mdtree.core.transform import apply_image_base_url
from mdtree.core.utils.diff import unified_diff


logger = logging.getLogger(__name__)


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _sources(path: str) -> tuple[Path, list[Path]]:
    """Return (source_root, files) for a file or directory argument."""
    src = Path(path)
    if not src.exists():
        _fail(f"Path not found: {path}")
    files = discover_files(src)
    if not files:
        _fail(f"No .md/.mdx files found under {path}")
    return (src if src.is_dir() else src.parent), files


def parse_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to parse")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    image_base_url: Annotated[Optional[str], typer.Option("--image-base-url", help="Prefix for bare image file names")] = None,
    ):
    """Parse documents and write one sidecar JSON per file."""
    settings = _settings(overrides={
        "output_dir": out, "parser_config": parser, "image_base_url": image_base_url,
    })
    root, files = _sources(path)
    output_dir = Path(settings.output_dir)

    written = []
    for src in files:
        try:
            tree = parse_file(src, settings.parser_config)
        except ParseError as e:
            _fail(f"Could not parse {src}", e)
        tree = apply_image_base_url(tree, settings.image_base_url)
        written.append((src, write_sidecar(tree, output_dir, root)))

    for src, json_path in written:
        typer.echo(f"  {src} -> {json_path}")
    typer.echo(f"Parsed {len(written)} document(s) to {output_dir}/")


def show_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to inspect")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the sidecar JSON instead of an outline")] = False,
    ):
    """Print the section/block outline of each document."""
    settings = _settings(overrides={"parser_config": parser})
    _, files = _sources(path)

    for src in files:
        try:
            tree = parse_file(src, settings.parser_config)
        except ParseError as e:
            _fail(f"Could not parse {src}", e)
        if as_json:
            typer.echo(json.dumps(build_sidecar(tree), indent=2, ensure_ascii=False))
        else:
            typer.echo(render_outline(tree))


def fmt_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to format")],
    check: Annotated[bool, typer.Option("--check", help="Report files that would change; exit 1 if any")] = False,
    diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff instead of writing")] = False,
    sort_keys: Annotated[Optional[bool], typer.Option("--sort-keys/--no-sort-keys", help="Sort frontmatter keys")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Rewrite frontmatter and body spacing into canonical form."""
    settings = _settings(overrides={"sort_keys": sort_keys, "parser_config": parser})
    _, files = _sources(path)

    changed = []
    for src in files:
        try:
            original = src.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            _fail(f"Could not read {src}", e)
        canonical = format_document(original, settings.sort_keys, settings.parser_config)
        if canonical == original:
            continue
        changed.append(src)
        if diff:
            typer.echo(''.join(unified_diff(original, canonical, str(src), f"{src} (formatted)")), nl=False)
        elif not check:
            src.write_text(canonical, encoding='utf-8')
            logger.info("Formatted %s", src)

    if check:
        for src in changed:
            typer.echo(f"  would reformat: {src}")
        if changed:
            raise typer.Exit(1)
        typer.echo(f"{len(files)} document(s) already formatted")
    elif not diff:
        typer.echo(f"Formatted {len(changed)} of {len(files)} document(s)")
