from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from saga_locations.cli.common import (
    BasePathOption,
    LanguageOption,
    NoSymbolOption,
    VerboseOption,
    build_options,
    configure_logging,
    console,
)
from saga_locations.core.annotate import annotate_file
from saga_locations.models import TransformResult


def _render_report(result: TransformResult) -> None:
    table = Table(show_lines=False)
    for header in ("kind", "name", "file", "line"):
        table.add_column(header)
    for annotation in result.annotations:
        table.add_row(
            annotation.kind,
            annotation.name,
            annotation.location.file_name,
            str(annotation.location.line_number),
        )
    console.print(table)
    console.print(f"({len(result.annotations)} annotations)")


def annotate(
    path: Annotated[Path, typer.Argument(help="JavaScript or TypeScript file to annotate.")],
    out: Annotated[Path | None, typer.Option("--out", "-o", help="Write the result here instead of stdout.")] = None,
    input_source_map: Annotated[
        Path | None, typer.Option(help="Source map of PATH. Defaults to the one named by its sourceMappingURL.")
    ] = None,
    base_path: BasePathOption = None,
    no_symbol: NoSymbolOption = False,
    language: LanguageOption = None,
    report: Annotated[bool, typer.Option(help="Print a table of the injected annotations.")] = False,
    verbose: VerboseOption = False,
) -> None:
    """Annotate a single file."""
    configure_logging(verbose)
    try:
        raw_map = input_source_map.read_text(encoding="utf-8") if input_source_map else None
        result = annotate_file(path, build_options(base_path, no_symbol), language, raw_map)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", highlight=False, soft_wrap=True)
        raise typer.Exit(1) from exc

    if out is None:
        typer.echo(result.code, nl=False)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.code, encoding="utf-8", newline="")
        console.print(f"[green]Wrote[/green] {out}")

    if report:
        _render_report(result)
