import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from saga_locations.cli.common import (
    BasePathOption,
    NoSymbolOption,
    VerboseOption,
    build_options,
    configure_logging,
    console,
)
from saga_locations.core.annotate import annotate_file
from saga_locations.models import PluginOptions
from saga_locations.watcher.watchfiles_adapter import SourceWatcher

logger = logging.getLogger(__name__)


def annotate_into(paths: set[Path], source_dir: Path, out_dir: Path, options: PluginOptions) -> list[Path]:
    """Annotate each changed file into ``out_dir``, mirroring its path below ``source_dir``.

    Files already inside ``out_dir`` are earlier output and are skipped.
    """
    resolved_out = out_dir.resolve()
    written: list[Path] = []
    for path in sorted(paths):
        resolved = path.resolve()
        if resolved.is_relative_to(resolved_out):
            continue
        target = out_dir / resolved.relative_to(source_dir.resolve())
        try:
            result = annotate_file(path, options)
        except (ValueError, FileNotFoundError) as exc:
            console.print(f"[red]Skipped[/red] {path}: {escape(str(exc))}", highlight=False)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.code, encoding="utf-8", newline="")
        logger.info("Wrote %s (%d annotations)", target, len(result.annotations))
        written.append(target)
    return written


def watch(
    source_dir: Annotated[Path, typer.Argument(help="Directory to watch.", exists=True, file_okay=False)],
    out_dir: Annotated[Path, typer.Option("--out-dir", help="Directory receiving the annotated files.")],
    base_path: BasePathOption = None,
    no_symbol: NoSymbolOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Re-annotate JavaScript/TypeScript files whenever they change."""
    configure_logging(verbose)
    options = build_options(base_path, no_symbol)

    async def _on_change(paths: set[Path]) -> None:
        for target in annotate_into(paths, source_dir, out_dir, options):
            console.print(f"[green]Annotated[/green] {target}")

    async def _run() -> None:
        watcher = SourceWatcher(source_dir, _on_change, ignore_paths=[out_dir])
        await watcher.start()
        console.print(f"Watching {source_dir} (Ctrl+C to stop)")
        try:
            await watcher.wait()
        finally:
            await watcher.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("Stopped.")
