import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from saga_locations.models import PluginOptions

console = Console(stderr=True)

BasePathOption = Annotated[
    str | None,
    typer.Option(
        "--base-path",
        envvar="SAGA_LOCATIONS_BASE_PATH",
        help="Report file names relative to this directory.",
    ),
]
NoSymbolOption = Annotated[
    bool,
    typer.Option("--no-symbol", help='Attach metadata under the plain string key "@@redux-saga/LOCATION".'),
]
LanguageOption = Annotated[
    str | None,
    typer.Option(help="Language name (javascript, typescript, tsx). Detected from the extension by default."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every injected annotation.")]


def build_options(base_path: str | None, no_symbol: bool) -> PluginOptions:
    return PluginOptions(use_symbol=not no_symbol, base_path=base_path)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
