import typer

from saga_locations.cli.annotate import annotate
from saga_locations.cli.watch import watch

app = typer.Typer(
    name="saga-locations",
    help="Annotate redux-saga generators and yielded effects with their source location.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.command("annotate")(annotate)
app.command("watch")(watch)


def main() -> None:
    app()
