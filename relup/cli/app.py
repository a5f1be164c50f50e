from __future__ import annotations

import typer

from relup import __version__
from relup.cli.commands.phases import main_phase, post_phase

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Reconcile a GitHub release and its tags from a CI step.",
)

app.command("main")(main_phase)
app.command("post")(post_phase)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
