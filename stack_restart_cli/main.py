import typer
from pathlib import Path
from typing import Optional
from typing_extensions import Annotated
from .context import AppContext
from .commands.restart import restart
from .commands.update import update
from .commands.services import services

app = typer.Typer(
    help="Restart or update the services of a Docker Compose stack.",
    add_completion=False,
    no_args_is_help=True,
)

app.command()(restart)
app.command()(update)
app.command()(services)

@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output for debugging.",
        ),
    ] = False,
    env_file: Annotated[
        Optional[Path],
        typer.Option(
            "--env-file",
            help="Read settings from this file (default: ~/.stack-restart/.env).",
        ),
    ] = None,
):
    """
    Initialize the AppContext and attach it to the Typer context.
    """
    ctx.obj = AppContext(verbose=verbose, env_file=env_file)

if __name__ == "__main__":
    app()
