"""
CLI: ``python -m jobrunner.cli``, launch and run background jobs.

``run-background-job`` is the worker entry point the launcher spawns;
``submit`` dispatches a job from a shell the same way application code does.
"""
import asyncio
import json

import typer

from . import config
from .dispatcher import get_default_dispatcher
from .registry import load_job_modules
from .status_log import configure_logging
from .worker import run_background_job as run_worker

app = typer.Typer(no_args_is_help=True)


@app.callback()
def main() -> None:
    configure_logging()
    load_job_modules(config.JOB_MODULES)


@app.command("run-background-job")
def run_background_job(
    class_name: str = typer.Argument(..., metavar="CLASS", help="Registered job class"),
    method: str = typer.Argument(..., help="Factory method on the class"),
    params: str = typer.Argument(..., help="base64-encoded JSON parameter list"),
    delay: int = typer.Argument(0, min=0, help="Seconds before the job becomes ready"),
    priority: int = typer.Argument(0, min=-config.MAX_PRIORITY, max=config.MAX_PRIORITY, help="Higher runs first"),
) -> None:
    """Build the job and push it onto the queue. Exit code 0 on success."""
    code = asyncio.run(run_worker(class_name, method, params, delay, priority))
    raise typer.Exit(code=code)


@app.command("submit")
def submit(
    class_name: str = typer.Argument(..., metavar="CLASS"),
    method: str = typer.Argument(...),
    params: str = typer.Option("[]", "--params", "-p", help="JSON list of parameters"),
    delay: int = typer.Option(0, "--delay", "-d", min=0),
    priority: int = typer.Option(0, "--priority", min=-config.MAX_PRIORITY, max=config.MAX_PRIORITY),
) -> None:
    """Dispatch a job in the background and return immediately."""
    try:
        parameters = json.loads(params)
    except ValueError as exc:
        raise typer.BadParameter(f"not valid JSON: {exc}", param_hint="--params")
    if not isinstance(parameters, list):
        raise typer.BadParameter("must be a JSON list", param_hint="--params")
    get_default_dispatcher().dispatch(class_name, method, parameters, delay, priority)
    typer.echo(f"Dispatched {class_name}@{method}")


if __name__ == "__main__":
    app()
