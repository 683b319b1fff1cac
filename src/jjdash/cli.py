"""Command-line entry point for jjdash."""

import logging
import os
from pathlib import Path

import click

from jjdash.errors import ConfigError
from jjdash.tui.app import JjDashApp
from jjdash.tui.context import JjDashContext

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(package_name="jjdash")
@click.option(
    "--repo",
    "repo",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Path of the jj repository to show.",
)
@click.option(
    "--log-file",
    "log_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write debug logs to this file.",
)
@click.pass_context
def cli(ctx: click.Context, repo: Path, log_file: Path | None) -> None:
    """Interactive dashboard for a jj repository, its pull requests and tickets."""
    # The TUI owns the terminal, so logs only ever go to a file
    if log_file is not None:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s - %(levelname)s - %(message)s",
        )

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = JjDashContext.for_production(repo.resolve())
    dash_ctx: JjDashContext = ctx.obj

    try:
        config = dash_ctx.config_store.load()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    config = config.with_environment(os.environ)

    logger.debug("starting dashboard for %s", repo)
    dash_ctx.tui_runner.run(JjDashApp(dash_ctx.initial_state(config)))


def main() -> None:
    """CLI entry point used by the `jjdash` console script."""
    cli()
