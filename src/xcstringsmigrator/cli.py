import logging
import sys

import click

from xcstringsmigrator import config as settings
from xcstringsmigrator import migrator, reverter
from xcstringsmigrator.errors import MigratorError

logger = logging.getLogger(__name__)


def _fail(error: MigratorError) -> None:
    click.echo(f"error: {error}")
    sys.exit(error.exit_code)


@click.group()
@click.version_option(package_name="xcstrings-migrator")
@click.option("--config-folder", default="config", help="Configuration folder path.")
@click.pass_context
def cli(ctx: click.Context, config_folder: str) -> None:
    """A tool to migrate the legacy strings file to xcstrings file."""
    try:
        config = settings.load_config(config_folder)
        settings.configure_logging(config)
    except MigratorError as error:
        _fail(error)
    ctx.default_map = config["commands"]


@cli.command("migrate")
@click.option(
    "-l",
    "--source-language",
    default="en",
    show_default=True,
    help="Source language of the xcstrings file.",
)
@click.option(
    "-p",
    "--path",
    "paths",
    multiple=True,
    required=True,
    help="Path to the lproj directory.",
)
@click.option(
    "-o",
    "--output-directory",
    required=True,
    help="Path to the directory where you want to save the xcstrings file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Provide detail output.")
def migrate(
    source_language: str, paths: tuple[str, ...], output_directory: str, verbose: bool
) -> None:
    """Migrate legacy strings file to xcstrings file."""
    logger.debug(f"Migrating {len(paths)} paths into {output_directory}")
    try:
        migrator.run(
            source_language=source_language,
            paths=paths,
            output_dir=output_directory,
            verbose=verbose,
        )
    except MigratorError as error:
        _fail(error)
    click.echo("Completed.")


@cli.command("revert")
@click.option("-p", "--path", required=True, help="Path to the xcstrings file.")
@click.option(
    "-o",
    "--output-directory",
    required=True,
    help="Path to the directory where you want to save the strings files.",
)
def revert(path: str, output_directory: str) -> None:
    """Revert xcstrings file to legacy strings file."""
    logger.debug(f"Reverting {path} into {output_directory}")
    try:
        reverter.run(path=path, output_dir=output_directory)
    except MigratorError as error:
        _fail(error)
    click.echo("Completed.")
