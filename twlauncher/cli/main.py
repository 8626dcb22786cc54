"""
Main CLI entry point for TWLauncher.

This module defines the Click command group and registers all subcommands.
"""

import click

from twlauncher.cli.categories import (
    assign,
    categories,
    create_category,
    delete_category,
    rename_category,
)
from twlauncher.cli.mods import (
    copy_to_secondary,
    disable,
    enable,
    games,
    import_load_order,
    load_order,
    migrate,
    move_to_secondary,
    rescan,
    set_game_path,
    set_secondary_path,
    share,
)
from twlauncher.cli.profiles import profile
from twlauncher.utils.app_info import AppInfo
from twlauncher.utils.log import setup_logging


@click.group()
@click.version_option(version=AppInfo().app_version, prog_name="TWLauncher")
@click.option("--debug", is_flag=True, help="Enable debug logging for this run.")
def cli(debug: bool) -> None:
    """TWLauncher - Total War mod manager CLI

    Headless tools for scanning mods, managing categories and load orders,
    and sharing them.
    """
    # Without --debug, the DEBUG marker file decides.
    setup_logging(debug=True if debug else None)


# Register subcommands
cli.add_command(games)
cli.add_command(set_game_path)
cli.add_command(set_secondary_path)
cli.add_command(rescan)
cli.add_command(load_order)
cli.add_command(enable)
cli.add_command(disable)
cli.add_command(migrate)
cli.add_command(share)
cli.add_command(import_load_order)
cli.add_command(copy_to_secondary)
cli.add_command(move_to_secondary)
cli.add_command(categories)
cli.add_command(create_category)
cli.add_command(delete_category)
cli.add_command(rename_category)
cli.add_command(assign)
cli.add_command(profile)


if __name__ == "__main__":
    cli()
