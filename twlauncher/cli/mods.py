"""
Subcommands working on the mods of a game: rescan, toggle, load order, sharing.
"""

from pathlib import Path

import click

from twlauncher.cli.common import fail, load_settings, open_controller
from twlauncher.models.game_config import GameConfig
from twlauncher.utils.exception import LauncherError
from twlauncher.utils.games import SUPPORTED_GAMES, get_game


@click.command("games")
def games() -> None:
    """List the supported games, and their configured install folder."""
    settings = load_settings()
    for key, game in SUPPORTED_GAMES.items():
        game_path = settings.game_path(key)
        click.echo(f"{key}\t{game.display_name}\t{game_path or '-'}")


@click.command("set-game-path")
@click.argument("game_key")
@click.argument("path", type=click.Path(path_type=Path, file_okay=False))
def set_game_path(game_key: str, path: Path) -> None:
    """Set the install folder of a game."""
    try:
        get_game(game_key)
    except LauncherError as e:
        fail(str(e))

    settings = load_settings()
    settings.game_paths[game_key] = str(path)
    settings.save()
    click.echo(f"Install folder of {game_key} set to {path}")


@click.command("set-secondary-path")
@click.argument("path", type=click.Path(path_type=Path, file_okay=False))
def set_secondary_path(path: Path) -> None:
    """Set the secondary mods folder, shared by every game."""
    settings = load_settings()
    settings.secondary_mods_path = str(path)
    settings.save()
    click.echo(f"Secondary mods folder set to {path}")


@click.command("rescan")
@click.argument("game_key")
def rescan(game_key: str) -> None:
    """Rescan the mods of a game and regenerate its load order."""
    controller = open_controller(game_key)
    try:
        controller.rescan()
    except LauncherError as e:
        fail(str(e))
    finally:
        controller.shutdown()

    game_config, _ = controller.snapshot()
    installed = [mod for mod in game_config.mods.values() if mod.paths]
    click.echo(f"{len(installed)} mods installed for {game_key}.")


@click.command("load-order")
@click.argument("game_key")
@click.option(
    "--manual/--automatic",
    default=None,
    help="Switch the load order mode before printing it.",
)
@click.option(
    "--script",
    is_flag=True,
    help="Print the user script lines instead of the mod ids.",
)
def load_order(game_key: str, manual: bool | None, script: bool) -> None:
    """Print the load order of a game."""
    controller = open_controller(game_key)
    try:
        if manual is not None:
            controller.set_automatic(not manual)

        if script:
            click.echo(controller.load_order_string())
            return

        _, order = controller.snapshot()
        for mod_id in order.mods:
            click.echo(mod_id)
    except LauncherError as e:
        fail(str(e))
    finally:
        controller.shutdown()


def _toggle(game_key: str, mod_ids: tuple[str, ...], enabled: bool) -> None:
    controller = open_controller(game_key)
    try:
        failed = controller.set_enabled(list(mod_ids), enabled)
    except LauncherError as e:
        fail(str(e))
    finally:
        controller.shutdown()

    if failed:
        fail(f"Cannot toggle: {', '.join(failed)}")


@click.command("enable")
@click.argument("game_key")
@click.argument("mod_ids", nargs=-1, required=True)
def enable(game_key: str, mod_ids: tuple[str, ...]) -> None:
    """Enable mods."""
    _toggle(game_key, mod_ids, True)


@click.command("disable")
@click.argument("game_key")
@click.argument("mod_ids", nargs=-1, required=True)
def disable(game_key: str, mod_ids: tuple[str, ...]) -> None:
    """Disable mods."""
    _toggle(game_key, mod_ids, False)


@click.command("migrate")
@click.argument("game_key")
def migrate(game_key: str) -> None:
    """Upgrade the saved catalog of a game to the current format."""
    try:
        get_game(game_key)
        migrated = GameConfig.migrate(game_key)
    except LauncherError as e:
        fail(str(e))

    if migrated:
        click.echo(f"Catalog of {game_key} migrated.")
    else:
        click.echo(f"Catalog of {game_key} is up to date.")


@click.command("share")
@click.argument("game_key")
def share(game_key: str) -> None:
    """Print the load order of a game as a string other users can import."""
    controller = open_controller(game_key)
    try:
        click.echo(controller.share_string())
    finally:
        controller.shutdown()


@click.command("import")
@click.argument("game_key")
@click.argument("text")
def import_load_order(game_key: str, text: str) -> None:
    """Apply a shared load order string, or a modlist (`mod "x.pack";` lines)."""
    controller = open_controller(game_key)
    try:
        report = controller.import_load_order(text)
    except LauncherError as e:
        fail(str(e))
    finally:
        controller.shutdown()

    for mod_id in report.missing:
        click.secho(f"Missing: {mod_id}", fg="yellow", err=True)
    for mod_id in report.different:
        click.secho(f"Different version: {mod_id}", fg="yellow", err=True)
    click.echo("Load order imported.")


def _transfer(game_key: str, mod_ids: tuple[str, ...], move: bool) -> None:
    controller = open_controller(game_key)
    try:
        if move:
            failed = controller.move_to_secondary(list(mod_ids))
        else:
            failed = controller.copy_to_secondary(list(mod_ids))
    except (LauncherError, OSError) as e:
        fail(str(e))
    finally:
        controller.shutdown()

    if failed:
        fail(f"Failed: {', '.join(failed)}")


@click.command("copy-to-secondary")
@click.argument("game_key")
@click.argument("mod_ids", nargs=-1, required=True)
def copy_to_secondary(game_key: str, mod_ids: tuple[str, ...]) -> None:
    """Copy workshop mods to the secondary folder."""
    _transfer(game_key, mod_ids, move=False)


@click.command("move-to-secondary")
@click.argument("game_key")
@click.argument("mod_ids", nargs=-1, required=True)
def move_to_secondary(game_key: str, mod_ids: tuple[str, ...]) -> None:
    """Move mods from /data to the secondary folder."""
    _transfer(game_key, mod_ids, move=True)
