import click

from twlauncher.cli.common import fail, open_controller
from twlauncher.models.profile import Profile
from twlauncher.utils.exception import LauncherError
from twlauncher.utils.games import get_game


@click.group("profile")
def profile() -> None:
    """Save and restore named load orders."""
    pass


@profile.command("save")
@click.argument("game_key")
@click.argument("name")
def save(game_key: str, name: str) -> None:
    """Save the current load order of a game as a profile."""
    controller = open_controller(game_key)
    try:
        controller.save_profile(name)
    except (LauncherError, ValueError) as e:
        fail(str(e))
    finally:
        controller.shutdown()
    click.echo(f"Profile {name} saved.")


@profile.command("load")
@click.argument("game_key")
@click.argument("name")
def load(game_key: str, name: str) -> None:
    """Apply a saved profile to a game."""
    controller = open_controller(game_key)
    try:
        controller.load_profile(name)
    except LauncherError as e:
        fail(str(e))
    finally:
        controller.shutdown()
    click.echo(f"Profile {name} loaded.")


@profile.command("list")
@click.argument("game_key")
def list_profiles(game_key: str) -> None:
    """List the profiles of a game."""
    try:
        get_game(game_key)
    except LauncherError as e:
        fail(str(e))

    for profile_id, saved in Profile.profiles_for_game(game_key).items():
        click.echo(f"{profile_id}\t{len(saved.load_order.mods)} mods")


@profile.command("delete")
@click.argument("game_key")
@click.argument("name")
def delete(game_key: str, name: str) -> None:
    """Delete a profile."""
    try:
        get_game(game_key)
    except LauncherError as e:
        fail(str(e))

    Profile(id=name, game=game_key).delete()
    click.echo(f"Profile {name} deleted.")
