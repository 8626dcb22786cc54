import click

from twlauncher.cli.common import fail, open_controller


@click.command("categories")
@click.argument("game_key")
def categories(game_key: str) -> None:
    """List the categories of a game in order, with their mods."""
    controller = open_controller(game_key)
    try:
        game_config, _ = controller.snapshot()
    finally:
        controller.shutdown()

    for category in game_config.categories_order:
        click.echo(category)
        for mod_id in game_config.categories.get(category, []):
            click.echo(f"    {mod_id}")


@click.command("create-category")
@click.argument("game_key")
@click.argument("name")
def create_category(game_key: str, name: str) -> None:
    """Create an empty category."""
    controller = open_controller(game_key)
    try:
        controller.create_category(name)
    finally:
        controller.shutdown()


@click.command("delete-category")
@click.argument("game_key")
@click.argument("name")
def delete_category(game_key: str, name: str) -> None:
    """Delete a category. Its mods go back to the default category on the next rescan."""
    controller = open_controller(game_key)
    try:
        controller.delete_category(name)
    finally:
        controller.shutdown()


@click.command("rename-category")
@click.argument("game_key")
@click.argument("old")
@click.argument("new")
def rename_category(game_key: str, old: str, new: str) -> None:
    """Rename a category. The default category can't be renamed."""
    controller = open_controller(game_key)
    try:
        controller.rename_category(old, new)
    except ValueError as e:
        fail(str(e))
    finally:
        controller.shutdown()


@click.command("assign")
@click.argument("game_key")
@click.argument("category")
@click.argument("mod_ids", nargs=-1, required=True)
def assign(game_key: str, category: str, mod_ids: tuple[str, ...]) -> None:
    """Move mods to a category."""
    controller = open_controller(game_key)
    try:
        controller.move_mods_to_category(list(mod_ids), category)
    except ValueError as e:
        fail(str(e))
    finally:
        controller.shutdown()
