import sys
from typing import NoReturn

import click

from twlauncher.controllers.catalog_controller import CatalogController
from twlauncher.models.settings import Settings
from twlauncher.utils.exception import LauncherError
from twlauncher.utils.games import get_game


def fail(message: str) -> NoReturn:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def load_settings() -> Settings:
    settings = Settings()
    settings.load()
    return settings


def open_controller(game_key: str) -> CatalogController:
    """Controller for a game, with the saved settings. Exits on unknown games or unreadable catalogs."""
    try:
        game = get_game(game_key)
        return CatalogController(game, load_settings())
    except LauncherError as e:
        fail(str(e))
