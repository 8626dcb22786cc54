from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from twlauncher.models.game_config import GameConfig


def filter_and_sort(game_config: "GameConfig", data_path: Path | None) -> list[str]:
    """
    Ids of the mods that should be loaded, in load order.

    A mod is loaded if it's installed and enabled, using the effective enabled state
    so movies in /data are always in. Sorting is by pack type (mods before movies)
    then by id, so the result only depends on the catalog.

    Parent mods are not moved above the mods depending on them. The list is a flat
    precedence list, not a dependency graph.
    """
    logger.debug("Starting load order sort")

    selected = [
        mod
        for mod in game_config.mods.values()
        if mod.paths and mod.is_enabled(data_path)
    ]
    selected.sort(key=lambda mod: (mod.pack_type.rank, mod.id))

    logger.debug(f"Finished load order sort with {len(selected)} mods")
    return [mod.id for mod in selected]
