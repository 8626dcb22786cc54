"""
Supported games and where each of them keeps its packs.

Every path helper takes the install folder of the game (the one holding the
executable and /data), because that's the only path the user configures.
"""

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from twlauncher.models.settings import Settings
from twlauncher.utils.constants import (
    LEGACY_MAP_EXTENSION,
    PACK_EXTENSION,
    VANILLA_MANIFEST_FILE_NAME,
)
from twlauncher.utils.exception import (
    GamePathError,
    SecondaryPathError,
    UnsupportedGameError,
)


@dataclass(frozen=True)
class GameInfo:
    """Static information about a supported game."""

    key: str
    display_name: str
    steam_id: int
    # Fully updated Shogun 2 and later games can load packs from outside /data with add_working_directory.
    supports_working_directory: bool

    def data_path(self, game_path: Path) -> Path:
        return game_path / "data"

    def content_path(self, game_path: Path) -> Path:
        """
        Workshop folder of the game: <steamapps>/workshop/content/<app id>.

        Raises GamePathError if the game is not installed in a steam library.
        """
        parts = game_path.parts
        if len(parts) < 3 or parts[-2].lower() != "common":
            raise GamePathError(
                f"{self.display_name} is not installed in a steam library: {game_path}"
            )

        steamapps = game_path.parent.parent
        return steamapps / "workshop" / "content" / str(self.steam_id)

    def vanilla_packs_paths(self, game_path: Path) -> set[Path]:
        """
        Canonical paths of the packs shipped with the game.

        They're listed in the manifest of /data. Without manifest the set is empty,
        as the pack type filter already drops most vanilla packs.
        """
        data_path = self.data_path(game_path)
        if not data_path.is_dir():
            raise GamePathError(f"Data folder not found: {data_path}")

        manifest = data_path / VANILLA_MANIFEST_FILE_NAME
        if not manifest.is_file():
            logger.debug(f"No manifest found for {self.key} at {manifest}")
            return set()

        try:
            text = manifest.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise GamePathError(f"Unable to read manifest {manifest}: {e}") from e

        packs = set()
        for line in text.splitlines():
            file_name = line.split("\t")[0].strip()
            if file_name.endswith(PACK_EXTENSION):
                packs.add((data_path / file_name).resolve())
        return packs

    def data_packs_paths(self, game_path: Path) -> list[Path] | None:
        """Packs directly in /data. Subfolders are not loaded by the game."""
        data_path = self.data_path(game_path)
        if not data_path.is_dir():
            return None

        return sorted(
            path
            for path in data_path.iterdir()
            if path.is_file() and path.suffix == PACK_EXTENSION
        )

    def content_packs_paths(self, game_path: Path) -> list[Path] | None:
        try:
            content_path = self.content_path(game_path)
        except GamePathError as e:
            logger.debug(f"No content folder for {self.key}: {e}")
            return None

        return archive_paths(content_path)

    def secondary_packs_paths(self, settings: Settings) -> list[Path] | None:
        try:
            path = secondary_mods_path(self, settings)
        except (SecondaryPathError, OSError) as e:
            logger.debug(f"No secondary folder for {self.key}: {e}")
            return None

        return archive_paths(path)


def archive_paths(folder: Path) -> list[Path] | None:
    """Every .pack and .bin file under `folder`, recursively, sorted."""
    if not folder.is_dir():
        return None

    return sorted(
        path
        for path in folder.rglob("*")
        if path.is_file() and path.suffix in (PACK_EXTENSION, LEGACY_MAP_EXTENSION)
    )


SUPPORTED_GAMES: dict[str, GameInfo] = {
    game.key: game
    for game in (
        GameInfo("pharaoh", "Pharaoh", 1937780, True),
        GameInfo("warhammer_3", "Warhammer 3", 1142710, True),
        GameInfo("troy", "Troy", 1099410, True),
        GameInfo("three_kingdoms", "Three Kingdoms", 779340, True),
        GameInfo("warhammer_2", "Warhammer 2", 594570, True),
        GameInfo("warhammer", "Warhammer", 364360, True),
        GameInfo("thrones_of_britannia", "Thrones of Britannia", 712100, True),
        GameInfo("attila", "Attila", 325610, True),
        GameInfo("rome_2", "Rome 2", 214950, True),
        GameInfo("shogun_2", "Shogun 2", 201270, True),
        GameInfo("napoleon", "Napoleon", 34030, False),
        GameInfo("empire", "Empire", 10500, False),
    )
}


def get_game(game_key: str) -> GameInfo:
    try:
        return SUPPORTED_GAMES[game_key]
    except KeyError:
        raise UnsupportedGameError(game_key) from None


def secondary_mods_path(game: GameInfo, settings: Settings) -> Path:
    """
    Canonical path of the secondary mods folder, created if missing.

    Raises SecondaryPathError if the game doesn't support it or it's not set,
    and OSError if the folder cannot be created.
    """
    if not game.supports_working_directory:
        raise SecondaryPathError(
            f"This game ({game.key}) doesn't support secondary mod folders."
        )

    if not settings.secondary_mods_path:
        raise SecondaryPathError("Secondary Mods Path not set.")

    # The game doesn't load packs from paths that are not properly formatted.
    path = Path(settings.secondary_mods_path).resolve()
    if not path.is_dir():
        logger.info(f"Creating secondary mods folder at {path}")
        path.mkdir(parents=True, exist_ok=True)

    return path
