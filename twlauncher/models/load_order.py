import base64
import re
import zlib
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

import msgspec
from loguru import logger

from twlauncher.models.mod import PackType, ShareableMod, sha256_file
from twlauncher.models.settings import Settings
from twlauncher.sort.load_order_sort import filter_and_sort
from twlauncher.utils.app_info import AppInfo
from twlauncher.utils.constants import (
    LOAD_ORDER_FILE_NAME_END,
    LOAD_ORDER_FILE_NAME_START,
)
from twlauncher.utils.exception import (
    CatalogReadError,
    SecondaryPathError,
    ShareStringError,
)
from twlauncher.utils.files import write_json_atomic
from twlauncher.utils.games import GameInfo, secondary_mods_path

if TYPE_CHECKING:
    from twlauncher.models.game_config import GameConfig

MODLIST_LINE_REGEX = re.compile(r'^\s*mod\s+"([^"]+)"\s*;', re.MULTILINE)


class ImportReport(NamedTuple):
    """Result of applying a shared load order to a catalog."""

    missing: list[str]
    different: list[str]


class LoadOrder(msgspec.Struct):
    """
    Ordered list of the mods the game will load. Later mods override earlier ones.

    Older versions kept movie packs in a separate `movies` list. That field is
    ignored on load, as movies now go after the mods in the same list.

    Attributes:
        automatic (bool): If True, the order is rebuilt from scratch on every update.
            Otherwise the current order is kept, and new mods are added at the end.
        mods (list[str]): Ids of the mods, in load order.
    """

    automatic: bool = True
    mods: list[str] = msgspec.field(default_factory=list)

    @staticmethod
    def file_path(game_key: str) -> Path:
        return AppInfo().game_config_folder / (
            f"{LOAD_ORDER_FILE_NAME_START}{game_key}{LOAD_ORDER_FILE_NAME_END}"
        )

    @classmethod
    def load(cls, game_key: str) -> "LoadOrder":
        """
        Load the last load order of a game, or an empty one if there's none.

        The loaded order is not checked against the catalog. Call `update` for that.
        """
        path = cls.file_path(game_key)
        if not path.is_file():
            return cls()

        try:
            return msgspec.json.decode(path.read_bytes(), type=cls)
        except (OSError, msgspec.DecodeError) as e:
            logger.error(f"Unable to read load order {path}: {e}")
            raise CatalogReadError(f"Unable to read load order {path}: {e}") from e

    def save(self, game_key: str) -> None:
        write_json_atomic(self.file_path(game_key), self)

    def generate(self, game_config: "GameConfig", data_path: Path | None) -> None:
        """Replace the order with the sorted list of enabled mods."""
        self.mods = filter_and_sort(game_config, data_path)

    def update(self, game_config: "GameConfig", data_path: Path | None) -> None:
        if self.automatic:
            self.generate(game_config, data_path)
        else:
            self._build_manual(game_config, data_path)

    def _build_manual(self, game_config: "GameConfig", data_path: Path | None) -> None:
        """
        Keep the current order, drop the mods no longer enabled and add the new ones at the end.

        Movies cannot be reordered, so they're always sorted at the end of the list.
        """
        selected = filter_and_sort(game_config, data_path)
        movies = [
            mod_id
            for mod_id in selected
            if game_config.mods[mod_id].pack_type == PackType.MOVIE
        ]
        ordinary = [mod_id for mod_id in selected if mod_id not in movies]

        kept = [mod_id for mod_id in self.mods if mod_id in ordinary]
        added = [mod_id for mod_id in ordinary if mod_id not in kept]
        self.mods = kept + added + movies

    def move_mod(self, mod_id: str, position: int) -> None:
        """Move a mod to another position. Only makes sense for manual load orders."""
        if mod_id not in self.mods:
            raise ValueError(f"Mod {mod_id} is not in the load order.")

        self.mods.remove(mod_id)
        self.mods.insert(max(0, min(position, len(self.mods))), mod_id)
        self.automatic = False

    def build_load_order_string(
        self,
        game_config: "GameConfig",
        game: GameInfo,
        game_path: Path,
        settings: Settings,
    ) -> str:
        """
        Text for the user script the game reads on launch.

        Packs outside of /data need their folder added as a working directory, which
        only works on games supporting it. The secondary folder is added once, and
        each content folder once. Movie packs are loaded from their folder by the
        game itself, so they only need the folder.
        """
        data_path = game.data_path(game_path).resolve()
        try:
            secondary_path: Path | None = secondary_mods_path(game, settings)
        except (SecondaryPathError, OSError):
            secondary_path = None

        folders: list[str] = []
        packs: list[str] = []

        for mod_id in self.mods:
            mod = game_config.mods.get(mod_id)
            if mod is None:
                continue

            path = mod.first_path()
            if path is None:
                logger.warning(f"Tried to load mod {mod_id} without packs.")
                continue

            is_movie = mod.pack_type == PackType.MOVIE
            if is_movie and not mod.can_be_toggled(data_path):
                continue

            if not path.is_relative_to(data_path) and game.supports_working_directory:
                folder = f'add_working_directory "{path.parent}";'
                if secondary_path is not None and path.parent == secondary_path:
                    if folder not in folders:
                        folders.insert(0, folder)
                elif folder not in folders:
                    folders.append(folder)

            if not is_movie:
                packs.append(f'mod "{path.name}";')

        return "\n".join(folders + packs)

    def to_share_string(self, game_config: "GameConfig") -> str:
        """Compressed, base64 encoded list of the mods in the load order, with their hashes."""
        shareable = []
        for mod_id in self.mods:
            mod = game_config.mods.get(mod_id)
            if mod is None or not mod.paths:
                logger.warning(f"Skipping {mod_id} from the shared load order: not installed.")
                continue

            try:
                shareable.append(ShareableMod.from_mod(mod))
            except OSError as e:
                logger.warning(f"Skipping {mod_id} from the shared load order: {e}")

        compressed = zlib.compress(msgspec.json.encode(shareable))
        return base64.b64encode(compressed).decode("ascii").rstrip("=")

    @staticmethod
    def from_share_string(text: str) -> list[ShareableMod]:
        text = text.strip()
        padded = text + "=" * (-len(text) % 4)

        # Bad base64 and non-ASCII text both raise ValueError.
        try:
            compressed = base64.b64decode(padded, validate=True)
            data = zlib.decompress(compressed)
            return msgspec.json.decode(data, type=list[ShareableMod])
        except (ValueError, zlib.error, msgspec.DecodeError) as e:
            raise ShareStringError(f"Invalid load order string: {e}") from e

    @staticmethod
    def from_modlist_text(text: str) -> list[ShareableMod]:
        """Parse the mod lines of a user script or a modlist file. Hashes are unknown."""
        return [
            ShareableMod(name=pack_name, id=pack_name)
            for pack_name in MODLIST_LINE_REGEX.findall(text)
        ]

    def apply_shared(
        self,
        game_config: "GameConfig",
        shared: list[ShareableMod],
        data_path: Path | None,
    ) -> ImportReport:
        """
        Enable exactly the shared mods, in the shared order.

        The load order becomes manual, so the order survives. Mods present locally
        with a different hash are still enabled, but reported.
        """
        missing = []
        different = []
        found = []

        for shared_mod in shared:
            mod = game_config.mods.get(shared_mod.id)
            if mod is None or not mod.paths:
                missing.append(shared_mod.id)
                continue

            if shared_mod.hash:
                try:
                    if sha256_file(Path(mod.paths[0])) != shared_mod.hash:
                        different.append(shared_mod.id)
                except OSError as e:
                    logger.warning(f"Unable to hash {mod.paths[0]}: {e}")
                    different.append(shared_mod.id)

            found.append(shared_mod.id)

        for mod in game_config.mods.values():
            if mod.can_be_toggled(data_path):
                mod.enabled = mod.id in found

        self.automatic = False
        self.mods = found
        self._build_manual(game_config, data_path)

        if missing:
            logger.warning(f"Mods missing from the shared load order: {missing}")
        if different:
            logger.warning(f"Mods with a different version than shared: {different}")
        return ImportReport(missing, different)
