import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import msgspec
from loguru import logger

from twlauncher.models.mod import Mod
from twlauncher.models.settings import Settings
from twlauncher.utils.app_info import AppInfo
from twlauncher.utils.constants import (
    DEFAULT_CATEGORY,
    GAME_CONFIG_FILE_NAME_END,
    GAME_CONFIG_FILE_NAME_START,
    LEGACY_MAP_EXTENSION,
    RootKind,
)
from twlauncher.utils.exception import CatalogReadError, GamePathError
from twlauncher.utils.files import (
    DiscoveredArchive,
    discover_archives,
    filter_candidates,
    steam_id_from_content_path,
    write_json_atomic,
)
from twlauncher.utils.games import GameInfo
from twlauncher.utils.pack_reader import PackReader, read_pack_type
from twlauncher.utils.steam.workshop import WorkshopItem

if TYPE_CHECKING:
    from twlauncher.models.load_order import LoadOrder


class GameConfig(msgspec.Struct, forbid_unknown_fields=True):
    """
    Catalog of every mod ever seen for a game, and the categories they're in.

    Mods are never removed from the catalog. If a mod is uninstalled it just loses
    its paths, so its data is reused if it's installed again.

    Attributes:
        game_key (str): Key of the game this catalog belongs to.
        mods (dict[str, Mod]): Mods by id (pack name).
        categories (dict[str, list[str]]): Ids of the installed mods in each category.
        categories_order (list[str]): Category names in display order. The default
            category is always the last one.
    """

    game_key: str = ""
    mods: dict[str, Mod] = msgspec.field(default_factory=dict)
    categories: dict[str, list[str]] = msgspec.field(default_factory=dict)
    categories_order: list[str] = msgspec.field(default_factory=list)

    @classmethod
    def new(cls, game_key: str) -> "GameConfig":
        return cls(
            game_key=game_key,
            categories={DEFAULT_CATEGORY: []},
            categories_order=[DEFAULT_CATEGORY],
        )

    @staticmethod
    def file_path(game_key: str) -> Path:
        return AppInfo().game_config_folder / (
            f"{GAME_CONFIG_FILE_NAME_START}{game_key}{GAME_CONFIG_FILE_NAME_END}"
        )

    @classmethod
    def load(cls, game_key: str, new_if_missing: bool = True) -> "GameConfig":
        """
        Load the catalog of a game, migrating it first if it was written by an older version.

        A missing file means first run, so an empty catalog is returned. A file that
        cannot be read with any known schema raises CatalogReadError and is left untouched.
        """
        path = cls.file_path(game_key)
        if not path.is_file():
            if not new_if_missing:
                raise CatalogReadError(f"No catalog found for {game_key} at {path}")

            logger.info(f"No catalog found for {game_key}. Creating a new one.")
            return cls.new(game_key)

        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error(f"Unable to read catalog {path}: {e}")
            raise CatalogReadError(f"Unable to read catalog {path}: {e}") from e

        from twlauncher.models.versions.migration import (
            detect_version,
            migrate_to_latest,
        )

        detected = detect_version(data)
        config = migrate_to_latest(detected)
        if not config.game_key:
            config.game_key = game_key

        config.ensure_default_category()

        if detected is not config:
            logger.info(
                f"Catalog of {game_key} migrated from {type(detected).__name__}. Saving it."
            )
            config.save()

        return config

    @classmethod
    def migrate(cls, game_key: str) -> bool:
        """
        Upgrade the catalog file of a game to the current schema.

        :return: True if the file needed a migration, False if it was already current or missing.
        """
        path = cls.file_path(game_key)
        if not path.is_file():
            return False

        before = path.read_bytes()
        cls.load(game_key, new_if_missing=False)
        return path.read_bytes() != before

    def save(self) -> None:
        path = self.file_path(self.game_key)
        logger.debug(f"Saving catalog of {self.game_key} to {path}")
        write_json_atomic(path, self)

    # Categories

    def ensure_default_category(self) -> None:
        """Make sure the default category exists and is the last one."""
        if DEFAULT_CATEGORY not in self.categories:
            self.categories[DEFAULT_CATEGORY] = []

        if self.categories_order and self.categories_order[-1] == DEFAULT_CATEGORY:
            return

        self.categories_order = [
            category for category in self.categories_order if category != DEFAULT_CATEGORY
        ]
        self.categories_order.append(DEFAULT_CATEGORY)

    def category_for_mod(self, mod_id: str) -> str:
        for category, mod_ids in self.categories.items():
            if mod_id in mod_ids:
                return category

        logger.warning(
            f"Mod {mod_id} not found in a category. Either it's not installed, or the categories were not normalized."
        )
        return DEFAULT_CATEGORY

    def create_category(self, category: str) -> None:
        """Add an empty category, right before the default one."""
        if category in self.categories:
            logger.warning(f"Category {category} already exists.")
            return

        self.categories[category] = []

        position = len(self.categories_order) - 1 if self.categories_order else 0
        self.categories_order.insert(position, category)

    def delete_category(self, category: str) -> None:
        """
        Delete a category. The default one cannot be deleted.

        Its mods are not reassigned here. They go back to the default category
        the next time the categories are normalized.
        """
        if DEFAULT_CATEGORY not in self.categories:
            self.categories[DEFAULT_CATEGORY] = []

        if category == DEFAULT_CATEGORY:
            return

        self.categories.pop(category, None)
        self.categories_order = [x for x in self.categories_order if x != category]

    def rename_category(self, old: str, new: str) -> None:
        if old == DEFAULT_CATEGORY or new == DEFAULT_CATEGORY:
            raise ValueError("The default category cannot be renamed.")
        if old not in self.categories:
            raise ValueError(f"Category {old} does not exist.")
        if new in self.categories:
            raise ValueError(f"Category {new} already exists.")

        self.categories[new] = self.categories.pop(old)
        self.categories_order = [
            new if category == old else category for category in self.categories_order
        ]

    def move_mods_to_category(self, mod_ids: list[str], category: str) -> None:
        """Move installed mods to the end of a category. Unknown or uninstalled mods are skipped."""
        if category not in self.categories:
            raise ValueError(f"Category {category} does not exist.")

        to_move = []
        for mod_id in mod_ids:
            mod = self.mods.get(mod_id)
            if mod is None or not mod.paths:
                logger.warning(f"Skipping {mod_id}: not installed.")
                continue
            if mod_id not in to_move:
                to_move.append(mod_id)

        for members in self.categories.values():
            members[:] = [mod_id for mod_id in members if mod_id not in to_move]

        self.categories[category].extend(to_move)

    def normalize_categories(self) -> None:
        """
        Remove uninstalled mods from every category, and add the installed ones
        that are in no category to the default category.
        """
        for members in self.categories.values():
            members[:] = [
                mod_id
                for mod_id in members
                if mod_id in self.mods and self.mods[mod_id].paths
            ]

        self.categories_order = [
            category for category in self.categories_order if category in self.categories
        ]
        for category in self.categories:
            if category not in self.categories_order:
                self.categories_order.append(category)

        self.ensure_default_category()

        categorized = {
            mod_id for members in self.categories.values() for mod_id in members
        }
        uncategorized = sorted(
            mod_id
            for mod_id, mod in self.mods.items()
            if mod.paths and mod_id not in categorized
        )
        self.categories[DEFAULT_CATEGORY].extend(uncategorized)

    # Mods

    def find_by_alt_name(self, pack_name: str) -> Mod | None:
        """
        Find the legacy mod a pack was generated from.

        Only mods not found yet in this scan, or found only as legacy .bin files,
        can be matched, so a real pack is never merged into another mod.
        """
        for mod in self.mods.values():
            first = mod.first_path()
            if first is not None and first.suffix != LEGACY_MAP_EXTENSION:
                continue

            if not mod.file_name:
                continue

            last = mod.file_name.replace("\\", "/").split("/")[-1]
            if mod.alt_name() == pack_name or last == pack_name:
                return mod

        return None

    def _merge_archive(
        self, archive: DiscoveredArchive, content_path: Path | None
    ) -> str | None:
        """Merge one discovered archive into the catalog. Returns its steam id hint, if any."""
        path = archive.path
        pack_name = path.name

        mod = self.mods.get(pack_name)
        if mod is None:
            mod = self.find_by_alt_name(pack_name)
        if mod is None:
            logger.debug(f"New mod found: {pack_name}")
            mod = Mod(name=pack_name, id=pack_name)
            self.mods[pack_name] = mod

        mod.add_path(path, front=archive.root != RootKind.CONTENT)

        # Only the highest priority copy defines the type and dates of the mod.
        if mod.paths[0] == str(path):
            mod.pack_type = archive.pack_type
            _update_file_times(mod, path)

        if archive.root == RootKind.CONTENT and content_path is not None:
            steam_id = steam_id_from_content_path(path, content_path)
            if steam_id is not None:
                mod.steam_id = steam_id
                return steam_id

        return None

    def update_mod_list(
        self,
        game: GameInfo,
        game_path: Path | None,
        settings: Settings,
        load_order: "LoadOrder | None" = None,
        reader: PackReader = read_pack_type,
        request_enrichment: Callable[[list[str]], Any] | None = None,
    ) -> Any:
        """
        Rescan the game folders and merge what's found into the catalog.

        Roots are processed from lowest to highest priority: content, secondary, data.
        Archives within a root are parsed in parallel, but merged sequentially.
        Per-archive failures are skipped. If the game install cannot be resolved,
        every mod ends up without paths.

        :param game: Game to scan.
        :param game_path: Install folder of the game.
        :param settings: Settings, for the secondary folder and the network toggle.
        :param load_order: If passed, it's updated and saved after the scan.
        :param reader: Archive reader collaborator.
        :param request_enrichment: Called with the steam ids found in the content folder,
            unless network updates are disabled. It should not block.
        :return: Whatever `request_enrichment` returned (usually a Future), or None.
        """
        logger.info(f"Rescanning mods for {game.key}")

        # Clear the paths first so a failure while loading them doesn't leave them stale.
        for mod in self.mods.values():
            mod.paths.clear()

        enrichment = None
        data_path = game.data_path(game_path) if game_path is not None else None

        if game_path is None or not game_path.is_dir():
            logger.warning(f"Game path for {game.key} not found: {game_path}")
        else:
            try:
                vanilla_packs = game.vanilla_packs_paths(game_path)
            except GamePathError as e:
                logger.error(f"Unable to resolve the install of {game.key}: {e}")
                vanilla_packs = None

            if vanilla_packs is not None:
                data_path = data_path.resolve() if data_path is not None else None
                try:
                    content_path: Path | None = game.content_path(game_path).resolve()
                except GamePathError:
                    content_path = None

                roots = (
                    (RootKind.CONTENT, game.content_packs_paths(game_path)),
                    (RootKind.SECONDARY, game.secondary_packs_paths(settings)),
                    (RootKind.DATA, game.data_packs_paths(game_path)),
                )

                steam_ids: list[str] = []
                for root, paths in roots:
                    if not paths:
                        continue

                    candidates = filter_candidates(paths, vanilla_packs)
                    archives = discover_archives(candidates, root, reader)
                    logger.debug(
                        f"{root.value} root: {len(archives)} mods out of {len(paths)} archives"
                    )

                    for archive in archives:
                        steam_id = self._merge_archive(archive, content_path)
                        if steam_id is not None and steam_id not in steam_ids:
                            steam_ids.append(steam_id)

                if (
                    steam_ids
                    and request_enrichment is not None
                    and not settings.skip_network_update
                ):
                    logger.info(f"Requesting workshop data for {len(steam_ids)} mods")
                    enrichment = request_enrichment(sorted(steam_ids))

        self.normalize_categories()

        if load_order is not None:
            load_order.update(self, data_path)
            load_order.save(self.game_key)

        self.save()
        logger.info(
            f"Finished rescan of {game.key}: {sum(1 for mod in self.mods.values() if mod.paths)} mods installed"
        )
        return enrichment

    def merge_enrichment(
        self,
        items: list[WorkshopItem],
        last_update_date: int = 0,
        user_names: dict[str, str] | None = None,
    ) -> list[str]:
        """
        Apply workshop data to the mods with the same steam id.

        Items for unknown steam ids are ignored, so this can be called at any
        time after a rescan.

        :param items: Workshop data, as returned by the metadata provider.
        :param last_update_date: Timestamp of the last game update, to report outdated mods.
        :param user_names: Nicks of the owners of the items, by user id.
        :return: Ids of the updated mods which are outdated.
        """
        user_names = user_names or {}
        by_steam_id: dict[str, list[Mod]] = {}
        for mod in self.mods.values():
            if mod.steam_id is not None:
                by_steam_id.setdefault(mod.steam_id, []).append(mod)

        now = int(time.time())
        outdated = []
        for item in items:
            for mod in by_steam_id.get(item.published_file_id, []):
                mod.name = item.title or mod.name
                mod.creator = item.owner
                mod.creator_name = user_names.get(item.owner, mod.creator_name)
                mod.file_name = item.file_name
                mod.file_size = item.file_size
                mod.file_url = item.url
                mod.preview_url = item.preview_url
                mod.description = item.description
                mod.time_created = item.time_created
                mod.time_updated = item.time_updated
                mod.last_check = now

                if mod.outdated(last_update_date):
                    outdated.append(mod.id)

        # Packs generated from legacy maps were found before their map got a file
        # name. Drop them so the next rescan attaches them to the map instead.
        alt_names = {}
        for mod in self.mods.values():
            alt_name = mod.alt_name()
            if alt_name is not None and alt_name != mod.id:
                alt_names[alt_name] = mod.id

        for mod_id in [mod_id for mod_id in self.mods if mod_id in alt_names]:
            logger.info(f"Removing {mod_id}, generated from {alt_names[mod_id]}")
            del self.mods[mod_id]
            for mods in self.categories.values():
                if mod_id in mods:
                    mods.remove(mod_id)

        logger.info(
            f"Merged workshop data for {len(items)} items, {len(outdated)} mods outdated"
        )
        return sorted(outdated)


def _update_file_times(mod: Mod, path: Path) -> None:
    try:
        stat = path.stat()
    except OSError as e:
        logger.warning(f"Unable to read the dates of {path}: {e}")
        return

    # Only Windows reports the creation date.
    if sys.platform == "win32":
        mod.time_created = int(stat.st_ctime)
    mod.time_updated = int(stat.st_mtime)
