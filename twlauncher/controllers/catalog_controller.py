from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from threading import RLock

import msgspec
from loguru import logger

from twlauncher.models.game_config import GameConfig
from twlauncher.models.load_order import ImportReport, LoadOrder
from twlauncher.models.profile import Profile
from twlauncher.models.settings import Settings
from twlauncher.utils.exception import CatalogReadError, GamePathError, LauncherError
from twlauncher.utils.files import copy_to_secondary, move_to_secondary
from twlauncher.utils.games import GameInfo, secondary_mods_path
from twlauncher.utils.pack_reader import PackReader, read_pack_type
from twlauncher.utils.steam.workshop import MetadataProvider, WorkshopItem, owners

EnrichmentResult = tuple[list[WorkshopItem], dict[str, str]]

# Modlists are plain user script lines, share strings are base64.
MODLIST_MARKER = 'mod "'


class CatalogController:
    """
    Single owner of the catalog and load order of a game.

    Every mutation goes through here, under one lock. Readers get deep copies
    from `snapshot`, so they never see a rescan halfway through. Rescans run on
    a dedicated worker thread, and workshop requests on another one, so neither
    blocks the caller.
    """

    def __init__(
        self,
        game: GameInfo,
        settings: Settings,
        provider: MetadataProvider | None = None,
        reader: PackReader = read_pack_type,
    ) -> None:
        self.game = game
        self.settings = settings
        self.provider = provider
        self.reader = reader

        # Timestamp of the last update of the game, to flag outdated mods.
        self.last_update_date = 0

        self._lock = RLock()
        self._game_config = GameConfig.load(game.key)
        try:
            self._load_order = LoadOrder.load(game.key)
        except CatalogReadError as e:
            logger.warning(f"Discarding unreadable load order of {game.key}: {e}")
            self._load_order = LoadOrder()

        self._scan_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="rescan"
        )
        self._network_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="network"
        )

    @property
    def game_path(self) -> Path | None:
        return self.settings.game_path(self.game.key)

    @property
    def data_path(self) -> Path | None:
        game_path = self.game_path
        if game_path is None:
            return None
        return self.game.data_path(game_path).resolve()

    def snapshot(self) -> tuple[GameConfig, LoadOrder]:
        """Deep copies of the catalog and load order, safe to read from any thread."""
        with self._lock:
            game_config = msgspec.json.decode(
                msgspec.json.encode(self._game_config), type=GameConfig
            )
            load_order = msgspec.json.decode(
                msgspec.json.encode(self._load_order), type=LoadOrder
            )
        return game_config, load_order

    def _persist(self) -> None:
        self._load_order.update(self._game_config, self.data_path)
        self._load_order.save(self.game.key)
        self._game_config.save()

    # Rescan and workshop data

    def rescan(self) -> "Future[EnrichmentResult] | None":
        """
        Rescan the game folders in the calling thread.

        :return: The pending workshop request for the mods found, if any. Its result
            is merged automatically once it arrives.
        """
        request = self._request_enrichment if self.provider is not None else None
        with self._lock:
            enrichment = self._game_config.update_mod_list(
                self.game,
                self.game_path,
                self.settings,
                self._load_order,
                reader=self.reader,
                request_enrichment=request,
            )
        return enrichment

    def rescan_async(self) -> "Future[GameConfig]":
        """Rescan in the worker thread. The future resolves to a snapshot of the catalog."""

        def task() -> GameConfig:
            self.rescan()
            return self.snapshot()[0]

        return self._scan_executor.submit(task)

    def _fetch_enrichment(self, steam_ids: list[str]) -> EnrichmentResult:
        if self.provider is None:
            raise LauncherError(f"No workshop provider set for {self.game.key}.")

        items = self.provider.request_mods_data(self.game.key, steam_ids)
        user_names = self.provider.request_user_names(owners(items))
        return items, user_names

    def _request_enrichment(self, steam_ids: list[str]) -> "Future[EnrichmentResult]":
        future = self._network_executor.submit(self._fetch_enrichment, steam_ids)
        future.add_done_callback(self._on_enrichment_done)
        return future

    def _on_enrichment_done(self, future: "Future[EnrichmentResult]") -> None:
        error = future.exception()
        if error is not None:
            logger.error(f"Workshop request for {self.game.key} failed: {error}")
            return

        items, user_names = future.result()
        self.apply_enrichment(items, user_names)

    def apply_enrichment(
        self, items: list[WorkshopItem], user_names: dict[str, str] | None = None
    ) -> list[str]:
        """Merge workshop data into the catalog and save. Returns the ids of outdated mods."""
        with self._lock:
            outdated = self._game_config.merge_enrichment(
                items, self.last_update_date, user_names
            )
            self._persist()
        return outdated

    # Mutations

    def set_enabled(self, mod_ids: list[str], enabled: bool) -> list[str]:
        """
        Enable or disable mods, and update the load order.

        :return: Ids that could not be toggled: unknown, uninstalled, or movies forced on by /data.
        """
        failed = []
        with self._lock:
            data_path = self.data_path
            for mod_id in mod_ids:
                mod = self._game_config.mods.get(mod_id)
                if mod is None or not mod.can_be_toggled(data_path):
                    logger.warning(f"Mod {mod_id} cannot be toggled.")
                    failed.append(mod_id)
                    continue
                mod.enabled = enabled

            self._persist()
        return failed

    def set_automatic(self, automatic: bool) -> None:
        with self._lock:
            self._load_order.automatic = automatic
            self._persist()

    def move_in_load_order(self, mod_id: str, position: int) -> None:
        with self._lock:
            self._load_order.move_mod(mod_id, position)
            self._persist()

    def create_category(self, category: str) -> None:
        with self._lock:
            self._game_config.create_category(category)
            self._game_config.save()

    def delete_category(self, category: str) -> None:
        with self._lock:
            self._game_config.delete_category(category)
            self._game_config.save()

    def rename_category(self, old: str, new: str) -> None:
        with self._lock:
            self._game_config.rename_category(old, new)
            self._game_config.save()

    def move_mods_to_category(self, mod_ids: list[str], category: str) -> None:
        with self._lock:
            self._game_config.move_mods_to_category(mod_ids, category)
            self._game_config.save()

    # Files

    def _folders(self) -> tuple[Path, Path]:
        game_path = self.game_path
        if game_path is None:
            raise GamePathError(f"Game path for {self.game.key} not set.")
        return game_path, secondary_mods_path(self.game, self.settings)

    def copy_to_secondary(self, mod_ids: list[str]) -> list[str]:
        """Copy workshop mods to the secondary folder, then rescan. Returns the ids that failed."""
        game_path, secondary_path = self._folders()
        content_path = self.game.content_path(game_path).resolve()
        with self._lock:
            failed = copy_to_secondary(
                self._game_config.mods, mod_ids, secondary_path, content_path
            )
        self.rescan()
        return failed

    def move_to_secondary(self, mod_ids: list[str]) -> list[str]:
        """Move mods from /data to the secondary folder, then rescan. Returns the ids that failed."""
        game_path, secondary_path = self._folders()
        data_path = self.game.data_path(game_path).resolve()
        with self._lock:
            failed = move_to_secondary(
                self._game_config.mods, mod_ids, secondary_path, data_path
            )
        self.rescan()
        return failed

    # Sharing and profiles

    def load_order_string(self) -> str:
        game_path = self.game_path
        if game_path is None:
            raise GamePathError(f"Game path for {self.game.key} not set.")

        with self._lock:
            return self._load_order.build_load_order_string(
                self._game_config, self.game, game_path, self.settings
            )

    def share_string(self) -> str:
        with self._lock:
            return self._load_order.to_share_string(self._game_config)

    def import_load_order(self, text: str) -> ImportReport:
        """Apply a shared load order string, or a list of `mod "x.pack";` lines."""
        if MODLIST_MARKER in text:
            shared = LoadOrder.from_modlist_text(text)
        else:
            shared = LoadOrder.from_share_string(text)

        with self._lock:
            report = self._load_order.apply_shared(
                self._game_config, shared, self.data_path
            )
            self._persist()
        return report

    def save_profile(self, profile_id: str) -> Profile:
        with self._lock:
            load_order = msgspec.json.decode(
                msgspec.json.encode(self._load_order), type=LoadOrder
            )
        profile = Profile(id=profile_id, game=self.game.key, load_order=load_order)
        profile.save()
        return profile

    def load_profile(self, profile_id: str) -> None:
        """Restore a profile: its mods get enabled, the rest disabled, in its order."""
        profile = Profile.load(self.game.key, profile_id)
        with self._lock:
            data_path = self.data_path
            wanted = set(profile.load_order.mods)
            for mod in self._game_config.mods.values():
                if mod.can_be_toggled(data_path):
                    mod.enabled = mod.id in wanted

            self._load_order = profile.load_order
            self._persist()

    def shutdown(self, wait: bool = True) -> None:
        self._scan_executor.shutdown(wait=wait)
        self._network_executor.shutdown(wait=wait)
