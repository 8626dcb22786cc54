from pathlib import Path

import msgspec
from loguru import logger

from twlauncher.models.load_order import LoadOrder
from twlauncher.utils.app_info import AppInfo
from twlauncher.utils.constants import PROFILE_FILE_NAME_END, PROFILE_FILE_NAME_START
from twlauncher.utils.exception import CatalogReadError
from twlauncher.utils.files import write_json_atomic


class Profile(msgspec.Struct):
    """A named load order, saved so it can be restored later."""

    id: str
    game: str
    load_order: LoadOrder = msgspec.field(default_factory=LoadOrder)

    @staticmethod
    def file_path(game_key: str, profile_id: str) -> Path:
        return AppInfo().profiles_folder / (
            f"{PROFILE_FILE_NAME_START}{game_key}_{profile_id}{PROFILE_FILE_NAME_END}"
        )

    @classmethod
    def profiles_for_game(cls, game_key: str) -> dict[str, "Profile"]:
        """Every readable profile of a game, by id. Unreadable ones are logged and skipped."""
        prefix = f"{PROFILE_FILE_NAME_START}{game_key}_"
        profiles = {}

        for path in sorted(AppInfo().profiles_folder.glob(f"{prefix}*{PROFILE_FILE_NAME_END}")):
            try:
                profile = msgspec.json.decode(path.read_bytes(), type=cls)
            except (OSError, msgspec.DecodeError) as e:
                logger.warning(f"Skipping unreadable profile {path}: {e}")
                continue

            if profile.game == game_key:
                profiles[profile.id] = profile

        return profiles

    @classmethod
    def load(cls, game_key: str, profile_id: str) -> "Profile":
        path = cls.file_path(game_key, profile_id)
        try:
            return msgspec.json.decode(path.read_bytes(), type=cls)
        except (OSError, msgspec.DecodeError) as e:
            logger.error(f"Unable to read profile {path}: {e}")
            raise CatalogReadError(f"Unable to read profile {profile_id}: {e}") from e

    def save(self) -> None:
        if not self.id or "/" in self.id or "\\" in self.id:
            raise ValueError(f"Invalid profile name: {self.id!r}")

        write_json_atomic(self.file_path(self.game, self.id), self)
        logger.info(f"Saved profile {self.id} for {self.game}")

    def delete(self) -> None:
        self.file_path(self.game, self.id).unlink(missing_ok=True)
        logger.info(f"Deleted profile {self.id} for {self.game}")
