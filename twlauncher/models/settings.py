import json
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from twlauncher.utils.app_info import AppInfo


class Settings:
    def __init__(self, settings_file: Path | None = None) -> None:
        self._settings_file = (
            settings_file if settings_file is not None else AppInfo().app_settings_file
        )
        self._debug_file = self._settings_file.parent / "DEBUG"

        # Install folder of each game, by game key.
        self.game_paths: dict[str, str] = {}

        # Optional folder with mid priority mods, shared between games.
        self.secondary_mods_path: str = ""

        # Workshop
        self.skip_network_update: bool = False
        self.steam_user_id: str = ""

        # Advanced
        self.debug_logging_enabled: bool = False

    def game_path(self, game_key: str) -> Path | None:
        game_path = self.game_paths.get(game_key, "")
        return Path(game_path) if game_path else None

    def load(self) -> None:
        self.debug_logging_enabled = (
            self._debug_file.exists() and self._debug_file.is_file()
        )

        try:
            with open(self._settings_file, "r", encoding="utf-8") as file:
                data = json.load(file)
        except FileNotFoundError:
            logger.info(
                f"Settings file not found at {self._settings_file}. Creating default settings."
            )
            self.save()
            return
        except JSONDecodeError as e:
            # Settings are easy to rebuild, unlike the catalogs. Start from scratch.
            logger.error(f"Unable to parse settings file, using defaults: {e}")
            self.save()
            return

        if not isinstance(data, dict):
            logger.error("Settings file does not contain an object, using defaults.")
            self.save()
            return

        self._from_dict(data)

    def save(self) -> None:
        if self.debug_logging_enabled:
            self._debug_file.touch(exist_ok=True)
        else:
            self._debug_file.unlink(missing_ok=True)

        self._settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._settings_file, "w", encoding="utf-8") as file:
            json.dump(self._to_dict(), file, indent=4)

    def _from_dict(self, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            if key.startswith("_") or not hasattr(self, key):
                logger.debug(f"Ignoring unknown setting: {key}")
                continue

            current = getattr(self, key)
            if type(current) is not type(value):
                logger.warning(
                    f"Ignoring setting {key}: expected {type(current).__name__}, got {type(value).__name__}"
                )
                continue

            setattr(self, key, value)

    def _to_dict(self) -> Dict[str, Any]:
        return {
            key: value for key, value in self.__dict__.items() if not key.startswith("_")
        }
