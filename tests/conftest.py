import struct
from pathlib import Path
from typing import Callable, NamedTuple

import pytest

from twlauncher.models.mod import PackType
from twlauncher.models.settings import Settings
from twlauncher.utils.app_info import AppInfo
from twlauncher.utils.games import GameInfo, get_game

PACK_HEADER_VALUES = {
    PackType.BOOT: 0,
    PackType.RELEASE: 1,
    PackType.PATCH: 2,
    PackType.MOD: 3,
    PackType.MOVIE: 4,
}


class GameInstall(NamedTuple):
    game_path: Path
    data_path: Path
    content_path: Path
    secondary_path: Path


@pytest.fixture(autouse=True)
def app_storage(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Redirect every file the launcher writes (catalogs, load orders, profiles,
    settings, logs) to the test's temporary folder.
    """
    storage = tmp_path / "storage"
    monkeypatch.setattr(AppInfo(), "_app_storage_folder", storage)
    monkeypatch.setattr(AppInfo(), "_user_log_folder", tmp_path / "logs")
    return storage


@pytest.fixture
def write_pack() -> Callable[..., Path]:
    """Write a file with a PFH header of the given type. Parent folders are created."""

    def _write(
        path: Path, pack_type: PackType = PackType.MOD, signature: bytes = b"PFH5"
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        header = struct.pack("<4sI", signature, PACK_HEADER_VALUES[pack_type])
        path.write_bytes(header + b"\x00" * 24 + path.name.encode())
        return path

    return _write


@pytest.fixture
def game() -> GameInfo:
    return get_game("warhammer_3")


@pytest.fixture
def game_install(tmp_path: Path, game: GameInfo) -> GameInstall:
    """A steam library with the game installed, an empty workshop folder and a secondary folder."""
    root = tmp_path.resolve()
    steamapps = root / "steamapps"
    game_path = steamapps / "common" / "Total War WARHAMMER III"
    data_path = game_path / "data"
    data_path.mkdir(parents=True)

    content_path = steamapps / "workshop" / "content" / str(game.steam_id)
    content_path.mkdir(parents=True)

    secondary_path = root / "secondary"
    secondary_path.mkdir()

    return GameInstall(game_path, data_path, content_path, secondary_path)


@pytest.fixture
def settings(tmp_path: Path, game: GameInfo, game_install: GameInstall) -> Settings:
    settings = Settings(tmp_path / "settings.json")
    settings.game_paths[game.key] = str(game_install.game_path)
    settings.secondary_mods_path = str(game_install.secondary_path)
    settings.skip_network_update = False
    return settings
