from typing import Any

import msgspec
import pytest

from twlauncher.models.game_config import GameConfig
from twlauncher.models.mod import Mod, PackType
from twlauncher.models.versions.game_config_versions import (
    GameConfigV0,
    GameConfigV1,
    GameConfigV2,
    GameConfigV3,
    GameConfigV4,
)
from twlauncher.models.versions.migration import detect_version, migrate_to_latest
from twlauncher.utils.constants import DEFAULT_CATEGORY
from twlauncher.utils.exception import CatalogReadError


def mod_v0(mod_id: str, category: str | None = None, installed: bool = True) -> dict[str, Any]:
    return {
        "name": mod_id.removesuffix(".pack").title(),
        "id": mod_id,
        "steam_id": "123",
        "enabled": True,
        "category": category,
        "paths": [f"/data/{mod_id}"] if installed else [],
        "creator": "76561",
        "creator_name": "Someone",
        "file_size": 2048,
        "file_url": "https://example.com/file",
        "preview_url": "",
        "description": "A mod",
        "time_created": 10,
        "time_updated": 20,
        "last_check": 30,
    }


def mod_v1(mod_id: str, **kwargs: Any) -> dict[str, Any]:
    return {**mod_v0(mod_id, **kwargs), "pack_type": "Movie"}


def mod_v2(mod_id: str, **kwargs: Any) -> dict[str, Any]:
    return {**mod_v1(mod_id, **kwargs), "outdated": True}


def mod_v3(mod_id: str, **kwargs: Any) -> dict[str, Any]:
    return {**mod_v2(mod_id, **kwargs), "file_name": "maps/Some Map"}


def mod_v4(mod_id: str, **kwargs: Any) -> dict[str, Any]:
    mod = mod_v3(mod_id, **kwargs)
    del mod["category"]
    return mod


def document(version: int) -> bytes:
    mod_builder = [mod_v0, mod_v1, mod_v2, mod_v3, mod_v4][version]
    config: dict[str, Any] = {
        "game_key": "warhammer_2",
        "mods": {
            "a.pack": mod_builder("a.pack", **({} if version == 4 else {"category": "Units"})),
            "b.pack": mod_builder("b.pack"),
            "c.pack": mod_builder("c.pack", installed=False),
        },
    }
    if version == 4:
        config["categories"] = {"Units": ["a.pack"], DEFAULT_CATEGORY: ["b.pack"]}
        config["categories_order"] = ["Units", DEFAULT_CATEGORY]
    return msgspec.json.encode(config)


@pytest.mark.parametrize(
    "version, expected_type",
    [
        (0, GameConfigV0),
        (1, GameConfigV1),
        (2, GameConfigV2),
        (3, GameConfigV3),
        (4, GameConfigV4),
    ],
)
def test_detect_version(version: int, expected_type: type) -> None:
    assert type(detect_version(document(version))) is expected_type


def test_detect_current_version() -> None:
    config = GameConfig.new("warhammer_2")
    config.mods["a.pack"] = Mod(name="A", id="a.pack", paths=["/data/a.pack"])

    detected = detect_version(msgspec.json.encode(config))

    assert detected == config


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"not json",
        b"[1, 2, 3]",
        b'{"game_key": "warhammer_2", "mods": {"a.pack": {"id": 3}}}',
        b'{"game_key": "warhammer_2", "profiles": []}',
    ],
)
def test_detect_version_unreadable(data: bytes) -> None:
    with pytest.raises(CatalogReadError):
        detect_version(data)


@pytest.mark.parametrize("version", [0, 1, 2, 3, 4])
def test_migrate_to_latest(version: int) -> None:
    config = migrate_to_latest(detect_version(document(version)))

    assert isinstance(config, GameConfig)
    assert config.game_key == "warhammer_2"
    assert sorted(config.mods) == ["a.pack", "b.pack", "c.pack"]

    a = config.mods["a.pack"]
    assert a.steam_id == "123"
    assert a.enabled is True
    assert a.paths == ["/data/a.pack"]
    assert a.creator_name == "Someone"
    assert a.time_updated == 20
    assert a.last_check == 30
    # Pack types were not stored before V1.
    assert a.pack_type == (PackType.MOD if version == 0 else PackType.MOVIE)
    assert a.file_name == ("maps/Some Map" if version >= 3 else "")

    assert config.categories == {"Units": ["a.pack"], DEFAULT_CATEGORY: ["b.pack"]}
    assert config.categories_order == ["Units", DEFAULT_CATEGORY]


def test_each_step_only_knows_the_next_one() -> None:
    v1 = detect_version(document(1))
    v2 = v1.to_next()
    v3 = v2.to_next()

    assert isinstance(v2, GameConfigV2)
    assert isinstance(v3, GameConfigV3)
    assert v3.mods["a.pack"].outdated is False
    assert v3.mods["a.pack"].file_name == ""
    assert v3.mods["a.pack"].category == "Units"


def test_categories_from_v3_are_sorted_and_default_goes_last() -> None:
    data = msgspec.json.decode(document(3))
    data["mods"]["d.pack"] = mod_v3("d.pack", category="Maps")
    data["mods"]["e.pack"] = mod_v3("e.pack", category="Zombies", installed=False)

    config = detect_version(msgspec.json.encode(data)).to_next()

    assert config.categories_order == ["Maps", "Units", DEFAULT_CATEGORY]
    assert "Zombies" not in config.categories


def test_load_saves_the_migrated_catalog() -> None:
    path = GameConfig.file_path("warhammer_2")
    path.write_bytes(document(0))

    config = GameConfig.load("warhammer_2")

    assert type(detect_version(path.read_bytes())) is GameConfig
    assert GameConfig.load("warhammer_2") == config


def test_load_does_not_rewrite_current_catalogs() -> None:
    path = GameConfig.file_path("warhammer_2")
    data = msgspec.json.encode(GameConfig.new("warhammer_2"))
    path.write_bytes(data)

    GameConfig.load("warhammer_2")

    assert path.read_bytes() == data


def test_load_leaves_unreadable_catalogs_alone() -> None:
    path = GameConfig.file_path("warhammer_2")
    path.write_bytes(b'{"game_key": "warhammer_2", "mods": []}')

    with pytest.raises(CatalogReadError):
        GameConfig.load("warhammer_2")

    assert path.read_bytes() == b'{"game_key": "warhammer_2", "mods": []}'


def test_migrate() -> None:
    path = GameConfig.file_path("warhammer_2")

    assert GameConfig.migrate("warhammer_2") is False

    path.write_bytes(document(2))
    assert GameConfig.migrate("warhammer_2") is True
    assert GameConfig.migrate("warhammer_2") is False
