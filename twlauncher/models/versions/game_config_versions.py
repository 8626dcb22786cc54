"""
Historical schemas of the per-game catalog.

V0 to V3 stored the category of each mod inside the mod. V4 moved them to the
catalog, with their own order. The current schema only differs from V4 in its mods.
"""

import msgspec

from twlauncher.models.game_config import GameConfig
from twlauncher.models.versions.mod_versions import ModV0, ModV1, ModV2, ModV3, ModV4
from twlauncher.utils.constants import DEFAULT_CATEGORY


class GameConfigV0(msgspec.Struct, forbid_unknown_fields=True):
    game_key: str
    mods: dict[str, ModV0]

    def to_next(self) -> "GameConfigV1":
        return GameConfigV1(
            game_key=self.game_key,
            mods={key: mod.to_next() for key, mod in self.mods.items()},
        )


class GameConfigV1(msgspec.Struct, forbid_unknown_fields=True):
    game_key: str
    mods: dict[str, ModV1]

    def to_next(self) -> "GameConfigV2":
        return GameConfigV2(
            game_key=self.game_key,
            mods={key: mod.to_next() for key, mod in self.mods.items()},
        )


class GameConfigV2(msgspec.Struct, forbid_unknown_fields=True):
    game_key: str
    mods: dict[str, ModV2]

    def to_next(self) -> "GameConfigV3":
        return GameConfigV3(
            game_key=self.game_key,
            mods={key: mod.to_next() for key, mod in self.mods.items()},
        )


class GameConfigV3(msgspec.Struct, forbid_unknown_fields=True):
    game_key: str
    mods: dict[str, ModV3]

    def to_next(self) -> "GameConfigV4":
        categories: dict[str, list[str]] = {}
        for mod in self.mods.values():
            # Uninstalled mods don't belong to any category.
            if not mod.paths:
                continue

            category = mod.category or DEFAULT_CATEGORY
            categories.setdefault(category, []).append(mod.id)

        categories.setdefault(DEFAULT_CATEGORY, [])
        categories_order = sorted(
            category for category in categories if category != DEFAULT_CATEGORY
        )
        categories_order.append(DEFAULT_CATEGORY)

        return GameConfigV4(
            game_key=self.game_key,
            mods={key: mod.to_next() for key, mod in self.mods.items()},
            categories=categories,
            categories_order=categories_order,
        )


class GameConfigV4(msgspec.Struct, forbid_unknown_fields=True):
    game_key: str
    mods: dict[str, ModV4]
    categories: dict[str, list[str]]
    categories_order: list[str]

    def to_next(self) -> GameConfig:
        return GameConfig(
            game_key=self.game_key,
            mods={key: mod.to_next() for key, mod in self.mods.items()},
            categories={
                category: list(mod_ids) for category, mod_ids in self.categories.items()
            },
            categories_order=list(self.categories_order),
        )
