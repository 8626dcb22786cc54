"""
Historical schemas of a Mod, as they were written to disk by older versions.

They're strict on purpose: every field is required and unknown fields are rejected,
so any document matches one version at most. They carry no behavior beyond
converting themselves to the next version.
"""

import msgspec

from twlauncher.models.mod import Mod, PackType


class ModV0(msgspec.Struct, forbid_unknown_fields=True):
    name: str
    id: str
    steam_id: str | None
    enabled: bool
    category: str | None
    paths: list[str]
    creator: str
    creator_name: str
    file_size: int
    file_url: str
    preview_url: str
    description: str
    time_created: int
    time_updated: int
    last_check: int

    def to_next(self) -> "ModV1":
        return ModV1(
            name=self.name,
            id=self.id,
            steam_id=self.steam_id,
            enabled=self.enabled,
            category=self.category,
            pack_type=PackType.MOD,
            paths=list(self.paths),
            creator=self.creator,
            creator_name=self.creator_name,
            file_size=self.file_size,
            file_url=self.file_url,
            preview_url=self.preview_url,
            description=self.description,
            time_created=self.time_created,
            time_updated=self.time_updated,
            last_check=self.last_check,
        )


class ModV1(msgspec.Struct, forbid_unknown_fields=True):
    name: str
    id: str
    steam_id: str | None
    enabled: bool
    category: str | None
    pack_type: PackType
    paths: list[str]
    creator: str
    creator_name: str
    file_size: int
    file_url: str
    preview_url: str
    description: str
    time_created: int
    time_updated: int
    last_check: int

    def to_next(self) -> "ModV2":
        return ModV2(
            name=self.name,
            id=self.id,
            steam_id=self.steam_id,
            enabled=self.enabled,
            category=self.category,
            pack_type=self.pack_type,
            paths=list(self.paths),
            creator=self.creator,
            creator_name=self.creator_name,
            file_size=self.file_size,
            file_url=self.file_url,
            preview_url=self.preview_url,
            description=self.description,
            time_created=self.time_created,
            time_updated=self.time_updated,
            outdated=False,
            last_check=self.last_check,
        )


class ModV2(msgspec.Struct, forbid_unknown_fields=True):
    name: str
    id: str
    steam_id: str | None
    enabled: bool
    category: str | None
    pack_type: PackType
    paths: list[str]
    creator: str
    creator_name: str
    file_size: int
    file_url: str
    preview_url: str
    description: str
    time_created: int
    time_updated: int
    outdated: bool
    last_check: int

    def to_next(self) -> "ModV3":
        return ModV3(
            name=self.name,
            id=self.id,
            steam_id=self.steam_id,
            enabled=self.enabled,
            category=self.category,
            pack_type=self.pack_type,
            paths=list(self.paths),
            creator=self.creator,
            creator_name=self.creator_name,
            file_name="",
            file_size=self.file_size,
            file_url=self.file_url,
            preview_url=self.preview_url,
            description=self.description,
            time_created=self.time_created,
            time_updated=self.time_updated,
            outdated=self.outdated,
            last_check=self.last_check,
        )


class ModV3(msgspec.Struct, forbid_unknown_fields=True):
    name: str
    id: str
    steam_id: str | None
    enabled: bool
    category: str | None
    pack_type: PackType
    paths: list[str]
    creator: str
    creator_name: str
    file_name: str
    file_size: int
    file_url: str
    preview_url: str
    description: str
    time_created: int
    time_updated: int
    outdated: bool
    last_check: int

    def to_next(self) -> "ModV4":
        # The category moves to the catalog. See GameConfigV3.to_next.
        return ModV4(
            name=self.name,
            id=self.id,
            steam_id=self.steam_id,
            enabled=self.enabled,
            pack_type=self.pack_type,
            paths=list(self.paths),
            creator=self.creator,
            creator_name=self.creator_name,
            file_name=self.file_name,
            file_size=self.file_size,
            file_url=self.file_url,
            preview_url=self.preview_url,
            description=self.description,
            time_created=self.time_created,
            time_updated=self.time_updated,
            outdated=self.outdated,
            last_check=self.last_check,
        )


class ModV4(msgspec.Struct, forbid_unknown_fields=True):
    name: str
    id: str
    steam_id: str | None
    enabled: bool
    pack_type: PackType
    paths: list[str]
    creator: str
    creator_name: str
    file_name: str
    file_size: int
    file_url: str
    preview_url: str
    description: str
    time_created: int
    time_updated: int
    outdated: bool
    last_check: int

    def to_next(self) -> Mod:
        # outdated is not stored anymore. It's computed from the game's last update.
        return Mod(
            name=self.name,
            id=self.id,
            steam_id=self.steam_id,
            enabled=self.enabled,
            pack_type=self.pack_type,
            paths=list(self.paths),
            creator=self.creator,
            creator_name=self.creator_name,
            file_name=self.file_name,
            file_size=self.file_size,
            file_url=self.file_url,
            preview_url=self.preview_url,
            description=self.description,
            time_created=self.time_created,
            time_updated=self.time_updated,
            last_check=self.last_check,
        )
