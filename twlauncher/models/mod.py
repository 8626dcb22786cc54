import hashlib
import os
from enum import Enum
from pathlib import Path
from typing import NamedTuple

import msgspec

from twlauncher.utils.constants import PACK_EXTENSION


class PackType(str, Enum):
    """Type of a pack, as stored in its PFH header. Declared in load order priority."""

    BOOT = "Boot"
    RELEASE = "Release"
    PATCH = "Patch"
    MOD = "Mod"
    MOVIE = "Movie"

    @property
    def rank(self) -> int:
        return _PACK_TYPE_RANK[self]

    @classmethod
    def from_header_value(cls, value: int) -> "PackType":
        """Map the low bits of a PFH type field to a PackType. Raises ValueError if unknown."""
        try:
            return _PACK_TYPE_BY_HEADER_VALUE[value]
        except KeyError:
            raise ValueError(f"Unknown pack type value: {value}") from None


_PACK_TYPE_RANK = {pack_type: rank for rank, pack_type in enumerate(PackType)}
_PACK_TYPE_BY_HEADER_VALUE = dict(enumerate(PackType))


class ModLocation(NamedTuple):
    """Where the paths of a mod live, relative to the three canonical roots."""

    in_data: bool
    in_secondary: bool
    content_steam_id: str | None


def _is_relative_to(path: Path, root: Path | None) -> bool:
    if root is None or root == Path():
        return False
    return path.is_relative_to(root)


class Mod(msgspec.Struct, forbid_unknown_fields=True):
    """A mod known by the catalog. One per distinct pack name.

    Attributes:
        name (str): Visual name of the mod. Title if the mod is from the workshop.
        id (str): File name of the mod's pack. Unique key within a game's catalog.
        steam_id (str | None): Workshop id (PublishedFileId) of the mod, once known.
        enabled (bool): User intent flag. See `is_enabled` for the effective state.
        pack_type (PackType): Pack type of the first path.
        paths (list[str]): Every location where the mod was found, by descending priority:
            data first, then secondary, then content. Empty if the mod is not installed.
        creator (str): Numeric id of the owner of the mod.
        creator_name (str): Nick of the owner of the mod.
        file_name (str): Workshop file name. Only present on legacy .bin mods, where it's
            the name the file must get when turned into a pack.
        file_size (int): Size of the file in bytes.
        file_url (str): Workshop URL of the mod.
        preview_url (str): Workshop URL of the preview image of the mod.
        description (str): Workshop description of the mod.
        time_created (int): Creation timestamp, from the workshop or the filesystem.
        time_updated (int): Last update timestamp, from the workshop or the filesystem.
        last_check (int): Timestamp of the last online check, so we don't spam steam.
    """

    name: str = ""
    id: str = ""
    steam_id: str | None = None
    enabled: bool = False
    pack_type: PackType = PackType.MOD
    paths: list[str] = msgspec.field(default_factory=list)
    creator: str = ""
    creator_name: str = ""
    file_name: str = ""
    file_size: int = 0
    file_url: str = ""
    preview_url: str = ""
    description: str = ""
    time_created: int = 0
    time_updated: int = 0
    last_check: int = 0

    def first_path(self) -> Path | None:
        return Path(self.paths[0]) if self.paths else None

    def alt_name(self) -> str | None:
        """
        Alternative pack name of legacy map mods.

        The workshop file name of those mods is a folder name, which becomes a pack
        with its spaces replaced by underscores.
        """
        if not self.file_name:
            return None

        last = self.file_name.replace("\\", "/").split("/")[-1]
        if not last or last.endswith(PACK_EXTENSION):
            return None

        return last.replace(" ", "_") + PACK_EXTENSION

    def display_name(self) -> str:
        if self.name == self.id or not self.name:
            return self.id

        if self.file_name:
            pack_name = self.alt_name() or self.file_name.replace("\\", "/").split("/")[-1]
            return f"{self.name} ({pack_name} - {self.id})"

        return f"{self.name} ({self.id})"

    def add_path(self, path: Path | str, front: bool) -> bool:
        """
        Add a path to the mod, keeping paths unique.

        :param path: Path to add.
        :param front: If True, the path is inserted first (highest priority), otherwise appended.
        :return: True if the path was added, False if it was already known.
        """
        path_str = str(path)
        if path_str in self.paths:
            return False

        if front:
            self.paths.insert(0, path_str)
        else:
            self.paths.append(path_str)
        return True

    def location(
        self,
        data_path: Path | None,
        secondary_path: Path | None,
        content_path: Path | None,
    ) -> ModLocation:
        """
        Classify every path of the mod against the three canonical roots.

        The content location carries the workshop id, which is the first folder
        after the content root.
        """
        in_data = False
        in_secondary = False
        content_steam_id = None

        for path_str in self.paths:
            path = Path(path_str)
            if _is_relative_to(path, data_path):
                in_data = True
            elif _is_relative_to(path, secondary_path):
                in_secondary = True
            elif content_path is not None and _is_relative_to(path, content_path):
                parts = path.relative_to(content_path).parts
                if len(parts) > 1:
                    content_steam_id = parts[0]

        return ModLocation(in_data, in_secondary, content_steam_id)

    def is_enabled(self, data_path: Path | None) -> bool:
        """
        Effective enabled state of the mod.

        Movie packs placed directly in /data are always loaded by the game,
        so for them the user flag only matters when they're somewhere else.
        """
        if self.pack_type == PackType.MOVIE:
            first = self.first_path()
            if first is not None and _is_relative_to(first, data_path):
                return True

        return self.enabled

    def can_be_toggled(self, data_path: Path | None) -> bool:
        first = self.first_path()
        if first is None:
            return False

        if self.pack_type == PackType.MOVIE:
            return not _is_relative_to(first, data_path)

        return True

    def outdated(self, game_last_update_date: int) -> bool:
        """A mod is outdated if it was last updated before the last game update."""
        return self.time_updated != 0 and game_last_update_date > self.time_updated

    def priority_dating_flags(
        self,
        data_path: Path | None,
        secondary_path: Path | None,
        content_path: Path | None,
    ) -> tuple[bool, bool, bool]:
        """
        Check if the higher priority copies of the mod are older than the lower priority ones.

        Returns (data older than secondary, data older than content, secondary older than content).
        Raises OSError if any of the paths cannot be checked.
        """
        data_time = None
        secondary_time = None
        content_time = None

        for path_str in self.paths:
            path = Path(path_str)
            modified = os.stat(path).st_mtime
            if _is_relative_to(path, data_path):
                data_time = modified
            elif _is_relative_to(path, secondary_path):
                secondary_time = modified
            elif _is_relative_to(path, content_path):
                content_time = modified

        def older(newer_priority: float | None, lower_priority: float | None) -> bool:
            return (
                newer_priority is not None
                and lower_priority is not None
                and newer_priority < lower_priority
            )

        return (
            older(data_time, secondary_time),
            older(data_time, content_time),
            older(secondary_time, content_time),
        )


class ShareableMod(msgspec.Struct):
    """Portable summary of a mod, used to share load orders between users."""

    name: str = ""
    id: str = ""
    steam_id: str | None = None
    hash: str = ""

    @classmethod
    def from_mod(cls, mod: Mod) -> "ShareableMod":
        """Build the shareable version of a mod. The mod must be installed."""
        first = mod.first_path()
        if first is None:
            raise ValueError(f"Mod {mod.id} has no path to hash.")

        return cls(
            name=mod.name,
            id=mod.id,
            steam_id=mod.steam_id,
            hash=sha256_file(first),
        )


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as file:
        for chunk in iter(lambda: file.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()
