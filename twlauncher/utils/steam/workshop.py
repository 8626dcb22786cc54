"""
Shape of the data we get from the Steam Workshop.

The actual network client lives outside of the launcher core. It only has to
implement `MetadataProvider`, and hand back `WorkshopItem`s.
"""

from typing import Protocol

import msgspec


class WorkshopItem(msgspec.Struct):
    """Published file details of a workshop item, as far as the catalog cares."""

    published_file_id: str
    title: str = ""
    owner: str = ""
    file_name: str = ""
    file_size: int = 0
    url: str = ""
    preview_url: str = ""
    description: str = ""
    time_created: int = 0
    time_updated: int = 0


class MetadataProvider(Protocol):
    def request_mods_data(
        self, game_key: str, steam_ids: list[str]
    ) -> list[WorkshopItem]: ...

    def request_user_names(self, user_ids: list[str]) -> dict[str, str]: ...


def decode_workshop_items(data: bytes) -> list[WorkshopItem]:
    """Decode a JSON list of published file details. Unknown fields are ignored."""
    return msgspec.json.decode(data, type=list[WorkshopItem])


def owners(items: list[WorkshopItem]) -> list[str]:
    """Distinct, non-empty owner ids of the items, sorted."""
    return sorted({item.owner for item in items if item.owner})
