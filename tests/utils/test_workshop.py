import msgspec
import pytest

from twlauncher.utils.steam.workshop import WorkshopItem, decode_workshop_items, owners


def test_decode_workshop_items() -> None:
    data = b"""[
        {
            "published_file_id": "1142710",
            "title": "Better Units",
            "owner": "76561",
            "file_size": 4096,
            "time_updated": 1700000000,
            "tags": ["units"]
        },
        {"published_file_id": "2"}
    ]"""

    items = decode_workshop_items(data)

    assert items == [
        WorkshopItem(
            published_file_id="1142710",
            title="Better Units",
            owner="76561",
            file_size=4096,
            time_updated=1700000000,
        ),
        WorkshopItem(published_file_id="2"),
    ]


def test_decode_workshop_items_without_id() -> None:
    with pytest.raises(msgspec.ValidationError):
        decode_workshop_items(b'[{"title": "No id"}]')


def test_owners() -> None:
    items = [
        WorkshopItem(published_file_id="1", owner="2"),
        WorkshopItem(published_file_id="2", owner="1"),
        WorkshopItem(published_file_id="3", owner="2"),
        WorkshopItem(published_file_id="4"),
    ]

    assert owners(items) == ["1", "2"]
