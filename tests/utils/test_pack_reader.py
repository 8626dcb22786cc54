import zlib
from pathlib import Path
from typing import Callable

import pytest

from twlauncher.models.mod import PackType
from twlauncher.utils.exception import PackParseError
from twlauncher.utils.pack_reader import is_legacy_map, read_pack_type


@pytest.mark.parametrize("pack_type", list(PackType))
def test_read_pack_type(
    tmp_path: Path, write_pack: Callable[..., Path], pack_type: PackType
) -> None:
    path = write_pack(tmp_path / "foo.pack", pack_type)
    assert read_pack_type(path) == pack_type


@pytest.mark.parametrize("signature", [b"PFH0", b"PFH2", b"PFH3", b"PFH4", b"PFH6"])
def test_read_pack_type_all_signatures(
    tmp_path: Path, write_pack: Callable[..., Path], signature: bytes
) -> None:
    path = write_pack(tmp_path / "foo.pack", PackType.MOD, signature)
    assert read_pack_type(path) == PackType.MOD


def test_read_pack_type_ignores_flags(tmp_path: Path) -> None:
    path = tmp_path / "flags.pack"
    # Mod type with the "has index with timestamps" flag set.
    path.write_bytes(b"PFH5" + (0x43).to_bytes(4, "little") + b"\x00" * 8)
    assert read_pack_type(path) == PackType.MOD


def test_read_pack_type_bad_signature(tmp_path: Path) -> None:
    path = tmp_path / "bad.pack"
    path.write_bytes(b"NOPE" + b"\x03\x00\x00\x00")
    with pytest.raises(PackParseError):
        read_pack_type(path)


def test_read_pack_type_short_file(tmp_path: Path) -> None:
    path = tmp_path / "short.pack"
    path.write_bytes(b"PFH5")
    with pytest.raises(PackParseError):
        read_pack_type(path)


def test_read_pack_type_unknown_type(tmp_path: Path) -> None:
    path = tmp_path / "unknown.pack"
    path.write_bytes(b"PFH5" + (7).to_bytes(4, "little"))
    with pytest.raises(PackParseError):
        read_pack_type(path)


def test_read_pack_type_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PackParseError):
        read_pack_type(tmp_path / "missing.pack")


def test_is_legacy_map(tmp_path: Path) -> None:
    good = tmp_path / "map.bin"
    good.write_bytes(zlib.compress(b"legacy map data" * 10))
    assert is_legacy_map(good)

    garbage = tmp_path / "garbage.bin"
    garbage.write_bytes(b"not compressed at all")
    assert not is_legacy_map(garbage)

    truncated = tmp_path / "truncated.bin"
    truncated.write_bytes(zlib.compress(b"legacy map data" * 10)[:-6])
    assert not is_legacy_map(truncated)

    assert not is_legacy_map(tmp_path / "missing.bin")


def test_is_legacy_map_large_file(tmp_path: Path) -> None:
    data = zlib.compress(b"\x00" * (16 * 1024 * 1024))

    large = tmp_path / "large.bin"
    large.write_bytes(data)
    assert is_legacy_map(large)

    truncated = tmp_path / "truncated.bin"
    truncated.write_bytes(data[: len(data) // 2])
    assert not is_legacy_map(truncated)
