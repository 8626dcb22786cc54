import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, NamedTuple

import msgspec
from loguru import logger

from twlauncher.models.mod import Mod, PackType
from twlauncher.utils.constants import (
    LEGACY_MAP_EXTENSION,
    PREVIEW_EXTENSION,
    RESERVED_PACK_NAMES,
    RootKind,
)
from twlauncher.utils.exception import CatalogWriteError, PackParseError
from twlauncher.utils.pack_reader import PackReader, is_legacy_map, read_pack_type


class DiscoveredArchive(NamedTuple):
    """An archive found in one of the roots that qualifies as a mod."""

    path: Path
    pack_type: PackType
    root: RootKind


def steam_id_from_content_path(path: Path, content_path: Path) -> str | None:
    """
    Workshop id of an archive in the content folder.

    The content folder nests items by their numeric id, so it's the first folder
    after the content root. Archives directly in the root have none.
    """
    try:
        parts = path.relative_to(content_path).parts
    except ValueError:
        return None

    if len(parts) > 1:
        return parts[0]
    return None


def filter_candidates(paths: Iterable[Path], vanilla_packs: set[Path]) -> list[Path]:
    """Canonicalize the paths, dropping vanilla packs, reserved packs and broken paths."""
    candidates = []
    for path in paths:
        try:
            canon_path = path.resolve(strict=True)
        except OSError as e:
            logger.debug(f"Skipping {path}, cannot be resolved: {e}")
            continue

        if canon_path in vanilla_packs or canon_path.name in RESERVED_PACK_NAMES:
            continue

        candidates.append(canon_path)
    return candidates


def _classify(path: Path, root: RootKind, reader: PackReader) -> DiscoveredArchive | None:
    try:
        pack_type = reader(path)
    except PackParseError as e:
        # Legacy maps are not packs, but Shogun 2 can still load them once converted.
        if (
            root == RootKind.CONTENT
            and path.suffix == LEGACY_MAP_EXTENSION
            and is_legacy_map(path)
        ):
            return DiscoveredArchive(path, PackType.MOVIE, root)

        logger.debug(f"Skipping {path}: {e}")
        return None

    if pack_type not in (PackType.MOD, PackType.MOVIE):
        return None

    return DiscoveredArchive(path, pack_type, root)


def discover_archives(
    paths: list[Path],
    root: RootKind,
    reader: PackReader = read_pack_type,
    max_workers: int = 4,
) -> list[DiscoveredArchive]:
    """
    Classify every candidate of a root in parallel.

    The result keeps the order of `paths`, so merging it is deterministic.
    Archives that fail to parse, or are not Mod/Movie packs, are dropped.
    """
    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = executor.map(lambda path: _classify(path, root, reader), paths)
        return [result for result in results if result is not None]


def _preview_path(path: Path) -> Path:
    return path.with_suffix(PREVIEW_EXTENSION)


def _transfer_to_secondary(
    mods: dict[str, Mod],
    mod_ids: list[str],
    secondary_path: Path,
    source_root: Path,
    move: bool,
) -> list[str]:
    operation = "move" if move else "copy"
    failed: list[str] = []

    for mod_id in mod_ids:
        mod = mods.get(mod_id)
        if mod is None or not mod.paths:
            logger.warning(f"Cannot {operation} {mod_id} to secondary: not installed.")
            failed.append(mod_id)
            continue

        if len(mod.paths) > 2:
            logger.warning(
                f"Cannot {operation} {mod_id} to secondary: it's already in {len(mod.paths)} places."
            )
            failed.append(mod_id)
            continue

        source = Path(mod.paths[0])
        if not source.is_relative_to(source_root):
            logger.warning(
                f"Cannot {operation} {mod_id} to secondary: {source} is not in {source_root}."
            )
            failed.append(mod_id)
            continue

        destination = secondary_path / source.name
        try:
            if move:
                shutil.move(source, destination)
            else:
                shutil.copy2(source, destination)
        except OSError as e:
            logger.error(f"Failed to {operation} {source} to {destination}: {e}")
            failed.append(mod_id)
            continue

        preview = _preview_path(source)
        if preview.is_file():
            try:
                if move:
                    shutil.move(preview, _preview_path(destination))
                else:
                    shutil.copy2(preview, _preview_path(destination))
            except OSError as e:
                logger.warning(f"Failed to {operation} preview {preview}: {e}")

        logger.info(f"{operation.capitalize()} {source} to {destination}")

    return failed


def copy_to_secondary(
    mods: dict[str, Mod], mod_ids: list[str], secondary_path: Path, content_path: Path
) -> list[str]:
    """
    Copy workshop mods to the secondary folder.

    Only mods whose highest priority path is in the content folder can be copied.

    :return: Ids of the mods that could not be copied.
    """
    return _transfer_to_secondary(
        mods, mod_ids, secondary_path, content_path, move=False
    )


def move_to_secondary(
    mods: dict[str, Mod], mod_ids: list[str], secondary_path: Path, data_path: Path
) -> list[str]:
    """
    Move mods from /data to the secondary folder.

    :return: Ids of the mods that could not be moved.
    """
    return _transfer_to_secondary(mods, mod_ids, secondary_path, data_path, move=True)


def write_json_atomic(path: Path, value: Any) -> None:
    """
    Write `value` as pretty printed JSON, replacing `path` only once the write succeeded.

    Raises CatalogWriteError if the file cannot be written.
    """
    data = msgspec.json.format(msgspec.json.encode(value), indent=4)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "wb") as file:
                file.write(data)
            os.replace(temp_name, path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error(f"Unable to write {path}: {e}")
        raise CatalogWriteError(f"Unable to write {path}: {e}") from e
