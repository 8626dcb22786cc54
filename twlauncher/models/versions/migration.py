"""
Detection and upgrade of catalogs written by older versions.

Each known schema only knows how to become the next one, so upgrading a
document means walking the chain until the current schema is reached.
"""

from typing import Union

import msgspec
from loguru import logger

from twlauncher.models.game_config import GameConfig
from twlauncher.models.versions.game_config_versions import (
    GameConfigV0,
    GameConfigV1,
    GameConfigV2,
    GameConfigV3,
    GameConfigV4,
)
from twlauncher.utils.exception import CatalogReadError

KnownGameConfig = Union[
    GameConfig, GameConfigV4, GameConfigV3, GameConfigV2, GameConfigV1, GameConfigV0
]

# Newest first. The first one that decodes a document wins.
HISTORICAL_VERSIONS: tuple[type, ...] = (
    GameConfigV4,
    GameConfigV3,
    GameConfigV2,
    GameConfigV1,
    GameConfigV0,
)


def detect_version(data: bytes) -> KnownGameConfig:
    """
    Decode a catalog with the schema it was written with.

    The current schema is always tried first. Newer documents may also be readable by
    older schemas, and success with the current one means there's nothing to migrate.

    Raises CatalogReadError if no known schema can read the document.
    """
    try:
        return msgspec.json.decode(data, type=GameConfig)
    except msgspec.DecodeError as e:
        logger.debug(f"Catalog is not in the current format: {e}")

    for version in HISTORICAL_VERSIONS:
        try:
            config = msgspec.json.decode(data, type=version)
        except msgspec.DecodeError:
            continue

        logger.info(f"Catalog detected as {version.__name__}")
        return config

    logger.error("Catalog cannot be read with any known format.")
    raise CatalogReadError("Catalog cannot be read with any known format.")


def migrate_to_latest(config: KnownGameConfig) -> GameConfig:
    """Convert a catalog of any known version to the current schema, one version at a time."""
    while not isinstance(config, GameConfig):
        logger.debug(f"Converting catalog from {type(config).__name__}")
        config = config.to_next()
    return config
