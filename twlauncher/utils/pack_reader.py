"""
pack_reader.py
Classify Total War pack files by reading their PFH header.

Only the first 8 bytes of a pack are needed for that:
    4B  signature   ("PFH0", "PFH2", "PFH3", "PFH4", "PFH5" or "PFH6")
    4B  type        (uint32, little endian). The lower nibble is the pack type
                    (0 Boot, 1 Release, 2 Patch, 3 Mod, 4 Movie); upper bits are flags.

Legacy map files (.bin) are not packs at all, but zlib streams.
"""

import struct
import zlib
from pathlib import Path
from typing import Callable

from twlauncher.models.mod import PackType
from twlauncher.utils.constants import PFH_HEADER_SIZE, PFH_SIGNATURES, PFH_TYPE_MASK
from twlauncher.utils.exception import PackParseError

LEGACY_MAP_CHUNK_SIZE = 64 * 1024

# Signature of the archive reader collaborator used by the rescan.
PackReader = Callable[[Path], PackType]


def read_pack_type(path: Path) -> PackType:
    """Return the type of the pack at `path`. Raises PackParseError if it's not a pack."""
    try:
        with open(path, "rb") as file:
            header = file.read(PFH_HEADER_SIZE)
    except OSError as e:
        raise PackParseError(f"Unable to read {path}: {e}") from e

    if len(header) < PFH_HEADER_SIZE:
        raise PackParseError(f"File too small to be a pack: {path}")

    signature, raw_type = struct.unpack("<4sI", header)
    if signature not in PFH_SIGNATURES:
        raise PackParseError(f"Unknown pack signature {signature!r}: {path}")

    try:
        return PackType.from_header_value(raw_type & PFH_TYPE_MASK)
    except ValueError as e:
        raise PackParseError(f"{e}: {path}") from e


def is_legacy_map(path: Path) -> bool:
    """
    Check if a .bin file is a compressed legacy map.

    If it decompresses correctly, we assume it's a map. Shogun 2's 64-bit update broke
    loading maps from /maps, so these are handled as mods instead.
    """
    decompressor = zlib.decompressobj()
    try:
        with open(path, "rb") as file:
            while not decompressor.eof:
                data = file.read(LEGACY_MAP_CHUNK_SIZE)
                if not data:
                    # Whatever zlib still holds is bounded by its window.
                    decompressor.flush()
                    break

                # Output is discarded chunk by chunk, so huge maps stay cheap.
                while data and not decompressor.eof:
                    decompressor.decompress(data, LEGACY_MAP_CHUNK_SIZE)
                    data = decompressor.unconsumed_tail
    except (OSError, zlib.error):
        return False

    return decompressor.eof
