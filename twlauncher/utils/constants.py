from enum import Enum

APP_NAME = "TWLauncher"

# Category every installed mod falls back to. Always last in the category order.
DEFAULT_CATEGORY = "Unassigned"

GAME_CONFIG_FILE_NAME_START = "game_config_"
GAME_CONFIG_FILE_NAME_END = ".json"
LOAD_ORDER_FILE_NAME_START = "last_load_order_"
LOAD_ORDER_FILE_NAME_END = ".json"
PROFILE_FILE_NAME_START = "profile_"
PROFILE_FILE_NAME_END = ".json"

# Packs generated by the launcher itself at launch time. Never treated as mods.
RESERVED_PACK_NAME = "zzzzzzzzzzzzzzzzzzzzrun_you_fool_thron.pack"
RESERVED_PACK_NAME_ALTERNATIVE = "!!!!!!!!!!!!!!!!!!!!!run_you_fool_thron.pack"
RESERVED_PACK_NAMES = frozenset({RESERVED_PACK_NAME, RESERVED_PACK_NAME_ALTERNATIVE})

PACK_EXTENSION = ".pack"
LEGACY_MAP_EXTENSION = ".bin"
PREVIEW_EXTENSION = ".png"

VANILLA_MANIFEST_FILE_NAME = "manifest.txt"

PFH_SIGNATURES = (b"PFH0", b"PFH2", b"PFH3", b"PFH4", b"PFH5", b"PFH6")
PFH_HEADER_SIZE = 8
PFH_TYPE_MASK = 0x0F


class RootKind(str, Enum):
    """Filesystem roots a mod archive can be discovered in, lowest priority first."""

    CONTENT = "Content"
    SECONDARY = "Secondary"
    DATA = "Data"
