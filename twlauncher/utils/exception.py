class LauncherError(Exception):
    """
    Base class for every error raised by the launcher core.
    """

    pass


class UnsupportedGameError(LauncherError):
    def __init__(self, game_key: str) -> None:
        super().__init__(f"What kind of game is {game_key}?")
        self.game_key = game_key


class GamePathError(LauncherError):
    """
    Raised when the base installation of a game cannot be resolved:
    missing install folder, missing /data folder, unreadable manifest...
    """

    pass


class SecondaryPathError(LauncherError):
    """
    Raised when the secondary mods folder is not usable for a game,
    either because the game doesn't support it or because it's not configured.
    """

    pass


class CatalogReadError(LauncherError):
    """
    Raised when a persisted catalog exists but cannot be read
    by the current schema nor by any of the known older ones.
    """

    pass


class CatalogWriteError(LauncherError):
    pass


class PackParseError(LauncherError):
    """
    Raised when trying to classify a file which is not a valid pack.
    Always handled per-file during a rescan.
    """

    pass


class ShareStringError(LauncherError):
    pass
