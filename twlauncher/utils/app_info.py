from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from platformdirs import PlatformDirs

from twlauncher.utils.constants import APP_NAME


class AppInfo:
    """
    Singleton class that provides information about the application and its related directories.

    The base directories are determined using the `platformdirs` package, ensuring
    platform-specific conventions are adhered to. Every secondary folder is derived
    from the storage folder when requested, and created if missing.

    Examples:
        >>> print(AppInfo().app_name)
        >>> print(AppInfo().game_config_folder)
    """

    _instance: "None | AppInfo" = None

    def __new__(cls) -> "AppInfo":
        """
        Create a new instance or return the existing singleton instance of the `AppInfo` class.
        """
        if not cls._instance:
            cls._instance = super(AppInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        self._app_name = APP_NAME

        try:
            self._app_version = version("twlauncher")
        except PackageNotFoundError:
            self._app_version = "Unknown version"

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        self._app_storage_folder: Path = Path(platform_dirs.user_data_dir)
        self._user_log_folder: Path = Path(platform_dirs.user_log_dir)

        self._is_initialized: bool = True

    @staticmethod
    def _ensure(folder: Path) -> Path:
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def app_version(self) -> str:
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """
        Get the path to the folder where user-specific data for the application is stored.

        Returns:
            Path: The path to the user-specific data folder.
        """
        return self._ensure(self._app_storage_folder)

    @property
    def user_log_folder(self) -> Path:
        """
        Get the path to the folder where application logs are stored for the user.

        Returns:
            Path: The path to the user-specific log folder.
        """
        return self._ensure(self._user_log_folder)

    @property
    def game_config_folder(self) -> Path:
        """
        Get the path to the folder holding the per-game catalogs and load orders.
        """
        return self._ensure(self.app_storage_folder / "game_configs")

    @property
    def profiles_folder(self) -> Path:
        """
        Get the path to the folder holding the saved load order profiles.
        """
        return self._ensure(self.app_storage_folder / "profiles")

    @property
    def app_settings_file(self) -> Path:
        return self.app_storage_folder / "settings.json"

    @property
    def debug_file(self) -> Path:
        """
        Marker file. If it exists, debug logging is enabled on startup.
        """
        return self.app_storage_folder / "DEBUG"
