"""Manage configuration settings for the SchoolDash application."""

import argparse
import dataclasses
import enum
import pathlib
import shutil
import tomllib
from typing import Optional


DB_FILE_NAME = "schooldash.db"
CONFIG_FILE_NAME = "schooldash.toml"
SESSION_FILE_NAME = ".schooldash-session.json"


class ConfigError(Exception):
    """Errors when setting or accessing settings."""

    class ErrorType(enum.Enum):
        NOT_A_FILE = 1
        PATH_DOES_NOT_EXIST = 2

    error_type: ErrorType

    def __init__(self, message: str, error_type: ErrorType) -> None:
        """Set error type."""
        super().__init__(message)
        self.error_type = error_type


@dataclasses.dataclass
class Settings:
    """Configuration data for the schooldash application.

    Passwords are stored in plain text in the database. The default_password
    is assigned to accounts created from the admin screens when the password
    field is left blank.
    """

    db_path: Optional[pathlib.Path] = None
    config_path: Optional[pathlib.Path] = None
    session_path: Optional[pathlib.Path] = None
    export_dir: Optional[pathlib.Path] = None
    min_password_length: int = 6
    default_password: str = "password123"
    schedule_days: tuple[int, ...] = (0, 1, 2, 3, 4)
    log_level: str = "INFO"

    @property
    def session_file(self) -> pathlib.Path:
        """Location of the persisted session token."""
        if self.session_path is not None:
            return self.session_path
        if self.db_path is not None:
            return self.db_path.parent / SESSION_FILE_NAME
        return pathlib.Path.cwd() / SESSION_FILE_NAME

    @property
    def export_folder(self) -> pathlib.Path:
        """Folder that receives CSV and Excel reports."""
        return self.export_dir if self.export_dir is not None else pathlib.Path.cwd()

    def update_from_args(self, args: argparse.Namespace) -> None:
        """Read settings."""
        db_path = getattr(args, "db_path", None)
        self.db_path = self._convert_path_to_absolute(
            db_path if db_path is not None else DB_FILE_NAME
        )
        self.config_path = self._get_full_path(
            getattr(args, "config_path", None), CONFIG_FILE_NAME
        )
        if self.config_path is not None:
            self._read_config_file()

    @staticmethod
    def _convert_path_to_absolute(path: pathlib.Path | str) -> pathlib.Path:
        """Convert relative paths to absolute paths."""
        if isinstance(path, str):
            path = pathlib.Path(path)
        return path if path.is_absolute() else pathlib.Path.cwd() / path

    @staticmethod
    def _get_full_path(
        path: Optional[pathlib.Path], default_file_name: str
    ) -> Optional[pathlib.Path]:
        """Convert path arg to full filesystem path.

        If path is None, looks for file in current working directory. Otherwise
        converts relative paths to absolute paths. Returns None if path does not
        point to an existing file.
        """
        cwd = pathlib.Path.cwd()
        if path is None:
            full_path = cwd / default_file_name
        elif path.is_absolute():
            full_path = path
        else:
            full_path = cwd / path
        if not full_path.is_file():
            return None
        return full_path

    def _read_config_file(self) -> None:
        """Read TOML configuration file."""
        if self.config_path is None:
            return
        app_settings = dataclasses.asdict(self)
        with open(self.config_path, "rb") as toml_file:
            file_settings = tomllib.load(toml_file)
        for setting_name, value in file_settings.items():
            if setting_name not in app_settings:
                continue
            if isinstance(value, str) and value.lower() in ["", "none", "null"]:
                value = None
            if setting_name in ["session_path", "export_dir"] and value is not None:
                value = self._convert_path_to_absolute(value)
            elif setting_name == "schedule_days" and value is not None:
                value = tuple(int(day) for day in value)
            setattr(self, setting_name, value)

    def create_new_config_file(self, config_path: pathlib.Path) -> None:
        """Create a new configuration file with default settings."""
        if config_path.exists():
            raise ConfigError(
                f"Configuration file {config_path} already exists.",
                ConfigError.ErrorType.NOT_A_FILE,
            )
        if not config_path.parent.exists():
            raise ConfigError(
                f"Folder {config_path.parent} does not exist.",
                ConfigError.ErrorType.PATH_DOES_NOT_EXIST,
            )
        shutil.copy(
            pathlib.Path(__file__).parent.parent / "example-config.toml", config_path
        )


# Store settings in a module-level variable, which will be available from any
# other module that imports schooldash.model.config. There is only a single
# instance of the Settings class.
settings = Settings()
