"""Test command-line args and settings."""

import argparse
import pathlib

import pytest
import rich  # noqa: F401

from schooldash.model import config


DATA_PATH = pathlib.Path(__file__).parent / "data"


def test_read_config() -> None:
    """Read the configuration from a TOML file."""
    # Arrange
    settings = config.Settings()
    args = argparse.Namespace(
        db_path=DATA_PATH / "school.db", config_path=DATA_PATH / "schooldash.toml"
    )
    # Act
    settings.update_from_args(args)
    # Assert
    assert settings.db_path == DATA_PATH / "school.db"
    assert settings.config_path == DATA_PATH / "schooldash.toml"
    assert settings.min_password_length == 8
    assert settings.default_password == "changeme1"
    assert settings.schedule_days == (1, 2, 3, 4, 5)
    assert settings.log_level == "DEBUG"
    assert settings.session_path is None
    assert settings.export_folder == pathlib.Path.cwd() / "exported-reports"
    assert not hasattr(settings, "unknown_setting")


def test_defaults_without_config_file(tmp_path: pathlib.Path) -> None:
    """A missing config file leaves the built-in defaults in place."""
    # Arrange
    settings = config.Settings()
    args = argparse.Namespace(
        db_path=tmp_path / "school.db", config_path=tmp_path / "missing.toml"
    )
    # Act
    settings.update_from_args(args)
    # Assert
    assert settings.config_path is None
    assert settings.min_password_length == 6
    assert settings.session_file == tmp_path / config.SESSION_FILE_NAME
    assert settings.export_folder == pathlib.Path.cwd()


def test_session_path_setting() -> None:
    """An explicit session path takes priority over the database folder."""
    settings = config.Settings(
        db_path=pathlib.Path("/srv/school.db"),
        session_path=pathlib.Path("/tmp/session.json"),
    )
    assert settings.session_file == pathlib.Path("/tmp/session.json")


def test_create_new_config_file(tmp_path: pathlib.Path) -> None:
    """The new file is a copy of the example configuration."""
    # Arrange
    settings = config.Settings()
    config_path = tmp_path / "schooldash.toml"
    # Act
    settings.create_new_config_file(config_path)
    # Assert
    assert "min_password_length = 6" in config_path.read_text()
    with pytest.raises(config.ConfigError) as exc_info:
        settings.create_new_config_file(config_path)
    assert exc_info.value.error_type == config.ConfigError.ErrorType.NOT_A_FILE


def test_config_folder_must_exist(tmp_path: pathlib.Path) -> None:
    """Config files are not written to missing folders."""
    settings = config.Settings()
    with pytest.raises(config.ConfigError) as exc_info:
        settings.create_new_config_file(tmp_path / "missing" / "schooldash.toml")
    assert exc_info.value.error_type == config.ConfigError.ErrorType.PATH_DOES_NOT_EXIST
