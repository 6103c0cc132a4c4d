"""Tests for configuration loading and validation"""

import pytest
from pydantic import ValidationError

from mirror_sync.exceptions import ConfigurationError
from mirror_sync.models.config import SyncConfig
from mirror_sync.storage.config_manager import ConfigManager


@pytest.fixture
def config_file(temp_dir):
    return temp_dir / "mirror-sync" / "config.ini"


def test_defaults():
    config = SyncConfig(manifest_source="https://catalog.example.com/files")

    assert config.destination_path == "files"
    assert config.interval_seconds == 300
    assert config.max_concurrent_downloads == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"manifest_source": "  "},
        {"destination_path": ""},
        {"interval_seconds": 0},
        {"max_concurrent_downloads": 0},
        {"max_concurrent_downloads": 33},
        {"download_timeout": 0},
    ],
)
def test_invalid_values_rejected(overrides):
    settings = {"manifest_source": "manifest.txt", **overrides}

    with pytest.raises(ValidationError):
        SyncConfig(**settings)


def test_save_and_load_round_trip(config_file):
    manager = ConfigManager(config_file)
    manager.save_new_config(
        {
            "manifest_source": "https://catalog.example.com/files",
            "destination_path": "/srv/mirror",
            "max_concurrent_downloads": 5,
        }
    )

    config = ConfigManager(config_file).load_config()

    assert config.manifest_source == "https://catalog.example.com/files"
    assert config.destination_path == "/srv/mirror"
    assert config.max_concurrent_downloads == 5
    assert config.config_path == str(config_file.parent)


def test_cli_options_override_file(config_file):
    ConfigManager(config_file).save_new_config({"manifest_source": "manifest.txt"})

    config = ConfigManager(config_file).load_config({"interval_seconds": 10})

    assert config.interval_seconds == 10


def test_missing_file_raises(config_file):
    with pytest.raises(ConfigurationError, match="mirror-sync init"):
        ConfigManager(config_file).load_config()


def test_invalid_file_value_raises(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        "[DEFAULT]\nmanifest_source = manifest.txt\nmax_concurrent_downloads = many\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_missing_keys_are_migrated(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[DEFAULT]\nmanifest_source = manifest.txt\n", encoding="utf-8")

    config = ConfigManager(config_file).load_config()

    assert config.interval_seconds == 300
    content = config_file.read_text(encoding="utf-8")
    assert "interval_seconds = 300" in content
    assert "max_concurrent_downloads = 3" in content
