"""Tests for configuration system."""

import pytest
from pathlib import Path

from photo_studio.core.config import (
    AuthConfig,
    CDNConfig,
    Config,
    DatabaseConfig,
    InstagramConfig,
    StudioConfig,
    get_config,
    reset_config,
    set_config,
)


def _dirs(temp_dir: Path) -> dict:
    return {
        'data_dir': temp_dir / "data",
        'config_dir': temp_dir / "config",
        'log_dir': temp_dir / "logs",
    }


class TestConfig:
    """Test configuration system."""

    def test_default_config(self, temp_dir):
        """Test default configuration values."""
        config = Config(**_dirs(temp_dir))

        assert config.app_name == "Photo Studio"
        assert config.debug is False
        assert isinstance(config.database, DatabaseConfig)
        assert isinstance(config.cdn, CDNConfig)
        assert isinstance(config.instagram, InstagramConfig)
        assert isinstance(config.auth, AuthConfig)
        assert isinstance(config.studio, StudioConfig)

    def test_database_config_defaults(self):
        """Test database configuration defaults."""
        db_config = DatabaseConfig()

        assert db_config.type == "sqlite"
        assert db_config.echo is False
        assert db_config.path == "photo_studio.db"

    def test_cdn_config_requires_all_credentials(self):
        assert CDNConfig().is_configured is False
        assert CDNConfig(cloud_name="demo", api_key="key").is_configured is False
        assert CDNConfig(cloud_name="demo", api_key="key", api_secret="secret").is_configured is True

    def test_auth_config_defaults(self):
        auth = AuthConfig()

        assert auth.algorithm == "HS256"
        assert auth.client_token_days == 7
        assert auth.client_cookie_name == "client-token"

    def test_directories_created(self, temp_dir):
        """Test that data, config and log directories are created."""
        config = Config(**_dirs(temp_dir))

        assert config.data_dir.is_dir()
        assert config.config_dir.is_dir()
        assert config.log_dir.is_dir()

    def test_config_from_env(self, temp_dir, monkeypatch):
        """Test configuration from environment variables."""
        monkeypatch.setenv('PHOTO_STUDIO_DEBUG', 'true')
        monkeypatch.setenv('PHOTO_STUDIO_DATABASE__TYPE', 'postgresql')
        monkeypatch.setenv('PHOTO_STUDIO_DATABASE__PORT', '5433')
        monkeypatch.setenv('PHOTO_STUDIO_CDN__CLOUD_NAME', 'studio-cloud')
        monkeypatch.setenv('PHOTO_STUDIO_STUDIO__CURRENCY', 'EUR')

        config = Config(**_dirs(temp_dir))

        assert config.debug is True
        assert config.database.type == "postgresql"
        assert config.database.port == 5433
        assert config.cdn.cloud_name == "studio-cloud"
        assert config.studio.currency == "EUR"

    def test_relative_database_path_resolved_in_data_dir(self, temp_dir):
        config = Config(**_dirs(temp_dir), database=DatabaseConfig(path="studio.db"))
        assert config.database_path == temp_dir / "data" / "studio.db"

    def test_absolute_database_path_kept(self, temp_dir):
        db_file = temp_dir / "elsewhere" / "studio.db"
        config = Config(**_dirs(temp_dir), database=DatabaseConfig(path=str(db_file)))
        assert config.database_path == db_file

    def test_save_and_load_yaml(self, temp_dir):
        """Test saving configuration and loading it back."""
        config = Config(
            **_dirs(temp_dir),
            debug=True,
            studio=StudioConfig(name="Lumière Studio", currency="EUR"),
        )
        config_file = config.save_config(temp_dir / "config.yaml")

        assert config_file.exists()

        loaded = Config(config_file=config_file, **_dirs(temp_dir))
        assert loaded.debug is True
        assert loaded.studio.name == "Lumière Studio"
        assert loaded.studio.currency == "EUR"

    def test_load_toml(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text(
            '[studio]\nname = "Toml Studio"\n\n[web]\nport = 9000\n',
            encoding="utf-8",
        )

        config = Config(config_file=config_file, **_dirs(temp_dir))

        assert config.studio.name == "Toml Studio"
        assert config.web.port == 9000

    def test_unsupported_config_format(self, temp_dir):
        config_file = temp_dir / "config.ini"
        config_file.write_text("[studio]\n")

        with pytest.raises(ValueError, match="Unsupported config file format"):
            Config.load_from_file(config_file)

    def test_global_config(self, temp_dir):
        """Test global configuration management."""
        config = Config(**_dirs(temp_dir), app_name="Custom Studio")
        set_config(config)
        try:
            assert get_config() is config
            assert get_config().app_name == "Custom Studio"
        finally:
            reset_config()
