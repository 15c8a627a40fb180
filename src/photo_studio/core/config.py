"""Configuration management for the photo studio backend."""

import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import toml
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database configuration settings."""

    type: Literal["sqlite", "postgresql"] = Field(default="sqlite", description="Database backend")
    path: str = Field(default="photo_studio.db", description="SQLite database file")
    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, gt=0, description="PostgreSQL port")
    database: str = Field(default="photo_studio", description="PostgreSQL database name")
    username: Optional[str] = Field(default=None, description="PostgreSQL user")
    password: Optional[str] = Field(default=None, description="PostgreSQL password")
    echo: bool = Field(default=False, description="Enable SQL query logging")


class CDNConfig(BaseModel):
    """Image CDN (Cloudinary) credentials and defaults."""

    cloud_name: Optional[str] = Field(default=None, description="Cloudinary cloud name")
    api_key: Optional[str] = Field(default=None, description="Cloudinary API key")
    api_secret: Optional[str] = Field(default=None, description="Cloudinary API secret")
    base_folder: str = Field(default="studio_portfolio", description="Root folder for uploads")
    api_url: str = Field(default="https://api.cloudinary.com/v1_1", description="Upload API base URL")
    delivery_url: str = Field(default="https://res.cloudinary.com", description="Delivery base URL")
    upload_timeout: int = Field(default=120, gt=0, description="Upload timeout in seconds")

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class InstagramConfig(BaseModel):
    """Instagram Graph API settings."""

    graph_url: str = Field(default="https://graph.instagram.com", description="Graph API base URL")
    access_token: Optional[str] = Field(default=None, description="Long-lived access token")
    user_id: Optional[str] = Field(default=None, description="Instagram user ID")
    timeout: int = Field(default=30, gt=0, description="Request timeout in seconds")
    posts_limit: int = Field(default=30, gt=0, description="Posts fetched per sync")
    import_folder: str = Field(default="instagram-imports", description="CDN folder for imports")


class AuthConfig(BaseModel):
    """Authentication settings for admins and clients."""

    secret_key: str = Field(default="change-me", description="JWT signing secret")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    admin_token_minutes: int = Field(default=60 * 12, ge=0, description="Admin token lifetime")
    client_token_days: int = Field(default=7, ge=0, description="Client token lifetime")
    client_cookie_name: str = Field(default="client-token", description="Client session cookie")
    secure_cookies: bool = Field(default=False, description="Mark cookies as secure")


class StudioConfig(BaseModel):
    """Studio identity and public contact defaults."""

    name: str = Field(default="Photo Studio", description="Studio display name")
    currency: str = Field(default="TND", description="Invoice currency")
    email: str = Field(default="contact@example.com", description="Contact e-mail")
    phone: str = Field(default="", description="Contact phone")
    whatsapp_number: str = Field(default="", description="WhatsApp number")
    location: str = Field(default="", description="Studio location")
    instagram_url: Optional[str] = Field(default=None, description="Instagram profile URL")
    facebook_url: Optional[str] = Field(default=None, description="Facebook page URL")
    youtube_url: Optional[str] = Field(default=None, description="YouTube channel URL")
    invoice_terms: str = Field(
        default="Payment due within 30 days of issue.",
        description="Default invoice terms"
    )


class WebConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, gt=0, description="Bind port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )
    downloads_dir: Optional[Path] = Field(default=None, description="Directory served under /downloads")
    max_upload_size: int = Field(default=25 * 1024 * 1024, gt=0, description="Max upload size in bytes")


class Config(BaseSettings):
    """Main configuration class."""

    model_config = SettingsConfigDict(
        env_prefix="PHOTO_STUDIO_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Application settings
    app_name: str = Field(default="Photo Studio", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Data directories
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share" / "photo-studio",
        description="Application data directory"
    )
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".config" / "photo-studio",
        description="Configuration directory"
    )
    log_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local" / "share" / "photo-studio" / "logs",
        description="Log directory"
    )

    # Configuration sections
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cdn: CDNConfig = Field(default_factory=CDNConfig)
    instagram: InstagramConfig = Field(default_factory=InstagramConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    studio: StudioConfig = Field(default_factory=StudioConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    def __init__(self, config_file: Optional[Path] = None, **kwargs):
        """Initialize configuration with optional config file."""
        if config_file and config_file.exists():
            file_config = self._load_config_file(config_file)
            file_config.update(kwargs)
            kwargs = file_config

        super().__init__(**kwargs)

        self._ensure_directories()

    @staticmethod
    def _load_config_file(config_file: Path) -> Dict[str, Any]:
        """Load configuration from file."""
        if config_file.suffix.lower() in ['.yaml', '.yml']:
            with open(config_file, 'r') as f:
                return yaml.safe_load(f) or {}
        elif config_file.suffix.lower() == '.toml':
            return toml.load(config_file)
        else:
            raise ValueError(f"Unsupported config file format: {config_file.suffix}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.config_dir, self.log_dir]:
            directory.mkdir(parents=True, exist_ok=True)

    def save_config(self, config_file: Optional[Path] = None) -> Path:
        """Save current configuration to file."""
        if config_file is None:
            config_file = self.config_dir / "config.yaml"

        config_data = self.model_dump(
            mode="json",
            exclude={'data_dir', 'config_dir', 'log_dir'},
        )

        with open(config_file, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)

        return config_file

    @classmethod
    def load_from_file(cls, config_file: Path) -> "Config":
        """Load configuration from file."""
        return cls(config_file=config_file)

    @property
    def database_path(self) -> Path:
        """SQLite file path, resolved against the data directory."""
        db_file = self.database.path
        if not os.path.isabs(db_file):
            return self.data_dir / db_file
        return Path(db_file)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        default_config_file = Path.home() / ".config" / "photo-studio" / "config.yaml"
        if default_config_file.exists():
            _config = Config.load_from_file(default_config_file)
        else:
            _config = Config()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
