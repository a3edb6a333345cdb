"""
Configuration loader for the ticket panel.
Loads configuration from YAML files and environment variables.
"""

from typing import Dict, Any, Optional
from pathlib import Path
import yaml
import os
from pydantic import BaseModel, Field
import logging

logger = logging.getLogger(__name__)

# Resolved against the working directory
DEFAULT_CONFIG_DIR = "config"


class SupabaseConfig(BaseModel):
    """Connection settings for the hosted store."""

    url: str = ""
    key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    class Config:
        extra = "allow"


class CacheConfig(BaseModel):
    """Query cache settings."""

    # Seconds a fetched result is reused before the next access refetches
    stale_time: float = 30.0

    class Config:
        extra = "allow"


class TicketPanelConfig(BaseModel):
    """Main ticket panel configuration."""

    # Environment
    environment: str = "development"
    debug: bool = False

    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    # Toasts kept for the page to drain
    notification_limit: int = 50

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8001

    # Logging
    log_level: str = "INFO"

    class Config:
        extra = "allow"


class ConfigLoader:
    """Load and manage ticket panel configuration."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files. Defaults to
                TICKET_PANEL_CONFIG_DIR, then ./config
        """
        self.config_dir = Path(config_dir or os.getenv("TICKET_PANEL_CONFIG_DIR", DEFAULT_CONFIG_DIR))
        self.config: Optional[TicketPanelConfig] = None
        self.load()

    def load(self) -> TicketPanelConfig:
        """Load configuration from YAML and environment variables."""

        env = os.getenv("TICKET_PANEL_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        # Defaults first, then the environment file, then env vars
        default_file = self.config_dir / "default.yaml"
        if not default_file.exists():
            logger.warning(f"⚠️ No {default_file} found, using built-in defaults")
        merged = self._load_yaml(default_file)

        if config_file.exists():
            _deep_update(merged, self._load_yaml(config_file))
        else:
            logger.debug(f"Config file not found: {config_file}, using defaults")

        _deep_update(merged, self._load_from_env())
        merged.setdefault("environment", env)

        self.config = TicketPanelConfig(**merged)

        logger.info(f"Configuration loaded (environment: {env})")

        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
                return data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        supabase = {}
        if supabase_url := os.getenv("SUPABASE_URL"):
            supabase["url"] = supabase_url
        if supabase_key := os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"):
            supabase["key"] = supabase_key
        if supabase:
            config["supabase"] = supabase

        if stale_time := os.getenv("TICKET_PANEL_STALE_TIME"):
            config["cache"] = {"stale_time": float(stale_time)}

        if log_level := os.getenv("TICKET_PANEL_LOG_LEVEL"):
            config["log_level"] = log_level.upper()

        if api_port := os.getenv("TICKET_PANEL_API_PORT"):
            config["api_port"] = int(api_port)

        return config

    def get(self) -> TicketPanelConfig:
        """Get current configuration."""
        if not self.config:
            self.load()
        return self.config

    def reload(self):
        """Reload configuration (useful for development)."""
        logger.info("Reloading configuration...")
        self.load()


def _deep_update(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into base, recursing into nested sections."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


# Global config instance
_global_config_loader: Optional[ConfigLoader] = None


def get_config() -> TicketPanelConfig:
    """Get the global ticket panel configuration."""
    global _global_config_loader
    if _global_config_loader is None:
        _global_config_loader = ConfigLoader()
    return _global_config_loader.get()


def initialize_config(config_dir: Optional[str] = None) -> TicketPanelConfig:
    """Initialize the global configuration loader."""
    global _global_config_loader
    _global_config_loader = ConfigLoader(config_dir)
    return _global_config_loader.get()
