"""Configuration management for AlbumAudit."""

from albumaudit.config.loader import ConfigError, ConfigLoader
from albumaudit.config.schema import AlbumAuditConfig

__all__ = ["AlbumAuditConfig", "ConfigError", "ConfigLoader"]
