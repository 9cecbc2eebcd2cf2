"""Configuration loading and validation for AlbumAudit."""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from albumaudit.config.schema import (
    AlbumAuditConfig,
    AlbumsConfig,
    CacheConfig,
    ExportConfig,
    FixConfig,
    GeneralConfig,
    LoggingConfig,
    SeverityConfig,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""

    pass


def _normalize_extensions(values: Any) -> list[str]:
    """Lowercase extensions and make sure each starts with a dot."""
    result = []
    for value in values or []:
        ext = str(value).strip().lower()
        if ext and not ext.startswith("."):
            ext = f".{ext}"
        if ext:
            result.append(ext)
    return result


class ConfigLoader:
    """Loads configuration from YAML files."""

    DEFAULT_CONFIG_PATHS = [
        Path("albumaudit.yaml"),
        Path("albumaudit.yml"),
        Path(".albumaudit/config.yaml"),
        Path(".albumaudit/config.yml"),
    ]

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> AlbumAuditConfig:
        """
        Load configuration.

        Priority:
        1. Explicit config_path argument
        2. Default config paths (first found)
        3. Built-in defaults

        Args:
            config_path: Optional explicit path to config file

        Returns:
            AlbumAuditConfig object

        Raises:
            ConfigError: If config file cannot be read or parsed
        """
        config_dict: dict[str, Any] = {}

        if config_path:
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
            config_dict = cls._load_yaml(config_path)
        else:
            for default_path in cls.DEFAULT_CONFIG_PATHS:
                if default_path.exists():
                    logger.info(f"Loading config from {default_path}")
                    config_dict = cls._load_yaml(default_path)
                    break

        return cls._build_config(config_dict)

    @classmethod
    def _load_yaml(cls, path: Path) -> dict[str, Any]:
        """Load YAML file and return dict."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root in {path} must be a mapping")
        return data

    @classmethod
    def _build_config(cls, data: dict[str, Any]) -> AlbumAuditConfig:
        """Build AlbumAuditConfig from dictionary."""
        try:
            return AlbumAuditConfig(
                version=str(data.get("version", "1.0")),
                general=cls._build_general(data.get("general") or {}),
                albums=cls._build_albums(data.get("albums") or {}),
                severity=cls._build_severity(data.get("severity") or {}),
                cache=cls._build_cache(data.get("cache") or {}),
                fix=cls._build_fix(data.get("fix") or {}),
                export=cls._build_export(data.get("export") or {}),
                logging=cls._build_logging(data.get("logging") or {}),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}")

    @classmethod
    def _build_general(cls, data: dict[str, Any]) -> GeneralConfig:
        """Build GeneralConfig from dictionary."""
        config = GeneralConfig()
        if data.get("root"):
            config.root = str(data["root"])
        if "ignore_hidden_files" in data:
            config.ignore_hidden_files = bool(data["ignore_hidden_files"])
        if "background_analysis" in data:
            config.background_analysis = bool(data["background_analysis"])
        if "max_workers" in data:
            config.max_workers = int(data["max_workers"])
        return config

    @classmethod
    def _build_albums(cls, data: dict[str, Any]) -> AlbumsConfig:
        """Build AlbumsConfig from dictionary."""
        config = AlbumsConfig()
        if "image_extensions" in data:
            config.image_extensions = _normalize_extensions(data["image_extensions"])
        if "raw_extensions" in data:
            config.raw_extensions = _normalize_extensions(data["raw_extensions"])
        if "writable_extensions" in data:
            config.writable_extensions = _normalize_extensions(data["writable_extensions"])
        return config

    @classmethod
    def _build_severity(cls, data: dict[str, Any]) -> SeverityConfig:
        """Build SeverityConfig from dictionary."""
        config = SeverityConfig()
        if "warning_gap_days" in data:
            config.warning_gap_days = int(data["warning_gap_days"])
        if "error_gap_days" in data:
            config.error_gap_days = int(data["error_gap_days"])
        return config

    @classmethod
    def _build_cache(cls, data: dict[str, Any]) -> CacheConfig:
        """Build CacheConfig from dictionary."""
        config = CacheConfig()
        if "enabled" in data:
            config.enabled = bool(data["enabled"])
        if "ttl_seconds" in data:
            config.ttl_seconds = int(data["ttl_seconds"])
        return config

    @classmethod
    def _build_fix(cls, data: dict[str, Any]) -> FixConfig:
        """Build FixConfig from dictionary."""
        config = FixConfig()
        if "dry_run_default" in data:
            config.dry_run_default = bool(data["dry_run_default"])
        if "backup_suffix" in data:
            config.backup_suffix = str(data["backup_suffix"])
        if "confirm" in data:
            config.confirm = bool(data["confirm"])
        return config

    @classmethod
    def _build_export(cls, data: dict[str, Any]) -> ExportConfig:
        """Build ExportConfig from dictionary."""
        config = ExportConfig()
        if "include_photos" in data:
            config.include_photos = bool(data["include_photos"])
        if "include_statistics" in data:
            config.include_statistics = bool(data["include_statistics"])
        if "pretty_print" in data:
            config.pretty_print = bool(data["pretty_print"])
        return config

    @classmethod
    def _build_logging(cls, data: dict[str, Any]) -> LoggingConfig:
        """Build LoggingConfig from dictionary."""
        config = LoggingConfig()
        if "level" in data:
            config.level = data["level"]
        if "color_output" in data:
            config.color_output = bool(data["color_output"])
        if "log_to_file" in data:
            config.log_to_file = bool(data["log_to_file"])
        if "file_path" in data:
            config.file_path = data["file_path"]
        if "activity_entries" in data:
            config.activity_entries = int(data["activity_entries"])
        return config

    @classmethod
    def validate(cls, config: AlbumAuditConfig) -> list[str]:
        """
        Validate configuration and return list of errors.

        Args:
            config: Configuration to validate

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        # Severity thresholds
        if config.severity.warning_gap_days < 0:
            errors.append("warning_gap_days must be >= 0")
        if config.severity.error_gap_days < config.severity.warning_gap_days:
            errors.append("error_gap_days must be >= warning_gap_days")

        if config.cache.ttl_seconds < 0:
            errors.append("cache ttl_seconds must be >= 0")

        if config.general.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if not config.fix.backup_suffix or "/" in config.fix.backup_suffix:
            errors.append(f"Invalid backup_suffix: {config.fix.backup_suffix!r}")

        unknown_writable = config.writable_extensions - config.all_image_extensions
        if unknown_writable:
            errors.append(
                f"writable_extensions not listed as image extensions: {sorted(unknown_writable)}"
            )
        unsupported_writable = config.writable_extensions - {".jpg", ".jpeg"}
        if unsupported_writable:
            errors.append(
                f"Only JPEG can be rewritten; unsupported: {sorted(unsupported_writable)}"
            )

        valid_levels = ["debug", "info", "warning", "error", "critical"]
        if config.logging.level.lower() not in valid_levels:
            errors.append(f"Invalid logging level: {config.logging.level}")

        if config.logging.activity_entries < 1:
            errors.append("activity_entries must be at least 1")

        return errors
