"""YAML configuration loading and validation.

Configuration file structure:
    yuque:
      domain: "https://www.yuque.com"
      user_id: "12345"
      sync_repos: ["Guide"]        # optional, empty means all repos
      exclude_docs: ["Scratch"]    # optional
    confluence:
      space: "DOCS"
    notification:                  # optional
      url: "https://hooks.example.com/abc"

Secrets (YUQUE_TOKEN, CONFLUENCE_API_TOKEN, ...) are never read from this
file; they come from the environment or a .env file.
"""

import os
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, ConfigFilesystemError
from .models import ConfluenceConfig, NotificationConfig, SyncConfig, YuqueConfig

CONFIG_ENV_VAR = "YUQUE_SYNC_CONFIG"
DEFAULT_CONFIG_PATH = "yuque-sync.yaml"


def resolve_config_path(cli_path: Optional[str] = None) -> str:
    """Pick the config path: explicit option, then environment, then default."""
    if cli_path:
        return cli_path
    return os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


class ConfigLoader:
    """Handles configuration file loading and validation."""

    # Required fields per section
    REQUIRED_YUQUE_FIELDS = ('domain', 'user_id')
    REQUIRED_CONFLUENCE_FIELDS = ('space',)

    @classmethod
    def load(cls, config_path: str) -> SyncConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            SyncConfig object with parsed configuration

        Raises:
            ConfigFilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigFilesystemError(config_path, 'read', 'Configuration file not found')
        except PermissionError:
            raise ConfigFilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise ConfigFilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> SyncConfig:
        yuque_raw = cls._section(config_dict, 'yuque', required=True)
        confluence_raw = cls._section(config_dict, 'confluence', required=True)
        notification_raw = cls._section(config_dict, 'notification', required=False)

        for name in cls.REQUIRED_YUQUE_FIELDS:
            cls._require_string(yuque_raw, 'yuque', name)
        for name in cls.REQUIRED_CONFLUENCE_FIELDS:
            cls._require_string(confluence_raw, 'confluence', name)

        domain = str(yuque_raw['domain']).strip()
        if not domain.startswith(('http://', 'https://')):
            raise ConfigError("must be an http(s) URL", config_field='yuque.domain')

        notification_url = notification_raw.get('url') or ""
        if not isinstance(notification_url, str):
            raise ConfigError("must be a string", config_field='notification.url')

        return SyncConfig(
            yuque=YuqueConfig(
                domain=domain,
                user_id=str(yuque_raw['user_id']).strip(),
                sync_repos=cls._string_list(yuque_raw, 'yuque', 'sync_repos'),
                exclude_docs=cls._string_list(yuque_raw, 'yuque', 'exclude_docs'),
            ),
            confluence=ConfluenceConfig(space=str(confluence_raw['space']).strip()),
            notification=NotificationConfig(url=notification_url.strip()),
        )

    @staticmethod
    def _section(config_dict: Dict[str, Any], name: str, required: bool) -> Dict[str, Any]:
        section = config_dict.get(name)
        if section is None:
            if required:
                raise ConfigError("Missing required section", config_field=name)
            return {}
        if not isinstance(section, dict):
            raise ConfigError(
                f"must be a dictionary, got {type(section).__name__}", config_field=name
            )
        return section

    @staticmethod
    def _require_string(section: Dict[str, Any], section_name: str, name: str) -> None:
        field_name = f"{section_name}.{name}"
        value = section.get(name)
        if value is None:
            raise ConfigError("Missing required field", config_field=field_name)
        # user ids are often written unquoted and parse as int
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            raise ConfigError(
                f"must be a string, got {type(value).__name__}", config_field=field_name
            )
        if not str(value).strip():
            raise ConfigError("must not be empty", config_field=field_name)

    @staticmethod
    def _string_list(section: Dict[str, Any], section_name: str, name: str) -> List[str]:
        field_name = f"{section_name}.{name}"
        value = section.get(name)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ConfigError(
                f"must be a list, got {type(value).__name__}", config_field=field_name
            )
        for item in value:
            if not isinstance(item, str):
                raise ConfigError(
                    f"must contain only strings, got {type(item).__name__}",
                    config_field=field_name,
                )
        return list(value)
