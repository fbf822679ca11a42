"""Data models for CLI operations."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Sync completed
    - GENERAL_ERROR (1): Config issues, conversion or structural failures
    - AUTH_ERROR (3): Yuque or Confluence rejected the credentials
    - NETWORK_ERROR (4): API unreachable or returned an error
    - OWNERSHIP_VIOLATION (5): A placeholder page belongs to another space

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    OWNERSHIP_VIOLATION = 5


@dataclass
class YuqueConfig:
    """Source side settings.

    Attributes:
        domain: Yuque base URL (e.g. https://www.yuque.com)
        user_id: Yuque user (or group) whose repos are synced
        sync_repos: Repo titles to sync; empty means all repos
        exclude_docs: Document titles left out together with their children
    """
    domain: str
    user_id: str
    sync_repos: List[str] = field(default_factory=list)
    exclude_docs: List[str] = field(default_factory=list)


@dataclass
class ConfluenceConfig:
    """Destination side settings.

    Attributes:
        space: Key of the Confluence space the repos are written into
    """
    space: str


@dataclass
class NotificationConfig:
    url: str = ""


@dataclass
class SyncConfig:
    """Complete sync configuration loaded from YAML.

    Credentials are not part of it; they come from the environment.

    Example:
        >>> config = SyncConfig(
        ...     yuque=YuqueConfig(domain="https://www.yuque.com", user_id="12345"),
        ...     confluence=ConfluenceConfig(space="DOCS"),
        ... )
    """
    yuque: YuqueConfig
    confluence: ConfluenceConfig
    notification: NotificationConfig = field(default_factory=NotificationConfig)
