"""Command-line interface for one-way Yuque to Confluence sync.

This package provides the `yuque-sync` CLI tool. It loads the YAML
configuration, runs the reconciler with progress output and maps failures
to exit codes.
"""

from .sync_command import SyncCommand
from .models import ExitCode, SyncConfig, YuqueConfig, ConfluenceConfig, NotificationConfig
from .errors import (
    CLIError,
    ConfigError,
    ConfigFilesystemError,
)

__all__ = [
    'SyncCommand',
    'ExitCode',
    'SyncConfig',
    'YuqueConfig',
    'ConfluenceConfig',
    'NotificationConfig',
    'CLIError',
    'ConfigError',
    'ConfigFilesystemError',
]
