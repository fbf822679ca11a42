"""Sync command orchestration for CLI.

This module provides the SyncCommand class that wires the Yuque and
Confluence clients, builds both document trees, runs the reconciler,
reports the outcome to the notification webhook and maps failures to
exit codes.
"""

import logging
from typing import Optional

from src.cli.config import ConfigLoader, resolve_config_path
from src.cli.errors import CLIError, ConfigError, ConfigFilesystemError
from src.cli.models import ExitCode, SyncConfig
from src.cli.output import OutputHandler
from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.auth import Authenticator
from src.confluence_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    SyncError,
)
from src.content_converter.html_converter import converter_factory
from src.content_converter.image_fetcher import ImageFetcher
from src.notification.webhook import WebhookNotifier
from src.reconciler.errors import OwnershipViolationError
from src.reconciler.hierarchy_builder import DestinationHierarchyBuilder, SourceHierarchyBuilder
from src.reconciler.models import SyncSummary
from src.reconciler.tree_reconciler import TreeReconciler
from src.yuque_client.api_wrapper import YuqueAPI
from src.yuque_client.auth import YuqueAuthenticator
from src.yuque_client.errors import (
    YuqueAPIError,
    YuqueCredentialsError,
    YuqueNotFoundError,
    YuqueUnreachableError,
)

logger = logging.getLogger(__name__)


class SyncCommand:
    """Orchestrates one complete sync run.

    The sync workflow:
        1. Load configuration
        2. Build the Yuque tree (filtered by sync_repos and exclude_docs)
        3. Build the Confluence tree from the space homepage
        4. Reconcile the trees
        5. Notify the webhook once with the outcome
        6. Return the matching exit code

    Collaborators can be injected for testing; anything left as None is
    created from the configuration and environment.

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(output_handler=output)
        >>> sys.exit(sync_cmd.run())
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        output_handler: Optional[OutputHandler] = None,
        confluence_api: Optional[APIWrapper] = None,
        yuque_api: Optional[YuqueAPI] = None,
        notifier: Optional[WebhookNotifier] = None,
        image_fetcher: Optional[ImageFetcher] = None,
    ):
        self.config_path = resolve_config_path(config_path)
        self.output_handler = output_handler or OutputHandler()
        self.confluence_api = confluence_api
        self.yuque_api = yuque_api
        self.notifier = notifier
        self.image_fetcher = image_fetcher

    def run(self) -> ExitCode:
        """Execute the sync and translate the outcome to an exit code.

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            logger.info(f"Loading configuration from {self.config_path}")
            self.output_handler.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load(self.config_path)
        except ConfigFilesystemError as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            self.output_handler.info(
                "Create yuque-sync.yaml or point --config / YUQUE_SYNC_CONFIG at your config file"
            )
            return ExitCode.GENERAL_ERROR
        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        if self.notifier is None:
            self.notifier = WebhookNotifier(config.notification.url)

        error: Optional[BaseException] = None
        summary: Optional[SyncSummary] = None
        try:
            summary = self._synchronize(config)
        except SyncError as e:
            error = e
        except Exception as e:
            logger.exception("Unexpected error during sync")
            error = e

        self.notifier.notify(error)

        if error is not None:
            return self._report_error(error)

        self.output_handler.print_summary(summary)
        return ExitCode.SUCCESS

    def _synchronize(self, config: SyncConfig) -> SyncSummary:
        space_key = config.confluence.space

        if self.confluence_api is None:
            self.confluence_api = APIWrapper(Authenticator(), space_key)
        if self.yuque_api is None:
            self.yuque_api = YuqueAPI(
                YuqueAuthenticator(), config.yuque.domain, config.yuque.user_id
            )

        with self.output_handler.spinner("Reading Yuque repositories..."):
            source_space = SourceHierarchyBuilder(self.yuque_api).build(
                config.yuque.sync_repos, config.yuque.exclude_docs
            )
        self.output_handler.info(f"Yuque: {len(source_space.repos)} repo(s) to sync")
        found = {repo.title for repo in source_space.repos}
        for title in config.yuque.sync_repos:
            if title not in found:
                self.output_handler.warning(
                    f"Repo '{title}' from sync_repos was not found in Yuque"
                )

        with self.output_handler.spinner(f"Reading Confluence space {space_key}..."):
            destination_space = DestinationHierarchyBuilder(self.confluence_api).build()
        self.output_handler.debug(
            f"Confluence: {len(destination_space.repos)} repo page(s) under the "
            f"{space_key} homepage"
        )

        factory = converter_factory(self.yuque_api, self.confluence_api, self.image_fetcher)
        reconciler = TreeReconciler(self.confluence_api, factory, space_key)
        return reconciler.synchronize(source_space, destination_space)

    def _report_error(self, error: BaseException) -> ExitCode:
        if isinstance(error, (InvalidCredentialsError, YuqueCredentialsError)):
            logger.error(f"Authentication failed: {error}")
            self.output_handler.error(f"Authentication failed: {error}")
            self.output_handler.info(
                "Check YUQUE_TOKEN, CONFLUENCE_USER and CONFLUENCE_API_TOKEN environment variables"
            )
            return ExitCode.AUTH_ERROR

        if isinstance(error, (APIUnreachableError, APIAccessError,
                              YuqueUnreachableError, YuqueAPIError, YuqueNotFoundError)):
            logger.error(f"API error: {error}")
            self.output_handler.error(f"API error: {error}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        if isinstance(error, OwnershipViolationError):
            logger.error(f"Ownership check failed: {error}")
            self.output_handler.error(f"Ownership check failed: {error}")
            self.output_handler.info("Check confluence.space in the configuration")
            return ExitCode.OWNERSHIP_VIOLATION

        if isinstance(error, CLIError):
            logger.error(f"CLI error: {error}")
            self.output_handler.error(f"Error: {error}")
            return ExitCode.GENERAL_ERROR

        if isinstance(error, SyncError):
            logger.error(f"Sync failed: {error}")
            self.output_handler.error(f"Sync failed: {error}")
            return ExitCode.GENERAL_ERROR

        self.output_handler.error(f"Unexpected error: {error}")
        return ExitCode.GENERAL_ERROR
