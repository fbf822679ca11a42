"""Pytest configuration and fixtures for integration tests.

Integration tests drive a complete sync run through SyncCommand against
the in-memory Yuque and Confluence services from tests.helpers.
"""

from unittest.mock import MagicMock, Mock

import pytest

from src.cli.models import ExitCode
from src.cli.sync_command import SyncCommand
from tests.fixtures.sample_html import PNG_PAYLOAD, RASTER_URL
from tests.helpers.fake_services import FakeConfluence, FakeImageFetcher, FakeYuque

CONFIG_TEMPLATE = """
yuque:
  domain: "https://www.yuque.com"
  user_id: "u1"
  exclude_docs: ["Scratch"]
confluence:
  space: "DOCS"
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "yuque-sync.yaml"
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    return str(path)


@pytest.fixture
def confluence():
    return FakeConfluence("DOCS")


@pytest.fixture
def yuque():
    return FakeYuque("u1")


@pytest.fixture
def image_fetcher():
    return FakeImageFetcher({RASTER_URL: (PNG_PAYLOAD, "image/png")})


@pytest.fixture
def run_sync(config_path, confluence, yuque, image_fetcher):
    """Return a callable that performs one full run and returns (exit_code, notifier)."""
    def _run(expected=ExitCode.SUCCESS):
        notifier = Mock()
        exit_code = SyncCommand(
            config_path=config_path,
            output_handler=MagicMock(),
            confluence_api=confluence,
            yuque_api=yuque,
            notifier=notifier,
            image_fetcher=image_fetcher,
        ).run()
        assert exit_code == expected
        notifier.notify.assert_called_once()
        return exit_code, notifier
    return _run
