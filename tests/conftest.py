"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import logging

# atlassian-python-api logs expected lookup failures at ERROR level.
logging.getLogger("atlassian").setLevel(logging.WARNING)
