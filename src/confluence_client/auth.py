"""Confluence credential loading.

Credentials come from the process environment, optionally populated from a
.env file by python-dotenv. They are read on demand and never logged.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

URL_VAR = 'CONFLUENCE_URL'
USER_VAR = 'CONFLUENCE_USER'
TOKEN_VAR = 'CONFLUENCE_API_TOKEN'


class Credentials(NamedTuple):
    """Site URL (without trailing slash), account email and API token."""
    url: str
    user: str
    api_token: str


class Authenticator:
    """Reads CONFLUENCE_URL, CONFLUENCE_USER and CONFLUENCE_API_TOKEN.

    Example:
        >>> creds = Authenticator().get_credentials()
        >>> creds.url
        'https://example.atlassian.net/wiki'
    """

    def __init__(self):
        load_dotenv()

    def get_credentials(self) -> Credentials:
        """Return the destination credentials.

        Raises:
            InvalidCredentialsError: If any of the three variables is unset or empty
        """
        url = os.getenv(URL_VAR) or ''
        user = os.getenv(USER_VAR) or ''
        api_token = os.getenv(TOKEN_VAR) or ''

        if not (url and user and api_token):
            raise InvalidCredentialsError(user=user or "unknown", endpoint=url or "unknown")

        return Credentials(url=url.rstrip('/'), user=user, api_token=api_token)
