"""Authentication module for loading the Yuque API token.

The token is read from the YUQUE_TOKEN environment variable, loaded from
a .env file with python-dotenv. It is never cached or logged.
"""

import os

from dotenv import load_dotenv

from .errors import YuqueCredentialsError


class YuqueAuthenticator:
    """Loads and validates the Yuque API token.

    Required environment variables:
        YUQUE_TOKEN: Personal access token for the Yuque open API
    """

    def __init__(self):
        load_dotenv()

    def get_token(self) -> str:
        """Return the Yuque token.

        Raises:
            YuqueCredentialsError: If YUQUE_TOKEN is not set
        """
        token = os.getenv('YUQUE_TOKEN')
        if not token:
            raise YuqueCredentialsError(endpoint="YUQUE_TOKEN")
        return token
