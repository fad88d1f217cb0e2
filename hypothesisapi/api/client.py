import logging
import httpx
from .base_api import ApiConfig, create_client
from .endpoints import AnnotationsApi, GroupsApi, ProfileApi
from hypothesisapi import configs
from hypothesisapi.entities.account import UserAccountID
from hypothesisapi.exceptions import HypothesisEnvironmentError

_LOGGER = logging.getLogger(__name__)


class Api:
    """Main API client that provides access to all endpoint handlers.

    Example:
        .. code-block:: python

            api = Api.from_env()
            annotation = api.annotations.create(InputAnnotation(uri='https://www.example.com',
                                                                text='this is a comment'))
    """
    DEFAULT_SERVER_URL = 'https://api.hypothes.is/api'
    USERNAME_VENV_NAME = configs.ENV_VARS[configs.USERNAME_KEY]
    APIKEY_VENV_NAME = configs.ENV_VARS[configs.APIKEY_KEY]

    def __init__(self,
                 username: str,
                 developer_key: str,
                 server_url: str | None = None,
                 timeout: float = 30.0) -> None:
        """Initialize the API client.

        Args:
            username: Hypothesis username of the authenticated user.
            developer_key: Personal API key (see https://h.readthedocs.io/en/latest/api/authorization/).
            server_url: Base URL for the API.
            timeout: Request timeout in seconds.

        Raises:
            HeaderError: If the developer key cannot be used in an HTTP header.
        """
        if server_url is None:
            server_url = configs.get_value(configs.APIURL_KEY)
            if server_url is None:
                server_url = Api.DEFAULT_SERVER_URL
        server_url = server_url.rstrip('/')

        self.username = username
        self.user = UserAccountID.from_username(username)
        self.config = ApiConfig(
            server_url=server_url,
            username=username,
            developer_key=developer_key,
            timeout=timeout
        )
        self._client: httpx.Client = create_client(self.config)
        # Initialize endpoint handlers
        self._annotations = None
        self._groups = None
        self._profile = None

    @classmethod
    def from_env(cls, **kwargs) -> 'Api':
        """Make a new client from the environment.

        Username from ``$HYPOTHESIS_NAME``, developer key from ``$HYPOTHESIS_KEY``
        (or from the values saved with ``hypothesis-config``).

        Raises:
            HypothesisEnvironmentError: If one of the values is missing.
        """
        username = configs.get_value(configs.USERNAME_KEY)
        if username is None:
            raise HypothesisEnvironmentError(
                cls.USERNAME_VENV_NAME,
                f"Set the environment variable {cls.USERNAME_VENV_NAME} to your username"
            )
        developer_key = configs.get_value(configs.APIKEY_KEY)
        if developer_key is None:
            raise HypothesisEnvironmentError(
                cls.APIKEY_VENV_NAME,
                f"Set the environment variable {cls.APIKEY_VENV_NAME} to your personal API key"
            )
        return cls(username, developer_key, **kwargs)

    @property
    def annotations(self) -> AnnotationsApi:
        """Access to annotation-related endpoints."""
        if self._annotations is None:
            self._annotations = AnnotationsApi(self.config, self._client)
        return self._annotations

    @property
    def groups(self) -> GroupsApi:
        """Access to group-related endpoints."""
        if self._groups is None:
            self._groups = GroupsApi(self.config, self._client)
        return self._groups

    @property
    def profile(self) -> ProfileApi:
        """Access to the profile of the authenticated user."""
        if self._profile is None:
            self._profile = ProfileApi(self.config, self._client)
        return self._profile

    def close(self) -> None:
        """Close the HTTP client connections."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
