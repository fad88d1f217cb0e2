import httpx
from ..base_api import BaseApi, ApiConfig
from hypothesisapi.entities.group import Group
from hypothesisapi.entities.profile import UserProfile


class ProfileApi(BaseApi):
    """API handler for the profile of the authenticated user."""
    ENDPOINT_BASE = "/profile"

    def __init__(self, config: ApiConfig, client: httpx.Client | None = None) -> None:
        super().__init__(config, client)

    def get_user(self) -> UserProfile:
        """Fetch profile information for the currently-authenticated user."""
        return self._request_model('GET', self.ENDPOINT_BASE, UserProfile)

    def get_groups(self) -> list[Group]:
        """Fetch the groups for which the currently-authenticated user is a member."""
        return self._request_model('GET', f"{self.ENDPOINT_BASE}/groups", list[Group])
