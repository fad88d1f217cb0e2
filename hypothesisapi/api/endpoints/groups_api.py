from typing import Sequence
import logging
import httpx
from ..base_api import EntityBaseApi, ApiConfig
from hypothesisapi.entities.group import Group, Member
from hypothesisapi.entities.query import Expand, GroupFilters, to_query_params, expand_params

_LOGGER = logging.getLogger(__name__)


def _group_payload(name: str | None, description: str | None) -> dict[str, str]:
    payload = {'name': name, 'description': description}
    # remove nones
    return {k: v for k, v in payload.items() if v is not None}


class GroupsApi(EntityBaseApi[Group]):
    """API handler for group-related endpoints."""

    def __init__(self, config: ApiConfig, client: httpx.Client | None = None) -> None:
        super().__init__(config, Group, 'groups', client)

    def get_list(self, filters: GroupFilters | None = None) -> list[Group]:
        """Retrieve the applicable groups, filtered by authority and target document.
        The user's private groups are included.

        Args:
            filters: Filters. Fields left at their default are not sent.
        """
        params = to_query_params(filters or GroupFilters())
        return self._request_model('GET', f'/{self.endpoint_base}', list[Group], params=params)

    def create(self, name: str, description: str | None = None) -> Group:
        """Create a new, private group for the currently-authenticated user.

        Args:
            name: The group name.
            description: Optional group description.
        """
        return self._create(_group_payload(name, description))

    def get_by_id(self, group_id: str, expand: Sequence[Expand] | None = None) -> Group:
        """Fetch a single group.

        Args:
            group_id: The group unique id.
            expand: Expand the organization, the scopes, or both.
        """
        return super().get_by_id(group_id, params=expand_params(expand))

    def update(self, group_id: str, name: str | None = None, description: str | None = None) -> Group:
        """Update the name and/or description of a group. None values are not sent."""
        return self._update(group_id, _group_payload(name, description))

    def get_members(self, group_id: str) -> list[Member]:
        """Fetch all members (users) of a group.

        Only public-facing user data is returned, unsorted.
        The authenticated user must have read access to the group.
        """
        return self._request_model('GET', self._entity_endpoint(group_id, 'members'), list[Member])

    def leave(self, group_id: str) -> None:
        """Remove the authenticated user from a group."""
        self._request_empty('DELETE', self._entity_endpoint(group_id, 'members/me'))

    async def create_many_async(self,
                                names: Sequence[str],
                                descriptions: Sequence[str | None] | None = None) -> list[Group]:
        if descriptions is None:
            descriptions = [None] * len(names)
        if len(names) != len(descriptions):
            raise ValueError("names and descriptions must have the same length.")
        return await self._run_concurrently(
            [lambda s, n=n, d=d: self._create_async(_group_payload(n, d), session=s)
             for n, d in zip(names, descriptions)]
        )

    def create_many(self,
                    names: Sequence[str],
                    descriptions: Sequence[str | None] | None = None) -> list[Group]:
        """Create several groups concurrently.

        Returns:
            The created groups, in the same order as `names`.

        Raises:
            HypothesisException: The first failure, if any call failed. No partial result is returned.
        """
        return self._run_sync(self.create_many_async(names, descriptions))

    async def get_many_async(self,
                             group_ids: Sequence[str],
                             expands: Sequence[Sequence[Expand] | None] | None = None) -> list[Group]:
        if expands is None:
            expands = [None] * len(group_ids)
        if len(group_ids) != len(expands):
            raise ValueError("group_ids and expands must have the same length.")
        return await self._run_concurrently(
            [lambda s, i=i, e=e: self.get_by_id_async(i, session=s, params=expand_params(e))
             for i, e in zip(group_ids, expands)]
        )

    def get_many(self,
                 group_ids: Sequence[str],
                 expands: Sequence[Sequence[Expand] | None] | None = None) -> list[Group]:
        """Fetch several groups concurrently. See :meth:`create_many`."""
        return self._run_sync(self.get_many_async(group_ids, expands))

    async def update_many_async(self,
                                group_ids: Sequence[str],
                                names: Sequence[str | None],
                                descriptions: Sequence[str | None]) -> list[Group]:
        if not (len(group_ids) == len(names) == len(descriptions)):
            raise ValueError("group_ids, names and descriptions must have the same length.")
        return await self._run_concurrently(
            [lambda s, i=i, n=n, d=d: self._update_async(i, _group_payload(n, d), session=s)
             for i, n, d in zip(group_ids, names, descriptions)]
        )

    def update_many(self,
                    group_ids: Sequence[str],
                    names: Sequence[str | None],
                    descriptions: Sequence[str | None]) -> list[Group]:
        """Update several groups concurrently. See :meth:`create_many`."""
        return self._run_sync(self.update_many_async(group_ids, names, descriptions))
