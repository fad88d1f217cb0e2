"""Filters and queries sent as URL parameters.

See `the Hypothesis API docs <https://h.readthedocs.io/en/latest/api-reference/v1/>`_
for more details on using these fields.
"""

import json
from enum import Enum
from typing import Any
from pydantic import Field
from .base_entity import OmitDefaultsModel
from .account import DEFAULT_AUTHORITY


class Sort(str, Enum):
    CREATED = 'created'
    UPDATED = 'updated'
    ID = 'id'
    GROUP = 'group'
    USER = 'user'


class Order(str, Enum):
    ASC = 'asc'
    DESC = 'desc'


class Expand(str, Enum):
    """Which field of a group to expand."""
    ORGANIZATION = 'organization'
    """Expand ``organization`` to an :class:`~hypothesisapi.entities.group.Org`."""
    SCOPES = 'scopes'
    """Expand ``scopes`` to a :class:`~hypothesisapi.entities.group.Scope`."""


class SearchQuery(OmitDefaultsModel):
    """Options to filter and sort search results.

    Attributes:
        limit: The maximum number of annotations to return. Range: [0, 200].
        sort: The field by which annotations should be sorted.
        search_after: Define a start point for a subset (page) of annotation search results,
            e.g. "2019-01-03T19:46:09.334Z". Make sure to set `order` to :attr:`Order.ASC` if using it.
        offset: The number of initial annotations to skip in the result set. At most 9800.
            `search_after` is more efficient.
        order: The order in which the results should be sorted.
        uri: Limit the results to annotations matching the specific URI or equivalent URIs.
        uri_parts: Limit the results to annotations containing the given keyword (tokenized chunk) in the URI.
        wildcard_uri: Limit the results to annotations whose URIs match the wildcard pattern.
        user: Limit the results to annotations made by the specified user (``acct:<username>@<authority>``).
        group: Limit the results to annotations made in the specified groups (by group ID).
        tag: Limit the results to annotations tagged with the specified value.
        tags: Similar to `tag` but allows a list of multiple tags.
        any: Limit the results to annotations containing the keyword in any of
            ``quote``, ``tags``, ``text`` or ``url``.
        quote: Limit the results to annotations that contain this text inside the text that was annotated.
        references: Returns annotations that are replies to this parent annotation ID.
        text: Limit the results to annotations that contain this text in their textual body.
    """
    limit: int = Field(default=20, ge=0, le=200)
    sort: Sort = Sort.UPDATED
    search_after: str = ''
    offset: int = Field(default=0, ge=0, le=9800)
    order: Order = Order.DESC
    uri: str = ''
    uri_parts: str = Field(default='', alias='uri.parts')
    wildcard_uri: str = ''
    user: str = ''
    group: list[str] = Field(default_factory=list)
    tag: str = ''
    tags: list[str] = Field(default_factory=list)
    any: str = ''
    quote: str = ''
    references: str = ''
    text: str = ''


class GroupFilters(OmitDefaultsModel):
    """Filter groups by authority and target document.

    Attributes:
        authority: Filter returned groups to this authority. For authenticated requests,
            the user's associated authority supersedes any provided value.
        document_uri: Only retrieve public groups that apply to a given document URI.
        expand: Relations to expand for each group.
    """
    authority: str = DEFAULT_AUTHORITY
    document_uri: str = ''
    expand: list[Expand] = Field(default_factory=list)


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value).strip('"')


def to_query_params(query: OmitDefaultsModel) -> list[tuple[str, str]]:
    """Convert a query model to URL parameters.

    Fields equal to their default are dropped. List fields become one parameter per element.
    """
    params = []
    for key, value in query.asdict().items():
        # repeated keys (group=a&group=b), the form the API accepts, not a stringified array
        if isinstance(value, list):
            params.extend((key, _stringify(v)) for v in value)
        else:
            params.append((key, _stringify(value)))
    return params


def expand_params(expand: list[Expand] | None) -> list[tuple[str, str]]:
    return [('expand', Expand(e).value) for e in (expand or [])]
