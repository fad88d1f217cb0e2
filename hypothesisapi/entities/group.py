"""Group entity module for the Hypothesis API."""

from enum import Enum
from typing import TypeAlias, Union
from pydantic import BaseModel, Field
from .base_entity import BaseEntity


class GroupType(str, Enum):
    PRIVATE = 'private'
    """Only the creator can view and edit."""
    OPEN = 'open'
    """Anyone can view and edit."""
    RESTRICTED = 'restricted'
    """More than one user can view and edit."""


class Links(BaseModel):
    """URL to the group's main (activity) page."""
    html: str | None = None


class Scope(BaseModel):
    """URL restrictions for annotations within a group."""
    enforced: bool
    uri_patterns: list[str]


class Org(BaseModel):
    """Expanded organization.

    Attributes:
        id: Organization ID.
        default: Whether this is the default organization for the current authority.
        logo: URI to the logo image, None if no logo exists.
        name: Organization name.
    """
    id: str
    default: bool
    logo: str | None = None
    name: str


Organization: TypeAlias = Union[str, Org, None]
"""TypeAlias: The organization of a group.

Decoded by the shape of the payload, in this order:
a bare string is the unexpanded organization ID; an object is the expanded :class:`Org`;
``null`` is an expanded organization the user is not authorized to see.
"""


class Group(BaseEntity):
    """Pydantic Model representing a Hypothesis group.

    Attributes:
        id: Group ID.
        groupid: Authority-unique identifier, set for groups owned by a third-party authority.
        name: Group name.
        links: Link to the group's main (activity) page.
        organization: The organization to which this group belongs. See :data:`Organization`.
        scopes: URL restrictions for annotations within this group.
        scoped: Whether this group restricts the documents that may be annotated within it.
        group_type: Whether the group is private, open or restricted.
    """

    id: str
    groupid: str | None = None
    name: str
    links: Links = Field(default_factory=Links)
    organization: Organization = None
    scopes: Scope | None = None
    scoped: bool = False
    group_type: GroupType = Field(alias='type')

    @property
    def organization_expanded(self) -> bool:
        """True if the organization was returned as an object (or null) instead of its ID."""
        return not isinstance(self.organization, str)

    @property
    def organization_id(self) -> str | None:
        if isinstance(self.organization, str):
            return self.organization
        if isinstance(self.organization, Org):
            return self.organization.id
        return None


class Member(BaseEntity):
    """Public information about a user in a group.

    Attributes:
        authority: Authority of the user, e.g. "hypothes.is".
        username: 3 to 30 characters of ``[A-Za-z0-9._]``.
        userid: ``acct:<username>@<authority>``.
        display_name: Display name, at most 30 characters.
    """
    authority: str
    username: str
    userid: str
    display_name: str | None = None
