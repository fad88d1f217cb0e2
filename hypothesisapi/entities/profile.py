from pydantic import Field
from .base_entity import BaseEntity
from .account import UserAccountID


class UserProfile(BaseEntity):
    """Profile of the currently-authenticated user.

    Attributes:
        authority: Authority of the user, e.g. "hypothes.is".
        features: Feature flags enabled for the user.
        preferences: User preferences.
        userid: ``acct:<username>@<authority>`` if the request is authenticated, None otherwise.
    """
    authority: str
    features: dict[str, bool] = Field(default_factory=dict)
    preferences: dict[str, bool] = Field(default_factory=dict)
    userid: UserAccountID | None = None
