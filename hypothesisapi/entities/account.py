from pydantic import ConfigDict, RootModel

DEFAULT_AUTHORITY = 'hypothes.is'


class UserAccountID(RootModel[str]):
    """User account ID in the format ``acct:<username>@<authority>``.

    Serializes as a bare string. Two ids are equal when their strings are equal.

    Example:
        >>> UserAccountID.from_username('alice').get()
        'acct:alice@hypothes.is'
    """

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_username(cls, username: str, authority: str = DEFAULT_AUTHORITY) -> 'UserAccountID':
        return cls(format_account_id(username, authority))

    def get(self) -> str:
        return self.root

    def __str__(self) -> str:
        return self.root


def format_account_id(username: str, authority: str = DEFAULT_AUTHORITY) -> str:
    return f"acct:{username}@{authority}"
