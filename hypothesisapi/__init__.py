"""
Python client and command line tools for the Hypothesis annotation API.
"""

import importlib.metadata
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .api.client import Api
    from .entities import (Annotation, InputAnnotation, Target, SearchQuery, GroupFilters,
                           Group, Member, UserProfile, UserAccountID)
    from .exceptions import HypothesisException, APIError
else:
    import lazy_loader as lazy

    __getattr__, __dir__, __all__ = lazy.attach(
        __name__,
        submodules=['entities', 'exceptions', 'configs'],
        submod_attrs={
            "api.client": ["Api"],
            "entities": ["Annotation", "InputAnnotation", "Target", "SearchQuery", "GroupFilters",
                         "Group", "Member", "UserProfile", "UserAccountID"],
            "exceptions": ["HypothesisException", "APIError"],
        },
    )

__name__ = "hypothesisapi"
__version__ = importlib.metadata.version(__name__)
