"""API endpoint handlers."""

from .annotations_api import AnnotationsApi
from .groups_api import GroupsApi
from .profile_api import ProfileApi

__all__ = [
    'AnnotationsApi',
    'GroupsApi',
    'ProfileApi',
]
