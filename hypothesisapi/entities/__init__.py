"""Hypothesis entities package."""

from .account import UserAccountID
from .annotation import Annotation, InputAnnotation, Target, Document, Dc, HighWire, Link, Permissions, UserInfo
from .base_entity import BaseEntity, OmitDefaultsModel
from .group import Group, GroupType, Links, Member, Org, Organization, Scope
from .profile import UserProfile
from .query import Expand, GroupFilters, Order, SearchQuery, Sort
from .selector import RawSelector, Selector, TextQuoteSelector, new_quote

__all__ = [
    'Annotation',
    'BaseEntity',
    'Dc',
    'Document',
    'Expand',
    'Group',
    'GroupFilters',
    'GroupType',
    'HighWire',
    'InputAnnotation',
    'Link',
    'Links',
    'Member',
    'OmitDefaultsModel',
    'Order',
    'Org',
    'Organization',
    'Permissions',
    'RawSelector',
    'Scope',
    'SearchQuery',
    'Selector',
    'Sort',
    'Target',
    'TextQuoteSelector',
    'UserAccountID',
    'UserInfo',
    'UserProfile',
    'new_quote',
]
