# filepath: hypothesisapi/entities/annotation.py
"""Annotation entity module for the Hypothesis API.

This module defines the models used to represent annotation records returned by
the ``/annotations`` and ``/search`` endpoints, and the :class:`InputAnnotation`
payload used to create or update them.
"""

from datetime import datetime
import logging
from pydantic import BaseModel, Field
from .base_entity import BaseEntity, OmitDefaultsModel
from .account import UserAccountID
from .selector import Selector

logger = logging.getLogger(__name__)


class Link(OmitDefaultsModel):
    href: str
    link_type: str = Field(default='', alias='type')


class Dc(OmitDefaultsModel):
    identifier: list[str] = Field(default_factory=list)


class HighWire(OmitDefaultsModel):
    doi: list[str] = Field(default_factory=list)
    pdf_url: list[str] = Field(default_factory=list)


class Document(OmitDefaultsModel):
    """Further metadata about the target document."""
    title: list[str] = Field(default_factory=list)
    dc: Dc | None = None
    highwire: HighWire | None = None
    link: list[Link] = Field(default_factory=list)


class Target(OmitDefaultsModel):
    """Which part of the document an annotation targets.

    Attributes:
        source: The target URI for the annotation. Leave empty when creating an annotation.
        selector: Selectors that refine this annotation's target.
    """
    source: str = ''
    selector: list[Selector] = Field(default_factory=list)


class Permissions(BaseModel):
    read: list[str] = Field(default_factory=list)
    delete: list[str] = Field(default_factory=list)
    admin: list[str] = Field(default_factory=list)
    update: list[str] = Field(default_factory=list)


class UserInfo(BaseModel):
    display_name: str | None = None


class InputAnnotation(OmitDefaultsModel):
    """Payload to create or update an annotation.

    All fields are optional. Fields left at their default are not sent.

    Attributes:
        uri: URI that this annotation is attached to. Can be a URL or a URN
            (DOI, PDF fingerprint...).
        text: Annotation text / comment given by the user. This is NOT the selected text on the web page.
        tags: Tags attached to the annotation.
        document: Further metadata about the target document.
        group: The unique identifier for the annotation's group. Ignored for replies,
            which belong to the same group as their parent annotation.
        target: Which part of the document the annotation targets. The whole page if left as default.
        references: Annotation IDs this annotation references (e.g. is a reply to).

    Example:
        .. code-block:: python

            InputAnnotation(uri='https://www.example.com',
                            text='this is a comment',
                            target=Target(source='https://www.example.com',
                                          selector=[new_quote('exact text', 'prefix', 'suffix')]),
                            tags=['tag1', 'tag2'])
    """
    uri: str = ''
    text: str = ''
    tags: list[str] | None = None
    document: Document | None = None
    group: str = ''
    target: Target = Field(default_factory=Target)
    references: list[str] = Field(default_factory=list)


class Annotation(BaseEntity):
    """Pydantic Model representing a Hypothesis annotation.

    Attributes:
        id: Annotation ID.
        created: Date of creation.
        updated: Date of last update.
        user: User account ID in the format ``acct:<username>@<authority>``.
        uri: URL of the document this annotation is attached to.
        text: The text content of the annotation body (NOT the selected text in the document).
        tags: Tags attached to the annotation.
        group: The unique identifier for the annotation's group.
        permissions: Principals allowed to read, delete, admin and update the annotation.
        target: Which part of the document the annotation targets.
        links: Hypermedia links for this annotation.
        hidden: Whether this annotation is hidden from public view.
        flagged: Whether this annotation has one or more flags for moderation.
        document: Document information.
        references: Annotation IDs this annotation references (e.g. is a reply to).
        user_info: Information about the creator.
    """

    id: str
    created: datetime
    updated: datetime
    user: UserAccountID
    uri: str
    text: str
    tags: list[str]
    group: str
    permissions: Permissions
    target: list[Target]
    links: dict[str, str]
    hidden: bool
    flagged: bool
    document: Document | None = None
    references: list[str] = Field(default_factory=list)
    user_info: UserInfo | None = None

    def merge_input(self, annotation: InputAnnotation) -> 'Annotation':
        """Return a copy of this annotation with every non-default field of `annotation` applied."""
        updates = {}
        if annotation.uri:
            updates['uri'] = annotation.uri
        if annotation.text:
            updates['text'] = annotation.text
        if annotation.tags is not None:
            updates['tags'] = list(annotation.tags)
        if annotation.document is not None:
            updates['document'] = annotation.document
        if annotation.group:
            updates['group'] = annotation.group
        if annotation.target != Target():
            updates['target'] = [annotation.target]
        if annotation.references:
            updates['references'] = list(annotation.references)
        return self.model_copy(update=updates)


class SearchResult(BaseEntity):
    rows: list[Annotation]
    total: int = 0


class DeletedAnnotation(BaseEntity):
    id: str
    deleted: bool
