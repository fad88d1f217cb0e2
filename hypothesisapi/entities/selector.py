"""Annotation selectors.

> Many Annotations refer to part of a resource, rather than all of it, as the Target.
> We call that part of the resource a Segment (of Interest). A Selector is used to describe how
> to determine the Segment from within the Source resource.

`Web Annotation Data Model - Selectors <https://www.w3.org/TR/annotation-model/#selectors>`_

The wire ``type`` tag selects the variant. Only :class:`TextQuoteSelector` is fully typed;
every other kind, including kinds unknown to this package, is kept as a :class:`RawSelector`.
"""

from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Discriminator, Tag

TEXT_QUOTE_SELECTOR = 'TextQuoteSelector'

# Selector kinds currently produced by the Hypothesis client.
# See https://github.com/hypothesis/client/blob/main/src/types/api.ts
KNOWN_SELECTOR_TYPES = (
    TEXT_QUOTE_SELECTOR,
    'TextPositionSelector',
    'RangeSelector',
    'FragmentSelector',
    'CssSelector',
    'XPathSelector',
    'DataPositionSelector',
    'SvgSelector',
    'PageSelector',
    'EPUBContentSelector',
    'MediaTimeSelector',
)


class TextQuoteSelector(BaseModel):
    """Describes a range of text by copying it, plus some of the text immediately before and after it.

    For example, if the document were "abcdefghijklmnopqrstuvwxyz", one could select
    "efg" by a prefix of "abcd", the match of "efg" and a suffix of "hijk".

    Attributes:
        exact: A copy of the text which is being selected, after normalization.
        prefix: A snippet of text that occurs immediately before the text which is being selected.
        suffix: The snippet of text that occurs immediately after the text which is being selected.
    """
    type: Literal['TextQuoteSelector'] = TEXT_QUOTE_SELECTOR
    exact: str
    prefix: str = ''
    suffix: str = ''


class RawSelector(BaseModel):
    """Any selector kind other than ``TextQuoteSelector``.

    The remaining keys are kept in their original order in :attr:`fields`.
    """
    model_config = ConfigDict(extra='allow')

    type: str

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.__pydantic_extra__ or {})

    @property
    def is_known(self) -> bool:
        return self.type in KNOWN_SELECTOR_TYPES


def _selector_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get('type')
    else:
        kind = getattr(value, 'type', None)
    return 'quote' if kind == TEXT_QUOTE_SELECTOR else 'raw'


Selector = Annotated[
    Union[
        Annotated[TextQuoteSelector, Tag('quote')],
        Annotated[RawSelector, Tag('raw')],
    ],
    Discriminator(_selector_tag),
]


def new_quote(exact: str, prefix: str = '', suffix: str = '') -> TextQuoteSelector:
    return TextQuoteSelector(exact=exact, prefix=prefix, suffix=suffix)
