import logging
from typing import Any
from pydantic import ConfigDict, BaseModel, model_serializer, SerializerFunctionWrapHandler

_LOGGER = logging.getLogger(__name__)


class BaseEntity(BaseModel):
    """
    Base class for all entities returned by the Hypothesis API.

    This class provides common functionality for all entities, such as
    serialization and deserialization from dictionaries, as well as
    handling unknown fields gracefully.
    """

    model_config = ConfigDict(extra='allow')  # Allow extra fields not defined in the model

    def asdict(self) -> dict[str, Any]:
        """Convert the entity to a JSON compatible dictionary, including unknown fields."""
        return self.model_dump(mode='json', by_alias=True)

    def asjson(self) -> str:
        """Convert the entity to a JSON string, including unknown fields."""
        return self.model_dump_json(by_alias=True)

    def model_post_init(self, __context: Any) -> None:
        if self.__pydantic_extra__:
            _LOGGER.info(f"Unknown fields found in {self.__class__.__name__} "
                         f"fields: {self.__pydantic_extra__.keys()}. ")


class OmitDefaultsModel(BaseModel):
    """
    Base class for request payloads and query builders.

    Every field equal to its declared default is left out of the serialized form,
    so that untouched fields never override server-side values.
    Setting a field explicitly to its default value is indistinguishable from leaving it unset.
    """

    model_config = ConfigDict(populate_by_name=True)

    @model_serializer(mode='wrap')
    def _omit_defaults(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            if getattr(self, name) != field.get_default(call_default_factory=True):
                continue
            data.pop(name, None)
            if field.alias is not None:
                data.pop(field.alias, None)
        return data

    def asdict(self) -> dict[str, Any]:
        """Wire representation: JSON compatible, aliased, non-default fields only."""
        return self.model_dump(mode='json', by_alias=True)
