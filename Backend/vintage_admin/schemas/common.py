from typing import Any, ClassVar, Dict, Generic, List, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import inspect

from vintage_admin.core.normalization import normalize

T = TypeVar("T")


class CamelModel(BaseModel):
    """Python attributes in snake_case, JSON in camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NormalizedInput(CamelModel):
    """
    Request body that runs through the field normalizer before validation,
    so either spelling of an aliased field is accepted.
    """
    entity_type: ClassVar[str]
    partial_update: ClassVar[bool] = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_fields(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return normalize(data, cls.entity_type, partial=cls.partial_update)
        return data


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int


def to_canonical(obj: Any, entity_type: str, **extra: Any) -> Dict[str, Any]:
    """ORM row -> canonical camelCase record, via the same normalizer used for input."""
    mapper = inspect(obj).mapper
    raw = {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}
    raw.update(extra)
    return normalize(raw, entity_type)
