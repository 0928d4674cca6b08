from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from vintage_admin.core.normalization import GENRE
from vintage_admin.schemas.common import CamelModel, NormalizedInput, to_canonical

_HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class GenreCreate(NormalizedInput):
    entity_type = GENRE

    name: str = Field(min_length=1, max_length=50)
    color_hex: Optional[str] = Field(default=None, pattern=_HEX_COLOR)
    description: Optional[str] = None


class GenreUpdate(NormalizedInput):
    entity_type = GENRE
    partial_update = True

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    color_hex: Optional[str] = Field(default=None, pattern=_HEX_COLOR)
    description: Optional[str] = None


class GenreResponse(CamelModel):
    id: UUID
    name: str
    color_hex: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_model(cls, genre) -> "GenreResponse":
        return cls.model_validate(to_canonical(genre, GENRE))


class GenreUsage(CamelModel):
    id: UUID
    name: str
    song_count: int
