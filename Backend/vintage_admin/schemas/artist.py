from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from vintage_admin.core.normalization import ARTIST, SONG
from vintage_admin.schemas.common import CamelModel, NormalizedInput, to_canonical


class ArtistCreate(NormalizedInput):
    entity_type = ARTIST

    stage_name: str = Field(min_length=1, max_length=150)
    owner_user_id: Optional[UUID] = None
    biography: Optional[str] = None
    nationality_code: Optional[str] = Field(default=None, min_length=2, max_length=2)
    featured: bool = False
    # When the name already exists, return the existing artist instead of a 409
    link_existing: bool = False


class ArtistUpdate(NormalizedInput):
    entity_type = ARTIST
    partial_update = True

    stage_name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    owner_user_id: Optional[UUID] = None
    biography: Optional[str] = None
    nationality_code: Optional[str] = Field(default=None, min_length=2, max_length=2)


class ArtistResponse(CamelModel):
    id: UUID
    stage_name: Optional[str] = None
    owner_user_id: Optional[UUID] = None
    biography: Optional[str] = None
    nationality_code: Optional[str] = None
    featured: bool
    created_at: datetime

    @classmethod
    def from_model(cls, artist) -> "ArtistResponse":
        return cls.model_validate(to_canonical(artist, ARTIST))


class FeaturedUpdate(NormalizedInput):
    # Songs, artists and playlists share the same spellings for the flag
    entity_type = SONG
    partial_update = True

    featured: bool


class NameCheckResponse(CamelModel):
    is_duplicate: bool
    matched_id: Optional[str] = None
    matched_name: Optional[str] = None
