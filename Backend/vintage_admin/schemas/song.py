from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from vintage_admin.core.normalization import SONG
from vintage_admin.models.song import SongStatus
from vintage_admin.schemas.common import CamelModel, NormalizedInput, to_canonical


class SongCreate(NormalizedInput):
    entity_type = SONG

    title: str = Field(min_length=1, max_length=200)
    artist_id: UUID
    album_id: Optional[UUID] = None
    duration_seconds: int = Field(default=0, ge=0)
    file_url: Optional[str] = None
    cover_art_url: Optional[str] = None
    status: SongStatus = SongStatus.DRAFT
    genres: List[str] = []


class SongUpdate(NormalizedInput):
    entity_type = SONG
    partial_update = True

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    artist_id: Optional[UUID] = None
    album_id: Optional[UUID] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    file_url: Optional[str] = None
    cover_art_url: Optional[str] = None
    status: Optional[SongStatus] = None


class SongGenresUpdate(NormalizedInput):
    """Accepts a list of genre names or the legacy comma-separated string."""
    entity_type = SONG
    partial_update = True

    genres: List[str]


class SongResponse(CamelModel):
    id: UUID
    title: str
    artist_id: UUID
    album_id: Optional[UUID] = None
    duration_seconds: int
    file_url: Optional[str] = None
    cover_art_url: Optional[str] = None
    status: SongStatus
    featured: bool
    genres: List[str] = []
    created_at: datetime

    @classmethod
    def from_model(cls, song) -> "SongResponse":
        return cls.model_validate(to_canonical(song, SONG, genres=song.genre_names))
