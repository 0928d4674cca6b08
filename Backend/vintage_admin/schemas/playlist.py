from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from vintage_admin.core.normalization import PLAYLIST
from vintage_admin.models.playlist import PlaylistVisibility
from vintage_admin.schemas.common import CamelModel, NormalizedInput, to_canonical


class PlaylistCreate(NormalizedInput):
    entity_type = PLAYLIST

    name: str = Field(min_length=1, max_length=200)
    owner_user_id: UUID
    description: Optional[str] = None
    visibility: PlaylistVisibility = PlaylistVisibility.PUBLIC
    song_ids: List[UUID] = []


class PlaylistUpdate(NormalizedInput):
    entity_type = PLAYLIST
    partial_update = True

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    visibility: Optional[PlaylistVisibility] = None
    # Replaces the whole ordered sequence when given
    song_ids: Optional[List[UUID]] = None


class PlaylistResponse(CamelModel):
    id: UUID
    name: str
    owner_user_id: UUID
    description: Optional[str] = None
    visibility: PlaylistVisibility
    featured: bool
    song_ids: List[UUID] = []
    created_at: datetime

    @classmethod
    def from_model(cls, playlist) -> "PlaylistResponse":
        return cls.model_validate(to_canonical(playlist, PLAYLIST, song_ids=playlist.song_ids))
