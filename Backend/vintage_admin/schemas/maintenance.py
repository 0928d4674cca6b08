from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from vintage_admin.schemas.common import CamelModel


class DuplicateArtist(CamelModel):
    id: UUID
    display_name: Optional[str] = None
    owner_user_id: Optional[UUID] = None
    song_count: int
    created_at: datetime


class DuplicateGroupResponse(CamelModel):
    normalized_name: str
    state: str
    canonical_id: Optional[UUID] = None
    artists: List[DuplicateArtist]
    reason: Optional[str] = None


class ReconcileReportResponse(CamelModel):
    dry_run: bool
    groups: List[DuplicateGroupResponse]
    merged: int
    rejected: int
    failed: int


class FixUrlsRequest(CamelModel):
    from_host: str = Field(min_length=1)
    to_host: str = Field(min_length=1)


class FixUrlsResponse(CamelModel):
    updated: int


class TopArtist(CamelModel):
    id: UUID
    display_name: Optional[str] = None
    follower_count: int
    song_count: int


class CatalogStats(CamelModel):
    users: int
    artists: int
    songs: int
    published_songs: int
    genres: int
    playlists: int
    featured_songs: int
    featured_artists: int
    featured_playlists: int
    top_artists: List[TopArtist] = []
