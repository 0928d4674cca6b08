from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vintage_admin.core.security import get_current_admin
from vintage_admin.schemas.artist import ArtistResponse, FeaturedUpdate
from vintage_admin.schemas.playlist import PlaylistResponse
from vintage_admin.schemas.song import SongResponse
from vintage_admin.services import featured_service
from vintage_admin.services.database import get_db

router = APIRouter()

# Artists are listed here but their flag is only changed through PATCH /artists/{id}/featured


@router.get("/featured/songs", response_model=List[SongResponse])
async def featured_songs(limit: int = Query(10), db: AsyncSession = Depends(get_db)):
    songs = await featured_service.get_featured_songs(db, limit)
    return [SongResponse.from_model(song) for song in songs]


@router.get("/featured/artists", response_model=List[ArtistResponse])
async def featured_artists(limit: int = Query(10), db: AsyncSession = Depends(get_db)):
    artists = await featured_service.get_featured_artists(db, limit)
    return [ArtistResponse.from_model(artist) for artist in artists]


@router.get("/featured/playlists", response_model=List[PlaylistResponse])
async def featured_playlists(limit: int = Query(10), db: AsyncSession = Depends(get_db)):
    playlists = await featured_service.get_featured_playlists(db, limit)
    return [PlaylistResponse.from_model(playlist) for playlist in playlists]


@router.patch(
    "/featured/songs/{song_id}",
    response_model=SongResponse,
    dependencies=[Depends(get_current_admin)],
)
async def set_song_featured(song_id: UUID, body: FeaturedUpdate, db: AsyncSession = Depends(get_db)):
    song = await featured_service.set_song_featured(db, song_id, body.featured)
    return SongResponse.from_model(song)


@router.patch(
    "/featured/playlists/{playlist_id}",
    response_model=PlaylistResponse,
    dependencies=[Depends(get_current_admin)],
)
async def set_playlist_featured(playlist_id: UUID, body: FeaturedUpdate, db: AsyncSession = Depends(get_db)):
    playlist = await featured_service.set_playlist_featured(db, playlist_id, body.featured)
    return PlaylistResponse.from_model(playlist)
