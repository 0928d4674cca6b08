import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.api.pagination import PageParams, paginate
from vintage_admin.core.exceptions import DependencyConflictError, NotFoundException, ValidationFailedError
from vintage_admin.core.normalization import SONG, to_columns
from vintage_admin.core.security import get_current_admin
from vintage_admin.models.album import Album
from vintage_admin.models.artist import Artist
from vintage_admin.models.playlist_song import PlaylistSong
from vintage_admin.models.song import Song, SongStatus
from vintage_admin.schemas.common import Page
from vintage_admin.schemas.song import SongCreate, SongGenresUpdate, SongResponse, SongUpdate
from vintage_admin.services import catalog_maintenance
from vintage_admin.services.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def _get_song_or_404(db: AsyncSession, song_id: UUID) -> Song:
    song = await db.get(Song, song_id)
    if song is None:
        raise NotFoundException("Song", song_id)
    return song


async def _check_references(db: AsyncSession, artist_id: UUID, album_id: Optional[UUID]):
    if await db.get(Artist, artist_id) is None:
        raise NotFoundException("Artist", artist_id)
    if album_id is not None:
        album = await db.get(Album, album_id)
        if album is None:
            raise NotFoundException("Album", album_id)
        if album.artist_id != artist_id:
            raise ValidationFailedError(f"Album {album_id} belongs to a different artist")


@router.get("/songs", response_model=Page[SongResponse])
async def list_songs(
    params: PageParams = Depends(),
    artist_id: Optional[UUID] = Query(None, alias="artistId"),
    song_status: Optional[SongStatus] = Query(None, alias="status"),
    featured: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Song).order_by(Song.created_at.desc(), Song.id)
    if artist_id is not None:
        query = query.where(Song.artist_id == artist_id)
    if song_status is not None:
        query = query.where(Song.status == song_status)
    if featured is not None:
        query = query.where(Song.is_featured == featured)
    if search:
        query = query.where(Song.title.ilike(f"%{search.strip()}%"))

    songs, total = await paginate(db, query, params)
    return Page[SongResponse](items=[SongResponse.from_model(s) for s in songs], total=total)


@router.get("/songs/{song_id}", response_model=SongResponse)
async def get_song(song_id: UUID, db: AsyncSession = Depends(get_db)):
    return SongResponse.from_model(await _get_song_or_404(db, song_id))


@router.post("/songs", response_model=SongResponse, status_code=status.HTTP_201_CREATED)
async def create_song(song_data: SongCreate, db: AsyncSession = Depends(get_db)):
    await _check_references(db, song_data.artist_id, song_data.album_id)

    song = Song(**to_columns(song_data.model_dump(exclude={"genres"}), SONG))
    await catalog_maintenance.replace_song_genres(db, song, song_data.genres)
    db.add(song)
    await db.commit()

    logger.info(f"Created song '{song.title}' ({song.id}) for artist {song.artist_id}")
    return SongResponse.from_model(song)


@router.patch("/songs/{song_id}", response_model=SongResponse)
async def update_song(song_id: UUID, song_data: SongUpdate, db: AsyncSession = Depends(get_db)):
    song = await _get_song_or_404(db, song_id)
    changes = song_data.model_dump(exclude_unset=True)

    for required in ("title", "artist_id", "status", "duration_seconds"):
        if required in changes and changes[required] is None:
            changes.pop(required)

    if "artist_id" in changes or changes.get("album_id") is not None:
        await _check_references(
            db,
            changes.get("artist_id", song.artist_id),
            changes.get("album_id", song.album_id),
        )

    # A featured song has to stay published
    if song.is_featured and changes.get("status") not in (None, SongStatus.PUBLISHED):
        raise ValidationFailedError("Unfeature the song before changing its status")

    for column, value in to_columns(changes, SONG).items():
        setattr(song, column, value)
    await db.commit()
    return SongResponse.from_model(song)


@router.post("/songs/{song_id}/genres", response_model=SongResponse)
async def set_song_genres(song_id: UUID, body: SongGenresUpdate, db: AsyncSession = Depends(get_db)):
    """Replace the song's genres. Accepts a list or a comma/semicolon/pipe separated string."""
    if not body.genres:
        song = await _get_song_or_404(db, song_id)
        if song.is_featured:
            raise ValidationFailedError("A featured song must keep at least one genre")
    song = await catalog_maintenance.set_song_genres(db, song_id, body.genres)
    return SongResponse.from_model(song)


@router.delete("/songs/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_song(song_id: UUID, db: AsyncSession = Depends(get_db)):
    song = await _get_song_or_404(db, song_id)

    in_playlists = await db.scalar(
        select(func.count()).select_from(PlaylistSong).where(PlaylistSong.song_id == song.id)
    )
    if in_playlists:
        raise DependencyConflictError("Song", song_id, {"playlists": in_playlists})

    await db.delete(song)
    await db.commit()
    logger.info(f"Deleted song {song_id}")
