import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.api.pagination import PageParams, paginate
from vintage_admin.core.exceptions import NotFoundException, ValidationFailedError
from vintage_admin.core.normalization import PLAYLIST, to_columns
from vintage_admin.core.security import get_current_admin
from vintage_admin.models.playlist import Playlist, PlaylistVisibility
from vintage_admin.models.playlist_song import PlaylistSong
from vintage_admin.models.song import Song
from vintage_admin.models.user import User
from vintage_admin.schemas.common import Page
from vintage_admin.schemas.playlist import PlaylistCreate, PlaylistResponse, PlaylistUpdate
from vintage_admin.services.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def _get_playlist_or_404(db: AsyncSession, playlist_id: UUID) -> Playlist:
    playlist = await db.get(Playlist, playlist_id)
    if playlist is None:
        raise NotFoundException("Playlist", playlist_id)
    return playlist


async def _set_songs(db: AsyncSession, playlist: Playlist, song_ids: List[UUID]):
    if len(set(song_ids)) != len(song_ids):
        raise ValidationFailedError("A song can appear only once in a playlist")

    if song_ids:
        result = await db.execute(select(Song.id).where(Song.id.in_(song_ids)))
        missing = set(song_ids) - set(result.scalars().all())
        if missing:
            raise ValidationFailedError(f"Unknown song id(s): {', '.join(sorted(map(str, missing)))}")

    existing = {entry.song_id: entry for entry in playlist.entries}
    playlist.entries = [existing.get(song_id) or PlaylistSong(song_id=song_id) for song_id in song_ids]
    playlist.entries.reorder()


@router.get("/playlists", response_model=Page[PlaylistResponse])
async def list_playlists(
    params: PageParams = Depends(),
    owner_user_id: Optional[UUID] = Query(None, alias="ownerUserId"),
    visibility: Optional[PlaylistVisibility] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Playlist).order_by(Playlist.created_at.desc(), Playlist.id)
    if owner_user_id is not None:
        query = query.where(Playlist.user_id == owner_user_id)
    if visibility is not None:
        query = query.where(Playlist.visibility == visibility)

    playlists, total = await paginate(db, query, params)
    return Page[PlaylistResponse](items=[PlaylistResponse.from_model(p) for p in playlists], total=total)


@router.get("/playlists/{playlist_id}", response_model=PlaylistResponse)
async def get_playlist(playlist_id: UUID, db: AsyncSession = Depends(get_db)):
    return PlaylistResponse.from_model(await _get_playlist_or_404(db, playlist_id))


@router.post("/playlists", response_model=PlaylistResponse, status_code=status.HTTP_201_CREATED)
async def create_playlist(playlist_data: PlaylistCreate, db: AsyncSession = Depends(get_db)):
    if await db.get(User, playlist_data.owner_user_id) is None:
        raise NotFoundException("User", playlist_data.owner_user_id)

    playlist = Playlist(**to_columns(playlist_data.model_dump(exclude={"song_ids"}), PLAYLIST))
    await _set_songs(db, playlist, playlist_data.song_ids)
    db.add(playlist)
    await db.commit()

    logger.info(f"Created playlist '{playlist.name}' with {len(playlist.entries)} song(s)")
    return PlaylistResponse.from_model(playlist)


@router.patch("/playlists/{playlist_id}", response_model=PlaylistResponse)
async def update_playlist(playlist_id: UUID, playlist_data: PlaylistUpdate, db: AsyncSession = Depends(get_db)):
    playlist = await _get_playlist_or_404(db, playlist_id)
    changes = playlist_data.model_dump(exclude_unset=True)

    song_ids = changes.pop("song_ids", None)
    if song_ids is not None:
        await _set_songs(db, playlist, song_ids)

    for required in ("name", "visibility"):
        if required in changes and changes[required] is None:
            changes.pop(required)
    for column, value in to_columns(changes, PLAYLIST).items():
        setattr(playlist, column, value)
    await db.commit()
    return PlaylistResponse.from_model(playlist)


@router.delete("/playlists/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_playlist(playlist_id: UUID, db: AsyncSession = Depends(get_db)):
    playlist = await _get_playlist_or_404(db, playlist_id)
    # Entries go with the playlist; the songs themselves stay
    await db.delete(playlist)
    await db.commit()
    logger.info(f"Deleted playlist {playlist_id}")
