import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.core.config import settings
from vintage_admin.core.exceptions import NotFoundException, ValidationFailedError
from vintage_admin.models.artist import Artist
from vintage_admin.models.playlist import Playlist, PlaylistVisibility
from vintage_admin.models.song import Song, SongStatus

logger = logging.getLogger(__name__)


def clamp_limit(limit: int) -> int:
    return min(max(1, limit), settings.FEATURED_LIMIT_MAX)


async def _get_or_404(db: AsyncSession, model, entity_id: UUID, label: str):
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundException(label, entity_id)
    return entity


async def set_song_featured(db: AsyncSession, song_id: UUID, featured: bool) -> Song:
    """
    Mark or unmark a song as featured. Setting the value it already has is a
    no-op write, so repeated calls leave the same state.
    """
    song = await _get_or_404(db, Song, song_id, "Song")

    # Only published songs with at least one genre can be put on the featured shelf
    if featured and song.status != SongStatus.PUBLISHED:
        raise ValidationFailedError(
            "Only published songs can be featured; publish the song first"
        )
    if featured and not song.genre_links:
        raise ValidationFailedError(
            "A song without genres cannot be featured; assign at least one genre first"
        )

    song.is_featured = featured
    await db.commit()

    logger.info(f"Song '{song.title}' featured={featured}")
    if featured:
        logger.info(f"Genres of featured song: {', '.join(song.genre_names) or 'none'}")
    return song


async def set_artist_featured(db: AsyncSession, artist_id: UUID, featured: bool) -> Artist:
    artist = await _get_or_404(db, Artist, artist_id, "Artist")
    artist.featured = featured
    await db.commit()
    logger.info(f"Artist '{artist.stage_name or artist.name or artist_id}' featured={featured}")
    return artist


async def set_playlist_featured(db: AsyncSession, playlist_id: UUID, featured: bool) -> Playlist:
    playlist = await _get_or_404(db, Playlist, playlist_id, "Playlist")
    playlist.is_featured = featured
    await db.commit()
    logger.info(f"Playlist '{playlist.name}' featured={featured}")
    return playlist


async def get_featured_songs(db: AsyncSession, limit: int = 10) -> List[Song]:
    limit = clamp_limit(limit)

    # 1. Songs explicitly marked as featured
    result = await db.execute(
        select(Song)
        .where(Song.is_featured == True, Song.status == SongStatus.PUBLISHED)
        .order_by(Song.created_at.desc())
        .limit(limit)
    )
    featured = list(result.scalars().all())
    if len(featured) >= limit:
        return featured

    # 2. Top up with published songs of featured artists, skipping ones already listed
    remaining = limit - len(featured)
    explicit_ids = {song.id for song in featured}
    query = (
        select(Song)
        .join(Artist, Song.artist_id == Artist.id)
        .where(Artist.featured == True, Song.status == SongStatus.PUBLISHED)
        .order_by(Song.created_at.desc())
    )
    if explicit_ids:
        query = query.where(Song.id.not_in(list(explicit_ids)))
    result = await db.execute(query.limit(remaining))
    return featured + list(result.scalars().all())


async def get_featured_artists(db: AsyncSession, limit: int = 10) -> List[Artist]:
    result = await db.execute(
        select(Artist)
        .where(Artist.featured == True)
        .order_by(Artist.updated_at.desc())
        .limit(clamp_limit(limit))
    )
    return list(result.scalars().all())


async def get_featured_playlists(db: AsyncSession, limit: int = 10) -> List[Playlist]:
    result = await db.execute(
        select(Playlist)
        .where(Playlist.is_featured == True, Playlist.visibility == PlaylistVisibility.PUBLIC)
        .order_by(Playlist.created_at.desc())
        .limit(clamp_limit(limit))
    )
    return list(result.scalars().all())
