import logging
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit, urlunsplit
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.core.exceptions import NotFoundException, ValidationFailedError
from vintage_admin.models.artist import Artist
from vintage_admin.models.artist_follower import ArtistFollower
from vintage_admin.models.genre import Genre
from vintage_admin.models.playlist import Playlist
from vintage_admin.models.song import Song, SongStatus
from vintage_admin.models.song_genre import SongGenre
from vintage_admin.models.user import User

logger = logging.getLogger(__name__)


async def genre_usage(db: AsyncSession) -> List[Tuple[Genre, int]]:
    """Every genre with the number of songs tagged with it, most used first."""
    usage = func.count(SongGenre.song_id).label("song_count")
    result = await db.execute(
        select(Genre, usage)
        .outerjoin(SongGenre, SongGenre.genre_id == Genre.id)
        .group_by(Genre.id)
        .order_by(usage.desc(), Genre.name)
    )
    return [(genre, count) for genre, count in result.all()]


async def resolve_genres(db: AsyncSession, names: Sequence[str]) -> List[Genre]:
    """
    Look up genres by name (case-insensitive), keeping the order of `names`.
    Raises ValidationFailedError listing every name that does not exist.
    """
    if not names:
        return []
    wanted = [name.casefold() for name in names]
    result = await db.execute(select(Genre).where(func.lower(Genre.name).in_(wanted)))
    by_key = {genre.name.casefold(): genre for genre in result.scalars().all()}

    unknown = [name for name in names if name.casefold() not in by_key]
    if unknown:
        raise ValidationFailedError(f"Unknown genre(s): {', '.join(unknown)}")
    return [by_key[key] for key in wanted]


async def replace_song_genres(db: AsyncSession, song: Song, names: Sequence[str]) -> Song:
    genres = await resolve_genres(db, names)
    existing = {link.genre_id: link for link in song.genre_links}

    # Reuse rows for genres the song already has so the (song, genre) key never collides
    song.genre_links = [existing.get(genre.id) or SongGenre(genre=genre) for genre in genres]
    song.genre_links.reorder()
    return song


async def set_song_genres(db: AsyncSession, song_id: UUID, names: Sequence[str]) -> Song:
    song = await db.get(Song, song_id)
    if song is None:
        raise NotFoundException("Song", song_id)

    await replace_song_genres(db, song, names)
    await db.commit()
    logger.info(f"Song '{song.title}' genres set to: {', '.join(song.genre_names) or 'none'}")
    return song


def _swap_host(url: Optional[str], from_host: str, to_host: str) -> Optional[str]:
    if not url:
        return url
    parts = urlsplit(url)
    if parts.netloc.lower() != from_host.lower():
        return url
    return urlunsplit(parts._replace(netloc=to_host))


async def fix_song_urls(db: AsyncSession, from_host: str, to_host: str) -> int:
    """
    Rewrite the host of file_url / cover_art_url for songs still pointing at
    `from_host`. Returns the number of songs changed.
    """
    pattern = f"%{from_host}%"
    result = await db.execute(
        select(Song).where(or_(Song.file_url.ilike(pattern), Song.cover_art_url.ilike(pattern)))
    )

    updated = 0
    for song in result.scalars().all():
        file_url = _swap_host(song.file_url, from_host, to_host)
        cover_art_url = _swap_host(song.cover_art_url, from_host, to_host)
        if file_url == song.file_url and cover_art_url == song.cover_art_url:
            continue
        song.file_url = file_url
        song.cover_art_url = cover_art_url
        updated += 1

    await db.commit()
    logger.info(f"Rewrote {from_host} -> {to_host} on {updated} song(s)")
    return updated


def _count(model, *criteria):
    return select(func.count()).select_from(model).where(*criteria).scalar_subquery()


async def catalog_stats(db: AsyncSession) -> Dict[str, int]:
    """Headline counts for the dashboard, read in one round trip."""
    result = await db.execute(
        select(
            _count(User).label("users"),
            _count(Artist).label("artists"),
            _count(Song).label("songs"),
            _count(Song, Song.status == SongStatus.PUBLISHED).label("published_songs"),
            _count(Genre).label("genres"),
            _count(Playlist).label("playlists"),
            _count(Song, Song.is_featured == True).label("featured_songs"),
            _count(Artist, Artist.featured == True).label("featured_artists"),
            _count(Playlist, Playlist.is_featured == True).label("featured_playlists"),
        )
    )
    return dict(result.one()._mapping)


async def top_artists(db: AsyncSession, limit: int) -> List[Tuple[Artist, int, int]]:
    """Artists with the most followers (then most songs), with both counts."""
    followers = (
        select(func.count(ArtistFollower.id))
        .where(ArtistFollower.artist_id == Artist.id)
        .correlate(Artist)
        .scalar_subquery()
        .label("follower_count")
    )
    songs = (
        select(func.count(Song.id))
        .where(Song.artist_id == Artist.id)
        .correlate(Artist)
        .scalar_subquery()
        .label("song_count")
    )
    result = await db.execute(
        select(Artist, followers, songs)
        .order_by(followers.desc(), songs.desc(), Artist.created_at)
        .limit(limit)
    )
    return [(artist, follower_count, song_count) for artist, follower_count, song_count in result.all()]
