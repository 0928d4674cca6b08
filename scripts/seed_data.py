import sys
import os
import asyncio

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'Backend')))

from vintage_admin.core.security import get_password_hash
from vintage_admin.models.registry import (
    Album, Artist, Genre, Playlist, PlaylistSong, Song, SongGenre, SongStatus, User, UserRole,
)
from vintage_admin.services.database import SessionLocal, engine


async def create_demo_data():
    async with SessionLocal() as session:
        # Create demo users; the admin can log in to the console right away
        admin = User(
            username="admin",
            email="admin@example.com",
            password_hash=get_password_hash(os.environ.get("SEED_ADMIN_PASSWORD", "change-me")),
            role=UserRole.ADMIN,
            is_verified=True,
        )
        listener = User(
            username="vinyl_lover",
            email="vinyl@example.com",
            password_hash=get_password_hash("demo-password"),
        )
        session.add_all([admin, listener])
        await session.flush()

        genres = {
            name: Genre(name=name, color_hex=color)
            for name, color in (("Rock", "#B22222"), ("Jazz", "#1E90FF"), ("Psychedelic", "#9932CC"))
        }
        session.add_all(genres.values())

        # Create demo artists; "pink floyd" is a deliberate legacy duplicate for the reconciler
        beatles = Artist(stage_name="The Beatles", featured=True)
        floyd = Artist(stage_name="Pink Floyd")
        floyd_legacy = Artist(name="pink floyd ")
        miles = Artist(stage_name="Miles Davis")
        session.add_all([beatles, floyd, floyd_legacy, miles])
        await session.flush()

        abbey_road = Album(artist_id=beatles.id, title="Abbey Road")
        session.add(abbey_road)
        await session.flush()

        songs = [
            ("Come Together", beatles, abbey_road, 259, ["Rock"]),
            ("Something", beatles, abbey_road, 182, ["Rock"]),
            ("Time", floyd, None, 413, ["Rock", "Psychedelic"]),
            ("Money", floyd_legacy, None, 382, ["Rock"]),
            ("So What", miles, None, 562, ["Jazz"]),
        ]
        created = []
        for title, artist, album, duration, genre_names in songs:
            song = Song(
                title=title,
                artist_id=artist.id,
                album_id=album.id if album else None,
                duration_seconds=duration,
                status=SongStatus.PUBLISHED,
            )
            song.genre_links = [SongGenre(genre=genres[name]) for name in genre_names]
            created.append(song)
        created[0].is_featured = True
        session.add_all(created)
        await session.flush()

        playlist = Playlist(user_id=listener.id, name="Sunday Spins", is_featured=True)
        playlist.entries = [PlaylistSong(song_id=song.id) for song in created[:3]]
        session.add(playlist)

        await session.commit()
        print(f"Seeded {len(created)} songs, {len(genres)} genres and 1 playlist")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(create_demo_data())
