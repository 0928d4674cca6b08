"""Shared fixtures: in-memory SQLite database, API client and record builders."""

import os

# Settings are read at import time, so the environment has to be in place first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["ENVIRONMENT"] = "development"

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from vintage_admin.core.security import create_access_token, get_password_hash
from vintage_admin.models.registry import (
    Album,
    Artist,
    ArtistFollower,
    Genre,
    Playlist,
    PlaylistSong,
    Song,
    SongGenre,
    SongStatus,
    User,
    UserRole,
)
from vintage_admin.services.database import Base, get_db

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """API client whose requests run against the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class RecordBuilder:
    """Creates committed rows with sensible defaults."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def user(self, role: UserRole = UserRole.USER, password: str = "secret-pass", **kwargs) -> User:
        n = self._next()
        kwargs.setdefault("email", f"user{n}@example.com")
        kwargs.setdefault("username", f"user{n}")
        return await self._save(User(role=role, password_hash=get_password_hash(password), **kwargs))

    async def artist(self, stage_name: Optional[str] = "Artist", minutes: int = 0, **kwargs) -> Artist:
        kwargs.setdefault("created_at", BASE_TIME + timedelta(minutes=minutes))
        return await self._save(Artist(stage_name=stage_name, **kwargs))

    async def album(self, artist: Artist, title: str = "Album") -> Album:
        return await self._save(Album(artist_id=artist.id, title=title))

    async def genre(self, name: str, color_hex: str = "#123456") -> Genre:
        return await self._save(Genre(name=name, color_hex=color_hex))

    async def song(
        self,
        artist: Artist,
        title: Optional[str] = None,
        genres: Optional[List[Genre]] = None,
        status: SongStatus = SongStatus.PUBLISHED,
        **kwargs,
    ) -> Song:
        song = Song(
            title=title or f"Song {self._next()}",
            artist_id=artist.id,
            status=status,
            **kwargs,
        )
        song.genre_links = [SongGenre(genre=genre) for genre in genres or []]
        return await self._save(song)

    async def follow(self, artist: Artist, user: User) -> ArtistFollower:
        return await self._save(ArtistFollower(artist_id=artist.id, user_id=user.id))

    async def playlist(self, owner: User, songs: Optional[List[Song]] = None, **kwargs) -> Playlist:
        kwargs.setdefault("name", f"Playlist {self._next()}")
        playlist = Playlist(user_id=owner.id, **kwargs)
        playlist.entries = [PlaylistSong(song_id=song.id) for song in songs or []]
        return await self._save(playlist)


@pytest.fixture
def make(db) -> RecordBuilder:
    return RecordBuilder(db)


@pytest.fixture
async def admin_user(make) -> User:
    return await make.user(role=UserRole.ADMIN, email="admin@example.com", username="admin")


@pytest.fixture
def admin_headers(admin_user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(admin_user.id))}"}
