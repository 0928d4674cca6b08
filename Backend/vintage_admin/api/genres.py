import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.api.pagination import PageParams, paginate
from vintage_admin.core.exceptions import DependencyConflictError, DuplicateError, NotFoundException
from vintage_admin.core.normalization import GENRE, to_columns
from vintage_admin.core.security import get_current_admin
from vintage_admin.models.genre import Genre
from vintage_admin.models.song_genre import SongGenre
from vintage_admin.schemas.common import Page
from vintage_admin.schemas.genre import GenreCreate, GenreResponse, GenreUpdate
from vintage_admin.services.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def _get_genre_or_404(db: AsyncSession, genre_id: UUID) -> Genre:
    genre = await db.get(Genre, genre_id)
    if genre is None:
        raise NotFoundException("Genre", genre_id)
    return genre


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None):
    query = select(Genre.id).where(func.lower(Genre.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Genre.id != exclude_id)
    existing_id = await db.scalar(query)
    if existing_id is not None:
        raise DuplicateError("Genre", name, existing_id)


@router.get("/genres", response_model=Page[GenreResponse])
async def list_genres(params: PageParams = Depends(), db: AsyncSession = Depends(get_db)):
    genres, total = await paginate(db, select(Genre).order_by(Genre.name), params)
    return Page[GenreResponse](items=[GenreResponse.from_model(g) for g in genres], total=total)


@router.get("/genres/{genre_id}", response_model=GenreResponse)
async def get_genre(genre_id: UUID, db: AsyncSession = Depends(get_db)):
    return GenreResponse.from_model(await _get_genre_or_404(db, genre_id))


@router.post("/genres", response_model=GenreResponse, status_code=status.HTTP_201_CREATED)
async def create_genre(genre_data: GenreCreate, db: AsyncSession = Depends(get_db)):
    name = genre_data.name.strip()
    await _ensure_unique_name(db, name)

    genre = Genre(**to_columns(genre_data.model_dump(exclude={"name"}), GENRE), name=name)
    db.add(genre)
    await db.commit()
    logger.info(f"Created genre '{name}'")
    return GenreResponse.from_model(genre)


@router.patch("/genres/{genre_id}", response_model=GenreResponse)
async def update_genre(genre_id: UUID, genre_data: GenreUpdate, db: AsyncSession = Depends(get_db)):
    genre = await _get_genre_or_404(db, genre_id)
    changes = genre_data.model_dump(exclude_unset=True)

    if changes.get("name") is not None:
        changes["name"] = changes["name"].strip()
        await _ensure_unique_name(db, changes["name"], exclude_id=genre.id)
    elif "name" in changes:
        changes.pop("name")

    for column, value in to_columns(changes, GENRE).items():
        setattr(genre, column, value)
    await db.commit()
    return GenreResponse.from_model(genre)


@router.delete("/genres/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_genre(genre_id: UUID, db: AsyncSession = Depends(get_db)):
    genre = await _get_genre_or_404(db, genre_id)

    # Songs keep their genres; a genre in use cannot disappear underneath them
    used_by = await db.scalar(
        select(func.count()).select_from(SongGenre).where(SongGenre.genre_id == genre.id)
    )
    if used_by:
        raise DependencyConflictError("Genre", genre.name, {"songs": used_by})

    await db.delete(genre)
    await db.commit()
    logger.info(f"Deleted genre '{genre.name}'")
