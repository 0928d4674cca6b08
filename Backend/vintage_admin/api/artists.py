import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.api.pagination import PageParams, paginate
from vintage_admin.core.exceptions import (
    ConflictError,
    DependencyConflictError,
    DuplicateError,
    NotFoundException,
)
from vintage_admin.core.normalization import ARTIST, to_columns
from vintage_admin.core.security import get_current_admin
from vintage_admin.models.album import Album
from vintage_admin.models.artist import Artist
from vintage_admin.models.artist_follower import ArtistFollower
from vintage_admin.models.song import Song
from vintage_admin.models.user import User
from vintage_admin.schemas.artist import (
    ArtistCreate,
    ArtistResponse,
    ArtistUpdate,
    FeaturedUpdate,
    NameCheckResponse,
)
from vintage_admin.schemas.common import Page
from vintage_admin.services import featured_service
from vintage_admin.services.database import get_db
from vintage_admin.services.identity_resolver import get_artist_resolver

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def _get_artist_or_404(db: AsyncSession, artist_id: UUID) -> Artist:
    artist = await db.get(Artist, artist_id)
    if artist is None:
        raise NotFoundException("Artist", artist_id)
    return artist


async def _check_owner(db: AsyncSession, owner_user_id: UUID, artist_id: Optional[UUID] = None):
    """An account can back at most one artist profile."""
    if await db.get(User, owner_user_id) is None:
        raise NotFoundException("User", owner_user_id)

    query = select(Artist.id).where(Artist.user_id == owner_user_id)
    if artist_id is not None:
        query = query.where(Artist.id != artist_id)
    linked_id = await db.scalar(query)
    if linked_id is not None:
        raise ConflictError(
            {"message": f"User {owner_user_id} is already linked to artist {linked_id}", "matchedId": str(linked_id)}
        )


@router.get("/artists", response_model=Page[ArtistResponse])
async def list_artists(
    params: PageParams = Depends(),
    search: Optional[str] = Query(None),
    featured: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(Artist).order_by(func.coalesce(Artist.stage_name, Artist.name), Artist.id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Artist.stage_name.ilike(pattern), Artist.name.ilike(pattern)))
    if featured is not None:
        query = query.where(Artist.featured == featured)

    artists, total = await paginate(db, query, params)
    return Page[ArtistResponse](items=[ArtistResponse.from_model(a) for a in artists], total=total)


@router.get("/artists/check-name", response_model=NameCheckResponse)
async def check_artist_name(
    name: str = Query(..., min_length=1),
    exclude_id: Optional[UUID] = Query(None, alias="excludeId"),
    db: AsyncSession = Depends(get_db),
):
    """Live duplicate check used by the artist form before submitting."""
    match = await get_artist_resolver(db).resolve(name, exclude_id=exclude_id)
    return NameCheckResponse(
        is_duplicate=match.is_duplicate,
        matched_id=str(match.matched_id) if match.matched_id is not None else None,
        matched_name=match.matched_name,
    )


@router.get("/artists/{artist_id}", response_model=ArtistResponse)
async def get_artist(artist_id: UUID, db: AsyncSession = Depends(get_db)):
    return ArtistResponse.from_model(await _get_artist_or_404(db, artist_id))


@router.post("/artists", response_model=ArtistResponse, status_code=status.HTTP_201_CREATED)
async def create_artist(artist_data: ArtistCreate, response: Response, db: AsyncSession = Depends(get_db)):
    stage_name = artist_data.stage_name.strip()

    match = await get_artist_resolver(db).resolve(stage_name)
    if match.is_duplicate:
        if artist_data.link_existing and match.matched_id is not None:
            logger.info(f"Linking '{stage_name}' to existing artist {match.matched_id}")
            response.status_code = status.HTTP_200_OK
            return ArtistResponse.from_model(await _get_artist_or_404(db, match.matched_id))
        raise DuplicateError("Artist name", stage_name, match.matched_id)

    if artist_data.owner_user_id is not None:
        await _check_owner(db, artist_data.owner_user_id)

    values = to_columns(artist_data.model_dump(exclude={"link_existing", "stage_name"}), ARTIST)
    artist = Artist(stage_name=stage_name, **values)
    db.add(artist)
    await db.commit()

    logger.info(f"Created artist '{stage_name}' ({artist.id})")
    return ArtistResponse.from_model(artist)


@router.patch("/artists/{artist_id}", response_model=ArtistResponse)
async def update_artist(artist_id: UUID, artist_data: ArtistUpdate, db: AsyncSession = Depends(get_db)):
    artist = await _get_artist_or_404(db, artist_id)
    changes = artist_data.model_dump(exclude_unset=True)

    if changes.get("stage_name") is not None:
        changes["stage_name"] = changes["stage_name"].strip()
        match = await get_artist_resolver(db).resolve(changes["stage_name"], exclude_id=artist.id)
        if match.is_duplicate:
            raise DuplicateError("Artist name", changes["stage_name"], match.matched_id)
    elif "stage_name" in changes:
        # The display name cannot be cleared
        changes.pop("stage_name")

    if changes.get("owner_user_id") is not None and changes["owner_user_id"] != artist.user_id:
        await _check_owner(db, changes["owner_user_id"], artist_id=artist.id)

    for column, value in to_columns(changes, ARTIST).items():
        setattr(artist, column, value)
    await db.commit()
    return ArtistResponse.from_model(artist)


@router.patch("/artists/{artist_id}/featured", response_model=ArtistResponse)
async def set_artist_featured(artist_id: UUID, body: FeaturedUpdate, db: AsyncSession = Depends(get_db)):
    artist = await featured_service.set_artist_featured(db, artist_id, body.featured)
    return ArtistResponse.from_model(artist)


@router.delete("/artists/{artist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_artist(artist_id: UUID, db: AsyncSession = Depends(get_db)):
    artist = await _get_artist_or_404(db, artist_id)

    dependencies = {}
    for label, model in (("songs", Song), ("albums", Album), ("followers", ArtistFollower)):
        dependencies[label] = await db.scalar(
            select(func.count()).select_from(model).where(model.artist_id == artist.id)
        )
    if any(dependencies.values()):
        raise DependencyConflictError("Artist", artist_id, dependencies)

    await db.delete(artist)
    await db.commit()
    logger.info(f"Deleted artist {artist_id}")
