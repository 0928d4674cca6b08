import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.api.pagination import PageParams, paginate
from vintage_admin.core.exceptions import DependencyConflictError, DuplicateError, NotFoundException
from vintage_admin.core.normalization import USER, to_columns
from vintage_admin.core.security import get_current_admin, get_current_user, get_password_hash
from vintage_admin.models.artist import Artist
from vintage_admin.models.artist_follower import ArtistFollower
from vintage_admin.models.playlist import Playlist
from vintage_admin.models.user import User
from vintage_admin.schemas.common import Page
from vintage_admin.schemas.user import EmailCheckResponse, UserCreate, UserResponse, UserUpdate
from vintage_admin.services.database import get_db
from vintage_admin.services.identity_resolver import get_email_resolver

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundException("User", user_id)
    return user


async def _ensure_unique(db: AsyncSession, email: str = None, username: str = None, exclude_id: UUID = None):
    if email is not None:
        match = await get_email_resolver(db).resolve(email, exclude_id=exclude_id)
        if match.is_duplicate:
            raise DuplicateError("Email", email, match.matched_id)

    if username is not None:
        query = select(User.id).where(User.username == username)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        existing_id = await db.scalar(query)
        if existing_id is not None:
            raise DuplicateError("Username", username, existing_id)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    email = user_data.email.lower()
    await _ensure_unique(db, email=email, username=user_data.username)

    values = to_columns(user_data.model_dump(exclude={"password", "email"}), USER)
    db_user = User(email=email, password_hash=get_password_hash(user_data.password), **values)
    db.add(db_user)
    await db.commit()

    logger.info(f"Admin {admin.id} created user {db_user.id} ({db_user.role.value})")
    return UserResponse.from_model(db_user)


@router.get("/users/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_user)):
    """
    Fetch the current logged-in user.
    """
    return UserResponse.from_model(current_user)


@router.get("/users/check-email", response_model=EmailCheckResponse)
async def check_email(
    email: str = Query(..., min_length=1),
    exclude_id: UUID = Query(None, alias="excludeId"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    match = await get_email_resolver(db).resolve(email, exclude_id=exclude_id)
    return EmailCheckResponse(
        is_duplicate=match.is_duplicate,
        matched_id=str(match.matched_id) if match.matched_id is not None else None,
    )


@router.get("/users", response_model=Page[UserResponse])
async def list_users(
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    users, total = await paginate(db, select(User).order_by(User.created_at.desc()), params)
    return Page[UserResponse](items=[UserResponse.from_model(u) for u in users], total=total)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return UserResponse.from_model(await _get_user_or_404(db, user_id))


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    user = await _get_user_or_404(db, user_id)

    # Only the name fields may be cleared
    changes = {
        key: value for key, value in user_data.model_dump(exclude_unset=True).items()
        if value is not None or key in ("first_name", "last_name")
    }
    if changes.get("email") is not None:
        changes["email"] = changes["email"].lower()
    await _ensure_unique(
        db,
        email=changes.get("email") if changes.get("email") != user.email else None,
        username=changes.get("username") if changes.get("username") != user.username else None,
        exclude_id=user.id,
    )

    for column, value in to_columns(changes, USER).items():
        setattr(user, column, value)
    await db.commit()
    return UserResponse.from_model(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    user = await _get_user_or_404(db, user_id)

    # Playlists and an artist profile hang off the account; they are never removed implicitly
    dependencies = {
        "playlists": await db.scalar(select(func.count()).select_from(Playlist).where(Playlist.user_id == user.id)),
        "artist profiles": await db.scalar(select(func.count()).select_from(Artist).where(Artist.user_id == user.id)),
    }
    if any(dependencies.values()):
        raise DependencyConflictError("User", user_id, dependencies)

    await db.execute(delete(ArtistFollower).where(ArtistFollower.user_id == user.id))
    await db.delete(user)
    await db.commit()
    logger.info(f"Admin {admin.id} deleted user {user_id}")
