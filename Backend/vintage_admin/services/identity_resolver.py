from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.core.exceptions import NameLoadError, TransientNetworkError
from vintage_admin.core.identity import IdentityResolver, NameLoader
from vintage_admin.core.normalization import display_name
from vintage_admin.models.artist import Artist
from vintage_admin.models.user import User


async def _read(db: AsyncSession, stmt):
    try:
        return await db.execute(stmt)
    except SQLAlchemyError as e:
        # The session cannot run anything else until the failed transaction is gone
        await db.rollback()
        if isinstance(e, DBAPIError) and (e.connection_invalidated or isinstance(e.orig, ConnectionError)):
            raise TransientNetworkError(str(e)) from e
        raise NameLoadError(str(e)) from e


def artist_name_loader(db: AsyncSession) -> NameLoader:
    """Existing artist display names, read from either name column."""
    async def load():
        result = await _read(db, select(Artist.id, Artist.stage_name, Artist.name))
        return [(row["id"], display_name(row)) for row in result.mappings()]
    return load


def user_email_loader(db: AsyncSession) -> NameLoader:
    async def load():
        result = await _read(db, select(User.id, User.email))
        return [(row.id, row.email) for row in result]
    return load


def get_artist_resolver(db: AsyncSession) -> IdentityResolver:
    return IdentityResolver(artist_name_loader(db), label="artist name")


def get_email_resolver(db: AsyncSession) -> IdentityResolver:
    return IdentityResolver(user_email_loader(db), label="email")
