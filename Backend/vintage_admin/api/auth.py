import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from vintage_admin.core.config import settings
from vintage_admin.core.exceptions import UnauthorizedError
from vintage_admin.core.security import create_access_token, verify_password
from vintage_admin.models.user import User
from vintage_admin.schemas.auth import LoginRequest, TokenResponse
from vintage_admin.services.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth/login", response_model=TokenResponse)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    # Same message for unknown email and wrong password
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login for {credentials.email}")
        raise UnauthorizedError("Incorrect email or password")
    if not user.is_active:
        raise UnauthorizedError("Account is disabled")

    token = create_access_token(str(user.id))
    logger.info(f"User {user.id} logged in")
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
