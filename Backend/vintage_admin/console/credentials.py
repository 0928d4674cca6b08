"""
Process-wide credential cache for the admin console.

There is exactly one store per process, reached through get_credential_store().
It is filled on a successful login and emptied on logout or whenever the API
answers 401.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class Credentials:
    access_token: str
    email: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and datetime.now(timezone.utc) >= self.expires_at


class CredentialStore:
    def __init__(self):
        self._credentials: Optional[Credentials] = None

    def set(self, access_token: str, expires_in: Optional[int] = None, email: Optional[str] = None) -> Credentials:
        expires_at = None
        if expires_in:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        self._credentials = Credentials(access_token=access_token, email=email, expires_at=expires_at)
        logger.info(f"Stored credentials for {email or 'admin session'}")
        return self._credentials

    def get(self) -> Optional[Credentials]:
        if self._credentials is not None and self._credentials.expired:
            logger.info("Cached token expired, clearing credentials")
            self._credentials = None
        return self._credentials

    @property
    def token(self) -> Optional[str]:
        credentials = self.get()
        return credentials.access_token if credentials else None

    @property
    def is_authenticated(self) -> bool:
        return self.get() is not None

    def clear(self) -> None:
        if self._credentials is not None:
            logger.info("Clearing cached credentials")
        self._credentials = None


_store: Optional[CredentialStore] = None


def get_credential_store() -> CredentialStore:
    global _store
    if _store is None:
        _store = CredentialStore()
    return _store
