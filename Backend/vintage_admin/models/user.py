import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base, utcnow


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    ARTIST = "artist"
    USER = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Stored lower-cased; uniqueness is case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(Enum(UserRole, native_enum=False, values_callable=lambda e: [m.value for m in e]),
                  default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Zero-or-one artist profile
    artist = relationship("Artist", back_populates="owner", uselist=False, passive_deletes=True)
    playlists = relationship("Playlist", back_populates="owner", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
