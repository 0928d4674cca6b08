import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base, utcnow


class Artist(Base):
    __tablename__ = "artists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    stage_name = Column(String(150), nullable=True, index=True)
    # Legacy display-name column; older rows only have this one filled in
    name = Column(String(150), nullable=True)
    user_id = Column(Uuid, ForeignKey("users.id"), unique=True, nullable=True)
    biography = Column(Text, nullable=True)
    nationality_code = Column(String(2), nullable=True)
    featured = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", back_populates="artist")
    # An artist has many songs (one-to-many relationship)
    songs = relationship("Song", back_populates="artist", passive_deletes=True)
    albums = relationship("Album", back_populates="artist", passive_deletes=True)
    followers = relationship("ArtistFollower", back_populates="artist", passive_deletes=True)
