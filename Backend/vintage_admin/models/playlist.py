import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from vintage_admin.models.playlist_song import PlaylistSong
from vintage_admin.services.database import Base, utcnow


class PlaylistVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    visibility = Column(Enum(PlaylistVisibility, native_enum=False, values_callable=lambda e: [m.value for m in e]),
                        default=PlaylistVisibility.PUBLIC, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", back_populates="playlists")
    entries = relationship(
        PlaylistSong,
        back_populates="playlist",
        order_by=PlaylistSong.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def song_ids(self) -> list:
        return [entry.song_id for entry in self.entries]
