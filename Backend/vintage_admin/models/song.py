import enum
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum, ForeignKey, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from vintage_admin.models.song_genre import SongGenre
from vintage_admin.services.database import Base, utcnow


class SongStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Song(Base):
    __tablename__ = "songs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    duration_seconds = Column(Integer, default=0, nullable=False)
    file_url = Column(String, nullable=True)
    cover_art_url = Column(String, nullable=True)
    status = Column(Enum(SongStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
                    default=SongStatus.DRAFT, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Link to its artist
    artist_id = Column(Uuid, ForeignKey("artists.id"), nullable=False, index=True)
    artist = relationship("Artist", back_populates="songs")

    album_id = Column(Uuid, ForeignKey("albums.id"), nullable=True)

    # Ordered genre set; loaded eagerly since async sessions cannot lazy load
    genre_links = relationship(
        SongGenre,
        back_populates="song",
        order_by=SongGenre.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def genre_names(self) -> list[str]:
        return [link.genre.name for link in self.genre_links if link.genre is not None]
