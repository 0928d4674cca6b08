from sqlalchemy import Column, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base


class SongGenre(Base):
    """One entry of a song's ordered genre set."""
    __tablename__ = "song_genres"

    song_id = Column(Uuid, ForeignKey("songs.id"), primary_key=True)
    genre_id = Column(Uuid, ForeignKey("genres.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)

    song = relationship("Song", back_populates="genre_links")
    genre = relationship("Genre", lazy="joined")
