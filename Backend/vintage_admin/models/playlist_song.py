import uuid
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base, utcnow


class PlaylistSong(Base):
    __tablename__ = "playlist_songs"
    __table_args__ = (
        UniqueConstraint("playlist_id", "song_id", name="uq_playlist_songs_playlist_song"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    playlist_id = Column(Uuid, ForeignKey("playlists.id"), nullable=False, index=True)
    song_id = Column(Uuid, ForeignKey("songs.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    added_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    playlist = relationship("Playlist", back_populates="entries")
