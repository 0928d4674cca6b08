import uuid
from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base, utcnow


class ArtistFollower(Base):
    __tablename__ = "artist_followers"
    __table_args__ = (
        UniqueConstraint("artist_id", "user_id", name="uq_artist_followers_artist_user"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    artist_id = Column(Uuid, ForeignKey("artists.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    followed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    artist = relationship("Artist", back_populates="followers")
