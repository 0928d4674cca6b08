import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from vintage_admin.services.database import Base, utcnow


class Album(Base):
    __tablename__ = "albums"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    artist_id = Column(Uuid, ForeignKey("artists.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    artist = relationship("Artist", back_populates="albums")
