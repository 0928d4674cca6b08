import uuid
from sqlalchemy import Column, String, DateTime, Text, Uuid

from vintage_admin.services.database import Base, utcnow


class Genre(Base):
    __tablename__ = "genres"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique case-insensitively; enforced by the genres router before writes
    name = Column(String(50), unique=True, nullable=False)
    color_hex = Column(String(7), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
