"""Micropost model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class Micropost(Base):
    """Short post authored by a user."""

    __tablename__ = "microposts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(String(140), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="microposts")
