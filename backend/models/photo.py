"""
Photo and comment models.

A photo is owned by exactly one user and a comment by exactly one author; both
ownership links are fixed at creation. Owners, authors and photos are
referenced by identity only: users are provisioned and removed outside this
service, and deleting a photo leaves its comments in place.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from services.db import Base
from services.identity import new_identity


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Photo(Base):
    """Uploaded photo record; the file itself lives in the upload directory."""
    __tablename__ = "photos"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(24), unique=True, nullable=False, index=True, default=new_identity)

    # Ownership
    user_id = Column(String(24), nullable=False, index=True)

    # Stored name assigned by upload admission
    file_name = Column(String(255), unique=True, nullable=False)

    date_time = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)

    def __repr__(self):
        return f"<Photo(id='{self.id}', file_name='{self.file_name}', user_id='{self.user_id}')>"


class Comment(Base):
    """Comment on a photo, editable and deletable only by its author."""
    __tablename__ = "comments"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(24), unique=True, nullable=False, index=True, default=new_identity)

    # Plain references: photos and users can go away without touching comments
    photo_id = Column(String(24), nullable=False, index=True)
    user_id = Column(String(24), nullable=False, index=True)

    comment = Column(Text, nullable=False)
    date_time = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def __repr__(self):
        return f"<Comment(id='{self.id}', photo_id='{self.photo_id}', user_id='{self.user_id}')>"
