"""
Request and response schemas for galleries, comments and uploads.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from schemas.user import UserSummary

class CommentText(BaseModel):
    """Body of the post/edit comment requests."""
    comment: Optional[str] = Field(None, description="Comment text; trimmed, must not be blank")

class CommentOut(BaseModel):
    """A comment with its author denormalized."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    photo_id: str
    comment: str
    date_time: datetime
    user: UserSummary

class PhotoOut(BaseModel):
    """Gallery entry with its comment thread attached."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    file_name: str
    date_time: datetime
    owner: Optional[UserSummary] = None
    comments: List[CommentOut] = []

class PhotoUploadResponse(BaseModel):
    id: str
    stored_name: str
    timestamp: datetime

class MessageResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None
