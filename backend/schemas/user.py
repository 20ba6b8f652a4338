from typing import Optional
from pydantic import BaseModel, ConfigDict

class UserSummary(BaseModel):
    """Directory entry and denormalized comment author."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str

class UserDetail(UserSummary):
    location: Optional[str] = None
    description: Optional[str] = None
    occupation: Optional[str] = None
