from pydantic import BaseModel, EmailStr
from typing import List, Optional
from datetime import datetime

from models.genre_models import Genre


class UserProfile(BaseModel):
    id: str
    username: str
    email: EmailStr
    age: Optional[int] = None
    interestedGenres: List[Genre] = []
    createdAt: Optional[datetime] = None
