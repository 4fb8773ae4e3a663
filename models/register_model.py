from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional

from models.genre_models import Genre, validate_genre_selection


class RegisterUser(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    username: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0, le=150)
    interestedGenres: List[Genre] = []

    @field_validator("interestedGenres")
    @classmethod
    def check_genres(cls, v: List[Genre]) -> List[Genre]:
        return validate_genre_selection(v)
