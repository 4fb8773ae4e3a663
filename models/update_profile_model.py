from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from models.genre_models import Genre, validate_genre_selection


class UpdateUserProfile(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    age: Optional[int] = Field(None, ge=0, le=150)
    interestedGenres: Optional[List[Genre]] = None

    @field_validator("interestedGenres")
    @classmethod
    def check_genres(cls, v: Optional[List[Genre]]) -> Optional[List[Genre]]:
        if v is None:
            return v
        return validate_genre_selection(v)
