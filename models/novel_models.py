from pydantic import BaseModel, Field, HttpUrl, field_validator
from typing import List, Optional
from enum import Enum

from models.genre_models import Genre, validate_genre_selection


class LeadingCharacter(str, Enum):
    MALE = "male"
    FEMALE = "female"


class CreateNovelModel(BaseModel):
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    genre: List[Genre] = Field(..., min_length=1)
    leadingCharacter: LeadingCharacter = LeadingCharacter.MALE
    story: str = Field(..., min_length=1)
    novelCoverPage: Optional[HttpUrl] = None

    @field_validator("genre")
    @classmethod
    def check_genres(cls, v: List[Genre]) -> List[Genre]:
        return validate_genre_selection(v)


class UpdateNovelModel(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    genre: Optional[List[Genre]] = Field(None, min_length=1)
    leadingCharacter: Optional[LeadingCharacter] = None
    story: Optional[str] = Field(None, min_length=1)
    novelCoverPage: Optional[HttpUrl] = None

    @field_validator("genre")
    @classmethod
    def check_genres(cls, v: Optional[List[Genre]]) -> Optional[List[Genre]]:
        if v is None:
            return v
        return validate_genre_selection(v)
