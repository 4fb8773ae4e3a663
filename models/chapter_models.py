from pydantic import BaseModel, Field
from typing import Optional


class AddChapterModel(BaseModel):
    chapterNumber: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class UpdateChapterModel(BaseModel):
    chapterNumber: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
