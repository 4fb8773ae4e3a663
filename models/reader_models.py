from pydantic import BaseModel, Field
from typing import Optional


class ScrollEvent(BaseModel):
    scrollTop: float = Field(..., ge=0)
    clientHeight: float = Field(..., ge=0)
    scrollHeight: float = Field(..., ge=0)


class ScrollResult(BaseModel):
    mountId: str
    state: str
    completed: bool


class ChapterView(BaseModel):
    readerId: str
    mountId: Optional[str] = None
    novel: dict
    chapter: dict
    previousChapter: Optional[dict] = None
    nextChapter: Optional[dict] = None
