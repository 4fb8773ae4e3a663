from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class LibraryEntry(BaseModel):
    novelId: str
    inLibrary: bool = False
    lastReadChapter: Optional[int] = None
    lastReadAt: Optional[datetime] = None
    addedAt: Optional[datetime] = None
