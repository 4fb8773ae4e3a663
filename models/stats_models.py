from pydantic import BaseModel
from typing import List


class DailyReads(BaseModel):
    name: str  # short weekday, e.g. "Mon"
    date: str  # YYYY-MM-DD
    reads: int = 0


class ReadingStats(BaseModel):
    userId: str
    days: List[DailyReads] = []
    currentlyReading: List[dict] = []
