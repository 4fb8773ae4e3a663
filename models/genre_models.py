from enum import Enum
from typing import Iterable, List

from config import MAX_GENRES
from exceptions import GenreLimitError


class Genre(str, Enum):
    HORROR = "Horror"
    FANTASY = "Fantasy"
    ADVENTURE = "Adventure"
    MYSTERY = "Mystery"
    LITERARY = "Literary"
    DYSTOPIAN = "Dystopian"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    THRILLER = "Thriller"
    DETECTIVE = "Detective"
    URBAN = "Urban"
    ACTION = "Action"
    ACG = "ACG"
    GAMES = "Games"
    LGBT = "LGBT+"
    WAR = "War"
    REALISTIC = "Realistic"
    HISTORY = "History"
    CHERADS = "Cherads"
    GENERAL = "General"
    TEEN = "Teen"
    DEVOTIONAL = "Devotional"
    POETRY = "Poetry"


def validate_genre_selection(genres: Iterable[Genre], limit: int = MAX_GENRES) -> List[Genre]:
    """Drop repeats (keeping first-selected order) and enforce the limit.

    Raises GenreLimitError before anything reaches the store.
    """
    selected: List[Genre] = []
    for genre in genres:
        if genre not in selected:
            selected.append(genre)
    if len(selected) > limit:
        raise GenreLimitError(len(selected), limit)
    return selected


def genre_values(genres: Iterable[Genre]) -> List[str]:
    return [g.value if isinstance(g, Genre) else str(g) for g in genres]
