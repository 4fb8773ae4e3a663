from .auth_routes import router as auth_routes
from .novel_routes import router as novel_routes
from .chapter_routes import router as chapter_routes
from .library_routes import router as library_routes
from .profile_routes import router as profile_routes

__all__ = [
    'auth_routes',
    'novel_routes',
    'chapter_routes',
    'library_routes',
    'profile_routes'
]
