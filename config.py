import os
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "novelnestdb")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "./data/logs")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Reader sessions kept in memory before the oldest is evicted
MAX_OPEN_READERS = int(os.getenv("MAX_OPEN_READERS", 10000))

EXPLORE_LIMIT = 20
RANKING_LIMIT = 50
CURRENTLY_READING_LIMIT = 5
STATS_WINDOW_DAYS = 7
MAX_GENRES = 3
