"""
Runtime settings for the catalog service.
Every value has a sensible default and can be overridden with an environment variable.
"""

import os  # environment-based overrides
import sys  # stderr sink for logging

from loguru import logger  # console logger

# Where DataLoader.load_store looks for movies.jsonl, users.jsonl, watch_history.jsonl, reviews.jsonl
DATA_DIR = os.getenv("CATALOG_DATA_DIR", "data")

# Search
CANDIDATE_CAP = int(os.getenv("CATALOG_CANDIDATE_CAP", "100"))  # max movies fetched per search
POPULARITY_CEILING = int(os.getenv("CATALOG_POPULARITY_CEILING", "1000"))  # watch count that saturates popularity
DEFAULT_WEIGHTS = {
	"similarity": 0.5,
	"rating": 0.3,
	"popularity": 0.2,
}

# Trending
TRENDING_WINDOW_DAYS = int(os.getenv("CATALOG_TRENDING_WINDOW_DAYS", "90"))
TRENDING_LIMIT = int(os.getenv("CATALOG_TRENDING_LIMIT", "20"))
MAX_TRENDING_WINDOW_DAYS = int(os.getenv("CATALOG_MAX_TRENDING_WINDOW_DAYS", "3650"))  # ten years

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

LOG_LEVEL = os.getenv("CATALOG_LOG_LEVEL", "INFO")

# Base URL the Streamlit UI talks to
API_URL = os.getenv("CATALOG_API_URL", "http://localhost:8000")


def configure_logging(level: str = LOG_LEVEL) -> None:
	"""Replace loguru's default DEBUG sink with a stderr sink at the configured level."""
	logger.remove()
	logger.add(sys.stderr, level=level.upper())
	logger.debug(f"[Config] Logging configured at level {level.upper()}")
