"""
Input validation shared by the search core and the services.
Every check raises InvalidInputError before any work is done.
"""

import re
from typing import Optional

from . import config
from .errors import InvalidInputError

RE_IDENTIFIER = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")
RE_EMAIL = re.compile(r"^\S+@\S+\.\S+$")

SUBSCRIPTION_TYPES = ('free', 'premium', 'vip')
MAX_REVIEW_LENGTH = 1000


def validate_query(query: Optional[str]) -> str:
	if query is None or not query.strip():
		raise InvalidInputError("Search query is required")
	return query.strip()


def validate_identifier(value: Optional[str], what: str = 'ID') -> str:
	if not value or not RE_IDENTIFIER.match(value):
		raise InvalidInputError(f"Invalid {what} format: {value!r}")
	return value


def validate_optional_identifier(value: Optional[str], what: str = 'ID') -> Optional[str]:
	"""Empty means "not given"; anything else must be well-formed."""
	if value is None or value == '':
		return None
	return validate_identifier(value, what)


def validate_min_rating(min_rating: Optional[float]) -> Optional[float]:
	if min_rating is None:
		return None
	if not 0 <= min_rating <= 10:
		raise InvalidInputError("Min rating must be 0-10")
	return float(min_rating)


def validate_pagination(page: int, limit: int) -> None:
	if page < 1:
		raise InvalidInputError("Page must be positive integer")
	if not 1 <= limit <= config.MAX_PAGE_SIZE:
		raise InvalidInputError(f"Limit must be 1-{config.MAX_PAGE_SIZE}")


def validate_review(rating: int, review_text: Optional[str]) -> None:
	if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 10:
		raise InvalidInputError("Rating must be between 1-10")
	if review_text and len(review_text.strip()) > MAX_REVIEW_LENGTH:
		raise InvalidInputError(f"Review text max {MAX_REVIEW_LENGTH} characters")


def validate_email(email: Optional[str]) -> str:
	email = (email or '').strip().lower()
	if not RE_EMAIL.match(email):
		raise InvalidInputError("Please provide a valid email")
	return email


def validate_subscription(subscription_type: Optional[str]) -> str:
	value = (subscription_type or 'free').strip().lower()
	if value not in SUBSCRIPTION_TYPES:
		raise InvalidInputError(f"Subscription type must be one of {', '.join(SUBSCRIPTION_TYPES)}")
	return value


def validate_watch(watch_duration: int, completion_percentage: int) -> None:
	if watch_duration < 0:
		raise InvalidInputError("Watch duration cannot be negative")
	if not 0 <= completion_percentage <= 100:
		raise InvalidInputError("Completion percentage must be 0-100")


def validate_window(window_days: int) -> int:
	if window_days < 1:
		raise InvalidInputError("Trending window must be at least one day")
	if window_days > config.MAX_TRENDING_WINDOW_DAYS:
		raise InvalidInputError(f"Trending window must be at most {config.MAX_TRENDING_WINDOW_DAYS} days")
	return window_days
