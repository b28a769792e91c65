"""
User service.
Viewer accounts, watch recording and watch-history summaries.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .errors import DuplicateError, InvalidInputError, NotFoundError
from .models import Review, User, WatchEvent
from .pagination import paginate
from .personalization import FavoriteGenreResolver
from .reviews import ReviewService
from .store import MovieStore, new_id
from .validators import (
	validate_email,
	validate_identifier,
	validate_review,
	validate_subscription,
	validate_watch,
)


class UserService:
	def __init__(
		self,
		store: MovieStore,
		resolver: Optional[FavoriteGenreResolver] = None,
		reviews: Optional[ReviewService] = None,
	):
		self.store = store
		self.resolver = resolver or FavoriteGenreResolver(store)
		self.reviews = reviews or ReviewService(store)

	def list_users(self) -> List[User]:
		return self.store.list_users()

	def get_user(self, user_id: str) -> User:
		validate_identifier(user_id, 'user ID')
		user = self.store.get_user(user_id)
		if user is None:
			raise NotFoundError('User not found')
		return user

	def create_user(self, name: str, email: str, subscription_type: Optional[str] = None) -> User:
		if not name or not name.strip():
			raise InvalidInputError('User name is required')
		email = validate_email(email)
		subscription = validate_subscription(subscription_type)

		user = self.store.add_user_if_email_absent(User(
			id=new_id(),
			name=name.strip(),
			email=email,
			subscription_type=subscription,
			created_at=datetime.now(timezone.utc),
		))
		if user is None:
			raise DuplicateError('Duplicate field value entered: email')
		logger.info(f"[Users] Created user {user.id} ({user.email})")
		return user

	def add_watch(
		self,
		user_id: str,
		movie_id: str,
		watch_duration: int = 0,
		completion_percentage: int = 0,
		rating: Optional[int] = None,
		review_text: Optional[str] = None,
	) -> Tuple[WatchEvent, Optional[Review]]:
		"""
		Record a viewing and bump the movie's watch count. With a rating, the user's
		review of the movie is created or updated in the same call.
		"""
		if not movie_id:
			raise InvalidInputError('Movie ID is required')
		validate_identifier(movie_id, 'movie ID')
		validate_watch(watch_duration, completion_percentage)
		if rating is not None:
			validate_review(rating, review_text)
		self.get_user(user_id)
		if self.store.get_movie(movie_id) is None:
			raise NotFoundError('Movie not found')

		event = self.store.add_watch_event(WatchEvent(
			id=new_id(),
			user_id=user_id,
			movie_id=movie_id,
			timestamp=datetime.now(timezone.utc),
			watch_duration=watch_duration,
			completion_percentage=completion_percentage,
		))
		self.store.increment_watch_count(movie_id)
		logger.info(f"[Users] Recorded watch {event.id} | user={user_id} movie={movie_id}")

		review = None
		if rating is not None:
			review = self.reviews.upsert_review(movie_id, user_id, rating, review_text)
		return event, review

	def history(
		self,
		user_id: str,
		start: Optional[datetime] = None,
		end: Optional[datetime] = None,
		page: int = 1,
		limit: int = 20,
	) -> Dict[str, Any]:
		"""
		Newest-first page of the user's watch history (optionally bounded by dates)
		plus all-time stats. Stats only count events whose movie still exists.
		"""
		user = self.get_user(user_id)
		events = self.store.viewer_watch_history(user_id)
		filtered = [
			e for e in events
			if (start is None or e.timestamp >= start) and (end is None or e.timestamp <= end)
		]
		entries = [
			{
				'movie': self.store.get_movie(e.movie_id),
				'watched_at': e.timestamp,
				'duration': e.watch_duration,
				'completion_percentage': e.completion_percentage,
			}
			for e in filtered
		]
		page_data = paginate(entries, page, limit)

		joined = [e for e in events if self.store.get_movie(e.movie_id) is not None]
		favorite = self.resolver.resolve(user_id)
		return {
			'user': user,
			'history': page_data['data'],
			'stats': {
				'total_movies_watched': len(joined),
				'total_watch_time': sum(e.watch_duration for e in joined),
				'favorite_genre': favorite or 'N/A',
			},
			'pagination': page_data['pagination'],
		}
