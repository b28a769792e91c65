"""
Review service.
Reads and writes movie reviews, enforcing one review per (user, movie).
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from .errors import DuplicateError, NotFoundError
from .models import Movie, Review
from .pagination import paginate
from .store import MovieStore, new_id
from .validators import validate_identifier, validate_review

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class ReviewService:
	def __init__(self, store: MovieStore):
		self.store = store

	def _require_movie(self, movie_id: str) -> Movie:
		validate_identifier(movie_id, 'movie ID')
		movie = self.store.get_movie(movie_id)
		if movie is None:
			raise NotFoundError('Movie not found')
		return movie

	def movie_reviews(self, movie_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
		"""Reviews of one movie, most helpful first, newest first among equals."""
		self._require_movie(movie_id)
		reviews = self.store.reviews_for_movie(movie_id)
		reviews.sort(key=lambda r: r.created_at or _EPOCH, reverse=True)
		reviews.sort(key=lambda r: r.helpful, reverse=True)
		return paginate(reviews, page, limit)

	def create_review(self, movie_id: str, user_id: str, rating: int, review_text: Optional[str] = None) -> Review:
		self._require_movie(movie_id)
		validate_identifier(user_id, 'user ID')
		validate_review(rating, review_text)
		if self.store.get_user(user_id) is None:
			raise NotFoundError('User not found')

		now = datetime.now(timezone.utc)
		review = self.store.add_review_if_absent(Review(
			id=new_id(),
			user_id=user_id,
			movie_id=movie_id,
			rating=rating,
			review_text=(review_text or '').strip(),
			created_at=now,
			updated_at=now,
		))
		if review is None:
			raise DuplicateError('You have already reviewed this movie')
		logger.info(f"[Reviews] Created review {review.id} | user={user_id} movie={movie_id} rating={rating}")
		return review

	def upsert_review(self, movie_id: str, user_id: str, rating: int, review_text: Optional[str] = None) -> Review:
		"""Create the user's review of the movie, or overwrite rating (and text, if given) of the existing one."""
		validate_review(rating, review_text)
		existing = self.store.find_review(user_id, movie_id)
		if existing is None:
			return self.create_review(movie_id, user_id, rating, review_text)

		changes: Dict[str, Any] = {'rating': rating, 'updated_at': datetime.now(timezone.utc)}
		if review_text:
			changes['review_text'] = review_text.strip()
		logger.info(f"[Reviews] Updated review {existing.id} | user={user_id} movie={movie_id} rating={rating}")
		return self.store.update_review(existing.id, **changes)

	def review_stats(self, movie_id: str) -> Dict[str, Any]:
		self._require_movie(movie_id)
		reviews = self.store.reviews_for_movie(movie_id)
		distribution = {str(r): 0 for r in range(1, 11)}
		for review in reviews:
			distribution[str(review.rating)] += 1

		average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0
		return {
			'average_rating': average,
			'total_reviews': len(reviews),
			'rating_distribution': distribution,
		}

	def mark_helpful(self, review_id: str) -> Review:
		validate_identifier(review_id, 'review ID')
		review = self.store.increment_review_helpful(review_id)
		if review is None:
			raise NotFoundError('Review not found')
		return review
