"""
In-memory record store for movies, users, watch events and reviews.
Answers the find/aggregate-style lookups the search core needs and the
simple CRUD the user and review services build on.
"""

# Thread lock so concurrent requests never observe half-applied writes
import threading  # mutation guard
# Unique ids for records created at runtime
import uuid  # id generation
from dataclasses import replace  # copy-on-update for immutable-style edits
from datetime import datetime  # window boundaries
from typing import Dict, List, Optional, Set, Tuple  # type hints

from loguru import logger  # console logger

from .models import Movie, Review, User, WatchEvent  # stored record types


def new_id() -> str:
	"""24-character hex identifier (same shape as a document-store object id)."""
	return uuid.uuid4().hex[:24]


class MovieStore:
	"""
	Holds all records in insertion order. Reads return copies of the internal
	lists so callers can sort or filter them freely.
	"""

	def __init__(self):
		self._lock = threading.Lock()  # guards every mutation below
		self.movies_map: Dict[str, Movie] = {}  # movie_id -> Movie
		self.users_map: Dict[str, User] = {}  # user_id -> User
		self.watch_events: List[WatchEvent] = []  # append-only log
		self.reviews_map: Dict[str, Review] = {}  # review_id -> Review
		self._review_index: Dict[Tuple[str, str], str] = {}  # (user_id, movie_id) -> review_id
		logger.debug("[Store] Initialized empty in-memory store")

	# ----- movies -----

	def add_movie(self, movie: Movie) -> Movie:
		with self._lock:
			self.movies_map[movie.id] = movie
		return movie

	def get_movie(self, movie_id: str) -> Optional[Movie]:
		return self.movies_map.get(movie_id)

	def list_movies(self) -> List[Movie]:
		return list(self.movies_map.values())

	def size(self) -> int:
		return len(self.movies_map)

	def increment_watch_count(self, movie_id: str) -> None:
		with self._lock:
			movie = self.movies_map.get(movie_id)
			if movie is not None:
				movie.watch_count = (movie.watch_count or 0) + 1

	def find_candidates(
		self,
		text_match: str,
		genre: Optional[str] = None,
		min_rating: Optional[float] = None,
		cap: int = 100,
	) -> List[Movie]:
		"""
		Broad existence filter: the query (literal, case-insensitive) must appear in the
		title, the director or any cast name. Genre narrows by substring on any genre label,
		min_rating keeps movies rated at least that. At most `cap` movies, store order.
		"""
		q = text_match.lower()
		genre_q = genre.lower() if genre else None
		found: List[Movie] = []
		for movie in self.list_movies():
			text_hit = (
				q in (movie.title or '').lower()
				or q in (movie.director or '').lower()
				or any(q in name.lower() for name in movie.cast_names)
			)
			if not text_hit:
				continue
			if genre_q and not any(genre_q in g.lower() for g in movie.genres):
				continue
			if min_rating is not None and (movie.rating or 0.0) < min_rating:
				continue
			found.append(movie)
			if len(found) >= cap:
				break
		logger.debug(f"[Store] find_candidates q='{text_match}' genre={genre} min_rating={min_rating} -> {len(found)}")
		return found

	# ----- users -----

	def add_user(self, user: User) -> User:
		with self._lock:
			self.users_map[user.id] = user
		return user

	def add_user_if_email_absent(self, user: User) -> Optional[User]:
		"""Insert unless the e-mail is taken; None when it is."""
		with self._lock:
			if self.find_user_by_email(user.email) is not None:
				return None
			self.users_map[user.id] = user
		return user

	def get_user(self, user_id: str) -> Optional[User]:
		return self.users_map.get(user_id)

	def list_users(self) -> List[User]:
		return list(self.users_map.values())

	def find_user_by_email(self, email: str) -> Optional[User]:
		email = email.lower()
		return next((u for u in self.users_map.values() if u.email == email), None)

	# ----- watch events -----

	def add_watch_event(self, event: WatchEvent) -> WatchEvent:
		with self._lock:
			self.watch_events.append(event)
		return event

	def all_watch_events(self) -> List[WatchEvent]:
		with self._lock:
			return list(self.watch_events)

	def viewer_watch_history(self, viewer_id: str) -> List[WatchEvent]:
		"""All events of one viewer, newest first."""
		events = [e for e in self.all_watch_events() if e.user_id == viewer_id]
		events.sort(key=lambda e: e.timestamp, reverse=True)
		return events

	def watch_events_in_window(self, start: datetime) -> List[WatchEvent]:
		return [e for e in self.all_watch_events() if e.timestamp >= start]

	def viewer_watched_movie_ids(self, viewer_id: str) -> Set[str]:
		return {e.movie_id for e in self.all_watch_events() if e.user_id == viewer_id}

	# ----- reviews -----

	def add_review(self, review: Review) -> Review:
		"""Insert a review; the caller enforces the one-per-user-per-movie rule."""
		with self._lock:
			self.reviews_map[review.id] = review
			self._review_index[(review.user_id, review.movie_id)] = review.id
		return review

	def add_review_if_absent(self, review: Review) -> Optional[Review]:
		"""Insert unless this user already reviewed this movie; None when one exists."""
		key = (review.user_id, review.movie_id)
		with self._lock:
			if key in self._review_index:
				return None
			self.reviews_map[review.id] = review
			self._review_index[key] = review.id
		return review

	def get_review(self, review_id: str) -> Optional[Review]:
		return self.reviews_map.get(review_id)

	def find_review(self, user_id: str, movie_id: str) -> Optional[Review]:
		review_id = self._review_index.get((user_id, movie_id))
		return self.reviews_map.get(review_id) if review_id else None

	def reviews_for_movie(self, movie_id: str) -> List[Review]:
		return [r for r in self.reviews_map.values() if r.movie_id == movie_id]

	def update_review(self, review_id: str, **changes) -> Optional[Review]:
		with self._lock:
			review = self.reviews_map.get(review_id)
			if review is None:
				return None
			updated = replace(review, **changes)
			self.reviews_map[review_id] = updated
			return updated

	def increment_review_helpful(self, review_id: str) -> Optional[Review]:
		with self._lock:
			review = self.reviews_map.get(review_id)
			if review is None:
				return None
			review.helpful += 1
			return review
