"""
Shared pytest fixtures: a small in-memory catalog with one horror fan.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

# Ensure project root is importable when tests run from repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from catalog.models import CastMember, Movie, User, WatchEvent
from catalog.store import MovieStore


@pytest.fixture
def movie_factory() -> Callable[..., Movie]:
	"""Build a Movie with sensible defaults and targeted overrides."""

	def _factory(id: str = 'm-1', title: str = 'Untitled', **overrides: Any) -> Movie:
		cast = overrides.pop('cast', [])
		data = {
			'release_year': 2000,
			'genres': [],
			'director': '',
			'rating': 0.0,
			'watch_count': 0,
		}
		data.update(overrides)
		return Movie(
			id=id,
			title=title,
			cast=[c if isinstance(c, CastMember) else CastMember(name=c) for c in cast],
			**data,
		)

	return _factory


@pytest.fixture
def now() -> datetime:
	return datetime.now(timezone.utc)


@pytest.fixture
def sample_store(movie_factory, now) -> MovieStore:
	"""
	Six movies, two users. u-alice watched three Horror movies in the last week;
	u-bob watched The Dark Knight twice and Inception once; nobody else has history.
	"""
	store = MovieStore()
	store.add_movie(movie_factory(
		'm-dark-knight', 'The Dark Knight', genres=['Action', 'Crime', 'Drama'],
		director='Christopher Nolan', cast=['Christian Bale', 'Heath Ledger'], rating=9.0, watch_count=3200,
	))
	store.add_movie(movie_factory(
		'm-dark-waters', 'Dark Waters', genres=['Drama', 'Thriller'],
		director='Todd Haynes', cast=['Mark Ruffalo'], rating=6.5, watch_count=100,
	))
	store.add_movie(movie_factory(
		'm-light-house', 'Light House', genres=['Drama', 'Horror'],
		director='Robert Eggers', cast=['Robert Pattinson'], rating=7.0, watch_count=50,
	))
	store.add_movie(movie_factory(
		'm-conjuring', 'The Conjuring', genres=['Horror', 'Mystery'],
		director='James Wan', cast=['Vera Farmiga'], rating=7.5, watch_count=400,
	))
	store.add_movie(movie_factory(
		'm-darkness', 'Darkness Falls', genres=['Horror'],
		director='Jonathan Liebesman', cast=['Chaney Kley'], rating=5.0, watch_count=20,
	))
	store.add_movie(movie_factory(
		'm-inception', 'Inception', genres=['Action', 'Science Fiction'],
		director='Christopher Nolan', cast=['Leonardo DiCaprio'], rating=8.8, watch_count=900,
	))

	store.add_user(User(id='u-alice', name='Alice', email='alice@example.com'))
	store.add_user(User(id='u-bob', name='Bob', email='bob@example.com', subscription_type='premium'))

	events = [
		('e-1', 'u-alice', 'm-conjuring', 1, 100),
		('e-2', 'u-alice', 'm-light-house', 2, 110),
		('e-3', 'u-alice', 'm-darkness', 3, 90),
		('e-4', 'u-bob', 'm-dark-knight', 1, 150),
		('e-5', 'u-bob', 'm-dark-knight', 4, 120),
		('e-6', 'u-bob', 'm-inception', 5, 140),
	]
	for event_id, user_id, movie_id, days_ago, minutes in events:
		store.add_watch_event(WatchEvent(
			id=event_id,
			user_id=user_id,
			movie_id=movie_id,
			timestamp=now - timedelta(days=days_ago),
			watch_duration=minutes,
			completion_percentage=100,
		))
	return store
