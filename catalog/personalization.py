"""
Favorite-genre resolution from a viewer's watch history.
"""

from collections import Counter
from typing import Dict, Iterable, Optional

from loguru import logger

from .models import Movie, WatchEvent
from .store import MovieStore


def favorite_genre_from_history(events: Iterable[WatchEvent], movies: Dict[str, Movie]) -> Optional[str]:
	"""
	Join events to movies, count one row per (event, genre) and return the most
	frequent genre. Ties go to the alphabetically first label so the answer never
	depends on store iteration order. Returns None when nothing can be counted.
	"""
	counts: Counter = Counter()
	for event in events:
		movie = movies.get(event.movie_id)
		if movie is None:  # dangling reference, nothing to join
			continue
		for genre in movie.genres:
			if genre and genre.strip():
				counts[genre] += 1

	if not counts:
		return None
	best_count = max(counts.values())
	return min(g for g, c in counts.items() if c == best_count)


class FavoriteGenreResolver:
	"""Recomputes a viewer's favorite genre from the store on every call."""

	def __init__(self, store: MovieStore):
		self.store = store

	def resolve(self, viewer_id: Optional[str]) -> Optional[str]:
		if not viewer_id:
			return None
		history = self.store.viewer_watch_history(viewer_id)
		movies = {e.movie_id: self.store.get_movie(e.movie_id) for e in history}
		genre = favorite_genre_from_history(history, {k: v for k, v in movies.items() if v is not None})
		logger.debug(f"[Personalization] viewer={viewer_id} events={len(history)} favorite_genre={genre}")
		return genre
