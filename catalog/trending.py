"""
Trending module.
Builds a "popular now" ranking from recent watch events as a chain of pure stages:
filter -> group -> join -> annotate -> sort -> truncate.
The stages only see in-memory collections, so they run without a live store.
"""

from dataclasses import dataclass, field  # per-movie accumulator
from datetime import datetime, timedelta, timezone  # window arithmetic
from typing import AbstractSet, Dict, Iterable, List, Optional, Set, Tuple  # type hints

from loguru import logger  # console logger

from . import config  # window and limit defaults
from .models import Movie, TrendingEntry, TrendingOutcome, WatchEvent  # data classes
from .personalization import FavoriteGenreResolver  # favorite-genre signal
from .ranking import is_favorite_genre  # shared genre predicate
from .store import MovieStore  # storage collaborator


@dataclass
class _MovieActivity:
	watch_count: int = 0
	total_duration: int = 0
	viewers: Set[str] = field(default_factory=set)


def filter_window(events: Iterable[WatchEvent], start: datetime) -> List[WatchEvent]:
	"""Stage 1: keep events at or after `start`."""
	return [e for e in events if e.timestamp >= start]


def group_by_movie(events: Iterable[WatchEvent]) -> Dict[str, _MovieActivity]:
	"""Stage 2: count events, sum durations and collect distinct viewers per movie."""
	groups: Dict[str, _MovieActivity] = {}
	for event in events:
		activity = groups.setdefault(event.movie_id, _MovieActivity())
		activity.watch_count += 1
		activity.total_duration += event.watch_duration or 0
		activity.viewers.add(event.user_id)
	return groups


def join_movies(groups: Dict[str, _MovieActivity], movies: Dict[str, Movie]) -> List[Tuple[Movie, _MovieActivity]]:
	"""Stage 3: attach each group to its movie; groups without a movie are dropped."""
	return [(movies[movie_id], activity) for movie_id, activity in groups.items() if movie_id in movies]


def annotate(
	rows: List[Tuple[Movie, _MovieActivity]],
	favorite_genre: Optional[str],
	watched_ids: AbstractSet[str],
) -> List[TrendingEntry]:
	"""Stages 4-5: genre affinity and watched flag."""
	entries = []
	for movie, activity in rows:
		entries.append(TrendingEntry(
			movie_id=movie.id,
			title=movie.title,
			poster_url=movie.poster_url,
			rating=movie.rating or 0.0,
			genres=list(movie.genres),
			release_year=movie.release_year,
			watch_count=activity.watch_count,
			unique_viewers=len(activity.viewers),
			avg_watch_time=round(activity.total_duration / activity.watch_count),
			genre_match=1 if is_favorite_genre(movie, favorite_genre) else 0,
			watched=1 if movie.id in watched_ids else 0,
		))
	return entries


def sort_entries(entries: List[TrendingEntry]) -> List[TrendingEntry]:
	"""Stage 6: genre match first, then unwatched before watched, then most watched."""
	return sorted(entries, key=lambda e: (-e.genre_match, e.watched, -e.watch_count))


def aggregate_trending(
	events: Iterable[WatchEvent],
	movies: Dict[str, Movie],
	now: datetime,
	window_days: int = config.TRENDING_WINDOW_DAYS,
	favorite_genre: Optional[str] = None,
	watched_ids: AbstractSet[str] = frozenset(),
	limit: int = config.TRENDING_LIMIT,
) -> Tuple[List[TrendingEntry], int]:
	"""
	Run the whole pipeline. Returns (top entries, number of aggregated movies the
	viewer already watched). Watched movies are demoted, never removed.
	"""
	start = now - timedelta(days=window_days)
	recent = filter_window(events, start)
	rows = join_movies(group_by_movie(recent), movies)
	ranked = sort_entries(annotate(rows, favorite_genre, watched_ids))
	watched_count = sum(e.watched for e in ranked)
	return ranked[:limit], watched_count


class TrendingAggregator:
	"""Fetches the inputs of the trending pipeline from the store and runs it."""

	def __init__(self, store: MovieStore, resolver: Optional[FavoriteGenreResolver] = None, limit: int = config.TRENDING_LIMIT):
		self.store = store
		self.resolver = resolver or FavoriteGenreResolver(store)
		self.limit = limit

	def trending(
		self,
		viewer_id: Optional[str] = None,
		window_days: int = config.TRENDING_WINDOW_DAYS,
		now: Optional[datetime] = None,
	) -> TrendingOutcome:
		now = now or datetime.now(timezone.utc)
		favorite_genre = self.resolver.resolve(viewer_id) if viewer_id else None
		watched_ids = self.store.viewer_watched_movie_ids(viewer_id) if viewer_id else set()

		events = self.store.watch_events_in_window(now - timedelta(days=window_days))
		movies = {m.id: m for m in self.store.list_movies()}
		entries, watched_count = aggregate_trending(
			events,
			movies,
			now,
			window_days=window_days,
			favorite_genre=favorite_genre,
			watched_ids=watched_ids,
			limit=self.limit,
		)
		logger.info(
			f"[Trending] {len(entries)} entries from {len(events)} events | window={window_days}d | "
			f"viewer={viewer_id} | favorite_genre={favorite_genre} | watched_demoted={watched_count}"
		)
		return TrendingOutcome(
			trending=entries,
			favorite_genre=favorite_genre,
			filtered_out_watched=watched_count,
			period_days=window_days,
			personalized=bool(viewer_id),
		)
