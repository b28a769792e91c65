"""
Ranking module.
Combines text relevance with rating and popularity signals into a hybrid score,
then orders candidates with a personalized tie-break ladder.
"""

from typing import Dict, List, Optional, Tuple

from loguru import logger

from . import config
from .models import Movie, ScoreBreakdown, ScoredCandidate
from .text_matcher import text_score


class HybridScorer:
	"""
	Computes the hybrid relevance score of a movie for a query:
	- text: best-field match strength from the text matcher (0..1)
	- rating: content rating 0..10 scaled to 0..1
	- popularity: watch count saturating at a fixed ceiling (0..1)
	Weights are not required to sum to 1.
	"""

	def __init__(
		self,
		weights: Optional[Dict[str, float]] = None,
		popularity_ceiling: int = config.POPULARITY_CEILING,
	):
		merged = dict(config.DEFAULT_WEIGHTS)
		merged.update(weights or {})
		self.similarity_weight = merged['similarity']
		self.rating_weight = merged['rating']
		self.popularity_weight = merged['popularity']
		self.popularity_ceiling = popularity_ceiling

	def score(self, movie: Movie, query: str) -> ScoreBreakdown:
		"""Score one movie against the query."""
		text = text_score(movie, query)
		rating_norm, popularity_norm = self._metadata_score(movie)

		final_score = (
			self.similarity_weight * text +
			self.rating_weight * rating_norm +
			self.popularity_weight * popularity_norm
		)
		return ScoreBreakdown(
			final_score=final_score,
			text_score=text,
			rating_score=rating_norm,
			popularity_score=popularity_norm,
		)

	def _metadata_score(self, movie: Movie) -> Tuple[float, float]:
		"""
		Normalize rating and popularity to [0..1].
		Missing values count as zero. Returns (rating_norm, popularity_norm)
		"""
		rating_norm = (movie.rating or 0.0) / 10.0
		popularity_norm = min((movie.watch_count or 0) / self.popularity_ceiling, 1.0)
		return rating_norm, popularity_norm


def is_favorite_genre(movie: Movie, favorite_genre: Optional[str]) -> bool:
	"""True only for a known favorite genre that appears in the movie's genre list."""
	return bool(favorite_genre) and favorite_genre in (movie.genres or [])


class RelevanceRanker:
	"""
	Orders scored candidates with a strict priority ladder; each tier only matters
	when all earlier tiers tie:
	1. favorite genre and title starts with the query
	2. favorite genre and title contains the query
	3. favorite genre
	4. title starts with the query
	5. title contains the query
	6. director contains the query
	7. higher final score
	The sort is stable, so fully tied candidates keep their input order.
	"""

	def sort_key(self, candidate: ScoredCandidate, query: str, favorite_genre: Optional[str]) -> tuple:
		"""Lexicographic key; False sorts before True, so each flag is negated."""
		q = query.lower()
		movie = candidate.movie
		title = (movie.title or '').lower()
		director = (movie.director or '').lower()

		favorite = is_favorite_genre(movie, favorite_genre)
		title_starts = title.startswith(q)
		title_contains = q in title
		director_contains = q in director

		return (
			not (favorite and title_starts),
			not (favorite and title_contains),
			not favorite,
			not title_starts,
			not title_contains,
			not director_contains,
			-candidate.scores.final_score,
		)

	def rank(
		self,
		candidates: List[ScoredCandidate],
		query: str,
		favorite_genre: Optional[str] = None,
	) -> List[ScoredCandidate]:
		"""Return a new list ordered by the ladder."""
		ranked = sorted(candidates, key=lambda c: self.sort_key(c, query, favorite_genre))
		logger.debug(
			f"[Ranker] Ranked {len(ranked)} candidates | query='{query}' | favorite_genre={favorite_genre}"
		)
		return ranked
