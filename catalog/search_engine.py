"""
Search engine module.
Entry points of the catalog core: personalized search, trending, favorite genre,
and plain catalog browsing.
"""

from typing import Any, Dict, List, Optional, Tuple  # type annotations for clarity

# Import rapidfuzz to tolerate small typos in genre filters
from rapidfuzz import fuzz, process  # fuzzy matching utilities

# Import loguru for console logging
from loguru import logger  # simple structured logger

# Import project modules for data structures and components
from . import config  # tunable defaults
from .data_loader import DataLoader  # for genre synonyms
from .errors import NotFoundError  # unknown movie lookups
from .highlight import highlight_movie  # marks matched substrings
from .models import Movie, ScoredCandidate, SearchFilters, SearchOutcome, TrendingOutcome  # core data classes
from .pagination import paginate  # page slicing
from .personalization import FavoriteGenreResolver  # favorite-genre signal
from .ranking import HybridScorer, RelevanceRanker  # hybrid scoring and ladder ordering
from .store import MovieStore  # storage collaborator
from .trending import TrendingAggregator  # "popular now" pipeline
from .validators import (  # input checks that run before any scoring
	validate_identifier,
	validate_min_rating,
	validate_optional_identifier,
	validate_query,
	validate_window,
)


class SearchEngine:
	"""
	High-level API combining validation, personalization, candidate fetching,
	hybrid scoring, ranking and highlighting.
	Every call recomputes its inputs from the store; nothing is cached between requests.
	"""
	GENRE_SYNONYMS = {k.lower(): v for k, v in DataLoader.GENRE_SYNONYMS.items()}  # mapping variants->canonical
	GENRE_FUZZY_CUTOFF = 88  # minimum fuzz.ratio for a typo to resolve to a known genre

	def __init__(
		self,
		store: MovieStore,  # record store with movies, users and watch events
		weights: Optional[Dict[str, float]] = None,  # hybrid score weights
		candidate_cap: int = config.CANDIDATE_CAP,  # max movies scored per search
	):
		# Store collaborators for use across the pipeline
		self.store = store  # keep store reference
		self.scorer = HybridScorer(weights)  # scorer instance
		self.ranker = RelevanceRanker()  # ladder ordering
		self.resolver = FavoriteGenreResolver(store)  # favorite-genre lookups
		self.trending_aggregator = TrendingAggregator(store, resolver=self.resolver)  # trending pipeline
		self.candidate_cap = candidate_cap  # bound on the candidate set
		logger.info(f"[Engine] Ready with {store.size()} movies | candidate_cap={candidate_cap}")

	def known_genres(self) -> List[str]:
		"""All genre labels currently present in the catalog."""
		genres = set()  # unique labels
		for movie in self.store.list_movies():  # iterate catalog
			genres.update(movie.genres)
		return sorted(genres)  # stable order for fuzzy matching

	def resolve_genre_filter(self, genre: Optional[str]) -> Optional[str]:
		"""
		Map a user-supplied genre filter onto a catalog genre when possible:
		synonyms first, then an exact (case-insensitive) hit, then a fuzzy match.
		Unresolved filters are returned unchanged and applied as a substring.
		"""
		if not genre or not genre.strip():
			return None
		g = genre.strip().lower()  # normalized filter
		if g in self.GENRE_SYNONYMS:  # known variant
			return self.GENRE_SYNONYMS[g]

		known = self.known_genres()  # catalog labels
		by_lower = {k.lower(): k for k in known}  # lowercase -> canonical
		if g in by_lower:  # exact label
			return by_lower[g]

		best = process.extractOne(g, list(by_lower.keys()), scorer=fuzz.ratio) if by_lower else None
		if best and best[1] >= self.GENRE_FUZZY_CUTOFF:
			logger.debug(f"[Engine] Genre filter fuzzy match: '{genre}' -> '{by_lower[best[0]]}' (score={best[1]:.0f})")
			return by_lower[best[0]]
		return genre.strip()  # fall back to the raw filter

	def favorite_genre(self, viewer_id: str) -> Optional[str]:
		"""Most-watched genre of the viewer, or None without history."""
		validate_identifier(viewer_id, 'user ID')  # reject malformed ids
		return self.resolver.resolve(viewer_id)  # recomputed each call

	def search(
		self,
		query: str,
		filters: Optional[SearchFilters] = None,
		viewer_id: Optional[str] = None,
	) -> SearchOutcome:
		"""Validate, personalize, fetch candidates, score, rank and highlight."""
		# Input validation happens before any storage or scoring work
		query = validate_query(query)  # non-empty, trimmed
		filters = filters or SearchFilters()  # no filters by default
		min_rating = validate_min_rating(filters.min_rating)  # 0..10 or None
		viewer_id = validate_optional_identifier(viewer_id, 'user ID')  # well-formed or None

		# Favorite genre only when a viewer is known; None means no personalization
		favorite_genre = self.resolver.resolve(viewer_id) if viewer_id else None

		# Bounded candidate set from the store (broad existence filter)
		genre = self.resolve_genre_filter(filters.genre)  # canonical genre when possible
		movies = self.store.find_candidates(query, genre=genre, min_rating=min_rating, cap=self.candidate_cap)
		logger.debug(f"[Engine] Retrieved {len(movies)} candidates for '{query}' | genre={genre} min_rating={min_rating}")

		# Hybrid score per candidate
		scored: List[ScoredCandidate] = []  # accumulator
		for movie in movies:  # each candidate
			scores = self.scorer.score(movie, query)  # text/rating/popularity blend
			logger.debug(
				f"[Engine] Candidate | movie={movie.title} ({movie.id}) | text={scores.text_score:.3f} | final={scores.final_score:.3f}"
			)
			scored.append(ScoredCandidate(movie=movie, scores=scores))  # collect

		# Ladder ordering, then highlight the fields that matched
		ranked = self.ranker.rank(scored, query, favorite_genre)  # stable sort
		ranked = [highlight_movie(c, query) for c in ranked]  # presentation markers

		logger.info(
			f"[Engine] Search '{query}' returned {len(ranked)} results | viewer={viewer_id} | favorite_genre={favorite_genre}"
		)
		return SearchOutcome(
			ranked_movies=ranked,
			favorite_genre=favorite_genre,
			personalized=viewer_id is not None,
		)

	def trending(self, viewer_id: Optional[str] = None, window_days: Optional[int] = None) -> TrendingOutcome:
		"""Popular-now ranking over the trailing window, personalized when a viewer is given."""
		viewer_id = validate_optional_identifier(viewer_id, 'user ID')  # well-formed or None
		window = validate_window(window_days if window_days is not None else config.TRENDING_WINDOW_DAYS)
		return self.trending_aggregator.trending(viewer_id=viewer_id, window_days=window)

	def list_movies(
		self,
		genre: Optional[str] = None,
		min_rating: Optional[float] = None,
		page: int = 1,
		limit: int = 20,
	) -> Dict[str, Any]:
		"""Browse the catalog: best rated first, then most watched."""
		min_rating = validate_min_rating(min_rating)
		genre = self.resolve_genre_filter(genre)
		g = genre.lower() if genre else None

		movies = [
			m for m in self.store.list_movies()
			if (g is None or any(g in mg.lower() for mg in m.genres))
			and (min_rating is None or (m.rating or 0.0) >= min_rating)
		]
		movies.sort(key=lambda m: (-(m.rating or 0.0), -(m.watch_count or 0)))
		return paginate(movies, page, limit)

	def movie_details(self, movie_id: str) -> Tuple[Movie, Dict[str, Any]]:
		"""A movie plus the average and count of its reviews."""
		validate_identifier(movie_id, 'movie ID')
		movie = self.store.get_movie(movie_id)
		if movie is None:
			raise NotFoundError('Movie not found')

		reviews = self.store.reviews_for_movie(movie_id)
		stats = {
			'average_rating': (sum(r.rating for r in reviews) / len(reviews)) if reviews else 0,
			'total_reviews': len(reviews),
		}
		return movie, stats
