"""
Data models for the Movie Catalog service.
Defines the core data structures used throughout the system.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import datetime for watch/review timestamps
from datetime import datetime  # event and audit times
# Import typing helpers for precise and self-documenting types
from typing import Dict, List, Optional  # lists, mappings and optional values


@dataclass
class CastMember:
	"""One credited person in a movie's cast."""
	name: str  # display name as stored
	role: str = 'Actor'  # credited role (defaults to plain actor)


@dataclass
class Movie:
	"""
	Represents a single movie and all the information we know about it.
	These fields are used both for searching and for showing data in results.
	"""
	id: str  # unique identifier of the movie (string for consistency)
	title: str  # movie title as displayed
	release_year: int = 0  # release year as a number (e.g., 1999), 0 when unknown
	genres: List[str] = field(default_factory=list)  # ordered genre labels in canonical form
	cast: List[CastMember] = field(default_factory=list)  # ordered cast entries
	director: str = ''  # director's name, empty when unknown
	rating: float = 0.0  # content rating on a 0-10 scale
	watch_count: int = 0  # popularity counter (number of recorded views)
	description: str = ''  # short synopsis
	poster_url: Optional[str] = None  # optional: URL for the poster image (for UI)

	@property
	def cast_names(self) -> List[str]:
		"""Names of all cast members in credit order."""
		return [c.name for c in self.cast if c.name]


@dataclass
class WatchEvent:
	"""
	A single viewing action. Append-only: created once, never mutated or deleted.
	"""
	id: str  # unique identifier of the event
	user_id: str  # viewer who watched
	movie_id: str  # movie that was watched
	timestamp: datetime  # when the viewing happened
	watch_duration: int = 0  # minutes watched (>= 0)
	completion_percentage: int = 0  # 0-100


@dataclass
class Review:
	"""A viewer's review of a movie. At most one per (user_id, movie_id)."""
	id: str
	user_id: str
	movie_id: str
	rating: int  # 1-10
	review_text: str = ''
	helpful: int = 0  # "helpful" votes, never negative
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None


@dataclass
class User:
	"""A catalog viewer."""
	id: str
	name: str
	email: str  # stored lower-cased, unique
	subscription_type: str = 'free'  # one of free / premium / vip
	created_at: Optional[datetime] = None


@dataclass
class ScoreBreakdown:
	"""Output of the hybrid scorer for one movie and one query."""
	final_score: float  # weighted blend used as the last tie-break
	text_score: float  # best-field text match strength (0..1)
	rating_score: float  # rating / 10
	popularity_score: float  # saturating watch-count normalization (0..1)


@dataclass
class ScoredCandidate:
	"""
	A movie plus its computed scores and optional highlighted-field variants.
	Lives only for the duration of one search request.
	"""
	movie: Movie
	scores: ScoreBreakdown
	title_highlighted: Optional[str] = None  # set only when the title matched
	director_highlighted: Optional[str] = None  # set only when the director matched
	cast_highlighted: Optional[List[Dict[str, str]]] = None  # one dict per cast entry


@dataclass
class TrendingEntry:
	"""One row of the trending ranking."""
	movie_id: str
	title: str
	poster_url: Optional[str]
	rating: float
	genres: List[str]
	release_year: int
	watch_count: int  # events inside the trending window
	unique_viewers: int  # distinct viewers inside the window
	avg_watch_time: int  # rounded mean minutes per event
	genre_match: int  # 1 when the viewer's favorite genre is in genres
	watched: int  # 1 when the viewer has ever watched this movie


@dataclass
class SearchFilters:
	"""Optional narrowing filters for a search request."""
	genre: Optional[str] = None  # genre label (synonyms and small typos tolerated)
	min_rating: Optional[float] = None  # keep movies rated at least this (0-10)


@dataclass
class SearchOutcome:
	"""Everything a search request returns to the presentation layer."""
	ranked_movies: List[ScoredCandidate]
	favorite_genre: Optional[str]
	personalized: bool


@dataclass
class TrendingOutcome:
	"""Everything a trending request returns to the presentation layer."""
	trending: List[TrendingEntry]
	favorite_genre: Optional[str]
	filtered_out_watched: int  # watched movies demoted (not removed) in the ranking
	period_days: int
	personalized: bool
