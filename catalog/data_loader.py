"""
Data loading and preprocessing module.
Handles loading movies, users, watch history and reviews from JSON Lines files
and cleaning/normalizing the data into an in-memory store.
"""

# Standard libs for JSON parsing, dates, typing, and paths
import json  # read JSON lines
from datetime import datetime, timezone  # event timestamps
from typing import Callable, Dict, List, TypeVar  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our data classes and the store they are loaded into
from .models import CastMember, Movie, Review, User, WatchEvent  # structured records
from .store import MovieStore, new_id  # in-memory store

# Console logging
from loguru import logger  # console logger

T = TypeVar('T')

# File names looked up inside the data directory
MOVIES_FILE = 'movies.jsonl'
USERS_FILE = 'users.jsonl'
WATCH_HISTORY_FILE = 'watch_history.jsonl'
REVIEWS_FILE = 'reviews.jsonl'


def parse_timestamp(value) -> datetime:
	"""
	Parse an ISO-8601 string (a trailing 'Z' is accepted) into an aware UTC datetime.
	Naive values are assumed to be UTC.
	"""
	if isinstance(value, datetime):
		dt = value
	else:
		text = str(value).strip()
		if text.endswith('Z'):
			text = text[:-1] + '+00:00'
		dt = datetime.fromisoformat(text)
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt


class DataLoader:
	"""
	Handles loading and preprocessing of catalog data.
	"""

	# Genre synonym mapping: common phrasings → single standard name
	GENRE_SYNONYMS = {
		'sci-fi': 'Science Fiction',  # map hyphenated to canonical
		'sci fi': 'Science Fiction',  # map spaced form
		'sci fy': 'Science Fiction',  # common misspelling with y
		'science-fiction': 'Science Fiction',  # map with dash
		'science fiction': 'Science Fiction',  # map with space
		'scifi': 'Science Fiction',  # common variant
		'horror': 'Horror',
		'thriller': 'Thriller',
		'comedy': 'Comedy',
		'funny': 'Comedy',
		'drama': 'Drama',
		'action': 'Action',
		'adventure': 'Adventure',
		'romance': 'Romance',
		'romantic': 'Romance',
		'fantasy': 'Fantasy',
		'mystery': 'Mystery',
		'crime': 'Crime',
		'war': 'War',
		'western': 'Western',
		'animation': 'Animation',
		'animated': 'Animation',
		'documentary': 'Documentary',
		'family': 'Family',
		'musical': 'Musical',
		'music': 'Music',
		'history': 'History',
		'biography': 'Biography',
		'biographical': 'Biography',
		'sport': 'Sport',
		'sports': 'Sport',
	}

	def __init__(self):
		"""Initialize the data loader and expose the synonyms mapping."""
		self.genre_synonyms = self.GENRE_SYNONYMS  # store mapping for reuse

	def load_store(self, data_dir: str) -> MovieStore:
		"""
		Build a MovieStore from whichever JSONL files exist in `data_dir`.
		A missing directory or file simply leaves that part of the store empty.
		"""
		base = Path(data_dir)  # normalize path
		store = MovieStore()  # target store
		if not base.exists():
			logger.warning(f"[DataLoader] Data directory {base} not found; starting with an empty catalog")
			return store

		if (base / MOVIES_FILE).exists():
			for movie in self.load_movies_from_jsonl(str(base / MOVIES_FILE)):
				store.add_movie(movie)
		if (base / USERS_FILE).exists():
			for user in self.load_users_from_jsonl(str(base / USERS_FILE)):
				store.add_user(user)
		if (base / WATCH_HISTORY_FILE).exists():
			for event in self.load_watch_history_from_jsonl(str(base / WATCH_HISTORY_FILE)):
				store.add_watch_event(event)
		if (base / REVIEWS_FILE).exists():
			for review in self.load_reviews_from_jsonl(str(base / REVIEWS_FILE)):
				if store.add_review_if_absent(review) is None:
					logger.warning(f"[DataLoader] Skipping duplicate review by {review.user_id} for {review.movie_id}")

		logger.info(
			f"[DataLoader] Store ready | movies={store.size()} users={len(store.list_users())} "
			f"watch_events={len(store.all_watch_events())} reviews={len(store.reviews_map)}"
		)
		return store

	def load_movies_from_jsonl(self, filepath: str) -> List[Movie]:
		"""Load movies from a JSON Lines file where each line is one JSON object."""
		return self._load_jsonl(filepath, self._parse_movie_data, 'movies')

	def load_users_from_jsonl(self, filepath: str) -> List[User]:
		return self._load_jsonl(filepath, self._parse_user_data, 'users')

	def load_watch_history_from_jsonl(self, filepath: str) -> List[WatchEvent]:
		return self._load_jsonl(filepath, self._parse_watch_event_data, 'watch events')

	def load_reviews_from_jsonl(self, filepath: str) -> List[Review]:
		return self._load_jsonl(filepath, self._parse_review_data, 'reviews')

	def _load_jsonl(self, filepath: str, parse: Callable[[Dict], T], label: str) -> List[T]:
		"""
		Read one record per line, skipping malformed lines with a warning.
		Raises FileNotFoundError if the file is missing.
		"""
		records: List[T] = []  # accumulator for parsed objects
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Catalog data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading {label} from {filepath}...")  # log action

		# Open the file and read line-by-line to handle large datasets efficiently
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # blank line
					continue
				try:
					data = json.loads(line.strip())  # parse JSON object per line
					records.append(parse(data))  # convert dict -> record
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue  # move on
				except (KeyError, TypeError, ValueError) as e:
					logger.warning(f"[DataLoader] Error parsing {label} at line {line_num}: {e}")  # bad field
					continue  # move on

		logger.info(f"[DataLoader] Successfully loaded {len(records)} {label}.")  # summary
		return records

	def _parse_movie_data(self, data: Dict) -> Movie:
		"""
		Convert a raw dictionary (from file) into a strongly-typed Movie object.
		Performs normalization and safe defaults.
		"""
		title = (data.get('title') or '').strip()
		if not title:
			raise ValueError("movie title is required")

		# Normalize genres using our mapping so variants collapse to one canonical label
		genres = [self.normalize_genre(g) for g in self._parse_comma_separated(data.get('genres', []))]
		genres = [g for g in genres if g]

		# Parse numeric fields, providing safe defaults when missing
		year = data.get('releaseYear') or data.get('release_year') or data.get('year')
		rating = float(data.get('rating') or 0.0)
		watch_count = int(data.get('watchCount') or data.get('watch_count') or 0)

		return Movie(
			id=str(data.get('_id') or data.get('id') or new_id()),  # ensure ID is string
			title=title,
			release_year=int(year) if year else 0,
			genres=genres,
			cast=self._parse_cast(data.get('cast') or data.get('actors') or []),
			director=(data.get('director') or '').strip(),
			rating=max(0.0, min(10.0, rating)),  # keep within 0-10
			watch_count=max(0, watch_count),
			description=(data.get('description') or data.get('overview') or '').strip(),
			poster_url=data.get('posterUrl') or data.get('poster_url') or data.get('url'),
		)

	def _parse_user_data(self, data: Dict) -> User:
		created = data.get('createdAt') or data.get('created_at')
		return User(
			id=str(data.get('_id') or data.get('id') or new_id()),
			name=str(data['name']).strip(),
			email=str(data['email']).strip().lower(),
			subscription_type=(data.get('subscriptionType') or data.get('subscription_type') or 'free').lower(),
			created_at=parse_timestamp(created) if created else None,
		)

	def _parse_watch_event_data(self, data: Dict) -> WatchEvent:
		return WatchEvent(
			id=str(data.get('_id') or data.get('id') or new_id()),
			user_id=str(data.get('userId') or data['user_id']),
			movie_id=str(data.get('movieId') or data['movie_id']),
			timestamp=parse_timestamp(data['timestamp']),
			watch_duration=max(0, int(data.get('watchDuration') or data.get('watch_duration') or 0)),
			completion_percentage=int(data.get('completionPercentage') or data.get('completion_percentage') or 0),
		)

	def _parse_review_data(self, data: Dict) -> Review:
		created = data.get('createdAt') or data.get('created_at')
		rating = int(data['rating'])
		if not 1 <= rating <= 10:
			raise ValueError(f"review rating out of range: {rating}")
		return Review(
			id=str(data.get('_id') or data.get('id') or new_id()),
			user_id=str(data.get('userId') or data['user_id']),
			movie_id=str(data.get('movieId') or data['movie_id']),
			rating=rating,
			review_text=(data.get('reviewText') or data.get('review_text') or '').strip(),
			helpful=max(0, int(data.get('helpful') or 0)),
			created_at=parse_timestamp(created) if created else None,
		)

	def _parse_cast(self, value) -> List[CastMember]:
		"""Accept names as plain strings, {name, role} objects, or one comma-separated string."""
		if isinstance(value, str):
			value = self._parse_comma_separated(value)
		cast = []
		for item in value:
			if isinstance(item, dict):
				name = (item.get('name') or '').strip()
				if name:
					cast.append(CastMember(name=name, role=item.get('role') or 'Actor'))
			elif item:
				cast.append(CastMember(name=str(item).strip()))
		return cast

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:  # missing field
			return []  # treat as empty list
		if isinstance(value, list):  # already a list
			return [str(item).strip() for item in value if item]  # clean each
		if isinstance(value, str):  # comma-separated string
			return [item.strip() for item in value.split(',') if item.strip()]  # split/trim
		return []  # any other type becomes empty

	def normalize_genre(self, genre: str) -> str:
		"""
		Map a raw genre to its canonical form using synonyms; fall back to Title Case.
		"""
		if not genre:  # missing genre
			return ''

		genre_lower = genre.strip().lower()  # prepare for lookup

		# If present in synonyms, return canonical value
		if genre_lower in self.genre_synonyms:
			return self.genre_synonyms[genre_lower]

		# Otherwise title-case the input to standardize (e.g., "war drama" → "War Drama")
		return genre.strip().title()

	def get_all_actors(self, movies: List[Movie]) -> List[str]:
		"""Return a sorted list of all unique actor names in the dataset."""
		actors = set()  # collect unique actors
		for movie in movies:  # iterate dataset
			actors.update(movie.cast_names)  # add movie cast
		return sorted(actors)  # sorted for stable display

	def get_all_directors(self, movies: List[Movie]) -> List[str]:
		"""Return a sorted list of all unique director names in the dataset."""
		directors = set()  # unique directors
		for movie in movies:  # iterate
			if movie.director:  # ignore empty
				directors.add(movie.director)
		return sorted(directors)  # sorted output

	def get_all_genres(self, movies: List[Movie]) -> List[str]:
		"""Return a sorted list of all unique genres in the dataset."""
		genres = set()  # unique genres
		for movie in movies:  # iterate
			genres.update(movie.genres)
		return sorted(genres)  # sorted output


def write_jsonl(filepath: Path, records: List[Dict]) -> None:
	"""Write dictionaries as JSON Lines (used by the sample-data script)."""
	filepath.parent.mkdir(parents=True, exist_ok=True)
	with open(filepath, 'w', encoding='utf-8') as f:
		for record in records:
			f.write(json.dumps(record, default=str) + '\n')
	logger.info(f"[DataLoader] Wrote {len(records)} records to {filepath}")
