"""
FastAPI server exposing the movie catalog API.
Endpoints:
- GET  /health: basic health check
- GET  /api/movies/search?query=...&genre=...&min_rating=...&user_id=...: personalized ranked search
- GET  /api/movies/trending?user_id=...: popular-now ranking over the last 90 days
- GET  /api/movies, GET /api/movies/{id}: catalog browsing
- GET/POST /api/movies/{id}/reviews, GET /api/movies/{id}/reviews/stats, PATCH /api/reviews/{id}/helpful
- GET/POST /api/users, GET /api/users/{id}, GET /api/users/{id}/history,
  GET /api/users/{id}/favorite-genre, POST /api/users/{id}/watch

Startup loads the catalog from CATALOG_DATA_DIR (JSON Lines files); a missing
directory starts the service with an empty catalog.
"""

# Import standard libraries for timing and dates
import time  # measure startup and request latencies
from datetime import datetime  # history date filters
from typing import Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, Query, Request  # FastAPI primitives
from fastapi.exceptions import RequestValidationError  # malformed query/body values
from fastapi.responses import JSONResponse  # error envelopes
from pydantic import BaseModel  # response schema definitions

# Import our internal modules for data loading, search and services
from catalog import config  # settings
from catalog.data_loader import DataLoader, parse_timestamp  # loads and normalizes records
from catalog.errors import CatalogError  # caller-facing failures
from catalog.models import Movie, Review, ScoredCandidate, SearchFilters, TrendingEntry, User, WatchEvent  # records
from catalog.pagination import paginate  # page slicing
from catalog.reviews import ReviewService  # review reads/writes
from catalog.search_engine import SearchEngine  # core search engine
from catalog.store import MovieStore  # in-memory store
from catalog.users import UserService  # users and watch history

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Movie Catalog API", version="1.0.0")  # web app

# Globals that hold the service instances and measured startup time
ENGINE: Optional[SearchEngine] = None  # search/trending entry points
USERS: Optional[UserService] = None  # user and watch operations
REVIEWS: Optional[ReviewService] = None  # review operations
STARTUP_TIME_S: float = 0.0  # measures how long startup took


# ---------- response / request schemas ----------

class CastOut(BaseModel):
	name: str
	role: str
	name_highlighted: Optional[str] = None  # present only when the cast name matched


class MovieOut(BaseModel):
	id: str  # unique id
	title: str  # display title
	release_year: int  # release year (0 when unknown)
	genres: List[str]  # list of genres
	cast: List[CastOut]  # cast entries
	director: Optional[str] = None  # director name if present
	rating: float  # 0-10 content rating
	watch_count: int  # popularity counter
	description: Optional[str] = None  # synopsis
	poster_url: Optional[str] = None  # optional poster image URL


class ScoreBreakdownOut(BaseModel):
	text: float
	rating: float
	popularity: float


class SearchItem(BaseModel):
	movie: MovieOut  # movie metadata (cast carries highlights)
	hybrid_score: float  # final hybrid score
	score_breakdown: ScoreBreakdownOut  # per-signal scores
	title_highlighted: Optional[str] = None
	director_highlighted: Optional[str] = None


class PaginationOut(BaseModel):
	page: int
	limit: int
	total: int
	pages: int


class SearchData(BaseModel):
	movies: List[SearchItem]
	pagination: PaginationOut
	user_favorite_genre: Optional[str] = None
	personalized: bool
	elapsed_ms: float  # server-side search time in ms


class SearchResponse(BaseModel):
	success: bool = True
	data: SearchData


class TrendingItem(BaseModel):
	id: str
	title: str
	poster_url: Optional[str] = None
	rating: float
	genres: List[str]
	release_year: int
	watch_count: int
	unique_viewers: int
	avg_watch_time: int
	genre_match: int
	watched: int


class TrendingData(BaseModel):
	trending: List[TrendingItem]
	period: str
	personalized: bool
	user_favorite_genre: Optional[str] = None
	filtered_out_watched: int


class TrendingResponse(BaseModel):
	success: bool = True
	data: TrendingData


class MovieListData(BaseModel):
	movies: List[MovieOut]
	pagination: PaginationOut


class MovieListResponse(BaseModel):
	success: bool = True
	data: MovieListData


class ReviewSummaryOut(BaseModel):
	average_rating: float
	total_reviews: int


class MovieDetailData(BaseModel):
	movie: MovieOut
	review_stats: ReviewSummaryOut


class MovieDetailResponse(BaseModel):
	success: bool = True
	data: MovieDetailData


class ReviewOut(BaseModel):
	id: str
	user_id: str
	movie_id: str
	rating: int
	review_text: str
	helpful: int
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None


class ReviewResponse(BaseModel):
	success: bool = True
	data: ReviewOut


class ReviewListData(BaseModel):
	reviews: List[ReviewOut]
	pagination: PaginationOut


class ReviewListResponse(BaseModel):
	success: bool = True
	data: ReviewListData


class ReviewStatsData(BaseModel):
	average_rating: float
	total_reviews: int
	rating_distribution: Dict[str, int]


class ReviewStatsResponse(BaseModel):
	success: bool = True
	data: ReviewStatsData


class UserOut(BaseModel):
	id: str
	name: str
	email: str
	subscription_type: str
	created_at: Optional[datetime] = None


class UserResponse(BaseModel):
	success: bool = True
	data: UserOut


class UserListResponse(BaseModel):
	success: bool = True
	data: List[UserOut]


class HistoryEntryOut(BaseModel):
	movie: Optional[MovieOut] = None  # None when the movie was removed from the catalog
	watched_at: datetime
	duration: int
	completion_percentage: int


class HistoryStatsOut(BaseModel):
	total_movies_watched: int
	total_watch_time: int
	favorite_genre: str


class HistoryData(BaseModel):
	user: UserOut
	history: List[HistoryEntryOut]
	stats: HistoryStatsOut
	pagination: PaginationOut


class HistoryResponse(BaseModel):
	success: bool = True
	data: HistoryData


class FavoriteGenreData(BaseModel):
	user_id: str
	favorite_genre: Optional[str] = None


class FavoriteGenreResponse(BaseModel):
	success: bool = True
	data: FavoriteGenreData


class WatchEventOut(BaseModel):
	id: str
	user_id: str
	movie_id: str
	timestamp: datetime
	watch_duration: int
	completion_percentage: int


class WatchData(BaseModel):
	watch_history: WatchEventOut
	review: Optional[ReviewOut] = None
	message: str


class WatchResponse(BaseModel):
	success: bool = True
	data: WatchData


class CreateReviewRequest(BaseModel):
	user_id: str
	rating: int
	review_text: Optional[str] = None


class CreateUserRequest(BaseModel):
	name: str
	email: str
	subscription_type: Optional[str] = None


class WatchRequest(BaseModel):
	movie_id: str
	watch_duration: int = 0
	completion_percentage: int = 0
	rating: Optional[int] = None
	review_text: Optional[str] = None


# ---------- conversions from core records ----------

def movie_out(m: Movie, cast_highlighted: Optional[List[Dict[str, str]]] = None) -> MovieOut:
	cast = cast_highlighted if cast_highlighted is not None else [{'name': c.name, 'role': c.role} for c in m.cast]
	return MovieOut(
		id=m.id,
		title=m.title,
		release_year=m.release_year,
		genres=m.genres,
		cast=[CastOut(**c) for c in cast],
		director=m.director or None,
		rating=m.rating,
		watch_count=m.watch_count,
		description=m.description or None,
		poster_url=m.poster_url,
	)


def search_item(c: ScoredCandidate) -> SearchItem:
	return SearchItem(
		movie=movie_out(c.movie, c.cast_highlighted),
		hybrid_score=round(c.scores.final_score, 3),
		score_breakdown=ScoreBreakdownOut(
			text=round(c.scores.text_score, 2),
			rating=round(c.scores.rating_score, 2),
			popularity=round(c.scores.popularity_score, 2),
		),
		title_highlighted=c.title_highlighted,
		director_highlighted=c.director_highlighted,
	)


def trending_item(e: TrendingEntry) -> TrendingItem:
	return TrendingItem(
		id=e.movie_id,
		title=e.title,
		poster_url=e.poster_url,
		rating=e.rating,
		genres=e.genres,
		release_year=e.release_year,
		watch_count=e.watch_count,
		unique_viewers=e.unique_viewers,
		avg_watch_time=e.avg_watch_time,
		genre_match=e.genre_match,
		watched=e.watched,
	)


def review_out(r: Review) -> ReviewOut:
	return ReviewOut(
		id=r.id,
		user_id=r.user_id,
		movie_id=r.movie_id,
		rating=r.rating,
		review_text=r.review_text,
		helpful=r.helpful,
		created_at=r.created_at,
		updated_at=r.updated_at,
	)


def user_out(u: User) -> UserOut:
	return UserOut(id=u.id, name=u.name, email=u.email, subscription_type=u.subscription_type, created_at=u.created_at)


def watch_out(e: WatchEvent) -> WatchEventOut:
	return WatchEventOut(
		id=e.id,
		user_id=e.user_id,
		movie_id=e.movie_id,
		timestamp=e.timestamp,
		watch_duration=e.watch_duration,
		completion_percentage=e.completion_percentage,
	)


# ---------- lifecycle and error handling ----------

def init_services(store: MovieStore) -> None:
	"""Wire the engine and services around one store (used at startup and by tests)."""
	global ENGINE, USERS, REVIEWS  # refer to module-level globals
	ENGINE = SearchEngine(store)  # search, trending, browsing
	REVIEWS = ReviewService(store)  # reviews
	USERS = UserService(store, resolver=ENGINE.resolver, reviews=REVIEWS)  # users and watches


# FastAPI startup hook to initialize the services once
@app.on_event("startup")
async def startup_event():
	"""Load the catalog and log how long it took."""
	global STARTUP_TIME_S  # refer to module-level global
	start = time.time()  # start timer for startup latency
	config.configure_logging()  # apply CATALOG_LOG_LEVEL

	logger.info(f"[API] Startup: loading catalog from '{config.DATA_DIR}'...")  # log intent
	store = DataLoader().load_store(config.DATA_DIR)  # read whatever data exists
	init_services(store)  # build engine and services

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {store.size()} movies.")  # summary log


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
	"""Map core errors to the JSON error envelope with their status code."""
	logger.warning(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
	return JSONResponse(
		status_code=exc.status_code,
		content={"success": False, "status": "fail", "message": exc.message},
	)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
	"""Malformed parameters are client errors, reported like other invalid input."""
	message = ', '.join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
	logger.warning(f"[API] {request.method} {request.url.path} -> 400: {message}")
	return JSONResponse(status_code=400, content={"success": False, "status": "fail", "message": message})


def _engine() -> SearchEngine:
	if ENGINE is None:  # startup has not completed
		raise RuntimeError("Search engine not initialized")
	return ENGINE


def _users() -> UserService:
	if USERS is None:
		raise RuntimeError("User service not initialized")
	return USERS


def _reviews() -> ReviewService:
	if REVIEWS is None:
		raise RuntimeError("Review service not initialized")
	return REVIEWS


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
	return parse_timestamp(value) if value is not None else None


# ---------- endpoints ----------

# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"engine_ready": ENGINE is not None,  # True if engine initialized
		"movies": ENGINE.store.size() if ENGINE is not None else 0,  # catalog size
		"startup_seconds": round(STARTUP_TIME_S, 2)  # startup latency
	}


# Main search endpoint
@app.get("/api/movies/search", response_model=SearchResponse)
async def search_movies(
	query: Optional[str] = Query(None, description="Text matched against title, director and cast"),
	genre: Optional[str] = None,
	min_rating: Optional[float] = None,
	user_id: Optional[str] = Query(None, description="Viewer id for favorite-genre personalization"),
	page: int = 1,
	limit: int = config.DEFAULT_PAGE_SIZE,
):
	"""Execute a personalized ranked search and return one page of results."""
	start = time.time()  # start timer
	logger.debug(f"[API] /search query='{query}' genre={genre} min_rating={min_rating} user_id={user_id}")  # debug log of input

	outcome = _engine().search(query, SearchFilters(genre=genre, min_rating=min_rating), viewer_id=user_id)  # run search
	page_data = paginate(outcome.ranked_movies, page, limit)  # slice one page
	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /search served {len(page_data['data'])} of {len(outcome.ranked_movies)} results in {elapsed_ms:.2f} ms")  # summary

	return SearchResponse(data=SearchData(
		movies=[search_item(c) for c in page_data['data']],
		pagination=PaginationOut(**page_data['pagination']),
		user_favorite_genre=outcome.favorite_genre,
		personalized=outcome.personalized,
		elapsed_ms=round(elapsed_ms, 2),
	))


@app.get("/api/movies/trending", response_model=TrendingResponse)
async def trending_movies(user_id: Optional[str] = None, window_days: Optional[int] = None):
	"""Popular-now movies, personalized by favorite genre and watched status."""
	outcome = _engine().trending(viewer_id=user_id, window_days=window_days)
	return TrendingResponse(data=TrendingData(
		trending=[trending_item(e) for e in outcome.trending],
		period=f"Last {outcome.period_days} days",
		personalized=outcome.personalized,
		user_favorite_genre=outcome.favorite_genre,
		filtered_out_watched=outcome.filtered_out_watched,
	))


@app.get("/api/movies", response_model=MovieListResponse)
async def list_movies(genre: Optional[str] = None, min_rating: Optional[float] = None, page: int = 1, limit: int = 20):
	result = _engine().list_movies(genre=genre, min_rating=min_rating, page=page, limit=limit)
	return MovieListResponse(data=MovieListData(
		movies=[movie_out(m) for m in result['data']],
		pagination=PaginationOut(**result['pagination']),
	))


@app.get("/api/movies/{movie_id}", response_model=MovieDetailResponse)
async def get_movie(movie_id: str):
	movie, stats = _engine().movie_details(movie_id)
	return MovieDetailResponse(data=MovieDetailData(movie=movie_out(movie), review_stats=ReviewSummaryOut(**stats)))


@app.get("/api/movies/{movie_id}/reviews", response_model=ReviewListResponse)
async def get_movie_reviews(movie_id: str, page: int = 1, limit: int = 10):
	result = _reviews().movie_reviews(movie_id, page=page, limit=limit)
	return ReviewListResponse(data=ReviewListData(
		reviews=[review_out(r) for r in result['data']],
		pagination=PaginationOut(**result['pagination']),
	))


@app.post("/api/movies/{movie_id}/reviews", response_model=ReviewResponse, status_code=201)
async def create_review(movie_id: str, body: CreateReviewRequest):
	review = _reviews().create_review(movie_id, body.user_id, body.rating, body.review_text)
	return ReviewResponse(data=review_out(review))


@app.get("/api/movies/{movie_id}/reviews/stats", response_model=ReviewStatsResponse)
async def get_review_stats(movie_id: str):
	return ReviewStatsResponse(data=ReviewStatsData(**_reviews().review_stats(movie_id)))


@app.patch("/api/reviews/{review_id}/helpful", response_model=ReviewResponse)
async def mark_review_helpful(review_id: str):
	return ReviewResponse(data=review_out(_reviews().mark_helpful(review_id)))


@app.get("/api/users", response_model=UserListResponse)
async def list_users():
	return UserListResponse(data=[user_out(u) for u in _users().list_users()])


@app.post("/api/users", response_model=UserResponse, status_code=201)
async def create_user(body: CreateUserRequest):
	user = _users().create_user(body.name, body.email, body.subscription_type)
	return UserResponse(data=user_out(user))


@app.get("/api/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
	return UserResponse(data=user_out(_users().get_user(user_id)))


@app.get("/api/users/{user_id}/history", response_model=HistoryResponse)
async def get_user_history(
	user_id: str,
	start_date: Optional[datetime] = None,
	end_date: Optional[datetime] = None,
	page: int = 1,
	limit: int = 20,
):
	result = _users().history(user_id, start=_as_utc(start_date), end=_as_utc(end_date), page=page, limit=limit)
	return HistoryResponse(data=HistoryData(
		user=user_out(result['user']),
		history=[
			HistoryEntryOut(
				movie=movie_out(h['movie']) if h['movie'] is not None else None,
				watched_at=h['watched_at'],
				duration=h['duration'],
				completion_percentage=h['completion_percentage'],
			)
			for h in result['history']
		],
		stats=HistoryStatsOut(**result['stats']),
		pagination=PaginationOut(**result['pagination']),
	))


@app.get("/api/users/{user_id}/favorite-genre", response_model=FavoriteGenreResponse)
async def get_favorite_genre(user_id: str):
	return FavoriteGenreResponse(data=FavoriteGenreData(user_id=user_id, favorite_genre=_engine().favorite_genre(user_id)))


@app.post("/api/users/{user_id}/watch", response_model=WatchResponse, status_code=201)
async def add_to_watch_history(user_id: str, body: WatchRequest):
	event, review = _users().add_watch(
		user_id,
		body.movie_id,
		watch_duration=body.watch_duration,
		completion_percentage=body.completion_percentage,
		rating=body.rating,
		review_text=body.review_text,
	)
	message = 'Movie added to watch history successfully' + (' with review' if review else '')
	return WatchResponse(data=WatchData(
		watch_history=watch_out(event),
		review=review_out(review) if review else None,
		message=message,
	))
