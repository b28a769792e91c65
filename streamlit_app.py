"""
Streamlit UI for the Movie Catalog.
Calls the local FastAPI server (CATALOG_API_URL, default http://localhost:8000) for search
and trending, or runs locally by loading the catalog from CATALOG_DATA_DIR like the API does.

Run API (optional):   uvicorn api:app --reload
Run UI:                streamlit run streamlit_app.py
"""

# HTTP client to call the API when running in API mode
import requests  # make web requests to the FastAPI server
# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Dict, List, Optional  # indicates values can be None

# Local engine imports for fallback/local mode (when API isn't used)
from catalog import config  # default URLs and paths
from catalog.data_loader import DataLoader  # load the catalog from files
from catalog.models import SearchFilters  # search narrowing
from catalog.search_engine import SearchEngine  # search + trending + ranking

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Movie Catalog", layout="wide")  # wide layout

# Main page title
st.title("🎬 Movie Catalog – Search & Trending")  # friendly header

# Per-session context; passed explicitly into every search/trending call
if "viewer_id" not in st.session_state:
	st.session_state["viewer_id"] = None  # selected viewer (None = anonymous)
if "page" not in st.session_state:
	st.session_state["page"] = 1  # current results page


# Cache the local engine so the catalog is only loaded once per process
@st.cache_resource(show_spinner=True)
def init_local_engine() -> Optional[SearchEngine]:
	"""Create a local SearchEngine over the catalog files."""
	try:
		store = DataLoader().load_store(config.DATA_DIR)  # read dataset
		return SearchEngine(store)  # success
	except (OSError, ValueError) as e:
		# Show an error in the UI so users know local mode failed
		st.error(f"Failed to initialize local search engine: {e}")
		return None  # signal failure


def list_viewers(api_url: str, engine: Optional[SearchEngine]) -> List[Dict]:
	"""Viewer choices for the sidebar selector."""
	if engine is not None:
		return [{"id": u.id, "name": u.name} for u in engine.store.list_users()]
	resp = requests.get(f"{api_url}/api/users", timeout=10)
	resp.raise_for_status()
	return [{"id": u["id"], "name": u["name"]} for u in resp.json()["data"]]


def local_search(engine: SearchEngine, query: str, genre: str, min_rating: float, viewer_id: Optional[str]) -> Dict:
	"""Run a search in-process and shape it like the API payload."""
	outcome = engine.search(query, SearchFilters(genre=genre or None, min_rating=min_rating or None), viewer_id=viewer_id)
	movies = []
	for c in outcome.ranked_movies:
		m = c.movie
		movies.append({
			"movie": {
				"id": m.id,
				"title": m.title,
				"release_year": m.release_year,
				"genres": m.genres,
				"director": m.director,
				"cast": c.cast_highlighted or [{"name": x.name, "role": x.role} for x in m.cast],
				"rating": m.rating,
				"poster_url": m.poster_url,
				"description": m.description,
			},
			"hybrid_score": round(c.scores.final_score, 3),
			"score_breakdown": {
				"text": round(c.scores.text_score, 2),
				"rating": round(c.scores.rating_score, 2),
				"popularity": round(c.scores.popularity_score, 2),
			},
			"title_highlighted": c.title_highlighted,
			"director_highlighted": c.director_highlighted,
		})
	return {"movies": movies, "user_favorite_genre": outcome.favorite_genre, "personalized": outcome.personalized}


def local_trending(engine: SearchEngine, viewer_id: Optional[str]) -> Dict:
	outcome = engine.trending(viewer_id=viewer_id)
	return {
		"trending": [
			{"title": e.title, "genres": e.genres, "watch_count": e.watch_count, "unique_viewers": e.unique_viewers,
			 "avg_watch_time": e.avg_watch_time, "genre_match": e.genre_match, "watched": e.watched, "poster_url": e.poster_url}
			for e in outcome.trending
		],
		"user_favorite_genre": outcome.favorite_genre,
		"filtered_out_watched": outcome.filtered_out_watched,
	}


# Sidebar contains configuration controls
with st.sidebar:
	st.header("Settings")  # section label
	page_size = st.slider("Results per page", min_value=5, max_value=20, value=10)  # page size
	api_url = st.text_input("API URL", config.API_URL)  # where the API lives
	# Toggle to force local mode; if API health probe fails we also fall back to local
	use_local = st.toggle("Use local engine", value=False, help="If enabled or API is unreachable, the app will run fully locally.")

# If not forcing local, check quickly whether the API is reachable
api_available = False  # default assumption
if not use_local:
	try:
		h = requests.get(f"{api_url}/health", timeout=3)  # ping API health endpoint
		api_available = h.ok  # True if server responded 200 OK
	except requests.RequestException:
		api_available = False  # probe failed
		st.sidebar.info("API not reachable; will use local engine.")  # inform user

# Initialize local engine only when needed (user toggle or API not available)
local_engine: Optional[SearchEngine] = None  # placeholder
if use_local or not api_available:
	with st.spinner("Loading catalog..."):
		local_engine = init_local_engine()  # load catalog
		if local_engine is not None:
			st.sidebar.success("Local engine ready.")  # success note
			loader = DataLoader()
			catalog_movies = local_engine.store.list_movies()
			st.sidebar.caption(
				f"{len(catalog_movies)} movies · {len(loader.get_all_genres(catalog_movies))} genres · "
				f"{len(loader.get_all_directors(catalog_movies))} directors · {len(loader.get_all_actors(catalog_movies))} actors"
			)
		else:
			st.sidebar.error("Local engine failed to initialize.")  # error note

# Viewer selector (explicit session context)
with st.sidebar:
	try:
		viewers = list_viewers(api_url, local_engine)
	except requests.RequestException as e:
		viewers = []
		st.error(f"Could not load viewers: {e}")
	options = [None] + [v["id"] for v in viewers]
	names = {v["id"]: v["name"] for v in viewers}
	st.session_state["viewer_id"] = st.selectbox(
		"Viewer",
		options,
		format_func=lambda vid: "Anonymous" if vid is None else names.get(vid, vid),
	)
viewer_id = st.session_state["viewer_id"]

search_tab, trending_tab = st.tabs(["Search", "Trending"])

with search_tab:
	# Main text input plus optional filters
	query = st.text_input("Search by title, director or cast", placeholder="e.g., dark")
	col1, col2, col3 = st.columns([2, 2, 1])  # filter row
	with col1:
		genre = st.text_input("Genre filter", placeholder="e.g., sci-fi")
	with col2:
		min_rating = st.slider("Minimum rating", min_value=0.0, max_value=10.0, value=0.0, step=0.5)
	with col3:
		st.session_state["page"] = st.number_input("Page", min_value=1, value=st.session_state["page"], step=1)

	if query.strip():
		with st.spinner("Searching..."):
			try:
				if local_engine is not None:
					payload = local_search(local_engine, query, genre, min_rating, viewer_id)
					start = (st.session_state["page"] - 1) * page_size
					payload["movies"] = payload["movies"][start:start + page_size]
				else:
					params = {"query": query, "page": st.session_state["page"], "limit": page_size}
					if genre:
						params["genre"] = genre
					if min_rating:
						params["min_rating"] = min_rating
					if viewer_id:
						params["user_id"] = viewer_id
					resp = requests.get(f"{api_url}/api/movies/search", params=params, timeout=30)
					resp.raise_for_status()  # raise error if server responded with an error code
					payload = resp.json()["data"]  # parse JSON returned by API

				if payload.get("personalized") and payload.get("user_favorite_genre"):
					st.info(f"Boosting your favorite genre: {payload['user_favorite_genre']}")
				st.success(f"Showing {len(payload['movies'])} results")
				st.divider()  # visual separator

				# Render each result as an image + details row
				for item in payload["movies"]:
					movie = item["movie"]
					c1, c2 = st.columns([1, 4])  # small image column + large text column
					with c1:
						if movie.get("poster_url"):
							st.image(movie["poster_url"], width='stretch')  # poster
					with c2:
						title = item.get("title_highlighted") or movie["title"]
						st.markdown(f"### {title} ({movie['release_year']})", unsafe_allow_html=True)
						breakdown = item["score_breakdown"]
						st.caption(
							f"Score: {item['hybrid_score']:.3f} | text {breakdown['text']} · rating {breakdown['rating']} · popularity {breakdown['popularity']}"
						)
						st.write(f"Genres: {', '.join(movie['genres'])}")
						director = item.get("director_highlighted") or movie.get("director")
						if director:
							st.markdown(f"Director: {director}", unsafe_allow_html=True)
						cast = [c.get("name_highlighted") or c["name"] for c in movie.get("cast", [])[:5]]
						if cast:
							st.markdown(f"Cast: {', '.join(cast)}", unsafe_allow_html=True)
						if movie.get("description"):
							st.write(movie["description"][:350])  # synopsis
					st.divider()  # separator

			except requests.RequestException as e:  # network/API errors
				st.error(f"API request failed: {e}")  # show human-friendly message
			except ValueError as e:  # rejected input from the local engine
				st.error(f"Search failed: {e}")  # show error

with trending_tab:
	try:
		if local_engine is not None:
			data = local_trending(local_engine, viewer_id)
		else:
			params = {"user_id": viewer_id} if viewer_id else {}
			resp = requests.get(f"{api_url}/api/movies/trending", params=params, timeout=30)
			resp.raise_for_status()
			data = resp.json()["data"]

		if data.get("user_favorite_genre"):
			st.caption(f"Personalized for {data['user_favorite_genre']} fans")
		if data.get("filtered_out_watched"):
			st.caption(f"{data['filtered_out_watched']} movies you've already watched are shown lower")
		for i, entry in enumerate(data["trending"][:10], start=1):
			badge = " ⭐" if entry["genre_match"] else ""
			seen = " (watched)" if entry["watched"] else ""
			st.write(
				f"{i}. **{entry['title']}**{badge}{seen} – {entry['watch_count']} views, "
				f"{entry['unique_viewers']} viewers, avg {entry['avg_watch_time']} min"
			)
	except requests.RequestException as e:
		st.error(f"API request failed: {e}")

# Show a footer indicator of current mode
st.sidebar.markdown("---")  # separator
if local_engine is not None:
	st.sidebar.caption("Mode: Local engine")  # mode label
else:
	st.sidebar.caption("Mode: API client (ensure uvicorn api:app --reload is running)")  # mode label
