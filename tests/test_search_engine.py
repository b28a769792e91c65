"""
Tests for the SearchEngine entry points: validation, personalization, filters and browsing.
Run: pytest tests/test_search_engine.py
"""

import pytest

from catalog.errors import InvalidInputError, NotFoundError
from catalog.models import Review, SearchFilters
from catalog.search_engine import SearchEngine


def titles(outcome):
	return [c.movie.title for c in outcome.ranked_movies]


def test_anonymous_search_ranks_by_ladder(sample_store):
	outcome = SearchEngine(sample_store).search('dark')
	assert outcome.favorite_genre is None
	assert outcome.personalized is False
	# both "starts with" titles first (higher blend first), then the "contains" title
	assert titles(outcome) == ['Dark Waters', 'Darkness Falls', 'The Dark Knight']


def test_light_house_is_not_a_candidate(sample_store):
	assert 'Light House' not in titles(SearchEngine(sample_store).search('dark'))


def test_favorite_genre_moves_horror_first(sample_store):
	outcome = SearchEngine(sample_store).search('dark', viewer_id='u-alice')
	assert outcome.favorite_genre == 'Horror'
	assert outcome.personalized is True
	assert titles(outcome) == ['Darkness Falls', 'Dark Waters', 'The Dark Knight']


def test_unknown_viewer_gets_no_personalization(sample_store):
	outcome = SearchEngine(sample_store).search('dark', viewer_id='u-ghost')
	assert outcome.favorite_genre is None
	assert outcome.personalized is True
	assert titles(outcome) == ['Dark Waters', 'Darkness Falls', 'The Dark Knight']


def test_director_search_uses_fuzzy_score_as_fallback(sample_store):
	outcome = SearchEngine(sample_store).search('nolan')
	assert titles(outcome) == ['The Dark Knight', 'Inception']
	knight = outcome.ranked_movies[0]
	assert knight.scores.text_score == pytest.approx(8 / 19)
	assert knight.director_highlighted == 'Christopher <mark>Nolan</mark>'
	assert knight.title_highlighted is None


def test_cast_search(sample_store):
	outcome = SearchEngine(sample_store).search('ledger')
	assert titles(outcome) == ['The Dark Knight']
	cast = outcome.ranked_movies[0].cast_highlighted
	assert cast[1]['name_highlighted'] == 'Heath <mark>Ledger</mark>'


def test_highlights_titles(sample_store):
	outcome = SearchEngine(sample_store).search('DARK')
	assert outcome.ranked_movies[0].title_highlighted == '<mark>Dark</mark> Waters'


def test_min_rating_filter(sample_store):
	outcome = SearchEngine(sample_store).search('dark', SearchFilters(min_rating=8))
	assert titles(outcome) == ['The Dark Knight']


def test_genre_filter_accepts_synonyms_and_typos(sample_store):
	engine = SearchEngine(sample_store)
	assert titles(engine.search('dark', SearchFilters(genre='horor'))) == ['Darkness Falls']
	assert titles(engine.search('dark', SearchFilters(genre='thriller'))) == ['Dark Waters']
	assert engine.resolve_genre_filter('sci-fi') == 'Science Fiction'
	assert engine.resolve_genre_filter('crime') == 'Crime'
	assert engine.resolve_genre_filter('noir') == 'noir'
	assert engine.resolve_genre_filter('  ') is None


def test_no_candidates_is_empty_not_error(sample_store):
	outcome = SearchEngine(sample_store).search('zzzz')
	assert outcome.ranked_movies == []


def test_candidate_cap(sample_store):
	outcome = SearchEngine(sample_store, candidate_cap=2).search('dark')
	assert len(outcome.ranked_movies) == 2


def test_custom_weights(sample_store):
	# only popularity counts; both share the director tier so the blend decides
	engine = SearchEngine(sample_store, weights={'similarity': 0.0, 'rating': 0.0, 'popularity': 1.0})
	outcome = engine.search('nolan')
	assert [c.scores.final_score for c in outcome.ranked_movies] == [1.0, 0.9]


@pytest.mark.parametrize('query', ['', '   ', None])
def test_empty_query_rejected(sample_store, query):
	with pytest.raises(InvalidInputError):
		SearchEngine(sample_store).search(query)


@pytest.mark.parametrize('min_rating', [-1, 10.5])
def test_out_of_range_rating_filter_rejected(sample_store, min_rating):
	with pytest.raises(InvalidInputError):
		SearchEngine(sample_store).search('dark', SearchFilters(min_rating=min_rating))


def test_malformed_viewer_rejected(sample_store):
	engine = SearchEngine(sample_store)
	with pytest.raises(InvalidInputError):
		engine.search('dark', viewer_id='bad id!')
	with pytest.raises(InvalidInputError):
		engine.trending(viewer_id='../etc')
	with pytest.raises(InvalidInputError):
		engine.favorite_genre('')


def test_invalid_input_is_a_value_error(sample_store):
	with pytest.raises(ValueError):
		SearchEngine(sample_store).search(' ')


def test_favorite_genre_entry_point(sample_store):
	engine = SearchEngine(sample_store)
	assert engine.favorite_genre('u-alice') == 'Horror'
	assert engine.favorite_genre('u-ghost') is None


def test_trending_entry_point(sample_store):
	outcome = SearchEngine(sample_store).trending(viewer_id='u-alice')
	assert outcome.favorite_genre == 'Horror'
	assert outcome.period_days == 90
	assert outcome.filtered_out_watched == 3
	with pytest.raises(InvalidInputError):
		SearchEngine(sample_store).trending(window_days=0)


def test_list_movies_sorted_by_rating(sample_store):
	result = SearchEngine(sample_store).list_movies(page=1, limit=3)
	assert [m.title for m in result['data']] == ['The Dark Knight', 'Inception', 'The Conjuring']
	assert result['pagination'] == {'page': 1, 'limit': 3, 'total': 6, 'pages': 2}

	horror = SearchEngine(sample_store).list_movies(genre='horror')
	assert [m.title for m in horror['data']] == ['The Conjuring', 'Light House', 'Darkness Falls']


def test_movie_details(sample_store):
	sample_store.add_review(Review(id='r-1', user_id='u-alice', movie_id='m-conjuring', rating=8))
	sample_store.add_review(Review(id='r-2', user_id='u-bob', movie_id='m-conjuring', rating=5))
	movie, stats = SearchEngine(sample_store).movie_details('m-conjuring')
	assert movie.title == 'The Conjuring'
	assert stats == {'average_rating': 6.5, 'total_reviews': 2}

	with pytest.raises(NotFoundError):
		SearchEngine(sample_store).movie_details('m-missing')


@pytest.mark.parametrize('window_days', [3651, 1_000_000])
def test_trending_window_has_an_upper_bound(sample_store, window_days):
	with pytest.raises(InvalidInputError):
		SearchEngine(sample_store).trending(window_days=window_days)


def test_longest_trending_window_is_accepted(sample_store):
	assert SearchEngine(sample_store).trending(window_days=3650).period_days == 3650
