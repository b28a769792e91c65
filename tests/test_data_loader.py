"""
Tests for data loading: JSON Lines parsing, normalization and store assembly.
Run: pytest tests/test_data_loader.py
"""

import json
from datetime import datetime, timezone

import pytest

from catalog.data_loader import (
	MOVIES_FILE,
	REVIEWS_FILE,
	USERS_FILE,
	WATCH_HISTORY_FILE,
	DataLoader,
	parse_timestamp,
	write_jsonl,
)


def write_lines(path, lines):
	path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
	return path


def test_movie_parsing_normalizes_fields(tmp_path):
	path = write_lines(tmp_path / MOVIES_FILE, [
		json.dumps({
			'_id': 'm-1', 'title': ' Alien ', 'releaseYear': 1979, 'genres': ['sci-fi', 'horror'],
			'cast': [{'name': 'Sigourney Weaver', 'role': 'Ripley'}, 'Tom Skerritt'],
			'director': 'Ridley Scott', 'rating': 8.5, 'watchCount': 42, 'posterUrl': 'http://img/alien.jpg',
		}),
		json.dumps({'id': 'm-2', 'title': 'Loud', 'genres': 'war drama, Comedy', 'cast': 'A One, B Two', 'rating': 14}),
	])
	alien, loud = DataLoader().load_movies_from_jsonl(str(path))

	assert alien.title == 'Alien'
	assert alien.release_year == 1979
	assert alien.genres == ['Science Fiction', 'Horror']
	assert [(c.name, c.role) for c in alien.cast] == [('Sigourney Weaver', 'Ripley'), ('Tom Skerritt', 'Actor')]
	assert alien.watch_count == 42
	assert alien.poster_url == 'http://img/alien.jpg'

	assert loud.genres == ['War Drama', 'Comedy']
	assert loud.cast_names == ['A One', 'B Two']
	assert loud.rating == 10.0
	assert loud.release_year == 0


def test_invalid_lines_are_skipped(tmp_path):
	path = write_lines(tmp_path / MOVIES_FILE, [
		'{not json',
		json.dumps({'id': 'no-title'}),
		'',
		json.dumps({'id': 'ok', 'title': 'Fine', 'rating': 'n/a'}),
		json.dumps({'id': 'ok-2', 'title': 'Also Fine'}),
	])
	movies = DataLoader().load_movies_from_jsonl(str(path))
	assert [m.id for m in movies] == ['ok-2']


def test_missing_file_raises(tmp_path):
	with pytest.raises(FileNotFoundError):
		DataLoader().load_movies_from_jsonl(str(tmp_path / 'nope.jsonl'))


def test_missing_directory_gives_empty_store(tmp_path):
	store = DataLoader().load_store(str(tmp_path / 'missing'))
	assert store.size() == 0
	assert store.all_watch_events() == []


def test_load_store_wires_all_records(tmp_path):
	write_jsonl(tmp_path / MOVIES_FILE, [
		{'_id': 'm-1', 'title': 'Alien', 'genres': ['Horror']},
		{'_id': 'm-2', 'title': 'Heat', 'genres': ['Crime']},
	])
	write_jsonl(tmp_path / USERS_FILE, [{'_id': 'u-1', 'name': 'Ann', 'email': 'ANN@example.com', 'subscriptionType': 'Premium'}])
	write_jsonl(tmp_path / WATCH_HISTORY_FILE, [
		{'_id': 'w-1', 'userId': 'u-1', 'movieId': 'm-1', 'timestamp': '2026-10-01T20:00:00Z', 'watchDuration': 117},
		{'_id': 'w-2', 'userId': 'u-1', 'movieId': 'm-2', 'timestamp': '2026-10-02T20:00:00', 'watchDuration': 170},
	])
	write_jsonl(tmp_path / REVIEWS_FILE, [
		{'_id': 'r-1', 'userId': 'u-1', 'movieId': 'm-1', 'rating': 9, 'createdAt': '2026-10-01T22:00:00Z'},
		{'_id': 'r-2', 'userId': 'u-1', 'movieId': 'm-1', 'rating': 3},
		{'_id': 'r-3', 'userId': 'u-1', 'movieId': 'm-2', 'rating': 11},
	])

	store = DataLoader().load_store(str(tmp_path))
	assert store.size() == 2
	user = store.get_user('u-1')
	assert user.email == 'ann@example.com'
	assert user.subscription_type == 'premium'
	assert [e.id for e in store.viewer_watch_history('u-1')] == ['w-2', 'w-1']
	assert store.viewer_watch_history('u-1')[0].timestamp.tzinfo is not None
	# the second review of the same movie and the out-of-range one are dropped
	assert list(store.reviews_map) == ['r-1']


def test_parse_timestamp_is_always_utc():
	assert parse_timestamp('2026-10-01T20:00:00Z') == datetime(2026, 10, 1, 20, tzinfo=timezone.utc)
	assert parse_timestamp('2026-10-01T20:00:00') == datetime(2026, 10, 1, 20, tzinfo=timezone.utc)
	assert parse_timestamp(datetime(2026, 1, 1)).tzinfo == timezone.utc
	with pytest.raises(ValueError):
		parse_timestamp('yesterday')


def test_catalog_listings(movie_factory):
	loader = DataLoader()
	movies = [
		movie_factory('a', genres=['Drama', 'Crime'], director='Sidney Lumet', cast=['Henry Fonda']),
		movie_factory('b', genres=['Drama'], director='', cast=['Al Pacino', 'Henry Fonda']),
	]
	assert loader.get_all_genres(movies) == ['Crime', 'Drama']
	assert loader.get_all_directors(movies) == ['Sidney Lumet']
	assert loader.get_all_actors(movies) == ['Al Pacino', 'Henry Fonda']
	assert loader.normalize_genre('  SCIFI ') == 'Science Fiction'
	assert loader.normalize_genre('') == ''
