"""
HTTP-level tests for the FastAPI app, run against the in-memory sample catalog.
Run: pytest tests/test_api.py
"""

import pytest
from fastapi.testclient import TestClient

import api


@pytest.fixture
def client(sample_store):
	# Without the context manager the startup hook (which reads CATALOG_DATA_DIR) never runs
	api.init_services(sample_store)
	yield TestClient(api.app)
	api.ENGINE = api.USERS = api.REVIEWS = None


def assert_fail(response, status_code):
	assert response.status_code == status_code
	body = response.json()
	assert body['success'] is False
	assert body['status'] == 'fail'
	assert body['message']


def test_health(client):
	body = client.get('/health').json()
	assert body['status'] == 'ok'
	assert body['engine_ready'] is True
	assert body['movies'] == 6


def test_search_ranked_and_highlighted(client):
	response = client.get('/api/movies/search', params={'query': 'dark'})
	assert response.status_code == 200
	data = response.json()['data']
	assert [m['movie']['title'] for m in data['movies']] == ['Dark Waters', 'Darkness Falls', 'The Dark Knight']
	assert data['movies'][0]['title_highlighted'] == '<mark>Dark</mark> Waters'
	assert data['movies'][0]['score_breakdown']['rating'] == 0.65
	assert data['personalized'] is False
	assert data['user_favorite_genre'] is None
	assert data['pagination'] == {'page': 1, 'limit': 10, 'total': 3, 'pages': 1}


def test_search_personalized(client):
	data = client.get('/api/movies/search', params={'query': 'dark', 'user_id': 'u-alice'}).json()['data']
	assert data['user_favorite_genre'] == 'Horror'
	assert data['personalized'] is True
	assert data['movies'][0]['movie']['title'] == 'Darkness Falls'


def test_search_pagination_and_filters(client):
	data = client.get('/api/movies/search', params={'query': 'dark', 'page': 2, 'limit': 2}).json()['data']
	assert [m['movie']['title'] for m in data['movies']] == ['The Dark Knight']
	assert data['pagination']['pages'] == 2

	data = client.get('/api/movies/search', params={'query': 'dark', 'genre': 'horor'}).json()['data']
	assert [m['movie']['title'] for m in data['movies']] == ['Darkness Falls']


def test_search_cast_highlight(client):
	movie = client.get('/api/movies/search', params={'query': 'heath'}).json()['data']['movies'][0]['movie']
	assert movie['cast'][1] == {'name': 'Heath Ledger', 'role': 'Actor', 'name_highlighted': '<mark>Heath</mark> Ledger'}
	assert movie['cast'][0]['name_highlighted'] is None


@pytest.mark.parametrize('params', [
	{},
	{'query': '   '},
	{'query': 'dark', 'min_rating': 11},
	{'query': 'dark', 'user_id': 'bad id!'},
	{'query': 'dark', 'min_rating': 'high'},
	{'query': 'dark', 'limit': 500},
])
def test_search_invalid_input_is_400(client, params):
	assert_fail(client.get('/api/movies/search', params=params), 400)


def test_trending(client):
	data = client.get('/api/movies/trending', params={'user_id': 'u-alice'}).json()['data']
	assert data['period'] == 'Last 90 days'
	assert data['user_favorite_genre'] == 'Horror'
	assert data['filtered_out_watched'] == 3
	assert {m['id'] for m in data['trending'][:3]} == {'m-conjuring', 'm-light-house', 'm-darkness'}

	anonymous = client.get('/api/movies/trending').json()['data']
	assert anonymous['personalized'] is False
	assert anonymous['trending'][0]['id'] == 'm-dark-knight'
	assert anonymous['trending'][0]['unique_viewers'] == 1
	assert anonymous['trending'][0]['avg_watch_time'] == 135


def test_list_and_get_movie(client):
	data = client.get('/api/movies', params={'min_rating': 8}).json()['data']
	assert [m['title'] for m in data['movies']] == ['The Dark Knight', 'Inception']

	detail = client.get('/api/movies/m-inception').json()['data']
	assert detail['movie']['director'] == 'Christopher Nolan'
	assert detail['review_stats'] == {'average_rating': 0.0, 'total_reviews': 0}

	assert_fail(client.get('/api/movies/m-missing'), 404)


def test_review_flow(client):
	created = client.post('/api/movies/m-conjuring/reviews', json={'user_id': 'u-bob', 'rating': 7, 'review_text': 'Solid'})
	assert created.status_code == 201
	review_id = created.json()['data']['id']

	assert_fail(client.post('/api/movies/m-conjuring/reviews', json={'user_id': 'u-bob', 'rating': 8}), 400)
	assert_fail(client.post('/api/movies/m-conjuring/reviews', json={'user_id': 'u-alice', 'rating': 0}), 400)

	helpful = client.patch(f'/api/reviews/{review_id}/helpful').json()['data']
	assert helpful['helpful'] == 1

	listed = client.get('/api/movies/m-conjuring/reviews').json()['data']
	assert [r['id'] for r in listed['reviews']] == [review_id]

	stats = client.get('/api/movies/m-conjuring/reviews/stats').json()['data']
	assert stats['average_rating'] == 7.0
	assert stats['rating_distribution']['7'] == 1


def test_users_and_watch_flow(client):
	created = client.post('/api/users', json={'name': 'Carol', 'email': 'carol@example.com'})
	assert created.status_code == 201
	carol = created.json()['data']
	assert carol['subscription_type'] == 'free'

	assert_fail(client.post('/api/users', json={'name': 'Carol 2', 'email': 'carol@example.com'}), 400)
	assert len(client.get('/api/users').json()['data']) == 3

	watch = client.post(f"/api/users/{carol['id']}/watch", json={'movie_id': 'm-darkness', 'watch_duration': 80, 'rating': 6})
	assert watch.status_code == 201
	body = watch.json()['data']
	assert body['message'] == 'Movie added to watch history successfully with review'
	assert body['review']['rating'] == 6

	favorite = client.get(f"/api/users/{carol['id']}/favorite-genre").json()['data']
	assert favorite == {'user_id': carol['id'], 'favorite_genre': 'Horror'}

	history = client.get(f"/api/users/{carol['id']}/history").json()['data']
	assert history['stats'] == {'total_movies_watched': 1, 'total_watch_time': 80, 'favorite_genre': 'Horror'}
	assert history['history'][0]['movie']['id'] == 'm-darkness'


def test_user_errors(client):
	assert_fail(client.get('/api/users/u-ghost'), 404)
	assert_fail(client.post('/api/users/u-alice/watch', json={'movie_id': 'm-missing'}), 404)
	assert_fail(client.post('/api/users/u-alice/watch', json={}), 400)
	assert client.get('/api/users/u-ghost/favorite-genre').json()['data']['favorite_genre'] is None


def test_trending_window_out_of_range_is_400(client):
	assert_fail(client.get('/api/movies/trending', params={'window_days': 1000000}), 400)
	assert_fail(client.get('/api/movies/trending', params={'window_days': 0}), 400)
