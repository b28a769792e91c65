"""
Text matching module.
Scores how strongly a query matches each searchable field of a movie.

Title, cast and genre fields only score on case-insensitive substring containment
(no fuzzy fallback). The director field is compared with a bigram Dice coefficient,
so near-miss spellings of a director still earn a partial score.
"""

from collections import Counter  # bigram multisets
from typing import Iterable

from .models import Movie

TITLE = 'title'
CAST = 'cast'
GENRE = 'genre'
DIRECTOR = 'director'


def match_field(field_value: str, query: str, field_class: str) -> float:
	"""
	Match strength (0..1) of `query` against one field value.
	"""
	if not field_value or not query:
		return 0.0

	if field_class == DIRECTOR:
		return dice_coefficient(query.lower(), field_value.lower())

	value = field_value.lower()
	q = query.lower()
	if q not in value:
		return 0.0

	if field_class == TITLE:
		return 0.9 + 0.1 * (len(q) / len(value))  # 0.9 .. 1.0
	if field_class == CAST:
		return 0.7 + 0.3 * (len(q) / len(value))  # 0.7 .. 1.0
	if field_class == GENRE:
		return 0.6
	raise ValueError(f"Unknown field class: {field_class}")


def dice_coefficient(first: str, second: str) -> float:
	"""
	Sorensen-Dice similarity over character bigrams, whitespace ignored.
	Identical strings score 1.0; strings shorter than two characters score 0.0.
	"""
	first = ''.join(first.split())
	second = ''.join(second.split())
	if first == second:
		return 1.0
	if len(first) < 2 or len(second) < 2:
		return 0.0

	first_bigrams = Counter(first[i:i + 2] for i in range(len(first) - 1))
	intersection = 0
	for i in range(len(second) - 1):
		bigram = second[i:i + 2]
		if first_bigrams[bigram] > 0:
			first_bigrams[bigram] -= 1
			intersection += 1

	return (2.0 * intersection) / (len(first) + len(second) - 2)


def _best(scores: Iterable[float]) -> float:
	return max(scores, default=0.0)


def text_score(movie: Movie, query: str) -> float:
	"""Best single-field match across title, director, cast names and genres."""
	title_score = match_field(movie.title, query, TITLE)
	director_score = match_field(movie.director, query, DIRECTOR)
	cast_score = _best(match_field(name, query, CAST) for name in movie.cast_names)
	genre_score = _best(match_field(g, query, GENRE) for g in movie.genres)
	return max(title_score, director_score, cast_score, genre_score)
