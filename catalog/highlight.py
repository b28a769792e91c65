"""
Highlighting helpers: mark query occurrences in result text for display.
"""

import re
from typing import Tuple

from .models import ScoredCandidate

DEFAULT_MARKER = ('<mark>', '</mark>')


def highlight_text(text: str, query: str, marker: Tuple[str, str] = DEFAULT_MARKER) -> str:
	"""Wrap every case-insensitive occurrence of `query` in `text`, keeping the original casing."""
	if not text or not query:
		return text
	open_tag, close_tag = marker
	pattern = re.compile(re.escape(query), re.IGNORECASE)
	return pattern.sub(lambda m: f"{open_tag}{m.group(0)}{close_tag}", text)


def highlight_movie(candidate: ScoredCandidate, query: str, marker: Tuple[str, str] = DEFAULT_MARKER) -> ScoredCandidate:
	"""Fill the highlighted variants of the fields that contain the query."""
	movie = candidate.movie
	q = query.lower()

	if movie.title and q in movie.title.lower():
		candidate.title_highlighted = highlight_text(movie.title, query, marker)

	if movie.director and q in movie.director.lower():
		candidate.director_highlighted = highlight_text(movie.director, query, marker)

	if movie.cast:
		cast_entries = []
		for member in movie.cast:
			entry = {'name': member.name, 'role': member.role}
			if member.name and q in member.name.lower():
				entry['name_highlighted'] = highlight_text(member.name, query, marker)
			cast_entries.append(entry)
		candidate.cast_highlighted = cast_entries

	return candidate
