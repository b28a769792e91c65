"""
Error types raised by the catalog core and services.
Each error carries the HTTP status code the API layer should answer with.
"""


class CatalogError(Exception):
	"""Base class for all expected, caller-facing failures."""

	status_code = 500

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class InvalidInputError(CatalogError, ValueError):
	"""Rejected input (empty query, malformed id, out-of-range filter...)."""

	status_code = 400


class NotFoundError(CatalogError, LookupError):
	"""A referenced movie, user or review does not exist."""

	status_code = 404


class DuplicateError(CatalogError):
	"""A uniqueness rule was violated (second review, reused e-mail)."""

	status_code = 400
