"""Slice an already-ordered list into one page plus pagination metadata."""

import math
from typing import Any, Dict, List

from . import config
from .validators import validate_pagination


def paginate(items: List[Any], page: int = 1, limit: int = config.DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
	validate_pagination(page, limit)
	start = (page - 1) * limit
	return {
		'data': items[start:start + limit],
		'pagination': {
			'page': page,
			'limit': limit,
			'total': len(items),
			'pages': math.ceil(len(items) / limit),
		},
	}
