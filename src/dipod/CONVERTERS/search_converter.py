# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Converters for registry search: Docker filters in, Docker results out.
"""
from typing import Any, Dict, List

from ..ERRORS.classifier import BadRequestError
from ..MODELS.search import SearchFilter, SearchResult
from ..UTILS.filters import FilterArgs
from .decoding import as_mapping, optional, optional_int, required

IS_AUTOMATED = "is-automated"
IS_OFFICIAL = "is-official"
STARS = "stars"
VALUE_YES = "true"
VALUE_NO = "false"


def _tri_state(filters: FilterArgs, key: str):
    if not filters.contains(key):
        return None
    values = filters.get(key)
    if VALUE_YES in values:
        return True
    if VALUE_NO in values:
        return False
    raise BadRequestError(f"invalid filter '{key}={values[0] if values else ''}'")


def to_search_filter(filters: FilterArgs) -> SearchFilter:
    """
    Builds the backend search filter.

    :raises BadRequestError: If ``stars`` is not an integer or a flag is
        neither true nor false.
    """
    search_filter = SearchFilter(
        is_automated=_tri_state(filters, IS_AUTOMATED),
        is_official=_tri_state(filters, IS_OFFICIAL),
    )
    stars = filters.get(STARS)
    if stars:
        try:
            search_filter.star_count = int(stars[0])
        except ValueError:
            raise BadRequestError(f"invalid filter 'stars={stars[0]}'")
    return search_filter


def to_backend_filter(search_filter: SearchFilter) -> Dict[str, Any]:
    return search_filter.model_dump()


def to_search_results(results: List[Any]) -> List[SearchResult]:
    converted = []
    for item in results:
        item = as_mapping(item, "search result")
        where = "search result"
        converted.append(
            SearchResult(
                name=required(item, "name", str, where),
                description=optional(item, "description", str, where, ""),
                is_automated=optional(item, "is_automated", bool, where, False),
                is_official=optional(item, "is_official", bool, where, False),
                star_count=optional_int(item, "star_count", where),
            )
        )
    return converted
